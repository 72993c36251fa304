# module pixoul.cart.views
"""Endpoints du panier snack (/api/v1/cart).
Toutes les routes renvoient le panier rafraîchi {...cart, items, item_count}.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from pixoul.auth.identity import Authenticated
from pixoul.utils.security import require_user
from pixoul.cart import service as cart_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])

class MenuItemIn(BaseModel):
    id: str
    name: str = ""
    price: float
    image_url: Optional[str] = None

class AddItemRequest(BaseModel):
    item: MenuItemIn
    qty: int = 1

class UpdateQuantityRequest(BaseModel):
    qty: int

def _call(action: str, fn, *args):
    try:
        return fn(*args)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("cart.%s failed", action)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("")
def get_cart(user: Authenticated = Depends(require_user)):
    return _call("get_cart", cart_service.get_cart, user.id)

@router.post("/items")
def add_item(body: AddItemRequest, user: Authenticated = Depends(require_user)):
    return _call("add_to_cart", cart_service.add_to_cart, user.id, body.item.model_dump(), body.qty)

@router.patch("/items/{cart_item_id}")
def update_item(cart_item_id: str, body: UpdateQuantityRequest, user: Authenticated = Depends(require_user)):
    """qty <= 0 supprime la ligne."""
    return _call("update_quantity", cart_service.update_quantity, user.id, cart_item_id, body.qty)

@router.delete("/items/{cart_item_id}")
def remove_item(cart_item_id: str, user: Authenticated = Depends(require_user)):
    return _call("remove_item", cart_service.remove_item, user.id, cart_item_id)

@router.delete("")
def clear_cart(user: Authenticated = Depends(require_user)):
    return _call("clear_cart", cart_service.clear_cart, user.id)
