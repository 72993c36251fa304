# module pixoul.orders.views
"""Endpoints commandes snack.
- POST /api/v1/orders: commande 'pending' à partir du panier actif
- GET  /api/v1/orders/me: commandes de l'utilisateur
- GET/PATCH /api/v1/orders (staff cuisine): file et progression
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from pixoul.auth.identity import Authenticated
from pixoul.utils.security import require_user, require_staff
from pixoul.orders import service as orders_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

class OrderStatusUpdate(BaseModel):
    status: str

@router.post("")
def create_order(user: Authenticated = Depends(require_user)):
    try:
        return {"order": orders_service.create_order_from_cart(user.id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("orders.create_order failed user_id=%s", user.id)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/me")
def my_orders(user: Authenticated = Depends(require_user)):
    return {"orders": orders_service.list_my_orders(user.id)}

@router.get("")
def list_orders(status: Optional[str] = None, staff: Authenticated = Depends(require_staff("kitchen"))):
    return {"orders": orders_service.list_orders(status)}

@router.patch("/{order_id}")
def update_status(order_id: str, body: OrderStatusUpdate, staff: Authenticated = Depends(require_staff("kitchen"))):
    return {"order": orders_service.update_order_status(order_id, body.status)}
