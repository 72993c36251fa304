"""
Cas d'usage 'orders': commande snack issue du panier actif, suivi cuisine.
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException

from pixoul.cart import service as cart_service
from . import repository

logger = logging.getLogger(__name__)

# Progression cuisine; 'pending' n'est posé qu'à la création (avant paiement)
ORDER_STATUSES = ("new", "preparing", "ready", "completed", "cancelled")

# module pixoul.orders.service
def create_order_from_cart(user_id: str) -> Dict[str, Any]:
    """
    Fige les totaux du panier actif dans une commande 'pending' non payée.
    Le panier reste actif jusqu'au paiement (il est clôturé par la réconciliation).
    """
    cart = cart_service.get_cart(user_id)
    if not cart.get("items"):
        raise HTTPException(status_code=400, detail="Cart is empty")
    order = repository.insert_order({
        "user_id": user_id,
        "cart_id": cart["id"],
        "subtotal": cart.get("subtotal") or 0,
        "tax": cart.get("tax") or 0,
        "fees": cart.get("fees") or 0,
        "tip": cart.get("tip") or 0,
        "total": cart.get("total") or 0,
        "payment_status": "unpaid",
        "fulfillment": "pickup",
        "status": "pending",
    })
    if not order:
        raise HTTPException(status_code=500, detail="Unable to create order")
    logger.info("orders.create_order_from_cart user_id=%s order_id=%s total=%s", user_id, order.get("id"), order.get("total"))
    return order

def _with_items(orders: List[dict]) -> List[dict]:
    items = repository.list_order_items_for_orders([str(o["id"]) for o in orders if o.get("id")])
    by_order: Dict[str, List[dict]] = {}
    for it in items:
        by_order.setdefault(str(it.get("order_id")), []).append(it)
    return [dict(o, items=by_order.get(str(o.get("id")), [])) for o in orders]

def list_my_orders(user_id: str) -> List[dict]:
    return _with_items(repository.list_orders_for_user(user_id))

def list_orders(status: Optional[str] = None) -> List[dict]:
    if status and status not in ORDER_STATUSES and status != "pending":
        raise HTTPException(status_code=400, detail="Invalid status")
    return _with_items(repository.list_orders(status))

def update_order_status(order_id: str, status: str) -> dict:
    if status not in ORDER_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    if not repository.get_order(order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    updated = repository.update_order(order_id, {"status": status})
    logger.info("orders.update_order_status order_id=%s status=%s", order_id, status)
    return updated or {"id": order_id, "status": status}
