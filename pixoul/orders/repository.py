"""
Accès aux tables orders / order_items.
"""
from typing import Any, Dict, List, Optional
import logging

import pixoul.infra.supabase_client as supabase_client
from pixoul.infra.supabase_client import rows, first_row, NOT_PAID_FILTER

logger = logging.getLogger(__name__)

# module pixoul.orders.repository
def insert_order(data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table("orders").insert(data).execute()
    return first_row(res)

def get_order(order_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("orders")
        .select("*")
        .eq("id", order_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def list_orders_for_user(user_id: str, limit: int = 50) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("orders")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return rows(res)

def list_orders(status: Optional[str] = None, limit: int = 100) -> List[dict]:
    q = supabase_client.get_service_supabase().table("orders").select("*")
    if status:
        q = q.eq("status", status)
    res = q.order("created_at", desc=True).limit(limit).execute()
    return rows(res)

def update_order(order_id: str, data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table("orders").update(data).eq("id", order_id).execute()
    return first_row(res)

def mark_order_paid(order_id: str, data: Dict[str, Any]) -> Optional[dict]:
    """Mise à jour conditionnelle: ne touche pas une commande déjà payée."""
    res = (
        supabase_client.get_service_supabase()
        .table("orders")
        .update(data)
        .eq("id", order_id)
        .or_(NOT_PAID_FILTER)
        .execute()
    )
    return first_row(res)

def list_order_items(order_id: str) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("order_items")
        .select("*")
        .eq("order_id", order_id)
        .execute()
    )
    return rows(res)

def list_order_items_for_orders(order_ids: List[str]) -> List[dict]:
    if not order_ids:
        return []
    res = (
        supabase_client.get_service_supabase()
        .table("order_items")
        .select("*")
        .in_("order_id", order_ids)
        .execute()
    )
    return rows(res)

def insert_order_items(items: List[Dict[str, Any]]) -> List[dict]:
    if not items:
        return []
    res = supabase_client.get_service_supabase().table("order_items").insert(items).execute()
    return rows(res)
