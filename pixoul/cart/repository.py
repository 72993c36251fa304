"""
Accès aux données pour la feature 'cart' (tables carts, cart_items).
Les écritures passent par le client service-role: l'appartenance du panier est
vérifiée dans le service à partir de l'identité injectée.
"""
from typing import Any, Dict, List, Optional
import logging

import pixoul.infra.supabase_client as supabase_client
from pixoul.infra.supabase_client import rows, first_row

logger = logging.getLogger(__name__)

# module pixoul.cart.repository
def list_active_carts(user_id: str) -> List[dict]:
    """Paniers 'active' d'un utilisateur, du plus ancien au plus récent."""
    res = (
        supabase_client.get_service_supabase()
        .table("carts")
        .select("*")
        .eq("user_id", user_id)
        .eq("status", "active")
        .order("created_at", desc=False)
        .execute()
    )
    return rows(res)

def insert_cart(user_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("carts")
        .insert({"user_id": user_id, "status": "active", "version": 0})
        .execute()
    )
    return first_row(res)

def get_cart(cart_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("carts")
        .select("*")
        .eq("id", cart_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def set_cart_status(cart_id: str, status: str) -> None:
    (
        supabase_client.get_service_supabase()
        .table("carts")
        .update({"status": status})
        .eq("id", cart_id)
        .execute()
    )

def update_cart_totals(cart_id: str, expected_version: int, totals: Dict[str, float]) -> Optional[dict]:
    """
    Écrit l'agrégat si la version lue est toujours celle en base.
    Retourne la ligne mise à jour, ou None si l'écriture est périmée.
    """
    payload = dict(totals)
    payload["version"] = int(expected_version) + 1
    res = (
        supabase_client.get_service_supabase()
        .table("carts")
        .update(payload)
        .eq("id", cart_id)
        .eq("version", int(expected_version))
        .execute()
    )
    return first_row(res)

def list_items(cart_id: str) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("cart_items")
        .select("*")
        .eq("cart_id", cart_id)
        .order("created_at", desc=False)
        .execute()
    )
    return rows(res)

def insert_item(data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table("cart_items").insert(data).execute()
    return first_row(res)

def update_item(cart_item_id: str, data: Dict[str, Any]) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("cart_items")
        .update(data)
        .eq("id", cart_item_id)
        .execute()
    )
    return first_row(res)

def delete_item(cart_item_id: str) -> None:
    supabase_client.get_service_supabase().table("cart_items").delete().eq("id", cart_item_id).execute()

def delete_items_for_cart(cart_id: str) -> None:
    supabase_client.get_service_supabase().table("cart_items").delete().eq("cart_id", cart_id).execute()

def move_items(from_cart_id: str, to_cart_id: str) -> None:
    (
        supabase_client.get_service_supabase()
        .table("cart_items")
        .update({"cart_id": to_cart_id})
        .eq("cart_id", from_cart_id)
        .execute()
    )
