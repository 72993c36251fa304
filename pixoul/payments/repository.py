"""
Accès BD du module payments:
- processed_payments: enregistrement d'idempotence par session Checkout
- saved_cards: cache des moyens de paiement Stripe
"""
from typing import Any, Dict, List, Optional
import logging

import pixoul.infra.supabase_client as supabase_client
from pixoul.infra.supabase_client import rows, first_row

logger = logging.getLogger(__name__)

# module pixoul.payments.repository
def insert_claim(data: Dict[str, Any]) -> Optional[dict]:
    """Insert brut; lève APIError 23505 si la session est déjà réservée."""
    res = supabase_client.get_service_supabase().table("processed_payments").insert(data).execute()
    return first_row(res)

def get_claim(session_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("processed_payments")
        .select("*")
        .eq("session_id", session_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def take_over_claim(session_id: str, expected_claimed_at: Any, data: Dict[str, Any]) -> Optional[dict]:
    """Compare-and-set sur claimed_at: None si un autre worker a repris la main avant nous."""
    q = (
        supabase_client.get_service_supabase()
        .table("processed_payments")
        .update(data)
        .eq("session_id", session_id)
    )
    if expected_claimed_at is None:
        q = q.is_("claimed_at", "null")
    else:
        q = q.eq("claimed_at", expected_claimed_at)
    return first_row(q.execute())

def finish_claim(session_id: str, data: Dict[str, Any]) -> None:
    (
        supabase_client.get_service_supabase()
        .table("processed_payments")
        .update(data)
        .eq("session_id", session_id)
        .execute()
    )

def upsert_saved_card(data: Dict[str, Any]) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("saved_cards")
        .upsert(data, on_conflict="stripe_payment_method_id")
        .execute()
    )
    return first_row(res)

def list_saved_cards(user_id: str) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("saved_cards")
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return rows(res)

def get_saved_card(card_id: str, user_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("saved_cards")
        .select("*")
        .eq("id", card_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def delete_saved_card(card_id: str, user_id: str) -> None:
    (
        supabase_client.get_service_supabase()
        .table("saved_cards")
        .delete()
        .eq("id", card_id)
        .eq("user_id", user_id)
        .execute()
    )
