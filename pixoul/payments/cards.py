"""
Cartes enregistrées (saved_cards), cache non autoritatif des PaymentMethod Stripe.
"""
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException

from . import repository
from . import stripe_client

logger = logging.getLogger(__name__)

# module pixoul.payments.cards
def _payment_method_id_of(session: Dict[str, Any]) -> Optional[str]:
    pm = session.get("payment_method")
    if not pm and isinstance(session.get("payment_intent"), dict):
        pm = session["payment_intent"].get("payment_method")
    if isinstance(pm, dict):
        return pm.get("id")
    return pm or None

def save_card_from_session(session: Dict[str, Any], user_id: Optional[str]) -> Optional[dict]:
    """
    Upsert de la carte utilisée (clé: stripe_payment_method_id).
    Jamais bloquant: les erreurs sont journalisées et None est retourné.
    """
    pm_id = _payment_method_id_of(session)
    if not pm_id or not user_id:
        return None
    try:
        pm = stripe_client.retrieve_payment_method(pm_id)
        card = pm.get("card") or {}
        return repository.upsert_saved_card({
            "user_id": user_id,
            "stripe_customer_id": session.get("customer"),
            "stripe_payment_method_id": pm.get("id") or pm_id,
            "card_brand": card.get("brand") or "unknown",
            "card_last4": card.get("last4") or "0000",
            "card_exp_month": card.get("exp_month") or 1,
            "card_exp_year": card.get("exp_year") or 2099,
        })
    except Exception:
        logger.exception("payments.cards.save_card_from_session failed user_id=%s pm=%s", user_id, pm_id)
        return None

def list_cards(user_id: str) -> List[dict]:
    return repository.list_saved_cards(user_id)

def delete_card(user_id: str, card_id: str) -> None:
    """Détache la carte côté Stripe puis supprime la ligne (limitée à l'utilisateur)."""
    card = repository.get_saved_card(card_id, user_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    pm_id = card.get("stripe_payment_method_id")
    if pm_id:
        stripe_client.detach_payment_method(pm_id)
    repository.delete_saved_card(card_id, user_id)
    logger.info("payments.cards.delete_card user_id=%s card_id=%s", user_id, card_id)
