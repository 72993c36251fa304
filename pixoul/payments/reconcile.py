"""
Réconciliation unique d'une session Checkout payée, partagée par le webhook
et par la vérification côté client.

Idempotence: une ligne processed_payments par session_id.
- 'completed': déjà traité, aucun effet de bord
- 'processing' récent (< PAYMENT_CLAIM_TTL_SECONDS): 409, un autre worker traite
- 'failed' ou réservation expirée: reprise par compare-and-set sur claimed_at
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from fastapi import HTTPException
from postgrest.exceptions import APIError

from pixoul.config import PAYMENT_CLAIM_TTL_SECONDS
from pixoul.infra.supabase_client import is_unique_violation
from pixoul.notifications import service as notifications
from . import repository
from . import cards
from .metadata import extract_metadata_from_session
from .purchasables import Purchasable, get_purchasable

logger = logging.getLogger(__name__)

# module pixoul.payments.reconcile
def _now() -> datetime:
    return datetime.now(timezone.utc)

def _parse_ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("payments.reconcile unreadable claimed_at=%s", value)
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)

def claim_session(session_id: str, *, payment_type: str, reference_id: str, user_id: Optional[str], source: str, event_id: Optional[str]) -> bool:
    """
    Réserve le traitement de la session.
    Retourne False si la session est déjà traitée, True si la réservation est acquise.
    """
    now = _now().isoformat()
    claim = {
        "status": "processing",
        "claimed_at": now,
        "source": source,
        "event_id": event_id,
        "error": None,
    }
    try:
        repository.insert_claim(dict(
            claim,
            session_id=session_id,
            type=payment_type,
            reference_id=reference_id,
            user_id=user_id,
        ))
        return True
    except APIError as e:
        if not is_unique_violation(e):
            raise

    existing = repository.get_claim(session_id)
    if not existing:
        raise HTTPException(status_code=409, detail="Payment is being processed")
    status = existing.get("status")
    if status == "completed":
        return False
    if status == "processing":
        claimed_at = _parse_ts(existing.get("claimed_at"))
        if claimed_at and (_now() - claimed_at).total_seconds() < PAYMENT_CLAIM_TTL_SECONDS:
            raise HTTPException(status_code=409, detail="Payment is being processed")

    taken = repository.take_over_claim(session_id, existing.get("claimed_at"), claim)
    if not taken:
        raise HTTPException(status_code=409, detail="Payment is being processed")
    logger.warning("payments.reconcile took over claim session_id=%s previous_status=%s", session_id, status)
    return True

def _notify(purchasable: Purchasable, reference_id: str, user_id: Optional[str]) -> None:
    try:
        if user_id:
            notifications.notify_user(
                user_id,
                "payment",
                f"{purchasable.label} confirmed",
                "Your payment was received.",
                purchasable.link_path,
            )
        notifications.notify_role(
            purchasable.staff_role,
            "payment",
            f"New paid {purchasable.label.lower()}",
            f"Reference {reference_id}",
            purchasable.link_path,
        )
    except Exception:
        logger.exception("payments.reconcile notify failed type=%s ref=%s", purchasable.type_name, reference_id)

def reconcile_payment(session: Dict[str, Any], source: str, event_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Applique les effets d'une session payée exactement une fois.
    source: 'webhook' | 'verify'
    Retour: {type, referenceId, alreadyProcessed}
    """
    session_id = session.get("id")
    payment_type, reference_id, user_id = extract_metadata_from_session(session)
    purchasable = get_purchasable(payment_type)
    if not session_id or not reference_id:
        raise HTTPException(status_code=400, detail="Session metadata incomplete")

    acquired = claim_session(
        session_id,
        payment_type=purchasable.type_name,
        reference_id=reference_id,
        user_id=user_id,
        source=source,
        event_id=event_id,
    )
    if not acquired:
        logger.info("payments.reconcile already processed session_id=%s source=%s", session_id, source)
        return {"type": payment_type, "referenceId": reference_id, "alreadyProcessed": True}

    try:
        purchasable.mark_paid(reference_id, session)
    except Exception as e:
        logger.exception("payments.reconcile failed session_id=%s type=%s ref=%s", session_id, payment_type, reference_id)
        repository.finish_claim(session_id, {"status": "failed", "error": str(getattr(e, "detail", None) or e)})
        raise

    cards.save_card_from_session(session, user_id)
    _notify(purchasable, reference_id, user_id)
    repository.finish_claim(session_id, {"status": "completed", "completed_at": _now().isoformat(), "error": None})
    logger.info("payments.reconcile completed session_id=%s type=%s ref=%s source=%s", session_id, payment_type, reference_id, source)
    return {"type": payment_type, "referenceId": reference_id, "alreadyProcessed": False}
