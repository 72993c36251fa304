"""
Cas d'usage 'payments': orchestre pricing, metadata, stripe, réconciliation.
"""
from typing import Any, Dict, Optional
import hashlib
import json
import logging

from fastapi import HTTPException

from pixoul.auth.identity import Authenticated
from pixoul.config import CHECKOUT_CURRENCY
from . import pricing
from . import stripe_client
from . import metadata as meta
from . import reconcile
from .purchasables import PURCHASABLES

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"

# module pixoul.payments.service
def _idempotency_key(user_id: str, params: Dict[str, Any]) -> str:
    """Clé dérivée de tous les paramètres envoyés à Stripe: même requête, même clé."""
    raw = json.dumps({"user": user_id, **params}, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(f"checkout:{raw}".encode("utf-8")).hexdigest()

def create_checkout(user: Authenticated, payload: Dict[str, Any], origin: str) -> Dict[str, Any]:
    """
    Crée une session Checkout pour un objet payable.
    - payload: {type, referenceId, amount, metadata{itemName, description}, paymentMethodId?}
    - l'objet doit exister (404), appartenir à l'appelant (403) et être impayé (409)
    - le montant facturé est celui stocké; un `amount` client différent est refusé (400)
    - montant en unités mineures TVA 5% incluse
    - clé d'idempotence Stripe: un retry client renvoie la même session
    Retour: {url, sessionId}
    """
    if not isinstance(user, Authenticated) or not user.email:
        raise HTTPException(status_code=401, detail="User not authenticated")

    payment_type = payload.get("type")
    if payment_type not in PURCHASABLES:
        raise HTTPException(status_code=400, detail=f"Unknown payment type: {payment_type}")
    reference_id = str(payload.get("referenceId") or "").strip()
    if not reference_id:
        raise HTTPException(status_code=400, detail="referenceId is required")
    try:
        amount = float(payload.get("amount"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="amount must be a number")
    if amount < 0:
        raise HTTPException(status_code=400, detail="amount must be positive")

    purchasable = PURCHASABLES[payment_type]
    row = purchasable.require(reference_id)
    if purchasable.owner_of(row) != user.id:
        raise HTTPException(status_code=403, detail=f"{purchasable.label} belongs to another user")
    if purchasable.is_paid(row):
        raise HTTPException(status_code=409, detail=f"{purchasable.label} is already paid")
    amount_due = purchasable.amount_due(row)
    if pricing.to_minor_units(amount) != pricing.to_minor_units(amount_due):
        raise HTTPException(status_code=400, detail=f"amount does not match amount due ({amount_due:.2f})")

    extra = payload.get("metadata") or {}
    amounts = pricing.checkout_amounts(amount_due)
    customer_id = stripe_client.find_or_create_customer(user.email, user.id)

    origin = (origin or "").rstrip("/")
    query = f"type={payment_type}&id={reference_id}"
    product: Dict[str, Any] = {"name": extra.get("itemName") or "Payment"}
    if extra.get("description"):
        product["description"] = extra["description"]

    params: Dict[str, Any] = {
        "customer": customer_id,
        "line_items": [{
            "price_data": {
                "currency": CHECKOUT_CURRENCY,
                "product_data": product,
                "unit_amount": amounts["total"],
            },
            "quantity": 1,
        }],
        "success_url": f"{origin}/payment-success?{query}&session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{origin}/payment-cancelled?{query}",
        "metadata": meta.make_metadata(payment_type, reference_id, user.id, amounts),
        "payment_intent_data": {"setup_future_usage": "on_session"} if payload.get("paymentMethodId") else None,
    }
    session = stripe_client.create_session(**params, idempotency_key=_idempotency_key(user.id, params))
    logger.info(
        "payments.create_checkout user_id=%s type=%s ref=%s total=%s session_id=%s",
        user.id, payment_type, reference_id, amounts["total"], session.get("id"),
    )
    return {"url": session.get("url"), "sessionId": session.get("id")}

def verify_payment(user: Authenticated, session_id: str) -> Dict[str, Any]:
    """
    Vérification côté client après redirection Stripe.
    - 400 si la session n'est pas payée (aucune écriture)
    - 403 si la session appartient à un autre utilisateur
    """
    if not session_id:
        raise HTTPException(status_code=400, detail="sessionId is required")
    session = stripe_client.get_session(session_id)
    if session.get("payment_status") != "paid":
        raise HTTPException(status_code=400, detail="Payment not completed")
    _, _, owner_id = meta.extract_metadata_from_session(session)
    if owner_id and owner_id != user.id:
        raise HTTPException(status_code=403, detail="Session belongs to another user")
    result = reconcile.reconcile_payment(session, source="verify")
    return {"success": True, **result}

def handle_webhook_event(event: Dict[str, Any]) -> Dict[str, Any]:
    event_type = (event or {}).get("type")
    if event_type != CHECKOUT_COMPLETED:
        return {"received": True, "status": "ignored"}
    session = meta.extract_session_from_event(event)
    if session.get("payment_status") not in (None, "paid"):
        # paiement différé: rien à réconcilier tant que Stripe ne confirme pas
        logger.info("payments.webhook unpaid session_id=%s status=%s", session.get("id"), session.get("payment_status"))
        return {"received": True, "status": "ignored"}
    result = reconcile.reconcile_payment(session, source="webhook", event_id=event.get("id"))
    return {"received": True, **result}

def get_origin(header_origin: Optional[str], fallback: str) -> str:
    return (header_origin or fallback).rstrip("/")
