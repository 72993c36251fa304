"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Les objets Stripe sont convertis en dict avant de sortir du module.
"""
import json
from typing import Any, Dict, List, Optional

import stripe
from fastapi import HTTPException, Request

from pixoul.config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET

# module pixoul.payments.stripe_client
def require_stripe():
    """
    Configure stripe.api_key et retourne le module stripe.
    - 500 si STRIPE_SECRET_KEY est absent
    """
    if not STRIPE_SECRET_KEY:
        raise HTTPException(status_code=500, detail="STRIPE_SECRET_KEY manquant")
    stripe.api_key = STRIPE_SECRET_KEY
    return stripe

def _as_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict) and not hasattr(obj, "to_dict_recursive") and not hasattr(obj, "to_dict"):
        return obj
    for attr in ("to_dict_recursive", "to_dict"):
        fn = getattr(obj, attr, None)
        if callable(fn):
            return fn()
    return dict(obj)

def find_or_create_customer(email: str, user_id: str) -> str:
    """Client Stripe retrouvé par email du compte, sinon créé (metadata.supabase_user_id)."""
    require_stripe()
    customers = _as_dict(stripe.Customer.list(email=email, limit=1))
    data: List[Dict[str, Any]] = customers.get("data") or []
    if data:
        return data[0]["id"]
    customer = _as_dict(stripe.Customer.create(email=email, metadata={"supabase_user_id": user_id}))
    return customer["id"]

def create_session(
    *,
    customer: str,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    payment_intent_data: Optional[Dict[str, Any]] = None,
    idempotency_key: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout (mode payment, carte).
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    require_stripe()
    params: Dict[str, Any] = {
        "customer": customer,
        "payment_method_types": ["card"],
        "line_items": line_items,
        "mode": "payment",
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }
    if payment_intent_data:
        params["payment_intent_data"] = payment_intent_data
    if idempotency_key:
        params["idempotency_key"] = idempotency_key
    return _as_dict(stripe.checkout.Session.create(**params))

def get_session(session_id: str) -> Dict[str, Any]:
    require_stripe()
    return _as_dict(stripe.checkout.Session.retrieve(session_id))

def retrieve_payment_method(payment_method_id: str) -> Dict[str, Any]:
    require_stripe()
    return _as_dict(stripe.PaymentMethod.retrieve(payment_method_id))

def detach_payment_method(payment_method_id: str) -> Dict[str, Any]:
    require_stripe()
    return _as_dict(stripe.PaymentMethod.detach(payment_method_id))

async def parse_event(request: Request) -> Dict[str, Any]:
    """
    Parse et valide un événement Stripe signé (webhook).
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    - Sans secret configuré (dev): le body est lu comme JSON brut
    - 400 si signature ou payload invalide
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    if not STRIPE_WEBHOOK_SECRET:
        try:
            return json.loads(payload.decode("utf-8"))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid payload: {e}")
    try:
        event = stripe.Webhook.construct_event(payload, sig_header or "", STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError) as e:
        raise HTTPException(status_code=400, detail=f"Webhook invalid: {e}")
    return _as_dict(event)
