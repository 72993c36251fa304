import logging
from typing import Any, Dict, Optional

import stripe
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from pixoul.auth.identity import Authenticated
from pixoul.config import FRONTEND_ORIGIN
from pixoul.utils.security import require_user
from pixoul.utils.rate_limit import optional_rate_limit
from pixoul.payments import stripe_client
from pixoul.payments import cards as payments_cards
from pixoul.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

class CheckoutRequest(BaseModel):
    type: str
    referenceId: str
    amount: float
    metadata: Dict[str, Any] = Field(default_factory=dict)
    paymentMethodId: Optional[str] = None

class VerifyRequest(BaseModel):
    sessionId: str

# module pixoul.payments.views
@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout(body: CheckoutRequest, request: Request, user: Authenticated = Depends(require_user)):
    """
    Crée une session Checkout Stripe pour une commande, une réservation, une fête ou un événement.
    - Sécurité: require_user + rate limit (10 req / 60s)
    - Origine des redirections: en-tête Origin, sinon FRONTEND_ORIGIN
    - Erreurs: 400 si type/montant invalide, 500 avec le message Stripe
    """
    origin = payments_service.get_origin(request.headers.get("origin"), FRONTEND_ORIGIN)
    try:
        return payments_service.create_checkout(user, body.model_dump(), origin)
    except HTTPException:
        raise
    except stripe.StripeError as e:
        logger.exception("payments.create_checkout stripe error user_id=%s", user.id)
        raise HTTPException(status_code=500, detail=getattr(e, "user_message", None) or str(e))
    except Exception as e:
        logger.exception("payments.create_checkout failed user_id=%s", user.id)
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/verify", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
def verify_payment(body: VerifyRequest, user: Authenticated = Depends(require_user)):
    """
    Confirme une session après redirection (sans attendre le webhook).
    - 400 si paiement non confirmé, 403 si session d'un autre utilisateur
    - Réponse: {success, type, referenceId, alreadyProcessed}
    """
    try:
        return payments_service.verify_payment(user, body.sessionId)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("payments.verify_payment failed session_id=%s", body.sessionId)
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request):
    """
    Webhook Stripe (Checkout): consomme checkout.session.completed.
    - Signature: stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Toute erreur renvoie un statut non-2xx pour que Stripe relivre l'événement
    """
    event = await stripe_client.parse_event(request)
    try:
        result = payments_service.handle_webhook_event(event)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("payments.webhook failed event_id=%s", (event or {}).get("id"))
        raise HTTPException(status_code=400, detail=str(e))
    return JSONResponse(result)

@router.get("/methods")
def list_payment_methods(user: Authenticated = Depends(require_user)):
    return {"cards": payments_cards.list_cards(user.id)}

@router.delete("/methods/{card_id}")
def delete_payment_method(card_id: str, user: Authenticated = Depends(require_user)):
    try:
        payments_cards.delete_card(user.id, card_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("payments.delete_payment_method failed card_id=%s", card_id)
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True}
