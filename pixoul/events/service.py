"""
Cas d'usage 'events': inscriptions aux événements/programmes.
- Capacité: Σ party_size des inscriptions non annulées <= max_participants
- Une inscription par (événement, utilisateur); une inscription annulée est réactivée
- Événement gratuit: confirmé immédiatement; payant: 'pending' jusqu'au paiement
"""
from typing import Any, Dict, List
import logging

from fastapi import HTTPException
from postgrest.exceptions import APIError

from pixoul.infra.supabase_client import is_unique_violation
from pixoul.bookings import validators
from . import repository

logger = logging.getLogger(__name__)

# module pixoul.events.service
def list_events() -> List[dict]:
    return repository.list_events()

def _seats_taken(event_id: str, exclude_user_id: str = "") -> int:
    taken = 0
    for reg in repository.list_registrations_for_event(event_id):
        if reg.get("status") == "cancelled" or str(reg.get("user_id")) == exclude_user_id:
            continue
        taken += int(reg.get("party_size") or 1)
    return taken

def register(user_id: str, event_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    event = repository.get_event(event_id)
    if not event or event.get("is_active") is False:
        raise HTTPException(status_code=404, detail="Event not found")

    party_size = max(1, int(data.get("party_size") or 1))
    max_participants = event.get("max_participants")
    if max_participants and _seats_taken(event_id, exclude_user_id=user_id) + party_size > int(max_participants):
        raise HTTPException(status_code=409, detail="Event is full")

    phone = data.get("participant_phone")
    if phone:
        try:
            phone = validators.validate_phone(phone)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    price = float(event.get("price") or 0)
    amount_due = round(price * party_size, 2)
    paid_now = amount_due <= 0
    payload = {
        "user_id": user_id,
        "event_id": event_id,
        "participant_name": data.get("participant_name"),
        "participant_email": data.get("participant_email"),
        "contact_phone": phone,
        "party_size": party_size,
        "notes": data.get("notes"),
        "status": "confirmed" if paid_now else "pending",
        "payment_status": "paid" if paid_now else "unpaid",
        "amount_paid": 0,
        "cancelled_at": None,
    }

    existing = repository.get_registration_for_user(event_id, user_id)
    if existing and existing.get("status") != "cancelled":
        raise HTTPException(status_code=409, detail="Already registered")
    try:
        if existing:
            registration = repository.update_registration(existing["id"], payload)
        else:
            registration = repository.insert_registration(payload)
    except APIError as e:
        if is_unique_violation(e):
            raise HTTPException(status_code=409, detail="Already registered")
        logger.exception("events.register failed user_id=%s event_id=%s", user_id, event_id)
        raise
    if not registration:
        raise HTTPException(status_code=500, detail="Unable to register")
    logger.info("events.register user_id=%s event_id=%s size=%s due=%s", user_id, event_id, party_size, amount_due)
    return {"registration": registration, "amountDue": amount_due, "requiresPayment": not paid_now}

def list_my_registrations(user_id: str) -> List[dict]:
    return repository.list_registrations_for_user(user_id)

def list_event_registrations(event_id: str) -> List[dict]:
    if not repository.get_event(event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return repository.list_registrations_for_event(event_id)
