# module pixoul.events.views
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field

from pixoul.auth.identity import Authenticated
from pixoul.utils.security import require_user, require_staff
from pixoul.events import service as events_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/events", tags=["Events API"])

class RegistrationRequest(BaseModel):
    participant_name: str = Field(min_length=1)
    participant_email: Optional[EmailStr] = None
    participant_phone: Optional[str] = None
    party_size: int = Field(default=1, ge=1)
    notes: Optional[str] = None

@router.get("")
def list_events():
    return {"events": events_service.list_events()}

@router.get("/registrations/me")
def my_registrations(user: Authenticated = Depends(require_user)):
    return {"registrations": events_service.list_my_registrations(user.id)}

@router.post("/{event_id}/register")
def register(event_id: str, body: RegistrationRequest, user: Authenticated = Depends(require_user)):
    """Inscription; 'requiresPayment' indique qu'un checkout (type=event) doit suivre."""
    try:
        return events_service.register(user.id, event_id, body.model_dump())
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("events.register failed user_id=%s event_id=%s", user.id, event_id)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/{event_id}/registrations")
def event_registrations(event_id: str, staff: Authenticated = Depends(require_staff("events"))):
    return {"registrations": events_service.list_event_registrations(event_id)}
