# module pixoul.bookings.views
"""Endpoints réservations (/api/v1/bookings).
- Salles: créneaux disponibles, création, mes réservations
- Fêtes: demande, suivi
- Staff 'bookings': listes et changements de statut
"""
from datetime import date
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, EmailStr, Field

from pixoul.auth.identity import Authenticated
from pixoul.utils.security import require_user, require_staff
from pixoul.bookings import service as bookings_service
from pixoul.bookings import repository as bookings_repo

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/bookings", tags=["Bookings API"])

class RoomBookingRequest(BaseModel):
    room_id: str
    booking_date: date
    start_time: str
    duration_hours: int = Field(ge=1)
    contact_phone: str
    contact_email: Optional[EmailStr] = None
    notes: Optional[str] = None

class PartyRequestIn(BaseModel):
    name: str
    party_type: str
    preferred_date: Optional[date] = None
    preferred_time_start: Optional[str] = None
    preferred_time_end: Optional[str] = None
    guest_count: int = Field(ge=1)
    age: Optional[int] = None
    school_name: Optional[str] = None
    theme: Optional[str] = None
    special_notes: Optional[str] = None
    contact_phone: str
    contact_email: Optional[EmailStr] = None

class StatusUpdate(BaseModel):
    status: str

class PartyUpdate(BaseModel):
    status: str
    estimated_cost: Optional[float] = Field(default=None, ge=0)

@router.get("/rooms")
def list_rooms():
    return {"rooms": bookings_repo.list_rooms()}

@router.get("/slots")
def time_slots(duration_hours: int = 1, day: Optional[date] = None):
    """Heures de début possibles (HH:00) pour une durée donnée."""
    return {"slots": bookings_service.time_slots(day, duration_hours)}

@router.post("/rooms")
def create_room_booking(body: RoomBookingRequest, user: Authenticated = Depends(require_user)):
    try:
        return {"booking": bookings_service.create_room_booking(user.id, body.model_dump())}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("bookings.create_room_booking failed user_id=%s", user.id)
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/parties")
def create_party_request(body: PartyRequestIn, user: Authenticated = Depends(require_user)):
    try:
        return {"request": bookings_service.create_party_request(user.id, body.model_dump())}
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("bookings.create_party_request failed user_id=%s", user.id)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/me")
def my_bookings(user: Authenticated = Depends(require_user)):
    return bookings_service.list_my_bookings(user.id)

@router.get("/rooms/all")
def staff_room_bookings(status: Optional[str] = None, staff: Authenticated = Depends(require_staff("bookings"))):
    return {"bookings": bookings_service.list_room_bookings(status)}

@router.get("/parties/all")
def staff_party_requests(status: Optional[str] = None, staff: Authenticated = Depends(require_staff("bookings"))):
    return {"requests": bookings_service.list_party_requests(status)}

@router.patch("/rooms/{booking_id}")
def update_booking_status(booking_id: str, body: StatusUpdate, staff: Authenticated = Depends(require_staff("bookings"))):
    return {"booking": bookings_service.update_booking_status(booking_id, body.status)}

@router.patch("/parties/{request_id}")
def update_party_status(request_id: str, body: PartyUpdate, staff: Authenticated = Depends(require_staff("bookings"))):
    """Le staff fixe le statut et, le cas échéant, le devis (estimated_cost) à régler."""
    return {"request": bookings_service.update_party_status(request_id, body.status, body.estimated_cost)}
