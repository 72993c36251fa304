"""
Cas d'usage 'bookings': réservations de salles et demandes de fêtes.
Les deux sont créées non payées; la confirmation vient de la réconciliation
du paiement ou d'une mise à jour staff.
"""
from datetime import date
from typing import Any, Dict, List, Optional
import logging

from fastapi import HTTPException

from . import repository
from . import validators

logger = logging.getLogger(__name__)

ROOM_BOOKINGS = "room_bookings"
PARTY_REQUESTS = "party_requests"

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")
PARTY_STATUSES = ("new", "pending", "confirmed", "cancelled", "completed")
PARTY_TYPES = ("birthday", "graduation", "corporate", "other")

# module pixoul.bookings.service
def time_slots(day: Optional[date], duration_hours: int) -> List[str]:
    if int(duration_hours) <= 0:
        raise HTTPException(status_code=400, detail="duration_hours must be positive")
    return validators.build_time_slots(day, duration_hours)

def create_room_booking(user_id: str, data: Dict[str, Any]) -> dict:
    """
    Crée une réservation 'pending' après validation du créneau et du téléphone.
    total_amount = hourly_rate × durée.
    """
    room = repository.get_room(str(data.get("room_id") or ""))
    if not room or room.get("is_active") is False:
        raise HTTPException(status_code=404, detail="Room not found")

    duration = int(data.get("duration_hours") or 0)
    booking_date: date = data["booking_date"]
    try:
        end_time = validators.validate_booking_window(booking_date, data.get("start_time") or "", duration)
        phone = validators.validate_phone(data.get("contact_phone") or "")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    total = round(float(room.get("hourly_rate") or 0) * duration, 2)
    booking = repository.insert_row(ROOM_BOOKINGS, {
        "user_id": user_id,
        "room_id": room["id"],
        "booking_date": booking_date.isoformat(),
        "start_time": data.get("start_time"),
        "end_time": end_time,
        "duration_hours": duration,
        "total_amount": total,
        "notes": data.get("notes"),
        "contact_phone": phone,
        "contact_email": data.get("contact_email"),
        "status": "pending",
        "payment_status": "unpaid",
    })
    if not booking:
        raise HTTPException(status_code=500, detail="Unable to create booking")
    logger.info("bookings.create_room_booking user_id=%s booking_id=%s total=%s", user_id, booking.get("id"), total)
    return booking

def create_party_request(user_id: str, data: Dict[str, Any]) -> dict:
    party_type = (data.get("party_type") or "").strip().lower()
    if party_type not in PARTY_TYPES:
        raise HTTPException(status_code=400, detail="Invalid party type")
    if party_type == "birthday" and not data.get("age"):
        raise HTTPException(status_code=400, detail="Age is required for birthday parties")
    if party_type == "graduation" and not (data.get("school_name") or "").strip():
        raise HTTPException(status_code=400, detail="School or university is required for graduation parties")
    if int(data.get("guest_count") or 0) <= 0:
        raise HTTPException(status_code=400, detail="guest_count must be positive")
    try:
        phone = validators.validate_phone(data.get("contact_phone") or "")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    preferred_date = data.get("preferred_date")
    request_row = repository.insert_row(PARTY_REQUESTS, {
        "user_id": user_id,
        "name": data.get("name"),
        "party_type": party_type,
        "age": data.get("age") if party_type == "birthday" else None,
        "school_name": data.get("school_name") if party_type == "graduation" else None,
        "preferred_date": preferred_date.isoformat() if preferred_date else None,
        "preferred_time_start": data.get("preferred_time_start"),
        "preferred_time_end": data.get("preferred_time_end"),
        "guest_count": int(data.get("guest_count")),
        "theme": data.get("theme"),
        "special_notes": data.get("special_notes"),
        "contact_phone": phone,
        "contact_email": data.get("contact_email"),
        "status": "new",
        "payment_status": "unpaid",
    })
    if not request_row:
        raise HTTPException(status_code=500, detail="Unable to create party request")
    logger.info("bookings.create_party_request user_id=%s request_id=%s", user_id, request_row.get("id"))
    return request_row

def list_my_bookings(user_id: str) -> Dict[str, List[dict]]:
    return {
        "bookings": repository.list_for_user(ROOM_BOOKINGS, user_id),
        "parties": repository.list_for_user(PARTY_REQUESTS, user_id),
    }

def list_room_bookings(status: Optional[str] = None) -> List[dict]:
    return repository.list_all(ROOM_BOOKINGS, status)

def list_party_requests(status: Optional[str] = None) -> List[dict]:
    return repository.list_all(PARTY_REQUESTS, status)

def _update_status(table: str, allowed, row_id: str, status: str, extra: Optional[Dict[str, Any]] = None) -> dict:
    if status not in allowed:
        raise HTTPException(status_code=400, detail="Invalid status")
    if not repository.get_row(table, row_id):
        raise HTTPException(status_code=404, detail="Not found")
    updated = repository.update_row(table, row_id, {"status": status, **(extra or {})})
    logger.info("bookings.update_status table=%s id=%s status=%s", table, row_id, status)
    return updated or {"id": row_id, "status": status}

def update_booking_status(booking_id: str, status: str) -> dict:
    return _update_status(ROOM_BOOKINGS, BOOKING_STATUSES, booking_id, status)

def update_party_status(request_id: str, status: str, estimated_cost: Optional[float] = None) -> dict:
    extra = {"estimated_cost": round(float(estimated_cost), 2)} if estimated_cost is not None else None
    return _update_status(PARTY_REQUESTS, PARTY_STATUSES, request_id, status, extra)
