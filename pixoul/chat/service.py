"""
Chat client <-> staff (support, réservations, fêtes).
Une conversation par (reference_id, type); pour le support sans référence,
une conversation par utilisateur. La diffusion temps réel reste côté client
(flux de changements Supabase); l'API expose `since` pour le polling.
"""
from datetime import datetime, timezone
from typing import List, Optional
import logging

from fastapi import HTTPException

from pixoul.auth.identity import Authenticated
from pixoul.bookings import repository as bookings_repo
from . import repository

logger = logging.getLogger(__name__)

CONVERSATION_TYPES = ("booking", "party", "support")
# table de la ligne référencée par type de conversation
REFERENCE_TABLES = {"booking": "room_bookings", "party": "party_requests"}

# module pixoul.chat.service
def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

def _can_access(user: Authenticated, conversation: dict) -> bool:
    return user.is_staff or str(conversation.get("user_id")) == user.id

def _get_accessible(user: Authenticated, conversation_id: str) -> dict:
    conversation = repository.get_conversation(conversation_id)
    if not conversation or not _can_access(user, conversation):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation

def open_conversation(user: Authenticated, conversation_type: str, reference_id: Optional[str] = None, title: str = "") -> dict:
    if conversation_type not in CONVERSATION_TYPES:
        raise HTTPException(status_code=400, detail="Invalid conversation type")
    if conversation_type != "support" and not reference_id:
        raise HTTPException(status_code=400, detail="reference_id is required")

    owner_id = user.id
    if conversation_type in REFERENCE_TABLES:
        # la conversation appartient au propriétaire de la réservation / demande
        row = bookings_repo.get_row(REFERENCE_TABLES[conversation_type], reference_id)
        if not row or not (user.is_staff or str(row.get("user_id")) == user.id):
            raise HTTPException(status_code=404, detail=f"{conversation_type.capitalize()} not found")
        owner_id = str(row.get("user_id"))

    if reference_id:
        existing = repository.find_conversation(conversation_type, reference_id=reference_id)
    else:
        existing = repository.find_conversation(conversation_type, user_id=user.id)
    if existing:
        if not _can_access(user, existing):
            raise HTTPException(status_code=404, detail="Conversation not found")
        return existing

    created = repository.insert_conversation({
        "user_id": owner_id,
        "conversation_type": conversation_type,
        "reference_id": reference_id,
        "title": title or conversation_type.capitalize(),
        "status": "open",
        "last_message_at": _now(),
    })
    if not created:
        raise HTTPException(status_code=500, detail="Unable to open conversation")
    logger.info("chat.open_conversation user_id=%s type=%s reference_id=%s", user.id, conversation_type, reference_id)
    return created

def list_conversations(user: Authenticated) -> List[dict]:
    return repository.list_conversations(None if user.is_staff else user.id)

def list_messages(user: Authenticated, conversation_id: str, since: Optional[str] = None) -> List[dict]:
    """Messages par ordre chronologique; ceux de l'autre partie passent en lus."""
    _get_accessible(user, conversation_id)
    messages = repository.list_messages(conversation_id, since)
    if any(not m.get("is_read") and str(m.get("sender_id")) != user.id for m in messages):
        repository.mark_others_read(conversation_id, user.id)
    return messages

def send_message(user: Authenticated, conversation_id: str, text: str) -> dict:
    text = (text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message cannot be empty")
    _get_accessible(user, conversation_id)
    message = repository.insert_message({
        "conversation_id": conversation_id,
        "sender_id": user.id,
        "message": text,
        "is_staff": user.is_staff,
        "is_read": False,
    })
    repository.touch_conversation(conversation_id, _now())
    return message or {}
