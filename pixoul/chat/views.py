# module pixoul.chat.views
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pixoul.auth.identity import Authenticated
from pixoul.utils.security import require_user
from pixoul.utils.rate_limit import optional_rate_limit
from pixoul.chat import service as chat_service

router = APIRouter(prefix="/api/v1/chat", tags=["Chat API"])

class OpenConversationRequest(BaseModel):
    conversation_type: str
    reference_id: Optional[str] = None
    title: str = ""

class SendMessageRequest(BaseModel):
    message: str

@router.post("/conversations")
def open_conversation(body: OpenConversationRequest, user: Authenticated = Depends(require_user)):
    return {"conversation": chat_service.open_conversation(user, body.conversation_type, body.reference_id, body.title)}

@router.get("/conversations")
def list_conversations(user: Authenticated = Depends(require_user)):
    return {"conversations": chat_service.list_conversations(user)}

@router.get("/conversations/{conversation_id}/messages")
def list_messages(conversation_id: str, since: Optional[str] = None, user: Authenticated = Depends(require_user)):
    """`since` (ISO 8601): ne renvoie que les messages plus récents (polling)."""
    return {"messages": chat_service.list_messages(user, conversation_id, since)}

@router.post(
    "/conversations/{conversation_id}/messages",
    dependencies=[Depends(optional_rate_limit(times=30, seconds=60))],
)
def send_message(conversation_id: str, body: SendMessageRequest, user: Authenticated = Depends(require_user)):
    return {"message": chat_service.send_message(user, conversation_id, body.message)}
