from typing import Any, Dict, List, Optional
import logging

import pixoul.infra.supabase_client as supabase_client
from pixoul.infra.supabase_client import rows, first_row

logger = logging.getLogger(__name__)

# module pixoul.chat.repository
def find_conversation(conversation_type: str, *, reference_id: Optional[str] = None, user_id: Optional[str] = None) -> Optional[dict]:
    q = (
        supabase_client.get_service_supabase()
        .table("chat_conversations")
        .select("*")
        .eq("conversation_type", conversation_type)
    )
    if reference_id:
        q = q.eq("reference_id", reference_id)
    if user_id:
        q = q.eq("user_id", user_id)
    res = q.order("created_at", desc=False).limit(1).execute()
    return first_row(res)

def get_conversation(conversation_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("chat_conversations")
        .select("*")
        .eq("id", conversation_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def insert_conversation(data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table("chat_conversations").insert(data).execute()
    return first_row(res)

def list_conversations(user_id: Optional[str] = None, limit: int = 100) -> List[dict]:
    q = supabase_client.get_service_supabase().table("chat_conversations").select("*")
    if user_id:
        q = q.eq("user_id", user_id)
    res = q.order("last_message_at", desc=True).limit(limit).execute()
    return rows(res)

def touch_conversation(conversation_id: str, when: str) -> None:
    (
        supabase_client.get_service_supabase()
        .table("chat_conversations")
        .update({"last_message_at": when})
        .eq("id", conversation_id)
        .execute()
    )

def list_messages(conversation_id: str, since: Optional[str] = None) -> List[dict]:
    q = (
        supabase_client.get_service_supabase()
        .table("chat_messages")
        .select("*")
        .eq("conversation_id", conversation_id)
    )
    if since:
        q = q.gt("created_at", since)
    res = q.order("created_at", desc=False).execute()
    return rows(res)

def mark_others_read(conversation_id: str, reader_id: str) -> None:
    (
        supabase_client.get_service_supabase()
        .table("chat_messages")
        .update({"is_read": True})
        .eq("conversation_id", conversation_id)
        .neq("sender_id", reader_id)
        .eq("is_read", False)
        .execute()
    )

def insert_message(data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table("chat_messages").insert(data).execute()
    return first_row(res)
