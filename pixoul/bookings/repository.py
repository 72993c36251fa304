"""
Accès aux tables rooms, room_bookings, party_requests.
"""
from typing import Any, Dict, List, Optional
import logging

import pixoul.infra.supabase_client as supabase_client
from pixoul.infra.supabase_client import rows, first_row, NOT_PAID_FILTER

logger = logging.getLogger(__name__)

# module pixoul.bookings.repository
def get_room(room_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("rooms")
        .select("*")
        .eq("id", room_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def list_rooms() -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("rooms")
        .select("*")
        .eq("is_active", True)
        .order("name", desc=False)
        .execute()
    )
    return rows(res)

def insert_row(table: str, data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table(table).insert(data).execute()
    return first_row(res)

def get_row(table: str, row_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(table)
        .select("*")
        .eq("id", row_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def list_for_user(table: str, user_id: str, limit: int = 50) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(table)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return rows(res)

def list_all(table: str, status: Optional[str] = None, limit: int = 200) -> List[dict]:
    q = supabase_client.get_service_supabase().table(table).select("*")
    if status:
        q = q.eq("status", status)
    res = q.order("created_at", desc=True).limit(limit).execute()
    return rows(res)

def update_row(table: str, row_id: str, data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table(table).update(data).eq("id", row_id).execute()
    return first_row(res)

def mark_paid(table: str, row_id: str, data: Dict[str, Any]) -> Optional[dict]:
    """Mise à jour conditionnelle: sans effet si la ligne est déjà payée."""
    res = (
        supabase_client.get_service_supabase()
        .table(table)
        .update(data)
        .eq("id", row_id)
        .or_(NOT_PAID_FILTER)
        .execute()
    )
    return first_row(res)
