from typing import Any, Dict, List, Optional
import logging

import pixoul.infra.supabase_client as supabase_client
from pixoul.infra.supabase_client import rows, first_row, NOT_PAID_FILTER

logger = logging.getLogger(__name__)

EVENTS = "events_programs"
REGISTRATIONS = "event_registrations"

# module pixoul.events.repository
def list_events() -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(EVENTS)
        .select("*")
        .eq("is_active", True)
        .order("event_date", desc=False)
        .execute()
    )
    return rows(res)

def get_event(event_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(EVENTS)
        .select("*")
        .eq("id", event_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def list_registrations_for_event(event_id: str) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(REGISTRATIONS)
        .select("*")
        .eq("event_id", event_id)
        .order("created_at", desc=False)
        .execute()
    )
    return rows(res)

def get_registration(registration_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(REGISTRATIONS)
        .select("*")
        .eq("id", registration_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def get_registration_for_user(event_id: str, user_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(REGISTRATIONS)
        .select("*")
        .eq("event_id", event_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def list_registrations_for_user(user_id: str) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(REGISTRATIONS)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return rows(res)

def insert_registration(data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table(REGISTRATIONS).insert(data).execute()
    return first_row(res)

def update_registration(registration_id: str, data: Dict[str, Any]) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(REGISTRATIONS)
        .update(data)
        .eq("id", registration_id)
        .execute()
    )
    return first_row(res)

def mark_registration_paid(registration_id: str, data: Dict[str, Any]) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table(REGISTRATIONS)
        .update(data)
        .eq("id", registration_id)
        .or_(NOT_PAID_FILTER)
        .execute()
    )
    return first_row(res)
