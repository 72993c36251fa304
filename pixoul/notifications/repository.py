from typing import Any, Dict, List, Optional
import logging

import pixoul.infra.supabase_client as supabase_client
from pixoul.infra.supabase_client import rows, first_row

logger = logging.getLogger(__name__)

# module pixoul.notifications.repository
def insert_notification(data: Dict[str, Any]) -> Optional[dict]:
    res = supabase_client.get_service_supabase().table("notifications").insert(data).execute()
    return first_row(res)

def list_unread_for_user(user_id: str, limit: int) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("notifications")
        .select("*")
        .eq("recipient_user_id", user_id)
        .eq("is_read", False)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return rows(res)

def list_for_roles(roles: List[str], limit: int) -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("notifications")
        .select("*")
        .in_("recipient_role", roles)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return rows(res)

def get_notification(notification_id: str) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("notifications")
        .select("*")
        .eq("id", notification_id)
        .limit(1)
        .execute()
    )
    return first_row(res)

def update_notification(notification_id: str, data: Dict[str, Any]) -> Optional[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("notifications")
        .update(data)
        .eq("id", notification_id)
        .execute()
    )
    return first_row(res)
