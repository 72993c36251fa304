"""
Notifications in-app.
- client: ses notifications non lues (30 max)
- staff: notifications adressées à son rôle (50 max); un manager voit tous les rôles
"""
from datetime import datetime, timezone
from typing import List, Optional
import logging

from fastapi import HTTPException

from pixoul.auth.identity import Authenticated, MANAGER_ROLE, STAFF_AREAS
from . import repository

logger = logging.getLogger(__name__)

CUSTOMER_LIMIT = 30
STAFF_LIMIT = 50

# module pixoul.notifications.service
def notify_user(user_id: str, kind: str, title: str, body: str = "", link_path: Optional[str] = None) -> Optional[dict]:
    return repository.insert_notification({
        "recipient_user_id": user_id,
        "kind": kind,
        "title": title,
        "body": body,
        "link_path": link_path,
        "is_read": False,
    })

def notify_role(role: str, kind: str, title: str, body: str = "", link_path: Optional[str] = None) -> Optional[dict]:
    return repository.insert_notification({
        "recipient_role": role,
        "kind": kind,
        "title": title,
        "body": body,
        "link_path": link_path,
        "is_read": False,
    })

def _visible_roles(user: Authenticated) -> List[str]:
    if user.role == MANAGER_ROLE:
        return [MANAGER_ROLE, *STAFF_AREAS]
    return [user.role]

def list_for_identity(user: Authenticated) -> List[dict]:
    if user.is_staff:
        return repository.list_for_roles(_visible_roles(user), STAFF_LIMIT)
    return repository.list_unread_for_user(user.id, CUSTOMER_LIMIT)

def mark_read(user: Authenticated, notification_id: str) -> dict:
    row = repository.get_notification(notification_id)
    owned = bool(row) and (
        str(row.get("recipient_user_id") or "") == user.id
        or (user.is_staff and row.get("recipient_role") in _visible_roles(user))
    )
    if not owned:
        raise HTTPException(status_code=404, detail="Notification not found")
    updated = repository.update_notification(notification_id, {
        "is_read": True,
        "read_at": datetime.now(timezone.utc).isoformat(),
    })
    return updated or dict(row, is_read=True)
