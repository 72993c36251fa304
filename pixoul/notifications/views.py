# module pixoul.notifications.views
from fastapi import APIRouter, Depends

from pixoul.auth.identity import Authenticated
from pixoul.utils.security import require_user
from pixoul.notifications import service as notifications_service

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications API"])

@router.get("")
def list_notifications(user: Authenticated = Depends(require_user)):
    items = notifications_service.list_for_identity(user)
    return {"notifications": items, "unread": sum(1 for n in items if not n.get("is_read"))}

@router.post("/{notification_id}/read")
def mark_read(notification_id: str, user: Authenticated = Depends(require_user)):
    return {"notification": notifications_service.mark_read(user, notification_id)}
