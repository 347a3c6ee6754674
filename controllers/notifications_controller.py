# controllers/notifications_controller.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from auth.dependencies import get_current_user, get_database
from services.notification_service import NotificationService

notifications_router = APIRouter(tags=["Notifications"])


@notifications_router.get("")
def list_notifications(
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> List[Dict[str, Any]]:
    return NotificationService(db).list_for_user(user["id"])


@notifications_router.get("/unread")
def unread_count(
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, int]:
    return {"count": NotificationService(db).unread_count(user["id"])}


@notifications_router.patch("/read-all")
def mark_all_read(
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, int]:
    return {"updated": NotificationService(db).mark_all_read(user["id"])}


@notifications_router.patch("/{notification_id}/read")
def mark_read(
    notification_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return NotificationService(db).mark_read(notification_id, user["id"])
