# controllers/reminder_controller.py
"""
Reminder settings. Saving settings restarts (or stops) the app's scheduler.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from auth.dependencies import MANAGER_ROLES, get_database, require_roles
from services.errors import ValidationError
from services.reminder_scheduler import (
    get_reminder_settings,
    present_settings,
    send_reminders,
    update_reminder_settings,
)

reminder_router = APIRouter(tags=["Reminder"])

managers = require_roles(*MANAGER_ROLES)


@reminder_router.get("/settings")
def read_settings(user: Dict[str, Any] = Depends(managers), db=Depends(get_database)) -> Dict[str, Any]:
    return present_settings(get_reminder_settings(db))


@reminder_router.put("/settings")
async def write_settings(
    request: Request,
    user: Dict[str, Any] = Depends(managers),
    db=Depends(get_database),
) -> Dict[str, Any]:
    try:
        data = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON")

    saved = update_reminder_settings(db, data)

    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is not None:
        if saved["enabled"]:
            scheduler.start()
        else:
            scheduler.stop()

    body = present_settings(saved)
    body["message"] = "Reminder settings updated successfully"
    return body


@reminder_router.post("/test")
def test_reminder(user: Dict[str, Any] = Depends(managers), db=Depends(get_database)) -> Dict[str, Any]:
    sent = send_reminders(db)
    return {"message": "Reminder sent", "sent": sent}
