# services/reminder_scheduler.py
"""
==============================================================
REMINDER SCHEDULER - periodic "log your tasks" notifications
==============================================================

Settings (stored in reminder_settings, latest row wins):
- enabled      (default True)
- frequency    daily | weekly | biweekly | monthly (default weekly)
- day_of_week  0 = Sunday .. 6 = Saturday (default 0)

Each setting maps to a cron expression at ``settings.REMINDER_HOUR``:

    daily    -> 0 H * * *
    weekly   -> 0 H * * D
    biweekly -> 0 H */14 * D
    monthly  -> 0 H 1 * D

Firing days are computed in ``settings.TIMEZONE``:
- biweekly fires on day D of even ISO weeks
- monthly fires on the first day D of each month

The job runs on a daemon ``threading.Timer`` that re-arms itself after
every run.
"""

import logging
import threading
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Optional

from config.settings import settings
from services.errors import ValidationError
from services.notification_service import NotificationService
from utils.dates import cron_weekday, day_name, local_tz, now_local, week_of_month

logger = logging.getLogger(__name__)

FREQUENCIES = ("daily", "weekly", "biweekly", "monthly")
DEFAULT_SETTINGS = {"enabled": True, "frequency": "weekly", "day_of_week": 0}

# Two months covers every frequency, including "first <weekday> of the month"
SEARCH_DAYS = 62


# =====================================================
# SETTINGS
# =====================================================

def present_settings(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "enabled": bool(row["enabled"]),
        "frequency": row["frequency"],
        "dayOfWeek": row["day_of_week"],
        "dayName": day_name(row["day_of_week"]),
    }


def get_reminder_settings(db) -> Dict[str, Any]:
    """Latest stored settings, or the defaults when none are stored."""
    row = db.query_one(
        "SELECT enabled, frequency, day_of_week FROM reminder_settings ORDER BY id DESC LIMIT 1"
    )
    return row or dict(DEFAULT_SETTINGS)


def update_reminder_settings(db, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and store a partial settings update.

    Args:
        data: any of ``enabled`` (bool), ``frequency``, ``dayOfWeek``

    Raises:
        ValidationError: value out of range
    """
    enabled = data.get("enabled")
    frequency = data.get("frequency")
    day_of_week = data.get("dayOfWeek")

    if enabled is not None and not isinstance(enabled, bool):
        raise ValidationError("enabled must be a boolean")
    if frequency and frequency not in FREQUENCIES:
        raise ValidationError("frequency must be one of: daily, weekly, biweekly, monthly")
    if day_of_week is not None and (
        isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6
    ):
        raise ValidationError("dayOfWeek must be between 0 (Sunday) and 6 (Saturday)")

    current = get_reminder_settings(db)
    merged = {
        "enabled": current["enabled"] if enabled is None else enabled,
        "frequency": frequency or current["frequency"],
        "day_of_week": current["day_of_week"] if day_of_week is None else day_of_week,
    }

    existing = db.query_one("SELECT id FROM reminder_settings ORDER BY id DESC LIMIT 1")
    if existing is None:
        db.execute(
            "INSERT INTO reminder_settings (enabled, frequency, day_of_week) VALUES (?, ?, ?)",
            (int(bool(merged["enabled"])), merged["frequency"], merged["day_of_week"]),
        )
    else:
        db.execute(
            "UPDATE reminder_settings SET enabled = ?, frequency = ?, day_of_week = ?, "
            "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (int(bool(merged["enabled"])), merged["frequency"], merged["day_of_week"], existing["id"]),
        )
    logger.info("Reminder settings updated: %s", merged)
    return merged


# =====================================================
# SCHEDULE COMPUTATION
# =====================================================

def cron_expression(frequency: str, day_of_week: int, hour: int = 9) -> str:
    if frequency == "daily":
        return "0 {0} * * *".format(hour)
    if frequency == "weekly":
        return "0 {0} * * {1}".format(hour, day_of_week)
    if frequency == "biweekly":
        return "0 {0} */14 * {1}".format(hour, day_of_week)
    if frequency == "monthly":
        return "0 {0} 1 * {1}".format(hour, day_of_week)
    return "0 {0} * * 0".format(hour)


def fires_on(frequency: str, day_of_week: int, day: date) -> bool:
    """True when the reminder is due on ``day``."""
    if frequency == "daily":
        return True
    if cron_weekday(day) != day_of_week:
        return False
    if frequency == "biweekly":
        return day.isocalendar()[1] % 2 == 0
    if frequency == "monthly":
        return day.day <= 7
    return True


def next_run(frequency: str, day_of_week: int, now: datetime, hour: int = 9) -> datetime:
    """
    First firing time strictly after ``now``.

    ``now`` must be timezone-aware; the result carries the same tzinfo.
    """
    for offset in range(SEARCH_DAYS + 1):
        day = now.date() + timedelta(days=offset)
        candidate = datetime.combine(day, time(hour=hour), tzinfo=now.tzinfo)
        if candidate > now and fires_on(frequency, day_of_week, day):
            return candidate
    raise ValueError("No reminder time found for {0}/{1}".format(frequency, day_of_week))


# =====================================================
# JOB
# =====================================================

def send_reminders(db, today: Optional[date] = None) -> int:
    """
    Notify every engineer account to log tasks for the current period.

    Returns:
        Number of notifications created
    """
    today = today or now_local().date()
    notifications = NotificationService(db)
    message = "Please log your tasks for week {0} of {1} {2}.".format(
        week_of_month(today), today.strftime("%B"), today.year
    )
    users = db.query("SELECT id FROM users WHERE role = 'engineer' ORDER BY id")
    for user in users:
        notifications.create(user["id"], "Task logging reminder", message)
    logger.info("Reminder sent to %d engineers", len(users))
    return len(users)


class ReminderScheduler:
    """Timer-driven runner for the reminder job"""

    def __init__(self, db, hour: Optional[int] = None, tz_name: Optional[str] = None):
        self.db = db
        self.hour = settings.REMINDER_HOUR if hour is None else hour
        self.tz = local_tz(tz_name)
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._stopped = False
        self.next_fire: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self) -> Optional[datetime]:
        """(Re)arm the timer from the stored settings; returns the next fire time."""
        self._cancel()
        self._stopped = False
        current = get_reminder_settings(self.db)
        if not current["enabled"]:
            logger.info("Reminder scheduler disabled")
            return None

        frequency, day_of_week = current["frequency"], current["day_of_week"]
        now = now_local(self.tz)
        fire_at = next_run(frequency, day_of_week, now, self.hour)
        logger.info(
            "Reminder scheduler: %s on %s (cron %s), next run %s",
            frequency, day_name(day_of_week),
            cron_expression(frequency, day_of_week, self.hour), fire_at.isoformat(),
        )

        with self._lock:
            self._timer = threading.Timer((fire_at - now).total_seconds(), self._run)
            self._timer.daemon = True
            self._timer.start()
            self.next_fire = fire_at
        return fire_at

    def stop(self) -> None:
        """Cancel the pending run; a job already in progress will not re-arm."""
        self._stopped = True
        if self._cancel():
            logger.info("Reminder scheduler stopped")

    def _cancel(self) -> bool:
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self.next_fire = None
            return True

    def _run(self) -> None:
        with self._lock:
            self._timer = None
        try:
            send_reminders(self.db)
        except Exception:
            logger.exception("Reminder job failed")
        if self._stopped:
            logger.info("Reminder scheduler stopped during run, not re-arming")
            return
        self.start()
