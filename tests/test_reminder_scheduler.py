# tests/test_reminder_scheduler.py
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from services import reminder_scheduler
from services.errors import ValidationError
from services.reminder_scheduler import (
    ReminderScheduler,
    cron_expression,
    get_reminder_settings,
    next_run,
    send_reminders,
    update_reminder_settings,
)

RIYADH = ZoneInfo("Asia/Riyadh")

# 2025-01-01 is a Wednesday
NEW_YEAR = datetime(2025, 1, 1, 10, 0, tzinfo=RIYADH)


class TestCronExpression:

    @pytest.mark.parametrize("frequency, expected", [
        ("daily", "0 9 * * *"),
        ("weekly", "0 9 * * 3"),
        ("biweekly", "0 9 */14 * 3"),
        ("monthly", "0 9 1 * 3"),
        ("yearly", "0 9 * * 0"),
    ])
    def test_expressions(self, frequency, expected):
        assert cron_expression(frequency, 3) == expected


class TestNextRun:

    def test_daily_after_todays_hour(self):
        assert next_run("daily", 0, NEW_YEAR) == datetime(2025, 1, 2, 9, 0, tzinfo=RIYADH)

    def test_daily_before_todays_hour(self):
        early = NEW_YEAR.replace(hour=8)
        assert next_run("daily", 0, early) == datetime(2025, 1, 1, 9, 0, tzinfo=RIYADH)

    def test_weekly_on_sunday(self):
        assert next_run("weekly", 0, NEW_YEAR) == datetime(2025, 1, 5, 9, 0, tzinfo=RIYADH)

    def test_biweekly_uses_even_iso_weeks(self):
        # Sunday 2025-01-05 closes ISO week 1; the next Sunday is in week 2
        assert next_run("biweekly", 0, NEW_YEAR) == datetime(2025, 1, 12, 9, 0, tzinfo=RIYADH)

    def test_monthly_first_weekday_of_month(self):
        assert next_run("monthly", 0, NEW_YEAR) == datetime(2025, 1, 5, 9, 0, tzinfo=RIYADH)
        later = datetime(2025, 1, 10, 10, 0, tzinfo=RIYADH)
        assert next_run("monthly", 0, later) == datetime(2025, 2, 2, 9, 0, tzinfo=RIYADH)

    def test_custom_hour(self):
        assert next_run("weekly", 3, NEW_YEAR, hour=17) == datetime(2025, 1, 1, 17, 0, tzinfo=RIYADH)


class TestSettings:

    def test_defaults(self, db):
        assert get_reminder_settings(db) == {"enabled": True, "frequency": "weekly", "day_of_week": 0}

    def test_partial_update(self, db):
        update_reminder_settings(db, {"frequency": "daily"})
        saved = update_reminder_settings(db, {"dayOfWeek": 4})
        assert saved == {"enabled": True, "frequency": "daily", "day_of_week": 4}
        assert db.scalar("SELECT COUNT(*) FROM reminder_settings") == 1

    @pytest.mark.parametrize("data", [
        {"enabled": "yes"},
        {"frequency": "hourly"},
        {"dayOfWeek": 7},
        {"dayOfWeek": -1},
        {"dayOfWeek": True},
    ])
    def test_invalid(self, db, data):
        with pytest.raises(ValidationError):
            update_reminder_settings(db, data)


class TestJob:

    def test_send_reminders_to_engineers(self, api_db, users):
        sent = send_reminders(api_db, today=date(2025, 3, 17))
        assert sent == 2
        rows = api_db.query("SELECT user_id, message FROM notifications ORDER BY user_id")
        assert [r["user_id"] for r in rows] == [users["alice"]["id"], users["bob"]["id"]]
        assert rows[0]["message"] == "Please log your tasks for week 3 of March 2025."

    def test_scheduler_start_and_stop(self, db):
        scheduler = ReminderScheduler(db, hour=9, tz_name="Asia/Riyadh")
        fire_at = scheduler.start()
        try:
            assert scheduler.running
            assert fire_at > datetime.now(RIYADH)
        finally:
            scheduler.stop()
        assert not scheduler.running

    def test_stop_during_run_does_not_rearm(self, db, monkeypatch):
        scheduler = ReminderScheduler(db, hour=9, tz_name="Asia/Riyadh")
        scheduler.start()
        monkeypatch.setattr(reminder_scheduler, "send_reminders", lambda _db: scheduler.stop())

        scheduler._run()

        assert not scheduler.running
        assert scheduler.next_fire is None

    def test_run_rearms_when_not_stopped(self, db, monkeypatch):
        sent = []
        monkeypatch.setattr(reminder_scheduler, "send_reminders", sent.append)
        scheduler = ReminderScheduler(db, hour=9, tz_name="Asia/Riyadh")
        try:
            scheduler._run()
            assert sent == [db]
            assert scheduler.running
        finally:
            scheduler.stop()

    def test_disabled_scheduler_does_not_arm(self, db):
        update_reminder_settings(db, {"enabled": False})
        scheduler = ReminderScheduler(db)
        assert scheduler.start() is None
        assert not scheduler.running


class TestReminderEndpoints:

    def test_get_defaults(self, client, auth):
        resp = client.get("/api/reminder/settings", headers=auth("director"))
        assert resp.json() == {"enabled": True, "frequency": "weekly", "dayOfWeek": 0, "dayName": "Sunday"}

    def test_update(self, client, auth):
        resp = client.put(
            "/api/reminder/settings",
            json={"frequency": "monthly", "dayOfWeek": 1},
            headers=auth("admin"),
        )
        assert resp.status_code == 200
        assert resp.json()["dayName"] == "Monday"
        assert resp.json()["message"] == "Reminder settings updated successfully"

    def test_update_validation(self, client, auth):
        resp = client.put("/api/reminder/settings", json={"frequency": "hourly"}, headers=auth("admin"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "frequency must be one of: daily, weekly, biweekly, monthly"}

    def test_engineers_forbidden(self, client, auth):
        assert client.get("/api/reminder/settings", headers=auth("alice")).status_code == 403

    def test_send_now(self, client, auth):
        resp = client.post("/api/reminder/test", headers=auth("admin"))
        assert resp.json() == {"message": "Reminder sent", "sent": 2}


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
