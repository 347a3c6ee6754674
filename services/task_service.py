# services/task_service.py
"""
Task CRUD with role rules and denormalized counters.

Every write recomputes ``engineers.tasks_total`` and ``services.count`` for
the names it touched, inside the same transaction as the write.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from auth.dependencies import ROLE_ENGINEER, is_manager
from services.errors import NotFoundError, PermissionDeniedError, ValidationError
from services.notification_service import NotificationService
from utils.dates import canonical_month

logger = logging.getLogger(__name__)

STATUSES = ("pending", "in-progress", "completed")
PRIORITIES = ("low", "medium", "high")
REQUIRED_FIELDS = ("service", "engineer", "week", "month", "year", "status", "priority")
EXPORT_COLUMNS = ["id", "engineer", "service", "week", "month", "year", "status", "priority", "notes"]


def validate_task(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check and normalize one task payload.

    ``description`` is accepted as an alias of ``notes``.

    Raises:
        ValidationError: a required field is missing or out of range
    """
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})

    try:
        week = int(data["week"])
        year = int(data["year"])
    except (TypeError, ValueError):
        raise ValidationError("week and year must be integers")
    if not 1 <= week <= 4:
        raise ValidationError("week must be between 1 and 4")

    month = canonical_month(data["month"])
    if month is None:
        raise ValidationError("month must be a full month name")

    status = str(data["status"]).strip().lower()
    if status not in STATUSES:
        raise ValidationError("status must be one of: {0}".format(", ".join(STATUSES)))

    priority = str(data["priority"]).strip().lower()
    if priority not in PRIORITIES:
        raise ValidationError("priority must be one of: {0}".format(", ".join(PRIORITIES)))

    notes = data.get("description") or data.get("notes") or None
    return {
        "service": str(data["service"]).strip(),
        "engineer": str(data["engineer"]).strip(),
        "week": week,
        "month": month,
        "year": year,
        "status": status,
        "priority": priority,
        "notes": notes,
    }


def with_description(task: Dict[str, Any]) -> Dict[str, Any]:
    task["description"] = task.get("notes") or ""
    return task


def recount(conn, engineers: Iterable[str] = (), services: Iterable[str] = ()) -> None:
    """Recompute denormalized task counters for the given names."""
    for name in set(engineers):
        conn.execute(
            "UPDATE engineers SET tasks_total = (SELECT COUNT(*) FROM tasks WHERE engineer = ?) WHERE name = ?",
            (name, name),
        )
    for name in set(services):
        conn.execute(
            "UPDATE services SET count = (SELECT COUNT(*) FROM tasks WHERE service = ?) WHERE name = ?",
            (name, name),
        )


def insert_task(conn, task: Dict[str, Any]) -> int:
    cursor = conn.execute(
        "INSERT INTO tasks (service, engineer, week, month, year, status, priority, notes) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (task["service"], task["engineer"], task["week"], task["month"], task["year"],
         task["status"], task["priority"], task["notes"]),
    )
    return cursor.lastrowid


class TaskService:
    """Task operations on behalf of an authenticated user"""

    def __init__(self, db, notifications: Optional[NotificationService] = None):
        self.db = db
        self.notifications = notifications or NotificationService(db)

    # =====================================================
    # READ
    # =====================================================

    def list_tasks(self, user: Dict[str, Any], view_all: bool = False) -> List[Dict[str, Any]]:
        if user["role"] == ROLE_ENGINEER and not view_all:
            if not user.get("engineerName"):
                return []
            rows = self.db.query(
                "SELECT * FROM tasks WHERE engineer = ? ORDER BY created_at DESC, id DESC",
                (user["engineerName"],),
            )
        else:
            rows = self.db.query("SELECT * FROM tasks ORDER BY created_at DESC, id DESC")
        return [with_description(r) for r in rows]

    def _fetch(self, task_id: int) -> Dict[str, Any]:
        task = self.db.query_one("SELECT * FROM tasks WHERE id = ?", (task_id,))
        if task is None:
            raise NotFoundError("Task")
        return task

    def _check_owner(self, task: Dict[str, Any], user: Dict[str, Any]) -> None:
        if user["role"] == ROLE_ENGINEER and task["engineer"] != user.get("engineerName"):
            raise PermissionDeniedError()

    def get_task(self, task_id: int, user: Dict[str, Any]) -> Dict[str, Any]:
        task = self._fetch(task_id)
        self._check_owner(task, user)
        return with_description(task)

    # =====================================================
    # WRITE
    # =====================================================

    def _check_can_create(self, task: Dict[str, Any], user: Dict[str, Any]) -> None:
        if user["role"] == ROLE_ENGINEER and task["engineer"] != user.get("engineerName"):
            raise PermissionDeniedError("Engineers can only create tasks for themselves")

    def _notify_assignment(self, task: Dict[str, Any], user: Dict[str, Any]) -> None:
        if not is_manager(user):
            return
        message = "{0} assigned you {1} for week {2} of {3} {4} ({5} priority).".format(
            user.get("name") or user["role"].capitalize(),
            task["service"], task["week"], task["month"], task["year"], task["priority"],
        )
        self.notifications.notify_engineer(task["engineer"], "New task assigned", message)

    def create_task(self, data: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        task = validate_task(data)
        self._check_can_create(task, user)

        with self.db.transaction() as conn:
            task_id = insert_task(conn, task)
            recount(conn, [task["engineer"]], [task["service"]])

        logger.info("Task %s created for %s / %s", task_id, task["engineer"], task["service"])
        self._notify_assignment(task, user)
        return with_description(self._fetch(task_id))

    def bulk_create(self, items: Any, user: Dict[str, Any]) -> Dict[str, Any]:
        """Create several tasks; any invalid item rejects the whole batch."""
        if not isinstance(items, list) or not items:
            raise ValidationError("Tasks array is required")

        tasks = [validate_task(item) for item in items]
        for task in tasks:
            self._check_can_create(task, user)

        with self.db.transaction() as conn:
            ids = [insert_task(conn, task) for task in tasks]
            recount(conn, [t["engineer"] for t in tasks], [t["service"] for t in tasks])

        logger.info("Bulk created %d tasks", len(ids))
        for task in tasks:
            self._notify_assignment(task, user)

        placeholders = ", ".join("?" for _ in ids)
        created = self.db.query(
            "SELECT * FROM tasks WHERE id IN ({0}) ORDER BY id".format(placeholders), ids
        )
        return {"success": True, "count": len(created), "tasks": [with_description(t) for t in created]}

    def update_task(self, task_id: int, data: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        old = self._fetch(task_id)
        self._check_owner(old, user)
        if user["role"] == ROLE_ENGINEER and data.get("engineer") not in (None, user.get("engineerName")):
            raise PermissionDeniedError("Engineers cannot reassign tasks")

        merged = dict(old)
        merged.update({k: v for k, v in data.items() if v is not None})
        task = validate_task(merged)

        with self.db.transaction() as conn:
            conn.execute(
                "UPDATE tasks SET service = ?, engineer = ?, week = ?, month = ?, year = ?, "
                "status = ?, priority = ?, notes = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (task["service"], task["engineer"], task["week"], task["month"], task["year"],
                 task["status"], task["priority"], task["notes"], task_id),
            )
            recount(conn, [old["engineer"], task["engineer"]], [old["service"], task["service"]])

        if task["engineer"] != old["engineer"]:
            self._notify_assignment(task, user)
        return with_description(self._fetch(task_id))

    def delete_task(self, task_id: int, user: Dict[str, Any]) -> None:
        task = self._fetch(task_id)
        self._check_owner(task, user)

        with self.db.transaction() as conn:
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            recount(conn, [task["engineer"]], [task["service"]])
        logger.info("Task %s deleted", task_id)

    # =====================================================
    # EXPORT
    # =====================================================

    def export_csv(self, year: Optional[int] = None, month: Optional[str] = None) -> str:
        """All tasks (optionally one year / month) as CSV text."""
        clauses, params = [], []
        if year is not None:
            clauses.append("year = ?")
            params.append(year)
        if month:
            canonical = canonical_month(month)
            if canonical is None:
                raise ValidationError("month must be a full month name")
            clauses.append("month = ?")
            params.append(canonical)

        where = "WHERE " + " AND ".join(clauses) if clauses else ""
        rows = self.db.query(
            "SELECT * FROM tasks {0} ORDER BY year DESC, month, engineer, service, week".format(where),
            params,
        )
        frame = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
        return frame.to_csv(index=False)
