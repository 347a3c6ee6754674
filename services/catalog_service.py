# services/catalog_service.py
"""
Service catalog: the kinds of security-operations work tasks are logged
against, split into primary and secondary categories.
"""

import logging
import sqlite3
from typing import Any, Dict, List

from services.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

CATEGORIES = ("primary", "secondary")
DUPLICATE_MESSAGE = "Service with this name already exists"


def _check_category(category: str) -> None:
    if category not in CATEGORIES:
        raise ValidationError('Category must be "primary" or "secondary"')


class CatalogService:

    def __init__(self, db):
        self.db = db

    def list_services(self) -> List[Dict[str, Any]]:
        return self.db.query("SELECT * FROM services ORDER BY category, name")

    def get_service(self, service_id: int) -> Dict[str, Any]:
        row = self.db.query_one("SELECT * FROM services WHERE id = ?", (service_id,))
        if row is None:
            raise NotFoundError("Service")
        return row

    def create_service(self, name: str, category: str, assigned_to: str = None) -> Dict[str, Any]:
        if not name or not category:
            raise ValidationError("Name and category are required")
        _check_category(category)
        try:
            service_id = self.db.execute(
                "INSERT INTO services (name, assigned_to, category) VALUES (?, ?, ?)",
                (name.strip(), assigned_to or None, category),
            )
        except sqlite3.IntegrityError:
            raise ConflictError(DUPLICATE_MESSAGE)
        logger.info("Service created: %s (%s)", name, category)
        return self.get_service(service_id)

    def update_service(self, service_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        current = self.get_service(service_id)

        fields, values = [], []
        name = (data.get("name") or "").strip()
        if name:
            fields.append("name = ?")
            values.append(name)
        if "assignedTo" in data:
            fields.append("assigned_to = ?")
            values.append(data["assignedTo"] or None)
        if data.get("category"):
            _check_category(data["category"])
            fields.append("category = ?")
            values.append(data["category"])
        if not fields:
            raise ValidationError("No fields to update")

        fields.append("updated_at = CURRENT_TIMESTAMP")
        try:
            with self.db.transaction() as conn:
                conn.execute(
                    "UPDATE services SET {0} WHERE id = ?".format(", ".join(fields)),
                    values + [service_id],
                )
                if name and name != current["name"]:
                    conn.execute("UPDATE tasks SET service = ? WHERE service = ?", (name, current["name"]))
        except sqlite3.IntegrityError:
            raise ConflictError(DUPLICATE_MESSAGE)
        return self.get_service(service_id)

    def ensure_service(self, conn, name: str, category: str = "primary") -> None:
        """Create the service if missing (inside a caller's transaction)."""
        conn.execute(
            "INSERT OR IGNORE INTO services (name, category) VALUES (?, ?)", (name, category)
        )

    def delete_service(self, service_id: int) -> None:
        service = self.get_service(service_id)
        task_count = self.db.scalar(
            "SELECT COUNT(*) FROM tasks WHERE service = ?", (service["name"],)
        )
        if task_count:
            raise ValidationError(
                "Cannot delete service. It has {0} associated task(s). "
                "Please delete or reassign tasks first.".format(task_count)
            )
        self.db.execute("DELETE FROM services WHERE id = ?", (service_id,))
        logger.info("Service deleted: %s", service["name"])
