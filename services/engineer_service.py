# services/engineer_service.py
"""
Engineer records (the names tasks are logged against).
"""

import logging
import sqlite3
from typing import Any, Dict, List

from services.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#3b82f6"


class EngineerService:

    def __init__(self, db):
        self.db = db

    def list_engineers(self) -> List[Dict[str, Any]]:
        return self.db.query(
            "SELECT e.*, u.email AS user_email, u.name AS user_name "
            "FROM engineers e LEFT JOIN users u ON e.user_id = u.id "
            "ORDER BY e.name"
        )

    def get_engineer(self, engineer_id: int) -> Dict[str, Any]:
        row = self.db.query_one("SELECT * FROM engineers WHERE id = ?", (engineer_id,))
        if row is None:
            raise NotFoundError("Engineer")
        return row

    def create_engineer(self, name: str, color: str) -> Dict[str, Any]:
        if not name or not color:
            raise ValidationError("Name and color are required")
        try:
            engineer_id = self.db.execute(
                "INSERT INTO engineers (name, color) VALUES (?, ?)", (name.strip(), color)
            )
        except sqlite3.IntegrityError:
            raise ConflictError("Engineer with this name already exists")
        logger.info("Engineer created: %s", name)
        return self.get_engineer(engineer_id)

    def ensure_engineer(self, conn, name: str, user_id=None, color: str = DEFAULT_COLOR) -> None:
        """Create the engineer if missing (inside a caller's transaction)."""
        conn.execute(
            "INSERT OR IGNORE INTO engineers (name, color) VALUES (?, ?)", (name, color)
        )
        if user_id is not None:
            conn.execute("UPDATE engineers SET user_id = ? WHERE name = ?", (user_id, name))

    def update_engineer(self, engineer_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update name and/or color.

        A rename is carried over to tasks, service assignments and the
        linked user account in the same transaction.
        """
        current = self.get_engineer(engineer_id)
        name = (data.get("name") or "").strip() or None
        color = data.get("color") or None
        if name is None and color is None:
            raise ValidationError("No fields to update")

        new_name = name or current["name"]
        try:
            with self.db.transaction() as conn:
                conn.execute(
                    "UPDATE engineers SET name = ?, color = ? WHERE id = ?",
                    (new_name, color or current["color"], engineer_id),
                )
                if new_name != current["name"]:
                    for sql in (
                        "UPDATE tasks SET engineer = ? WHERE engineer = ?",
                        "UPDATE services SET assigned_to = ? WHERE assigned_to = ?",
                        "UPDATE users SET engineer_name = ? WHERE engineer_name = ?",
                    ):
                        conn.execute(sql, (new_name, current["name"]))
        except sqlite3.IntegrityError:
            raise ConflictError("Engineer with this name already exists")

        if new_name != current["name"]:
            logger.info("Engineer renamed: %s -> %s", current["name"], new_name)
        return self.get_engineer(engineer_id)

    def delete_engineer(self, engineer_id: int) -> None:
        engineer = self.get_engineer(engineer_id)
        task_count = self.db.scalar(
            "SELECT COUNT(*) FROM tasks WHERE engineer = ?", (engineer["name"],)
        )
        if task_count:
            raise ValidationError(
                "Cannot delete engineer. They have {0} associated task(s). "
                "Please delete or reassign tasks first.".format(task_count)
            )
        with self.db.transaction() as conn:
            conn.execute("UPDATE services SET assigned_to = NULL WHERE assigned_to = ?", (engineer["name"],))
            conn.execute("DELETE FROM engineers WHERE id = ?", (engineer_id,))
        logger.info("Engineer deleted: %s", engineer["name"])
