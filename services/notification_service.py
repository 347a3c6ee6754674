# services/notification_service.py
"""
In-app notifications (task assignments and logging reminders).
"""

import logging
from typing import Any, Dict, List

from services.errors import NotFoundError

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(self, db):
        self.db = db

    def list_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        rows = self.db.query(
            "SELECT * FROM notifications WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (user_id,),
        )
        for row in rows:
            row["read"] = bool(row["read"])
        return rows

    def unread_count(self, user_id: int) -> int:
        return self.db.scalar(
            "SELECT COUNT(*) FROM notifications WHERE user_id = ? AND read = 0",
            (user_id,),
        ) or 0

    def mark_read(self, notification_id: int, user_id: int) -> Dict[str, Any]:
        changed = self.db.execute(
            "UPDATE notifications SET read = 1 WHERE id = ? AND user_id = ?",
            (notification_id, user_id),
        )
        if not changed:
            raise NotFoundError("Notification")
        row = self.db.query_one("SELECT * FROM notifications WHERE id = ?", (notification_id,))
        row["read"] = True
        return row

    def mark_all_read(self, user_id: int) -> int:
        return self.db.execute(
            "UPDATE notifications SET read = 1 WHERE user_id = ? AND read = 0",
            (user_id,),
        )

    def create(self, user_id: int, title: str, message: str) -> int:
        return self.db.execute(
            "INSERT INTO notifications (user_id, title, message) VALUES (?, ?, ?)",
            (user_id, title, message),
        )

    def notify_engineer(self, engineer_name: str, title: str, message: str) -> int:
        """
        Notify every engineer account linked to ``engineer_name``.

        Returns:
            Number of notifications created
        """
        users = self.db.query(
            "SELECT id FROM users WHERE engineer_name = ? AND role = 'engineer'",
            (engineer_name,),
        )
        for user in users:
            self.create(user["id"], title, message)
        if not users:
            logger.debug("No engineer account linked to %s; notification skipped", engineer_name)
        return len(users)
