# services/user_service.py
"""
User accounts: login, administration and the optional startup admin.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from auth.dependencies import ROLE_ADMIN, ROLE_ENGINEER, ROLES
from auth.security import hash_password, token_for_user, verify_password
from services.engineer_service import DEFAULT_COLOR, EngineerService
from services.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_COLUMNS = "id, email, name, role, engineer_name, created_at, updated_at"
MIN_PASSWORD_LENGTH = 6


def public_user(row: Dict[str, Any]) -> Dict[str, Any]:
    """Shape returned to clients (never includes the hash)"""
    return {
        "id": row["id"],
        "email": row["email"],
        "name": row["name"],
        "role": row["role"],
        "engineerName": row.get("engineer_name"),
    }


class UserService:

    def __init__(self, db):
        self.db = db
        self.engineers = EngineerService(db)

    # =====================================================
    # AUTHENTICATION
    # =====================================================

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """
        Returns:
            {"token": str, "user": public user}
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        row = self.db.query_one(
            "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
        )
        if row is None or not verify_password(password, row["password_hash"]):
            logger.info("Failed login for %s", email)
            raise AuthenticationError()

        return {"token": token_for_user(row), "user": public_user(row)}

    def get_user(self, user_id: int) -> Dict[str, Any]:
        row = self.db.query_one(
            "SELECT {0} FROM users WHERE id = ?".format(PUBLIC_COLUMNS), (user_id,)
        )
        if row is None:
            raise NotFoundError("User")
        return row

    # =====================================================
    # ADMINISTRATION
    # =====================================================

    def list_users(self) -> List[Dict[str, Any]]:
        return self.db.query(
            "SELECT u.id, u.email, u.name, u.role, u.engineer_name, u.created_at, u.updated_at, "
            "e.color, e.tasks_total "
            "FROM users u LEFT JOIN engineers e ON u.engineer_name = e.name "
            "ORDER BY CASE u.role WHEN 'admin' THEN 1 WHEN 'director' THEN 2 ELSE 3 END, u.name"
        )

    def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        email = (data.get("email") or "").strip().lower()
        name = (data.get("name") or "").strip()
        role = data.get("role")
        password = data.get("password") or ""
        engineer_name = (data.get("engineer_name") or "").strip() or None

        if not email or not name or not role:
            raise ValidationError("Email, name, and role are required")
        if role not in ROLES:
            raise ValidationError("Invalid role. Must be admin, director, or engineer")
        if role == ROLE_ENGINEER and not engineer_name:
            raise ValidationError("engineer_name is required for engineer role")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                "Password must be at least {0} characters".format(MIN_PASSWORD_LENGTH)
            )

        try:
            with self.db.transaction() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (email, name, password_hash, role, engineer_name) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (email, name, hash_password(password), role, engineer_name),
                )
                user_id = cursor.lastrowid
                if role == ROLE_ENGINEER:
                    self.engineers.ensure_engineer(
                        conn, engineer_name, user_id=user_id, color=data.get("color") or DEFAULT_COLOR
                    )
        except sqlite3.IntegrityError:
            raise ConflictError("Email already exists")

        logger.info("User created: %s (%s)", email, role)
        return self.get_user(user_id)

    def delete_user(self, user_id: int, acting_user_id: int) -> None:
        """Remove an account; the engineer record and its tasks are kept."""
        if user_id == acting_user_id:
            raise ValidationError("You cannot delete your own account")
        self.get_user(user_id)

        with self.db.transaction() as conn:
            conn.execute("DELETE FROM notifications WHERE user_id = ?", (user_id,))
            conn.execute("UPDATE engineers SET user_id = NULL WHERE user_id = ?", (user_id,))
            conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        logger.info("User %s deleted", user_id)

    def ensure_admin(self, email: str, password: str) -> bool:
        """
        Seed one admin account into an empty users table.

        Returns:
            True when an account was created
        """
        if not email or not password:
            return False
        if self.db.scalar("SELECT COUNT(*) FROM users"):
            return False
        self.db.execute(
            "INSERT INTO users (email, name, password_hash, role) VALUES (?, ?, ?, ?)",
            (email.strip().lower(), "Administrator", hash_password(password), ROLE_ADMIN),
        )
        logger.info("Seeded admin account %s", email)
        return True
