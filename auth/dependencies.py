# auth/dependencies.py
"""
FastAPI dependencies: database handle, current user and role guards.
"""

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from auth.security import decode_token
from services.errors import AuthenticationError, PermissionDeniedError

ROLE_ADMIN = "admin"
ROLE_DIRECTOR = "director"
ROLE_ENGINEER = "engineer"
ROLES = (ROLE_ADMIN, ROLE_DIRECTOR, ROLE_ENGINEER)
MANAGER_ROLES = (ROLE_ADMIN, ROLE_DIRECTOR)

# auto_error=False: a missing header is reported as 401 by get_current_user
bearer = HTTPBearer(auto_error=False)


def get_database(request: Request):
    """The Database instance attached to the running app"""
    return request.app.state.db


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
) -> Dict[str, Any]:
    """
    Identity of the caller from the bearer token.

    The account row is re-read on every request, so a deleted user loses
    access and an engineer rename applies to tokens issued before it.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")

    payload = decode_token(credentials.credentials)
    row = get_database(request).query_one(
        "SELECT id, email, name, role, engineer_name FROM users WHERE id = ?",
        (int(payload["sub"]),),
    )
    if row is None:
        raise AuthenticationError("User not found")
    return {
        "id": row["id"],
        "email": row["email"],
        "name": row["name"],
        "role": row["role"],
        "engineerName": row["engineer_name"],
    }


def require_roles(*roles: str) -> Callable[..., Dict[str, Any]]:
    """Dependency factory: caller must hold one of ``roles``"""

    def checker(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if user["role"] not in roles:
            raise PermissionDeniedError()
        return user

    return checker


def is_manager(user: Dict[str, Any]) -> bool:
    return user["role"] in MANAGER_ROLES
