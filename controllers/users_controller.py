# controllers/users_controller.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from auth.dependencies import ROLE_ADMIN, get_database, require_roles
from services.user_service import UserService

users_router = APIRouter(tags=["Users"])

admin_only = require_roles(ROLE_ADMIN)


class UserPayload(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    password: Optional[str] = None
    engineer_name: Optional[str] = None
    color: Optional[str] = None


@users_router.get("")
def list_users(user: Dict[str, Any] = Depends(admin_only), db=Depends(get_database)) -> List[Dict[str, Any]]:
    return UserService(db).list_users()


@users_router.post("", status_code=201)
def create_user(
    body: UserPayload,
    user: Dict[str, Any] = Depends(admin_only),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return UserService(db).create_user(body.model_dump())


@users_router.delete("/{user_id}")
def delete_user(
    user_id: int,
    user: Dict[str, Any] = Depends(admin_only),
    db=Depends(get_database),
) -> Dict[str, str]:
    UserService(db).delete_user(user_id, acting_user_id=user["id"])
    return {"message": "User deleted successfully"}
