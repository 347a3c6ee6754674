# controllers/auth_controller.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from auth.dependencies import get_current_user, get_database
from services.user_service import UserService, public_user

auth_router = APIRouter(tags=["Auth"])


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@auth_router.post("/login")
def login(body: LoginRequest, db=Depends(get_database)) -> Dict[str, Any]:
    return UserService(db).login(body.email, body.password)


@auth_router.get("/me")
def me(user: Dict[str, Any] = Depends(get_current_user), db=Depends(get_database)) -> Dict[str, Any]:
    return public_user(UserService(db).get_user(user["id"]))
