# controllers/engineers_controller.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from auth.dependencies import MANAGER_ROLES, get_current_user, get_database, require_roles
from services.engineer_service import EngineerService

engineers_router = APIRouter(tags=["Engineers"])


class EngineerPayload(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None


@engineers_router.get("")
def list_engineers(
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> List[Dict[str, Any]]:
    return EngineerService(db).list_engineers()


@engineers_router.post("", status_code=201)
def create_engineer(
    body: EngineerPayload,
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return EngineerService(db).create_engineer(body.name, body.color)


@engineers_router.put("/{engineer_id}")
def update_engineer(
    engineer_id: int,
    body: EngineerPayload,
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return EngineerService(db).update_engineer(engineer_id, body.model_dump(exclude_unset=True))


@engineers_router.delete("/{engineer_id}")
def delete_engineer(
    engineer_id: int,
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, str]:
    EngineerService(db).delete_engineer(engineer_id)
    return {"message": "Engineer deleted successfully"}
