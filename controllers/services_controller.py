# controllers/services_controller.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from auth.dependencies import MANAGER_ROLES, get_current_user, get_database, require_roles
from services.catalog_service import CatalogService

services_router = APIRouter(tags=["Services"])


class ServicePayload(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    assignedTo: Optional[str] = None


@services_router.get("")
def list_services(
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> List[Dict[str, Any]]:
    return CatalogService(db).list_services()


@services_router.post("", status_code=201)
def create_service(
    body: ServicePayload,
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return CatalogService(db).create_service(body.name, body.category, body.assignedTo)


@services_router.put("/{service_id}")
def update_service(
    service_id: int,
    body: ServicePayload,
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return CatalogService(db).update_service(service_id, body.model_dump(exclude_unset=True))


@services_router.delete("/{service_id}")
def delete_service(
    service_id: int,
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, str]:
    CatalogService(db).delete_service(service_id)
    return {"message": "Service deleted successfully"}
