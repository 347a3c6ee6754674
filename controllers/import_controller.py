# controllers/import_controller.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, UploadFile

from auth.dependencies import MANAGER_ROLES, get_database, require_roles
from services.import_service import ImportService

import_router = APIRouter(tags=["Import"])


@import_router.post("")
async def import_tasks(
    file: UploadFile = File(...),
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, Any]:
    content = await file.read()
    return ImportService(db).import_csv(content, user)


@import_router.post("/undo")
def undo_import(
    user: Dict[str, Any] = Depends(require_roles(*MANAGER_ROLES)),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return ImportService(db).undo_last()
