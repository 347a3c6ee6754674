# controllers/tasks_controller.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from auth.dependencies import get_current_user, get_database
from services.task_service import TaskService

tasks_router = APIRouter(tags=["Tasks"])


class TaskPayload(BaseModel):
    service: Optional[str] = None
    engineer: Optional[str] = None
    week: Optional[int] = None
    month: Optional[str] = None
    year: Optional[int] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    notes: Optional[str] = None
    description: Optional[str] = None


class BulkTasksPayload(BaseModel):
    tasks: Optional[List[Dict[str, Any]]] = None


@tasks_router.get("")
def list_tasks(
    viewAll: bool = False,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> List[Dict[str, Any]]:
    return TaskService(db).list_tasks(user, view_all=viewAll)


@tasks_router.get("/export")
def export_tasks(
    year: Optional[int] = None,
    month: Optional[str] = None,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Response:
    csv_text = TaskService(db).export_csv(year=year, month=month)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="tasks.csv"'},
    )


@tasks_router.get("/{task_id}")
def get_task(
    task_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return TaskService(db).get_task(task_id, user)


@tasks_router.post("", status_code=201)
def create_task(
    body: TaskPayload,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return TaskService(db).create_task(body.model_dump(), user)


@tasks_router.post("/bulk", status_code=201)
def bulk_create(
    body: BulkTasksPayload,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return TaskService(db).bulk_create(body.tasks, user)


@tasks_router.put("/{task_id}")
def update_task(
    task_id: int,
    body: TaskPayload,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, Any]:
    return TaskService(db).update_task(task_id, body.model_dump(exclude_unset=True), user)


@tasks_router.delete("/{task_id}")
def delete_task(
    task_id: int,
    user: Dict[str, Any] = Depends(get_current_user),
    db=Depends(get_database),
) -> Dict[str, str]:
    TaskService(db).delete_task(task_id, user)
    return {"message": "Task deleted successfully"}
