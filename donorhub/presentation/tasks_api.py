from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from donorhub.domain.helpers.dates import parse_date_only
from donorhub.domain.models import Task, TaskPriority
from donorhub.domain.services import task_service
from donorhub.domain.services.auth_service import get_current_user
from donorhub.presentation.dependencies import get_db
from donorhub.presentation.schemas import (
    CamelModel,
    DataResponse,
    ListResponse,
    PaginationResponse,
)

router = APIRouter(
    prefix="/api/tasks", tags=["tasks"], dependencies=[Depends(get_current_user)]
)


class _DueDateMixin(CamelModel):
    @field_validator("due_date", mode="before", check_fields=False)
    @classmethod
    def _strict_due_date(cls, value):
        if value is None or value == "":
            return None
        return parse_date_only(value)


class CreateTaskRequest(_DueDateMixin):
    type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    donor_id: int
    due_date: Optional[date] = None
    priority: Optional[TaskPriority] = None


class UpdateTaskRequest(_DueDateMixin):
    type: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[TaskPriority] = None
    completed: Optional[bool] = None


class TaskResponse(CamelModel):
    id: int
    type: str
    description: str
    donor_id: int
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None
    due_date: Optional[date] = None
    priority: TaskPriority
    completed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def from_domain(t: Task) -> "TaskResponse":
        return TaskResponse(
            id=t.id,
            type=t.type,
            description=t.description,
            donor_id=t.donor_id,
            donor_name=t.donor_name,
            donor_email=t.donor_email,
            due_date=t.due_date,
            priority=t.priority,
            completed=t.completed,
            created_at=t.created_at,
            updated_at=t.updated_at,
        )


class TaskDeletedResponse(CamelModel):
    id: int


@router.get("", response_model=ListResponse[TaskResponse])
def list_tasks_endpoint(
    db: Session = Depends(get_db),
    completed: Optional[bool] = None,
    priority: Optional[TaskPriority] = None,
    donor_id: Optional[int] = Query(None, alias="donorId"),
    limit: int = Query(10, ge=1, description="Page size, capped at 100"),
    offset: int = Query(0, ge=0),
):
    tasks, page = task_service.list_tasks(db, completed, priority, donor_id, limit, offset)
    return ListResponse[TaskResponse](
        data=[TaskResponse.from_domain(t) for t in tasks],
        pagination=PaginationResponse.from_domain(page),
    )


@router.get("/{task_id}", response_model=DataResponse[TaskResponse])
def get_task_endpoint(task_id: int, db: Session = Depends(get_db)):
    return DataResponse[TaskResponse](
        data=TaskResponse.from_domain(task_service.get_task(db, task_id))
    )


@router.post(
    "",
    response_model=DataResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_task_endpoint(req: CreateTaskRequest, db: Session = Depends(get_db)):
    task = task_service.create_task(
        db,
        type=req.type,
        description=req.description,
        donor_id=req.donor_id,
        due_date=req.due_date,
        priority=req.priority,
    )
    return DataResponse[TaskResponse](
        data=TaskResponse.from_domain(task), message="Task created successfully"
    )


@router.patch("/{task_id}", response_model=DataResponse[TaskResponse])
def update_task_endpoint(task_id: int, req: UpdateTaskRequest, db: Session = Depends(get_db)):
    task = task_service.update_task(db, task_id, req.model_dump(exclude_unset=True))
    return DataResponse[TaskResponse](
        data=TaskResponse.from_domain(task), message="Task updated successfully"
    )


@router.delete("/{task_id}", response_model=DataResponse[TaskDeletedResponse])
def delete_task_endpoint(task_id: int, db: Session = Depends(get_db)):
    task_service.delete_task(db, task_id)
    return DataResponse[TaskDeletedResponse](
        data=TaskDeletedResponse(id=task_id), message="Task deleted successfully"
    )
