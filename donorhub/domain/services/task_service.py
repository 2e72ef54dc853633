from datetime import date
from typing import Any, Dict, List, Tuple

import structlog
from sqlalchemy.orm import Session

from donorhub.data.repositories import task_repository
from donorhub.data.repositories.donor_repository import donor_exists
from donorhub.domain.errors import ConflictError, NotFoundError, ValidationError
from donorhub.domain.helpers.pagination import build_page, clamp_limit, clamp_offset
from donorhub.domain.models import Page, Task, TaskPriority

logger = structlog.get_logger()

REQUIRED_FIELDS = ("type", "description", "priority", "completed")


def _required_text(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise ValidationError(f"Task {label} is required")
    return value


def list_tasks(
    db: Session,
    completed: bool | None = None,
    priority: TaskPriority | None = None,
    donor_id: int | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> Tuple[List[Task], Page]:
    limit = clamp_limit(limit)
    offset = clamp_offset(offset)
    tasks, total = task_repository.list_tasks(
        db,
        completed=completed,
        priority=priority,
        donor_id=donor_id,
        limit=limit,
        offset=offset,
    )
    return tasks, build_page(total, limit, offset)


def get_task(db: Session, task_id: int) -> Task:
    task = task_repository.get_task(db, task_id)
    if task is None:
        raise NotFoundError("Task not found", code="task.not_found")
    return task


def create_task(
    db: Session,
    type: str,
    description: str,
    donor_id: int,
    due_date: date | None = None,
    priority: TaskPriority | None = None,
) -> Task:
    type = _required_text(type, "type")
    description = _required_text(description, "description")
    if not donor_exists(db, donor_id):
        raise NotFoundError("Donor not found", code="donor.not_found")
    task = task_repository.add_task(
        db,
        type=type,
        description=description,
        donor_id=donor_id,
        due_date=due_date,
        priority=priority or TaskPriority.MEDIUM,
    )
    logger.info("Task created", task_id=task.id, donor_id=donor_id)
    return task


def update_task(db: Session, task_id: int, changes: Dict[str, Any]) -> Task:
    """
    Partial update. Completion is one-way: a completed task cannot be reopened.
    """
    current = task_repository.get_task(db, task_id)
    if current is None:
        raise NotFoundError("Task not found", code="task.not_found")

    for key in REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")

    updates: Dict[str, Any] = {}
    if "type" in changes:
        updates["type"] = _required_text(changes["type"], "type")
    if "description" in changes:
        updates["description"] = _required_text(changes["description"], "description")
    if "due_date" in changes:
        updates["due_date"] = changes["due_date"]
    if "priority" in changes:
        updates["priority"] = TaskPriority(changes["priority"])
    if "completed" in changes:
        if current.completed and not changes["completed"]:
            raise ConflictError(
                "Completed tasks cannot be reopened", code="task.reopen_not_allowed"
            )
        updates["completed"] = changes["completed"]

    task = task_repository.update_task(db, task_id, updates)
    logger.info("Task updated", task_id=task_id, fields=sorted(updates))
    return task


def delete_task(db: Session, task_id: int) -> None:
    if not task_repository.delete_task(db, task_id):
        raise NotFoundError("Task not found", code="task.not_found")
    logger.info("Task deleted", task_id=task_id)
