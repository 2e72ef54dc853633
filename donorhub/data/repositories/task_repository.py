from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy import case, func
from sqlalchemy.orm import relationship

from donorhub.data.base import Base
from donorhub.domain.models import PRIORITY_RANK, Task, TaskPriority


class TaskORM(Base):
    __tablename__ = "tasks"
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    type = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    due_date = Column(Date, nullable=True)
    priority = Column(
        SAEnum(TaskPriority, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    completed = Column(Boolean, nullable=False, default=False)
    donor_id = Column(
        Integer, ForeignKey("donors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    donor = relationship("DonorORM", back_populates="tasks")


def task_to_domain(task_orm: TaskORM, with_donor: bool = False) -> Task:
    return Task(
        id=task_orm.id,
        type=task_orm.type,
        description=task_orm.description,
        donor_id=task_orm.donor_id,
        priority=TaskPriority(task_orm.priority),
        completed=task_orm.completed,
        due_date=task_orm.due_date,
        created_at=task_orm.created_at,
        updated_at=task_orm.updated_at,
        donor_name=task_orm.donor.name if with_donor else None,
        donor_email=task_orm.donor.email if with_donor else None,
    )


def _priority_rank():
    return case(
        *[(TaskORM.priority == priority, rank) for priority, rank in PRIORITY_RANK.items()],
        else_=0,
    )


def get_task(db, task_id: int) -> Optional[Task]:
    task = db.query(TaskORM).filter(TaskORM.id == task_id).first()
    return task_to_domain(task, with_donor=True) if task else None


def list_tasks(
    db,
    completed: bool | None = None,
    priority: TaskPriority | None = None,
    donor_id: int | None = None,
    limit: int = 10,
    offset: int = 0,
) -> Tuple[List[Task], int]:
    query = db.query(TaskORM)
    if completed is not None:
        query = query.filter(TaskORM.completed == completed)
    if priority is not None:
        query = query.filter(TaskORM.priority == priority)
    if donor_id is not None:
        query = query.filter(TaskORM.donor_id == donor_id)
    total = query.count()
    tasks = (
        query.order_by(
            TaskORM.completed.asc(),
            # undated tasks sort after dated ones on every backend
            TaskORM.due_date.is_(None).asc(),
            TaskORM.due_date.asc(),
            _priority_rank().desc(),
            TaskORM.id.asc(),
        )
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [task_to_domain(t, with_donor=True) for t in tasks], total


def add_task(
    db,
    type: str,
    description: str,
    donor_id: int,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date: date | None = None,
) -> Task:
    task_orm = TaskORM(
        type=type,
        description=description,
        donor_id=donor_id,
        priority=priority,
        due_date=due_date,
        completed=False,
    )
    db.add(task_orm)
    db.commit()
    db.refresh(task_orm)
    return task_to_domain(task_orm, with_donor=True)


def update_task(db, task_id: int, changes: Dict[str, Any]) -> Optional[Task]:
    task = db.query(TaskORM).filter(TaskORM.id == task_id).first()
    if not task:
        return None
    for key, value in changes.items():
        setattr(task, key, value)
    db.commit()
    db.refresh(task)
    return task_to_domain(task, with_donor=True)


def delete_task(db, task_id: int) -> bool:
    task = db.query(TaskORM).filter(TaskORM.id == task_id).first()
    if task:
        db.delete(task)
        db.commit()
        return True
    return False
