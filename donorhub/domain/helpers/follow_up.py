from datetime import date, datetime, timedelta, timezone

import structlog

from donorhub.data.base import SessionLocal
from donorhub.data.repositories.task_repository import add_task
from donorhub.domain.models import (
    THANK_YOU_DUE_DAYS,
    THANK_YOU_TASK_DESCRIPTION,
    THANK_YOU_TASK_TYPE,
    TaskPriority,
)

logger = structlog.get_logger()


def thank_you_due_date(today: date | None = None) -> date:
    today = today or datetime.now(timezone.utc).date()
    return today + timedelta(days=THANK_YOU_DUE_DAYS)


def create_thank_you_task(donor_id: int, due_date: date) -> None:
    """Post-commit hook: queue a high-priority thank-you follow-up for the donor."""
    db = SessionLocal()
    try:
        task = add_task(
            db,
            type=THANK_YOU_TASK_TYPE,
            description=THANK_YOU_TASK_DESCRIPTION,
            donor_id=donor_id,
            priority=TaskPriority.HIGH,
            due_date=due_date,
        )
    finally:
        db.close()
    logger.info("Thank-you task created", task_id=task.id, donor_id=donor_id)
