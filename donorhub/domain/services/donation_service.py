import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Tuple

import structlog
from sqlalchemy.orm import Session

from donorhub.data.repositories import donation_repository
from donorhub.data.repositories.campaign_repository import campaign_exists
from donorhub.data.repositories.donor_repository import donor_exists
from donorhub.domain.errors import ConflictError, NotFoundError, ValidationError
from donorhub.domain.helpers.aggregation import (
    adjust_campaign_raised,
    resync_campaign_raised,
)
from donorhub.domain.helpers.follow_up import create_thank_you_task, thank_you_due_date
from donorhub.domain.helpers.pagination import build_page, clamp_limit, clamp_offset
from donorhub.domain.helpers.post_commit import PostCommitHooks, Schedule
from donorhub.domain.models import (
    THANK_YOU_TASK_DESCRIPTION,
    THANK_YOU_TASK_TYPE,
    Donation,
    DonationDeletion,
    Page,
    TaskPriority,
)

logger = structlog.get_logger()

REQUIRED_FIELDS = ("amount", "date", "method", "recurring", "thanked")


@dataclass
class ScheduledTask:
    type: str
    description: str
    due_date: date
    priority: TaskPriority


@dataclass
class DonationCreated:
    donation: Donation
    task: ScheduledTask


def _validate_amount(amount) -> float:
    if amount is None or not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Amount must be a positive number")
    return float(amount)


def _ensure_campaign(db: Session, campaign_id: int) -> None:
    if not campaign_exists(db, campaign_id):
        raise NotFoundError("Campaign not found", code="campaign.not_found")


def list_donations(
    db: Session,
    donor_id: int | None = None,
    campaign_id: int | None = None,
    method: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> Tuple[List[Donation], Page]:
    limit = clamp_limit(limit)
    offset = clamp_offset(offset)
    donations, total = donation_repository.list_donations(
        db,
        donor_id=donor_id,
        campaign_id=campaign_id,
        method=method.strip() if method else None,
        limit=limit,
        offset=offset,
    )
    return donations, build_page(total, limit, offset)


def get_donation(db: Session, donation_id: int) -> Donation:
    donation = donation_repository.get_donation(db, donation_id)
    if donation is None:
        raise NotFoundError("Donation not found", code="donation.not_found")
    return donation


def create_donation(
    db: Session,
    amount: float,
    date: datetime,
    method: str,
    donor_id: int,
    schedule: Schedule,
    campaign_id: int | None = None,
    recurring: bool = False,
    notes: str | None = None,
    today=None,
) -> DonationCreated:
    """
    Log a donation, then schedule the follow-ups: a thank-you task for the donor
    and, for campaign donations, the cached raised increment. The follow-ups run
    after commit and are best-effort; their failure never undoes the donation.
    """
    amount = _validate_amount(amount)
    method = method.strip()
    if not method:
        raise ValidationError("Amount, date, method, and donorId are required")
    if not donor_exists(db, donor_id):
        raise NotFoundError("Donor not found", code="donor.not_found")
    if campaign_id is not None:
        _ensure_campaign(db, campaign_id)

    donation = donation_repository.add_donation(
        db,
        Donation(
            id=0,
            amount=amount,
            date=date,
            method=method,
            donor_id=donor_id,
            recurring=recurring,
            notes=notes.strip() if notes and notes.strip() else None,
            campaign_id=campaign_id,
        ),
    )

    due_date = thank_you_due_date(today)
    hooks = PostCommitHooks()
    hooks.add("create_thank_you_task", create_thank_you_task, donor_id, due_date)
    if campaign_id is not None:
        hooks.add("adjust_campaign_raised", adjust_campaign_raised, campaign_id, amount)
    hooks.dispatch(schedule)

    logger.info(
        "Donation created",
        donation_id=donation.id,
        donor_id=donor_id,
        campaign_id=campaign_id,
        amount=amount,
    )
    return DonationCreated(
        donation=donation,
        task=ScheduledTask(
            type=THANK_YOU_TASK_TYPE,
            description=THANK_YOU_TASK_DESCRIPTION,
            due_date=due_date,
            priority=TaskPriority.HIGH,
        ),
    )


def update_donation(
    db: Session, donation_id: int, changes: Dict[str, Any], schedule: Schedule
) -> Donation:
    """
    Partial update. When amount or campaign changes, the cached totals of the
    previous and the new campaign are resynced from their donation sums.
    """
    current = donation_repository.get_donation(db, donation_id)
    if current is None:
        raise NotFoundError("Donation not found", code="donation.not_found")

    for key in REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")

    updates: Dict[str, Any] = {}
    if "amount" in changes:
        updates["amount"] = _validate_amount(changes["amount"])
    if "date" in changes:
        updates["date"] = changes["date"]
    if "method" in changes:
        method = changes["method"].strip()
        if not method:
            raise ValidationError("Method cannot be empty")
        updates["method"] = method
    if "campaign_id" in changes:
        campaign_id = changes["campaign_id"]
        if campaign_id is not None and campaign_id != current.campaign_id:
            _ensure_campaign(db, campaign_id)
        updates["campaign_id"] = campaign_id
    if "recurring" in changes:
        updates["recurring"] = changes["recurring"]
    if "thanked" in changes:
        if current.thanked and not changes["thanked"]:
            raise ConflictError(
                "A thanked donation cannot be marked as unthanked",
                code="donation.thanked_irreversible",
            )
        updates["thanked"] = changes["thanked"]
    if "notes" in changes:
        notes = changes["notes"]
        updates["notes"] = notes.strip() if notes and notes.strip() else None

    donation, previous_campaign_id = donation_repository.update_donation(
        db, donation_id, updates
    )

    if "amount" in updates or "campaign_id" in updates:
        affected = {previous_campaign_id, donation.campaign_id} - {None}
        hooks = PostCommitHooks()
        for campaign_id in sorted(affected):
            hooks.add("resync_campaign_raised", resync_campaign_raised, campaign_id)
        hooks.dispatch(schedule)

    logger.info("Donation updated", donation_id=donation_id, fields=sorted(updates))
    return donation


def delete_donation(db: Session, donation_id: int, schedule: Schedule) -> DonationDeletion:
    deletion, campaign_id = donation_repository.delete_donation(db, donation_id)
    if deletion is None:
        raise NotFoundError("Donation not found", code="donation.not_found")
    if campaign_id is not None:
        hooks = PostCommitHooks()
        hooks.add(
            "adjust_campaign_raised", adjust_campaign_raised, campaign_id, -deletion.amount
        )
        hooks.dispatch(schedule)
    logger.info("Donation deleted", donation_id=donation_id, campaign_id=campaign_id)
    return deletion
