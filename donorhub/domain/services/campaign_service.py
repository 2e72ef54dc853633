import math
from datetime import date
from typing import Any, Dict, List, Tuple

import structlog
from sqlalchemy.orm import Session

from donorhub.data.repositories import campaign_repository
from donorhub.domain.errors import NotFoundError, ValidationError
from donorhub.domain.helpers.aggregation import summarize_donations
from donorhub.domain.helpers.pagination import build_page, clamp_limit, clamp_offset
from donorhub.domain.models import Campaign, CampaignStatus, Page

logger = structlog.get_logger()

REQUIRED_FIELDS = ("name", "goal", "start_date", "status")


def _validate_window(start_date: date, end_date: date | None) -> None:
    if end_date is not None and end_date < start_date:
        raise ValidationError("End date cannot be before start date")


def _validate_goal(goal) -> float:
    if goal is None or not math.isfinite(goal) or goal <= 0:
        raise ValidationError("Goal must be a positive number")
    return float(goal)


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    return description.strip() or None


def list_campaigns(
    db: Session,
    status: CampaignStatus | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> Tuple[List[Campaign], Page]:
    limit = clamp_limit(limit)
    offset = clamp_offset(offset)
    campaigns, total = campaign_repository.list_campaigns(
        db, status=status, limit=limit, offset=offset
    )
    return campaigns, build_page(total, limit, offset)


def get_campaign(db: Session, campaign_id: int) -> Campaign:
    campaign = campaign_repository.get_campaign(db, campaign_id)
    if campaign is None:
        raise NotFoundError("Campaign not found", code="campaign.not_found")
    campaign.raised, campaign.donation_count = summarize_donations(campaign.donations)
    return campaign


def create_campaign(
    db: Session,
    name: str,
    goal: float,
    start_date: date,
    description: str | None = None,
    end_date: date | None = None,
    status: CampaignStatus | None = None,
) -> Campaign:
    name = name.strip()
    if not name:
        raise ValidationError("Campaign name is required")
    goal = _validate_goal(goal)
    _validate_window(start_date, end_date)
    campaign = campaign_repository.add_campaign(
        db,
        name=name,
        goal=goal,
        start_date=start_date,
        end_date=end_date,
        description=_clean_description(description),
        status=status or CampaignStatus.ACTIVE,
    )
    logger.info("Campaign created", campaign_id=campaign.id)
    return campaign


def update_campaign(db: Session, campaign_id: int, changes: Dict[str, Any]) -> Campaign:
    """Partial update; returns the detailed view with computed totals."""
    dates = campaign_repository.get_campaign_dates(db, campaign_id)
    if dates is None:
        raise NotFoundError("Campaign not found", code="campaign.not_found")

    for key in REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")

    updates: Dict[str, Any] = {}
    if "name" in changes:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("Campaign name cannot be empty")
        updates["name"] = name
    if "description" in changes:
        updates["description"] = _clean_description(changes["description"])
    if "goal" in changes:
        updates["goal"] = _validate_goal(changes["goal"])
    if "start_date" in changes:
        updates["start_date"] = changes["start_date"]
    if "end_date" in changes:
        updates["end_date"] = changes["end_date"]
    if "status" in changes:
        updates["status"] = CampaignStatus(changes["status"])

    start_date, end_date = dates
    _validate_window(
        updates.get("start_date", start_date), updates.get("end_date", end_date)
    )

    campaign_repository.update_campaign(db, campaign_id, updates)
    logger.info("Campaign updated", campaign_id=campaign_id, fields=sorted(updates))
    return get_campaign(db, campaign_id)
