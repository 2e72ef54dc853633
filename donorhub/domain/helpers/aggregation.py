from typing import Iterable, Tuple

import structlog

from donorhub.data.base import SessionLocal
from donorhub.data.repositories.campaign_repository import (
    increment_cached_raised,
    set_cached_raised,
    sum_campaign_donations,
)
from donorhub.domain.models import Donation

logger = structlog.get_logger()


def summarize_donations(donations: Iterable[Donation]) -> Tuple[float, int]:
    """
    Returns (raised, donation_count) for a campaign's linked donations.
    This sum is the authoritative definition of a campaign's raised amount.
    """
    raised = 0.0
    count = 0
    for d in donations:
        raised += d.amount
        count += 1
    return raised, count


def adjust_campaign_raised(campaign_id: int, delta: float) -> None:
    """Post-commit hook: move the cached counter by delta (negative on delete)."""
    db = SessionLocal()
    try:
        if not increment_cached_raised(db, campaign_id, delta):
            raise LookupError(f"Campaign {campaign_id} not found")
    finally:
        db.close()
    logger.info("Campaign cached total adjusted", campaign_id=campaign_id, delta=delta)


def resync_campaign_raised(campaign_id: int) -> None:
    """Post-commit hook: reset the cached counter to the authoritative sum."""
    db = SessionLocal()
    try:
        raised, _ = sum_campaign_donations(db, campaign_id)
        if not set_cached_raised(db, campaign_id, raised):
            raise LookupError(f"Campaign {campaign_id} not found")
    finally:
        db.close()
    logger.info("Campaign cached total resynced", campaign_id=campaign_id, raised=raised)
