from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from donorhub.data.base import Base
from donorhub.data.repositories.donation_repository import (
    DonationORM,
    list_campaign_donations,
)
from donorhub.domain.models import Campaign, CampaignStatus


class CampaignORM(Base):
    __tablename__ = "campaigns"
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    goal = Column(Float, nullable=False)
    # Cached counter only; reads always use the sum over linked donations.
    raised = Column(Float, nullable=False, default=0.0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    status = Column(
        SAEnum(CampaignStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CampaignStatus.ACTIVE,
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    donations = relationship("DonationORM", back_populates="campaign")


def campaign_to_domain(
    campaign_orm: CampaignORM, raised: float = 0.0, donation_count: int = 0
) -> Campaign:
    return Campaign(
        id=campaign_orm.id,
        name=campaign_orm.name,
        description=campaign_orm.description,
        goal=campaign_orm.goal,
        start_date=campaign_orm.start_date,
        end_date=campaign_orm.end_date,
        status=CampaignStatus(campaign_orm.status),
        raised=raised,
        donation_count=donation_count,
        created_at=campaign_orm.created_at,
        updated_at=campaign_orm.updated_at,
    )


def _donation_totals():
    return (
        DonationORM.campaign_id.label("campaign_id"),
        func.coalesce(func.sum(DonationORM.amount), 0.0).label("raised"),
        func.count(DonationORM.id).label("donation_count"),
    )


def sum_campaign_donations(db, campaign_id: int) -> Tuple[float, int]:
    """Authoritative raised total and donation count for one campaign."""
    raised, count = (
        db.query(func.coalesce(func.sum(DonationORM.amount), 0.0), func.count(DonationORM.id))
        .filter(DonationORM.campaign_id == campaign_id)
        .one()
    )
    return float(raised or 0.0), int(count or 0)


def campaign_exists(db, campaign_id: int) -> bool:
    return (
        db.query(CampaignORM.id).filter(CampaignORM.id == campaign_id).first()
        is not None
    )


def list_campaigns(
    db,
    status: CampaignStatus | None = None,
    limit: int = 10,
    offset: int = 0,
) -> Tuple[List[Campaign], int]:
    filters = []
    if status is not None:
        filters.append(CampaignORM.status == status)
    total = db.query(func.count(CampaignORM.id)).filter(*filters).scalar() or 0

    totals = (
        db.query(*_donation_totals())
        .filter(DonationORM.campaign_id.isnot(None))
        .group_by(DonationORM.campaign_id)
        .subquery()
    )
    rows = (
        db.query(
            CampaignORM,
            func.coalesce(totals.c.raised, 0.0),
            func.coalesce(totals.c.donation_count, 0),
        )
        .outerjoin(totals, totals.c.campaign_id == CampaignORM.id)
        .filter(*filters)
        .order_by(CampaignORM.created_at.desc(), CampaignORM.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [
        campaign_to_domain(c, raised=float(raised), donation_count=int(count))
        for c, raised, count in rows
    ], total


def get_campaign(db, campaign_id: int) -> Optional[Campaign]:
    campaign = db.query(CampaignORM).filter(CampaignORM.id == campaign_id).first()
    if not campaign:
        return None
    result = campaign_to_domain(campaign)
    result.donations = list_campaign_donations(db, campaign_id)
    return result


def add_campaign(
    db,
    name: str,
    goal: float,
    start_date: date,
    status: CampaignStatus = CampaignStatus.ACTIVE,
    description: str | None = None,
    end_date: date | None = None,
) -> Campaign:
    campaign_orm = CampaignORM(
        name=name,
        description=description,
        goal=goal,
        raised=0.0,
        start_date=start_date,
        end_date=end_date,
        status=status,
    )
    db.add(campaign_orm)
    db.commit()
    db.refresh(campaign_orm)
    return campaign_to_domain(campaign_orm)


def get_campaign_dates(db, campaign_id: int) -> Optional[Tuple[date, Optional[date]]]:
    row = (
        db.query(CampaignORM.start_date, CampaignORM.end_date)
        .filter(CampaignORM.id == campaign_id)
        .first()
    )
    return (row[0], row[1]) if row else None


def update_campaign(db, campaign_id: int, changes: Dict[str, Any]) -> bool:
    campaign = db.query(CampaignORM).filter(CampaignORM.id == campaign_id).first()
    if not campaign:
        return False
    for key, value in changes.items():
        setattr(campaign, key, value)
    db.commit()
    return True


def get_cached_raised(db, campaign_id: int) -> Optional[float]:
    return (
        db.query(CampaignORM.raised).filter(CampaignORM.id == campaign_id).scalar()
    )


def increment_cached_raised(db, campaign_id: int, amount: float) -> bool:
    updated = (
        db.query(CampaignORM)
        .filter(CampaignORM.id == campaign_id)
        .update(
            {CampaignORM.raised: CampaignORM.raised + amount},
            synchronize_session=False,
        )
    )
    db.commit()
    return updated > 0


def set_cached_raised(db, campaign_id: int, raised: float) -> bool:
    updated = (
        db.query(CampaignORM)
        .filter(CampaignORM.id == campaign_id)
        .update({CampaignORM.raised: raised}, synchronize_session=False)
    )
    db.commit()
    return updated > 0
