from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from donorhub.data.base import Base
from donorhub.domain.models import CampaignRef, Donation, DonationDeletion, DonorRef


class DonationORM(Base):
    __tablename__ = "donations"
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    amount = Column(Float, nullable=False)
    date = Column(DateTime, nullable=False)
    method = Column(String, nullable=False)
    recurring = Column(Boolean, nullable=False, default=False)
    thanked = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    donor_id = Column(
        Integer, ForeignKey("donors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    campaign_id = Column(
        Integer,
        ForeignKey("campaigns.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    donor = relationship("DonorORM", back_populates="donations")
    campaign = relationship("CampaignORM", back_populates="donations")


def donation_to_domain(donation_orm: DonationORM, with_refs: bool = False) -> Donation:
    donor_ref = None
    campaign_ref = None
    if with_refs:
        donor_ref = DonorRef(
            id=donation_orm.donor.id,
            name=donation_orm.donor.name,
            email=donation_orm.donor.email,
        )
    if donation_orm.campaign is not None:
        campaign_ref = CampaignRef(
            id=donation_orm.campaign.id,
            name=donation_orm.campaign.name,
            goal=donation_orm.campaign.goal if with_refs else None,
        )
    return Donation(
        id=donation_orm.id,
        amount=donation_orm.amount,
        date=donation_orm.date,
        method=donation_orm.method,
        donor_id=donation_orm.donor_id,
        recurring=donation_orm.recurring,
        thanked=donation_orm.thanked,
        notes=donation_orm.notes,
        campaign_id=donation_orm.campaign_id,
        created_at=donation_orm.created_at,
        updated_at=donation_orm.updated_at,
        donor=donor_ref,
        campaign=campaign_ref,
    )


def get_donation(db, donation_id: int) -> Optional[Donation]:
    donation = db.query(DonationORM).filter(DonationORM.id == donation_id).first()
    return donation_to_domain(donation, with_refs=True) if donation else None


def list_donations(
    db,
    donor_id: int | None = None,
    campaign_id: int | None = None,
    method: str | None = None,
    limit: int = 10,
    offset: int = 0,
) -> Tuple[List[Donation], int]:
    query = db.query(DonationORM)
    if donor_id is not None:
        query = query.filter(DonationORM.donor_id == donor_id)
    if campaign_id is not None:
        query = query.filter(DonationORM.campaign_id == campaign_id)
    if method:
        query = query.filter(DonationORM.method.icontains(method, autoescape=True))
    total = query.count()
    donations = (
        query.order_by(DonationORM.date.desc(), DonationORM.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [donation_to_domain(d, with_refs=True) for d in donations], total


def list_campaign_donations(db, campaign_id: int) -> List[Donation]:
    donations = (
        db.query(DonationORM)
        .filter(DonationORM.campaign_id == campaign_id)
        .order_by(DonationORM.date.desc(), DonationORM.id.desc())
        .all()
    )
    return [donation_to_domain(d) for d in donations]


def add_donation(db, donation: Donation) -> Donation:
    donation_orm = DonationORM(
        amount=donation.amount,
        date=donation.date,
        method=donation.method,
        recurring=donation.recurring,
        thanked=False,
        notes=donation.notes,
        donor_id=donation.donor_id,
        campaign_id=donation.campaign_id,
    )
    db.add(donation_orm)
    db.commit()
    db.refresh(donation_orm)
    return donation_to_domain(donation_orm, with_refs=True)


def update_donation(
    db, donation_id: int, changes: Dict[str, Any]
) -> Tuple[Optional[Donation], Optional[int]]:
    """Apply a partial update. Returns the updated donation and its previous campaign id."""
    donation = db.query(DonationORM).filter(DonationORM.id == donation_id).first()
    if not donation:
        return None, None
    previous_campaign_id = donation.campaign_id
    for key, value in changes.items():
        setattr(donation, key, value)
    db.commit()
    db.refresh(donation)
    return donation_to_domain(donation, with_refs=True), previous_campaign_id


def delete_donation(db, donation_id: int) -> Tuple[Optional[DonationDeletion], Optional[int]]:
    donation = db.query(DonationORM).filter(DonationORM.id == donation_id).first()
    if not donation:
        return None, None
    campaign_id = donation.campaign_id
    deletion = DonationDeletion(
        deleted_id=donation.id,
        amount=donation.amount,
        campaign_reverted=campaign_id is not None,
    )
    db.delete(donation)
    db.commit()
    return deletion, campaign_id
