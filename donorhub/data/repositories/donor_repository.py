from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Column, DateTime, Integer, String, Text, func, or_
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from donorhub.data.base import Base
from donorhub.data.repositories.donation_repository import DonationORM, donation_to_domain
from donorhub.data.repositories.task_repository import TaskORM, task_to_domain
from donorhub.domain.models import Donor, DonorDeletion, DonorDetail, DonorStatus


class DonorORM(Base):
    __tablename__ = "donors"
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    status = Column(
        SAEnum(DonorStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DonorStatus.NEW,
    )
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    donations = relationship(
        "DonationORM", back_populates="donor", cascade="all, delete-orphan"
    )
    tasks = relationship("TaskORM", back_populates="donor", cascade="all, delete-orphan")


def donor_to_domain(
    donor_orm: DonorORM, donation_count: int = 0, task_count: int = 0
) -> Donor:
    return Donor(
        id=donor_orm.id,
        name=donor_orm.name,
        email=donor_orm.email,
        phone=donor_orm.phone,
        status=DonorStatus(donor_orm.status),
        notes=donor_orm.notes,
        created_at=donor_orm.created_at,
        updated_at=donor_orm.updated_at,
        donation_count=donation_count,
        task_count=task_count,
    )


def _count_by_donor(db, model, donor_id: int) -> int:
    return (
        db.query(func.count(model.id)).filter(model.donor_id == donor_id).scalar() or 0
    )


def _with_counts(db, donor_orm: DonorORM) -> Donor:
    return donor_to_domain(
        donor_orm,
        donation_count=_count_by_donor(db, DonationORM, donor_orm.id),
        task_count=_count_by_donor(db, TaskORM, donor_orm.id),
    )


def get_donor(db, donor_id: int) -> Optional[Donor]:
    donor = db.query(DonorORM).filter(DonorORM.id == donor_id).first()
    return _with_counts(db, donor) if donor else None


def get_donor_by_email(db, email: str) -> Optional[Donor]:
    donor = db.query(DonorORM).filter(DonorORM.email == email).first()
    return donor_to_domain(donor) if donor else None


def donor_exists(db, donor_id: int) -> bool:
    return db.query(DonorORM.id).filter(DonorORM.id == donor_id).first() is not None


def list_donors(
    db,
    search: str | None = None,
    status: DonorStatus | None = None,
    limit: int = 10,
    offset: int = 0,
) -> Tuple[List[Donor], int]:
    filters = []
    if search:
        filters.append(
            or_(
                DonorORM.name.icontains(search, autoescape=True),
                DonorORM.email.icontains(search, autoescape=True),
            )
        )
    if status is not None:
        filters.append(DonorORM.status == status)

    total = db.query(func.count(DonorORM.id)).filter(*filters).scalar() or 0

    donation_counts = (
        db.query(
            DonationORM.donor_id.label("donor_id"),
            func.count(DonationORM.id).label("donation_count"),
        )
        .group_by(DonationORM.donor_id)
        .subquery()
    )
    rows = (
        db.query(DonorORM, func.coalesce(donation_counts.c.donation_count, 0))
        .outerjoin(donation_counts, donation_counts.c.donor_id == DonorORM.id)
        .filter(*filters)
        .order_by(DonorORM.created_at.desc(), DonorORM.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [donor_to_domain(d, donation_count=n) for d, n in rows], total


def get_donor_detail(db, donor_id: int) -> Optional[DonorDetail]:
    donor = db.query(DonorORM).filter(DonorORM.id == donor_id).first()
    if not donor:
        return None
    donations = (
        db.query(DonationORM)
        .filter(DonationORM.donor_id == donor_id)
        .order_by(DonationORM.date.desc(), DonationORM.id.desc())
        .all()
    )
    tasks = (
        db.query(TaskORM)
        .filter(TaskORM.donor_id == donor_id)
        .order_by(TaskORM.due_date.desc(), TaskORM.id.desc())
        .all()
    )
    return DonorDetail(
        donor=donor_to_domain(
            donor, donation_count=len(donations), task_count=len(tasks)
        ),
        donations=[donation_to_domain(d) for d in donations],
        tasks=[task_to_domain(t) for t in tasks],
    )


def create_donor(
    db,
    name: str,
    email: str,
    status: DonorStatus = DonorStatus.NEW,
    phone: str | None = None,
    notes: str | None = None,
) -> Donor:
    donor_orm = DonorORM(
        name=name, email=email, status=status, phone=phone, notes=notes
    )
    db.add(donor_orm)
    db.commit()
    db.refresh(donor_orm)
    return donor_to_domain(donor_orm)


def update_donor(db, donor_id: int, changes: Dict[str, Any]) -> Optional[Donor]:
    donor = db.query(DonorORM).filter(DonorORM.id == donor_id).first()
    if not donor:
        return None
    for key, value in changes.items():
        setattr(donor, key, value)
    db.commit()
    db.refresh(donor)
    return _with_counts(db, donor)


def delete_donor(db, donor_id: int) -> Tuple[Optional[DonorDeletion], List[int]]:
    """
    Delete a donor together with its donations and tasks.
    Returns the deletion summary (counts taken before deletion) and the ids of
    campaigns that lost donations, so their cached totals can be resynced.
    """
    donor = db.query(DonorORM).filter(DonorORM.id == donor_id).first()
    if not donor:
        return None, []
    donation_count = _count_by_donor(db, DonationORM, donor_id)
    task_count = _count_by_donor(db, TaskORM, donor_id)
    campaign_ids = [
        cid
        for (cid,) in db.query(DonationORM.campaign_id)
        .filter(DonationORM.donor_id == donor_id, DonationORM.campaign_id.isnot(None))
        .distinct()
        .all()
    ]
    deletion = DonorDeletion(
        deleted_id=donor.id,
        deleted_name=donor.name,
        donations=donation_count,
        tasks=task_count,
    )
    db.delete(donor)
    db.commit()
    return deletion, campaign_ids
