from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from donorhub.domain.helpers.dates import parse_timestamp
from donorhub.domain.models import Donation, TaskPriority
from donorhub.domain.services import donation_service
from donorhub.domain.services.auth_service import get_current_user
from donorhub.presentation.dependencies import get_db
from donorhub.presentation.schemas import (
    CamelModel,
    DataResponse,
    ListResponse,
    PaginationResponse,
)

router = APIRouter(
    prefix="/api/donations",
    tags=["donations"],
    dependencies=[Depends(get_current_user)],
)


class _DonationDateMixin(CamelModel):
    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def _parse_date(cls, value):
        if value is None:
            return value
        return parse_timestamp(value)


class CreateDonationRequest(_DonationDateMixin):
    amount: float = Field(..., gt=0)
    date: datetime
    method: str = Field(..., min_length=1)
    donor_id: int
    campaign_id: Optional[int] = None
    recurring: bool = False
    notes: Optional[str] = None


class UpdateDonationRequest(_DonationDateMixin):
    amount: Optional[float] = Field(None, gt=0)
    date: Optional[datetime] = None
    method: Optional[str] = None
    campaign_id: Optional[int] = None
    recurring: Optional[bool] = None
    thanked: Optional[bool] = None
    notes: Optional[str] = None


class DonorSummary(CamelModel):
    id: int
    name: str
    email: str


class CampaignSummary(CamelModel):
    id: int
    name: str
    goal: Optional[float] = None


class DonationResponse(CamelModel):
    id: int
    amount: float
    date: datetime
    method: str
    recurring: bool
    thanked: bool
    notes: Optional[str] = None
    donor_id: int
    campaign_id: Optional[int] = None
    donor: Optional[DonorSummary] = None
    campaign: Optional[CampaignSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def from_domain(d: Donation) -> "DonationResponse":
        return DonationResponse(
            id=d.id,
            amount=d.amount,
            date=d.date,
            method=d.method,
            recurring=d.recurring,
            thanked=d.thanked,
            notes=d.notes,
            donor_id=d.donor_id,
            campaign_id=d.campaign_id,
            donor=(
                DonorSummary(id=d.donor.id, name=d.donor.name, email=d.donor.email)
                if d.donor
                else None
            ),
            campaign=(
                CampaignSummary(
                    id=d.campaign.id, name=d.campaign.name, goal=d.campaign.goal
                )
                if d.campaign
                else None
            ),
            created_at=d.created_at,
            updated_at=d.updated_at,
        )


class ScheduledTaskResponse(CamelModel):
    type: str
    description: str
    due_date: date
    priority: TaskPriority


class DonationCreatedResponse(DataResponse[DonationResponse]):
    scheduled_task: ScheduledTaskResponse


class DonationDeletedResponse(CamelModel):
    deleted_id: int
    amount: float
    campaign_reverted: bool


@router.get("", response_model=ListResponse[DonationResponse])
def list_donations_endpoint(
    db: Session = Depends(get_db),
    donor_id: Optional[int] = Query(None, alias="donorId"),
    campaign_id: Optional[int] = Query(None, alias="campaignId"),
    method: Optional[str] = Query(None, description="Substring match on method"),
    limit: int = Query(10, ge=1, description="Page size, capped at 100"),
    offset: int = Query(0, ge=0),
):
    donations, page = donation_service.list_donations(
        db, donor_id, campaign_id, method, limit, offset
    )
    return ListResponse[DonationResponse](
        data=[DonationResponse.from_domain(d) for d in donations],
        pagination=PaginationResponse.from_domain(page),
    )


@router.get("/{donation_id}", response_model=DataResponse[DonationResponse])
def get_donation_endpoint(donation_id: int, db: Session = Depends(get_db)):
    donation = donation_service.get_donation(db, donation_id)
    return DataResponse[DonationResponse](data=DonationResponse.from_domain(donation))


@router.post(
    "",
    response_model=DonationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_donation_endpoint(
    req: CreateDonationRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    created = donation_service.create_donation(
        db,
        amount=req.amount,
        date=req.date,
        method=req.method,
        donor_id=req.donor_id,
        schedule=background_tasks.add_task,
        campaign_id=req.campaign_id,
        recurring=req.recurring,
        notes=req.notes,
    )
    task = created.task
    return DonationCreatedResponse(
        data=DonationResponse.from_domain(created.donation),
        message="Donation created successfully",
        scheduled_task=ScheduledTaskResponse(
            type=task.type,
            description=task.description,
            due_date=task.due_date,
            priority=task.priority,
        ),
    )


@router.patch("/{donation_id}", response_model=DataResponse[DonationResponse])
def update_donation_endpoint(
    donation_id: int,
    req: UpdateDonationRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    donation = donation_service.update_donation(
        db, donation_id, req.model_dump(exclude_unset=True), background_tasks.add_task
    )
    return DataResponse[DonationResponse](
        data=DonationResponse.from_domain(donation),
        message="Donation updated successfully",
    )


@router.delete("/{donation_id}", response_model=DataResponse[DonationDeletedResponse])
def delete_donation_endpoint(
    donation_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    deletion = donation_service.delete_donation(db, donation_id, background_tasks.add_task)
    return DataResponse[DonationDeletedResponse](
        data=DonationDeletedResponse(
            deleted_id=deletion.deleted_id,
            amount=deletion.amount,
            campaign_reverted=deletion.campaign_reverted,
        ),
        message="Donation deleted successfully",
    )
