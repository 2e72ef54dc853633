from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from pydantic import EmailStr, Field
from sqlalchemy.orm import Session

from donorhub.domain.models import Donation, Donor, DonorDetail, DonorStatus, Task, TaskPriority
from donorhub.domain.services import donor_service
from donorhub.domain.services.auth_service import get_current_user
from donorhub.presentation.dependencies import get_db
from donorhub.presentation.schemas import (
    CamelModel,
    DataResponse,
    ListResponse,
    PaginationResponse,
)

router = APIRouter(
    prefix="/api/donors", tags=["donors"], dependencies=[Depends(get_current_user)]
)


class CreateDonorRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    status: Optional[DonorStatus] = None
    notes: Optional[str] = None


class UpdateDonorRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    status: Optional[DonorStatus] = None
    notes: Optional[str] = None


class DonorResponse(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    status: DonorStatus
    notes: Optional[str] = None
    donation_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def from_domain(d: Donor) -> "DonorResponse":
        return DonorResponse(
            id=d.id,
            name=d.name,
            email=d.email,
            phone=d.phone,
            status=d.status,
            notes=d.notes,
            donation_count=d.donation_count,
            created_at=d.created_at,
            updated_at=d.updated_at,
        )


class CampaignSummary(CamelModel):
    id: int
    name: str


class DonorDonationResponse(CamelModel):
    id: int
    amount: float
    date: datetime
    method: str
    recurring: bool
    thanked: bool
    notes: Optional[str] = None
    campaign_id: Optional[int] = None
    campaign: Optional[CampaignSummary] = None

    @staticmethod
    def from_domain(d: Donation) -> "DonorDonationResponse":
        return DonorDonationResponse(
            id=d.id,
            amount=d.amount,
            date=d.date,
            method=d.method,
            recurring=d.recurring,
            thanked=d.thanked,
            notes=d.notes,
            campaign_id=d.campaign_id,
            campaign=(
                CampaignSummary(id=d.campaign.id, name=d.campaign.name)
                if d.campaign
                else None
            ),
        )


class DonorTaskResponse(CamelModel):
    id: int
    type: str
    description: str
    due_date: Optional[date] = None
    priority: TaskPriority
    completed: bool

    @staticmethod
    def from_domain(t: Task) -> "DonorTaskResponse":
        return DonorTaskResponse(
            id=t.id,
            type=t.type,
            description=t.description,
            due_date=t.due_date,
            priority=t.priority,
            completed=t.completed,
        )


class DonorDetailResponse(DonorResponse):
    task_count: int = 0
    donations: List[DonorDonationResponse]
    tasks: List[DonorTaskResponse]

    @staticmethod
    def from_detail(detail: DonorDetail) -> "DonorDetailResponse":
        base = DonorResponse.from_domain(detail.donor)
        return DonorDetailResponse(
            **base.model_dump(),
            task_count=detail.donor.task_count,
            donations=[DonorDonationResponse.from_domain(d) for d in detail.donations],
            tasks=[DonorTaskResponse.from_domain(t) for t in detail.tasks],
        )


class RelatedDeletions(CamelModel):
    donations: int
    tasks: int


class DonorDeletedResponse(CamelModel):
    deleted_id: int
    deleted_name: str
    related_deletions: RelatedDeletions


@router.get("", response_model=ListResponse[DonorResponse])
def list_donors_endpoint(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Match on name or email"),
    donor_status: Optional[DonorStatus] = Query(None, alias="status"),
    limit: int = Query(10, ge=1, description="Page size, capped at 100"),
    offset: int = Query(0, ge=0),
):
    donors, page = donor_service.list_donors(db, search, donor_status, limit, offset)
    return ListResponse[DonorResponse](
        data=[DonorResponse.from_domain(d) for d in donors],
        pagination=PaginationResponse.from_domain(page),
    )


@router.get("/{donor_id}", response_model=DataResponse[DonorDetailResponse])
def get_donor_endpoint(donor_id: int, db: Session = Depends(get_db)):
    detail = donor_service.get_donor_detail(db, donor_id)
    return DataResponse[DonorDetailResponse](
        data=DonorDetailResponse.from_detail(detail)
    )


@router.post(
    "",
    response_model=DataResponse[DonorResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_donor_endpoint(req: CreateDonorRequest, db: Session = Depends(get_db)):
    donor = donor_service.create_donor(
        db,
        name=req.name,
        email=req.email,
        status=req.status,
        phone=req.phone,
        notes=req.notes,
    )
    return DataResponse[DonorResponse](
        data=DonorResponse.from_domain(donor), message="Donor created successfully"
    )


@router.patch("/{donor_id}", response_model=DataResponse[DonorResponse])
def update_donor_endpoint(
    donor_id: int, req: UpdateDonorRequest, db: Session = Depends(get_db)
):
    donor = donor_service.update_donor(db, donor_id, req.model_dump(exclude_unset=True))
    return DataResponse[DonorResponse](
        data=DonorResponse.from_domain(donor), message="Donor updated successfully"
    )


@router.delete("/{donor_id}", response_model=DataResponse[DonorDeletedResponse])
def delete_donor_endpoint(
    donor_id: int, background_tasks: BackgroundTasks, db: Session = Depends(get_db)
):
    deletion = donor_service.delete_donor(db, donor_id, background_tasks.add_task)
    return DataResponse[DonorDeletedResponse](
        data=DonorDeletedResponse(
            deleted_id=deletion.deleted_id,
            deleted_name=deletion.deleted_name,
            related_deletions=RelatedDeletions(
                donations=deletion.donations, tasks=deletion.tasks
            ),
        ),
        message="Donor deleted successfully",
    )
