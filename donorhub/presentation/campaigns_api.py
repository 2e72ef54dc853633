from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from donorhub.domain.helpers.dates import parse_date_only
from donorhub.domain.models import Campaign, CampaignStatus, Donation
from donorhub.domain.services import campaign_service
from donorhub.domain.services.auth_service import get_current_user
from donorhub.presentation.dependencies import get_db
from donorhub.presentation.schemas import (
    CamelModel,
    DataResponse,
    ListResponse,
    PaginationResponse,
)

router = APIRouter(
    prefix="/api/campaigns",
    tags=["campaigns"],
    dependencies=[Depends(get_current_user)],
)


class _CampaignDatesMixin(CamelModel):
    @field_validator("start_date", "end_date", mode="before", check_fields=False)
    @classmethod
    def _strict_dates(cls, value):
        if value is None:
            return value
        return parse_date_only(value)


class CreateCampaignRequest(_CampaignDatesMixin):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    goal: float = Field(..., gt=0)
    start_date: date
    end_date: Optional[date] = None
    status: Optional[CampaignStatus] = None


class UpdateCampaignRequest(_CampaignDatesMixin):
    name: Optional[str] = None
    description: Optional[str] = None
    goal: Optional[float] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[CampaignStatus] = None


class CampaignDonationResponse(CamelModel):
    id: int
    amount: float
    date: datetime
    method: str
    donor_id: int
    thanked: bool

    @staticmethod
    def from_domain(d: Donation) -> "CampaignDonationResponse":
        return CampaignDonationResponse(
            id=d.id,
            amount=d.amount,
            date=d.date,
            method=d.method,
            donor_id=d.donor_id,
            thanked=d.thanked,
        )


class CampaignResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    goal: float
    raised: float
    donation_count: int
    start_date: date
    end_date: Optional[date] = None
    status: CampaignStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def from_domain(c: Campaign) -> "CampaignResponse":
        return CampaignResponse(
            id=c.id,
            name=c.name,
            description=c.description,
            goal=c.goal,
            raised=c.raised,
            donation_count=c.donation_count,
            start_date=c.start_date,
            end_date=c.end_date,
            status=c.status,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )


class CampaignDetailResponse(CampaignResponse):
    donations: List[CampaignDonationResponse]

    @staticmethod
    def from_detail(c: Campaign) -> "CampaignDetailResponse":
        return CampaignDetailResponse(
            **CampaignResponse.from_domain(c).model_dump(),
            donations=[CampaignDonationResponse.from_domain(d) for d in c.donations],
        )


@router.get("", response_model=ListResponse[CampaignResponse])
def list_campaigns_endpoint(
    db: Session = Depends(get_db),
    campaign_status: Optional[CampaignStatus] = Query(None, alias="status"),
    limit: int = Query(10, ge=1, description="Page size, capped at 100"),
    offset: int = Query(0, ge=0),
):
    campaigns, page = campaign_service.list_campaigns(db, campaign_status, limit, offset)
    return ListResponse[CampaignResponse](
        data=[CampaignResponse.from_domain(c) for c in campaigns],
        pagination=PaginationResponse.from_domain(page),
    )


@router.get("/{campaign_id}", response_model=DataResponse[CampaignDetailResponse])
def get_campaign_endpoint(campaign_id: int, db: Session = Depends(get_db)):
    campaign = campaign_service.get_campaign(db, campaign_id)
    return DataResponse[CampaignDetailResponse](
        data=CampaignDetailResponse.from_detail(campaign)
    )


@router.post(
    "",
    response_model=DataResponse[CampaignResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_campaign_endpoint(req: CreateCampaignRequest, db: Session = Depends(get_db)):
    campaign = campaign_service.create_campaign(
        db,
        name=req.name,
        goal=req.goal,
        start_date=req.start_date,
        description=req.description,
        end_date=req.end_date,
        status=req.status,
    )
    return DataResponse[CampaignResponse](
        data=CampaignResponse.from_domain(campaign),
        message="Campaign created successfully",
    )


@router.patch("/{campaign_id}", response_model=DataResponse[CampaignDetailResponse])
def update_campaign_endpoint(
    campaign_id: int, req: UpdateCampaignRequest, db: Session = Depends(get_db)
):
    campaign = campaign_service.update_campaign(
        db, campaign_id, req.model_dump(exclude_unset=True)
    )
    return DataResponse[CampaignDetailResponse](
        data=CampaignDetailResponse.from_detail(campaign),
        message="Campaign updated successfully",
    )
