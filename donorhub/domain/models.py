# donorhub/domain/models.py
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class DonorStatus(str, Enum):
    ACTIVE = "active"
    LAPSED = "lapsed"
    NEW = "new"


class CampaignStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    UPCOMING = "upcoming"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Sort rank for "descending priority" ordering; higher sorts first.
PRIORITY_RANK = {TaskPriority.HIGH: 3, TaskPriority.MEDIUM: 2, TaskPriority.LOW: 1}

THANK_YOU_TASK_TYPE = "thank-you"
THANK_YOU_TASK_DESCRIPTION = "Send thank you message for donation"
THANK_YOU_DUE_DAYS = 7


@dataclass
class User:
    id: int
    email: str
    name: str
    hashed_password: str
    created_at: Optional[datetime] = None


@dataclass
class CurrentUser:
    """Identity carried by a verified bearer token."""

    id: int
    email: str


@dataclass
class DonorRef:
    id: int
    name: str
    email: str


@dataclass
class CampaignRef:
    id: int
    name: str
    goal: Optional[float] = None


@dataclass
class Donor:
    id: int
    name: str
    email: str
    status: DonorStatus
    phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    donation_count: int = 0
    task_count: int = 0


@dataclass
class Donation:
    id: int
    amount: float
    date: datetime
    method: str
    donor_id: int
    recurring: bool = False
    thanked: bool = False
    notes: Optional[str] = None
    campaign_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    donor: Optional[DonorRef] = None
    campaign: Optional[CampaignRef] = None

    def __post_init__(self):
        if self.amount is None or self.amount <= 0:
            raise ValueError("Donation amount must be a positive number.")


@dataclass
class Task:
    id: int
    type: str
    description: str
    donor_id: int
    priority: TaskPriority
    completed: bool = False
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None


@dataclass
class DonorDetail:
    donor: Donor
    donations: List[Donation] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)


@dataclass
class Campaign:
    id: int
    name: str
    goal: float
    start_date: date
    status: CampaignStatus
    description: Optional[str] = None
    end_date: Optional[date] = None
    raised: float = 0.0
    donation_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    donations: List[Donation] = field(default_factory=list)

    def __post_init__(self):
        if self.goal is None or self.goal <= 0:
            raise ValueError("Campaign goal must be a positive number.")


@dataclass
class Page:
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


@dataclass
class DonorDeletion:
    deleted_id: int
    deleted_name: str
    donations: int
    tasks: int


@dataclass
class DonationDeletion:
    # campaign_reverted means the cached-total decrement was scheduled;
    # the hook itself is best-effort and runs after the response.
    deleted_id: int
    amount: float
    campaign_reverted: bool
