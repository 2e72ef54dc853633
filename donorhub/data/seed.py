"""
Populate the database with demo data: one login, six donors, three campaigns,
five donations and five tasks.

Usage: python -m donorhub.data.seed [--keep]
  --keep  do not clear existing rows first
"""
import sys
from datetime import date, datetime

import structlog

from donorhub.data.base import SessionLocal, create_tables
from donorhub.data.repositories.campaign_repository import (
    CampaignORM,
    add_campaign,
    set_cached_raised,
    sum_campaign_donations,
)
from donorhub.data.repositories.donation_repository import (
    DonationORM,
    add_donation,
    update_donation,
)
from donorhub.data.repositories.donor_repository import DonorORM, create_donor
from donorhub.data.repositories.task_repository import TaskORM, add_task, update_task
from donorhub.data.repositories.user_repository import UserORM, create_user
from donorhub.domain.models import CampaignStatus, Donation, DonorStatus, TaskPriority
from donorhub.domain.services.auth_service import get_password_hash
from donorhub.utils.logging_config import configure_logging

logger = structlog.get_logger()

SEED_USER = {"email": "test@donorhub.com", "password": "password123", "name": "Test User"}

DONORS = [
    ("Sarah Johnson", "sarah.johnson@email.com", "(555) 123-4567", DonorStatus.ACTIVE,
     "Major donor. Interested in education programs."),
    ("Michael Chen", "michael.chen@email.com", "(555) 234-5678", DonorStatus.ACTIVE,
     "Monthly recurring donor."),
    ("Emily Rodriguez", "emily.r@email.com", "(555) 345-6789", DonorStatus.NEW,
     "First-time donor from holiday campaign."),
    ("David Thompson", "david.t@email.com", "(555) 456-7890", DonorStatus.LAPSED,
     "Last donation over 1 year ago. Needs follow-up."),
    ("Lisa Anderson", "lisa.anderson@email.com", "(555) 567-8901", DonorStatus.ACTIVE,
     "Legacy donor. Member of planned giving circle."),
    ("James Wilson", "james.w@email.com", "(555) 678-9012", DonorStatus.ACTIVE,
     "Prefers check donations."),
]

CAMPAIGNS = [
    ("Winter Appeal 2025",
     "Annual winter fundraising campaign to support our community programs.",
     50000, date(2025, 11, 1), date(2026, 1, 31), CampaignStatus.ACTIVE),
    ("Spring Gala 2026", "Annual gala event and silent auction.",
     75000, date(2026, 3, 1), date(2026, 4, 15), CampaignStatus.UPCOMING),
    ("Summer Education Fund", "Scholarship fund for summer educational programs.",
     30000, date(2025, 6, 1), date(2025, 8, 31), CampaignStatus.COMPLETED),
]

# (amount, date, method, recurring, thanked, notes, donor index, campaign index)
DONATIONS = [
    (250, datetime(2026, 1, 2), "credit_card", True, True, "Monthly recurring donation", 1, 0),
    (1000, datetime(2026, 1, 5), "bank_transfer", False, False,
     "First donation - needs thank you call", 2, 0),
    (500, datetime(2025, 12, 15), "credit_card", False, True, None, 0, 0),
    (2000, datetime(2025, 12, 28), "check", False, True, "Year-end contribution", 4, 0),
    (300, datetime(2025, 11, 30), "check", False, True, "General fund", 5, None),
]

# (type, description, due date, priority, completed, donor index)
TASKS = [
    ("thank-you", "Send thank you letter for first donation", date(2026, 1, 8),
     TaskPriority.HIGH, False, 2),
    ("follow-up", "Follow-up call - lapsed donor outreach", date(2026, 1, 10),
     TaskPriority.MEDIUM, False, 3),
    ("call", "Quarterly update call with major donor", date(2026, 1, 15),
     TaskPriority.HIGH, False, 0),
    ("email", "Send planned giving information packet", date(2026, 1, 12),
     TaskPriority.MEDIUM, False, 4),
    ("thank-you", "Monthly recurring donor appreciation email", date(2026, 1, 7),
     TaskPriority.LOW, True, 1),
]


def clear_data(db):
    for model in (TaskORM, DonationORM, CampaignORM, DonorORM, UserORM):
        db.query(model).delete(synchronize_session=False)
    db.commit()


def seed_database(db, clear: bool = True) -> dict:
    if clear:
        clear_data(db)

    create_user(
        db,
        SEED_USER["email"],
        SEED_USER["name"],
        get_password_hash(SEED_USER["password"]),
    )

    donors = [
        create_donor(db, name=name, email=email, phone=phone, status=status, notes=notes)
        for name, email, phone, status, notes in DONORS
    ]
    campaigns = [
        add_campaign(
            db,
            name=name,
            description=description,
            goal=goal,
            start_date=start,
            end_date=end,
            status=status,
        )
        for name, description, goal, start, end, status in CAMPAIGNS
    ]

    for amount, when, method, recurring, thanked, notes, donor_idx, campaign_idx in DONATIONS:
        donation = add_donation(
            db,
            Donation(
                id=0,
                amount=amount,
                date=when,
                method=method,
                donor_id=donors[donor_idx].id,
                recurring=recurring,
                notes=notes,
                campaign_id=campaigns[campaign_idx].id if campaign_idx is not None else None,
            ),
        )
        if thanked:
            update_donation(db, donation.id, {"thanked": True})

    for task_type, description, due, priority, completed, donor_idx in TASKS:
        task = add_task(
            db,
            type=task_type,
            description=description,
            donor_id=donors[donor_idx].id,
            priority=priority,
            due_date=due,
        )
        if completed:
            update_task(db, task.id, {"completed": True})

    for campaign in campaigns:
        raised, _ = sum_campaign_donations(db, campaign.id)
        set_cached_raised(db, campaign.id, raised)

    counts = {
        "donors": len(donors),
        "campaigns": len(campaigns),
        "donations": len(DONATIONS),
        "tasks": len(TASKS),
    }
    logger.info("Database seeded", user=SEED_USER["email"], **counts)
    return counts


if __name__ == "__main__":
    configure_logging()
    create_tables()
    db = SessionLocal()
    try:
        seed_database(db, clear="--keep" not in sys.argv[1:])
    finally:
        db.close()
