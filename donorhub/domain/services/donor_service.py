import re
from typing import Any, Dict, List, Optional, Tuple

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from donorhub.data.repositories import donor_repository
from donorhub.domain.errors import ConflictError, NotFoundError, ValidationError
from donorhub.domain.helpers.aggregation import resync_campaign_raised
from donorhub.domain.helpers.pagination import build_page, clamp_limit, clamp_offset
from donorhub.domain.helpers.post_commit import PostCommitHooks, Schedule
from donorhub.domain.models import Donor, DonorDeletion, DonorDetail, DonorStatus, Page
from donorhub.domain.services.auth_service import normalize_email

logger = structlog.get_logger()

PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]{10,}$")
REQUIRED_FIELDS = ("name", "email", "status")
DUPLICATE_EMAIL_MESSAGE = "Donor with this email already exists"


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_phone(phone: Optional[str]) -> Optional[str]:
    phone = _clean_optional(phone)
    if phone is not None and not PHONE_PATTERN.fullmatch(phone):
        raise ValidationError(
            "Phone must have at least 10 digits, spaces or - + ( ) characters"
        )
    return phone


def _ensure_email_available(db: Session, email: str, donor_id: int | None = None):
    existing = donor_repository.get_donor_by_email(db, email)
    if existing and existing.id != donor_id:
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE, code="donor.email_taken")


def list_donors(
    db: Session,
    search: str | None = None,
    status: DonorStatus | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> Tuple[List[Donor], Page]:
    limit = clamp_limit(limit)
    offset = clamp_offset(offset)
    donors, total = donor_repository.list_donors(
        db, search=search.strip() if search else None, status=status, limit=limit, offset=offset
    )
    return donors, build_page(total, limit, offset)


def get_donor_detail(db: Session, donor_id: int) -> DonorDetail:
    detail = donor_repository.get_donor_detail(db, donor_id)
    if detail is None:
        raise NotFoundError("Donor not found", code="donor.not_found")
    return detail


def create_donor(
    db: Session,
    name: str,
    email: str,
    status: DonorStatus | None = None,
    phone: str | None = None,
    notes: str | None = None,
) -> Donor:
    name = name.strip()
    if not name:
        raise ValidationError("Name and email are required")
    email = normalize_email(email)
    _ensure_email_available(db, email)
    try:
        donor = donor_repository.create_donor(
            db,
            name=name,
            email=email,
            status=status or DonorStatus.NEW,
            phone=validate_phone(phone),
            notes=_clean_optional(notes),
        )
    except IntegrityError:
        # Lost a race with a concurrent insert of the same email.
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE, code="donor.email_taken")
    logger.info("Donor created", donor_id=donor.id)
    return donor


def update_donor(db: Session, donor_id: int, changes: Dict[str, Any]) -> Donor:
    """Partial update: only keys present in `changes` are written."""
    current = donor_repository.get_donor(db, donor_id)
    if current is None:
        raise NotFoundError("Donor not found", code="donor.not_found")

    for key in REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")

    updates: Dict[str, Any] = {}
    if "name" in changes:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        updates["name"] = name
    if "email" in changes:
        email = normalize_email(changes["email"])
        if email != current.email:
            _ensure_email_available(db, email, donor_id)
        updates["email"] = email
    if "status" in changes:
        updates["status"] = DonorStatus(changes["status"])
    if "phone" in changes:
        updates["phone"] = validate_phone(changes["phone"])
    if "notes" in changes:
        updates["notes"] = _clean_optional(changes["notes"])

    try:
        donor = donor_repository.update_donor(db, donor_id, updates)
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_EMAIL_MESSAGE, code="donor.email_taken")
    logger.info("Donor updated", donor_id=donor_id, fields=sorted(updates))
    return donor


def delete_donor(db: Session, donor_id: int, schedule: Schedule) -> DonorDeletion:
    deletion, campaign_ids = donor_repository.delete_donor(db, donor_id)
    if deletion is None:
        raise NotFoundError("Donor not found", code="donor.not_found")
    hooks = PostCommitHooks()
    for campaign_id in campaign_ids:
        hooks.add("resync_campaign_raised", resync_campaign_raised, campaign_id)
    hooks.dispatch(schedule)
    logger.info(
        "Donor deleted",
        donor_id=donor_id,
        donations=deletion.donations,
        tasks=deletion.tasks,
    )
    return deletion
