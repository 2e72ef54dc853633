import re
from datetime import date, datetime, timezone

from dateutil.parser import isoparse

DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date_only(value: str) -> date:
    """Parse a strict YYYY-MM-DD date. Raises ValueError otherwise."""
    if not isinstance(value, str) or not DATE_ONLY.fullmatch(value):
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid calendar date: {value}")


def parse_timestamp(value: str) -> datetime:
    """
    Parse a YYYY-MM-DD date or a full ISO-8601 timestamp into a naive UTC datetime.
    Raises ValueError for anything else.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Invalid date format. Use ISO 8601 format (YYYY-MM-DD)")
    try:
        parsed = isoparse(value.strip())
    except (ValueError, OverflowError):
        raise ValueError("Invalid date format. Use ISO 8601 format (YYYY-MM-DD)")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
