from donorhub.domain.models import Page

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(limit, MAX_LIMIT))


def clamp_offset(offset: int | None) -> int:
    return max(0, offset or 0)


def build_page(total: int, limit: int, offset: int) -> Page:
    return Page(total=total, limit=limit, offset=offset)
