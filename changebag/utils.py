"""Shared validation and parsing helpers."""

import math
import re
from datetime import date, datetime, timezone

_EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
_DIGITS_RE = re.compile(r'\D')


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_valid_email(value: str) -> bool:
    """Return True if *value* looks like a valid email address."""
    return bool(value and isinstance(value, str) and _EMAIL_RE.match(value.strip()))


def non_text_fields(data: dict, fields) -> dict:
    """Map each supplied field in *fields* that isn't a string to an error."""
    return {
        field: "must be text"
        for field in fields
        if data.get(field) is not None and not isinstance(data[field], str)
    }


def normalize_email(value) -> str:
    return (value or "").strip().lower()


def is_valid_phone(value: str) -> bool:
    """Return True if *value* contains 7–15 digits (international-friendly).

    Accepts any mix of digits, spaces, hyphens, parentheses, dots, and a
    leading +.  Strips all non-digit characters before counting.
    """
    if not value:
        return True  # phone is optional wherever this is used
    digits = _DIGITS_RE.sub('', str(value).strip())
    return 7 <= len(digits) <= 15


def standardize_phone_number(phone: str) -> str:
    """Normalize an Indian mobile number to +91XXXXXXXXXX."""
    cleaned = re.sub(r'[^\d+]', '', phone or '')
    cleaned = cleaned.lstrip('+')
    if cleaned.startswith('0'):
        cleaned = cleaned[1:]
    if cleaned.startswith('91') and len(cleaned) > 10:
        cleaned = cleaned[2:]
    return f"+91{cleaned}"


def parse_date(value):
    """Parse an ISO date or datetime string. Returns None if it can't."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def to_number(value):
    """Coerce form/JSON input to int or float. Returns None if it can't.

    ``inf`` and ``nan`` are rejected along with anything non-numeric.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def page_params(args, default_limit: int = 10, max_limit: int = 100) -> tuple[int, int]:
    """Read ``page`` and ``limit`` query args, falling back to defaults."""
    try:
        page = int(args.get("page", 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(args.get("limit", default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    page = max(page, 1)
    limit = min(max(limit, 1), max_limit)
    return page, limit


def paginate(query, page: int, limit: int) -> tuple[list, dict]:
    """Apply (page-1)*limit skip to an ordered query and describe the page."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, {
        "total": total,
        "page": page,
        "pages": math.ceil(total / limit) if limit else 0,
    }
