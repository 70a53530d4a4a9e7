"""
Expiry parsing and timestamp formatting.

Timestamps are stored as ISO-8601 strings in UTC with millisecond precision,
e.g. ``2025-01-01T00:00:00.000Z``.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

ISO_DATETIME_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T", re.ASCII)
RELATIVE_EXPIRY = re.compile(r"^(\d+)\s*([mhd])$", re.ASCII)

EXPIRY_UNITS = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse a stored ISO-8601 timestamp.

    Returns None when the value can't be parsed. Values without an offset
    are read as UTC.
    """
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_expiry(expiry: Any, now: Optional[datetime] = None) -> Optional[str]:
    """
    Resolve a creation request's ``expiry`` into an absolute timestamp.

    Accepted forms:
        - ISO string starting with ``YYYY-MM-DDT``: returned verbatim
        - ``<integer><unit>`` with unit m, h or d: now + offset

    Anything else, including offsets past year 9999, means "never expires".
    """
    if not expiry:
        return None

    text = str(expiry)
    if ISO_DATETIME_PREFIX.match(text):
        return text

    match = RELATIVE_EXPIRY.match(text.strip())
    if not match:
        return None

    amount, unit = int(match.group(1)), match.group(2)
    now = now or utcnow()
    try:
        return format_timestamp(now + amount * EXPIRY_UNITS[unit])
    except OverflowError:
        return None
