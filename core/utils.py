# core/utils.py

import math
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional


def sanitize(data: dict, *, drop_none: bool = False) -> dict:
    """
    Prepare a payload for a PostgREST insert/update:
    - Strip string whitespace, empty strings → None
      (UUID columns reject "")
    - date/datetime → ISO strings, Decimal → float
    - Optionally drop None values (partial updates)
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            v = v.strip() or None
        elif isinstance(v, datetime):
            v = v.isoformat()
        elif isinstance(v, date):
            v = v.isoformat()
        elif isinstance(v, Decimal):
            v = float(v)

        if v is None and drop_none:
            continue

        clean[k] = v

    return clean


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse Supabase timestamps (trailing Z tolerated) into aware datetimes."""
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def page_range(page: int, limit: int) -> tuple[int, int]:
    """1-based page → inclusive PostgREST range."""
    start = (page - 1) * limit
    return start, start + limit - 1


def total_pages(total: int, limit: int) -> int:
    return math.ceil((total or 0) / limit) if limit else 0
