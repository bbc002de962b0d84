from datetime import datetime, timezone
from typing import Iterable, List, Optional


def utcnow() -> datetime:
    """Current time as naive UTC, the form every timestamp is stored in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage_time(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC"""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# SQLite and PostgreSQL BIGINT both store row ids as signed 64-bit integers
MAX_ROW_ID = 2 ** 63 - 1


def is_row_id(value) -> bool:
    """True when value could be the id of a stored row"""
    return isinstance(value, int) and 1 <= value <= MAX_ROW_ID


def normalize_tag(tag) -> str:
    return str(tag).strip().lower()


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Trim, lower-case, drop empties and collapse duplicates"""
    if not tags:
        return []
    return sorted({normalize_tag(t) for t in tags if t is not None and normalize_tag(t)})


def parse_tag_param(raw: Optional[str]) -> List[str]:
    """Split a comma-separated ?tags= query value"""
    if not raw:
        return []
    return normalize_tags(raw.split(","))


def mask_token(token: str) -> str:
    """Mask a secret for log output"""
    if len(token) <= 8:
        return "****"
    return token[:4] + "****" + token[-4:]


def format_ctr(clicks: int, views: int) -> str:
    """Click-through rate as a percentage string; no views reads as 0%"""
    if views <= 0:
        return "0%"
    return f"{clicks / views * 100:.2f}%"
