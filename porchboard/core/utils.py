"""
Small helpers shared across routers
"""

from datetime import datetime, timezone
from typing import Optional
import re

VALID_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(text: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim leading/trailing '-'"""
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def is_valid_image_type(mime_type: Optional[str]) -> bool:
    return mime_type in VALID_IMAGE_TYPES


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; normalize aware input to match"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
