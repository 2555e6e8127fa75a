"""Stored <-> API conversion for post records.

Rows written by older schemas may hold ``images`` as a native list or as
JSON text; every read goes through ``parse_images`` so endpoints never deal
with that difference.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, List, Optional, Tuple

from posthub.models.db import Post
from posthub.models.schemas.posts import PostRead
from posthub.utils import get_logger
from posthub.utils.time import isoformat_utc

logger = get_logger(__name__)


def parse_images(value: Any) -> List[str]:
    """Return the stored image list as a list of non-empty path strings.

    Accepts a list, JSON text encoding a list, or ``None``. Unparsable text,
    empty text and JSON that is not a list all yield ``[]``.
    """
    if value is None:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text)
        except ValueError:
            logger.warning("Unparsable stored images value", preview=text[:80])
            return []
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str) and item]


def primary_image(images: List[str]) -> str:
    return images[0] if images else ""


def serialize_images(images: List[str]) -> Tuple[str, str]:
    """Stored form of an image list: (JSON text, primary image path)."""
    cleaned = parse_images(list(images))
    return json.dumps(cleaned), primary_image(cleaned)


def format_timestamp(value: Any) -> Optional[str]:
    """ISO 8601 text for a datetime or timestamp string; ``None`` passes through."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return isoformat_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return text
        return isoformat_utc(parsed)
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")


def to_api(row: Post) -> PostRead:
    """Build the API form of a stored post."""
    images = parse_images(row.images)
    legacy_primary = row.image_url or ""
    if not images and legacy_primary:
        # Pre-gallery rows only carried the single image column
        images = [legacy_primary]

    return PostRead(
        id=row.id,
        title=row.title,
        category=row.category or "",
        content=row.content,
        images=images,
        affiliate_link=row.affiliate_link or "",
        created_at=format_timestamp(row.created_at) or "",
        updated_at=format_timestamp(row.updated_at),
    )


__all__ = ["parse_images", "primary_image", "serialize_images", "format_timestamp", "to_api"]
