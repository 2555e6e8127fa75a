"""Import posts from the older JSON-file store (``posts.json``).

Usage:
    python -m posthub.legacy_import posts.json [--dry-run]

The file holds a JSON list of post objects (``title``, ``category``,
``content``, ``images``, ``imageUrl``, ``affiliateLink``, ``date``,
``updatedAt``). Original ids are not kept; the table assigns new ones in
chronological order.
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from posthub.config import get_settings
from posthub.database import build_engine, build_session_factory, init_db
from posthub.errors import StorageError
from posthub.models.db import Post
from posthub.services.normalizer import parse_images, serialize_images
from posthub.utils import get_logger, setup_logging
from posthub.utils.time import ensure_utc, utc_now

logger = get_logger(__name__)


@dataclass
class ImportReport:
    imported: int = 0
    skipped: int = 0
    messages: List[str] = field(default_factory=list)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError:
        return None


def legacy_record_to_post(record: Dict[str, Any]) -> Post:
    """Build a ``Post`` row from one legacy JSON object.

    Raises:
        ValueError: title or content missing.
    """
    title = record.get("title")
    title = title.strip() if isinstance(title, str) else ""
    content = record.get("content")
    content = content if isinstance(content, str) else ""
    if not title or not content.strip():
        raise ValueError("title and content are required")

    images = parse_images(record.get("images"))
    if not images and isinstance(record.get("imageUrl"), str) and record["imageUrl"]:
        images = [record["imageUrl"]]
    images_json, primary = serialize_images(images)

    return Post(
        title=title,
        category=record.get("category") or "",
        content=content,
        images=images_json,
        image_url=primary,
        affiliate_link=record.get("affiliateLink") or "",
        created_at=_parse_datetime(record.get("date") or record.get("createdAt")) or utc_now(),
        updated_at=_parse_datetime(record.get("updatedAt")),
    )


def load_legacy_file(path: Path) -> List[Dict[str, Any]]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return []
    data = json.loads(text)
    if isinstance(data, dict):
        data = data.get("posts", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of posts")
    return data


def import_records(db: Session, records: List[Dict[str, Any]], dry_run: bool = False) -> ImportReport:
    """Insert legacy records oldest first in a single commit."""
    report = ImportReport()
    rows: List[Post] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            report.skipped += 1
            report.messages.append(f"#{index}: not an object, skipped")
            continue
        try:
            rows.append(legacy_record_to_post(record))
        except ValueError as e:
            report.skipped += 1
            report.messages.append(f"#{index} ({record.get('id', '?')}): {e}, skipped")

    rows.sort(key=lambda row: row.created_at)
    report.imported = len(rows)
    if dry_run or not rows:
        return report

    try:
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Legacy import failed", error=str(e), exc_info=True)
        raise StorageError(f"Legacy import failed: {e}") from e

    logger.info("Legacy import completed", imported=report.imported, skipped=report.skipped)
    return report


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Import posts from a legacy posts.json file")
    parser.add_argument("path", type=Path, help="path to posts.json")
    parser.add_argument("--dry-run", action="store_true", help="validate without writing")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_file=settings.log_file)

    try:
        records = load_legacy_file(args.path)
    except (OSError, ValueError) as e:
        print(f"Cannot read {args.path}: {e}", file=sys.stderr)
        return 1

    engine = build_engine(settings)
    init_db(engine)
    db = build_session_factory(engine)()
    try:
        report = import_records(db, records, dry_run=args.dry_run)
    except StorageError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()

    for message in report.messages:
        print(message)
    verb = "Would import" if args.dry_run else "Imported"
    print(f"{verb} {report.imported} posts, skipped {report.skipped}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
