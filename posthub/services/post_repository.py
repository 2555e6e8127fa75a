"""Persistence operations for posts.

Each call touches exactly one row and commits once, so a failed call leaves
the previous state untouched. SQLAlchemy errors are rolled back and surfaced
as ``StorageError``.
"""
from __future__ import annotations

from datetime import timedelta
from typing import List, NoReturn, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from posthub.errors import PostNotFoundError, StorageError, ValidationError
from posthub.models.db import Post
from posthub.models.schemas.posts import PostFields
from posthub.services.normalizer import parse_images, serialize_images
from posthub.utils import get_logger
from posthub.utils.time import ensure_utc, utc_now

logger = get_logger(__name__)


def require_post_text(fields: PostFields) -> None:
    """Reject missing or blank title/content before anything is written."""
    if not (fields.title or "").strip() or not (fields.content or "").strip():
        logger.warning("Post rejected: missing title or content")
        raise ValidationError("Title and content are required")


class PostRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Post]:
        """All posts, newest first (ties broken by id)."""
        try:
            stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            self._fail("list", e)

    def get(self, post_id: int) -> Post:
        try:
            post = self.db.get(Post, post_id)
        except SQLAlchemyError as e:
            self._fail("get", e, post_id=post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    def create(self, fields: PostFields, image_paths: Sequence[str] = ()) -> Post:
        require_post_text(fields)
        images_json, primary = serialize_images(list(image_paths))
        post = Post(
            title=fields.title,
            category=fields.category or "",
            content=fields.content,
            images=images_json,
            image_url=primary,
            affiliate_link=fields.affiliate_link or "",
            created_at=utc_now(),
        )
        try:
            self.db.add(post)
            self.db.commit()
            self.db.refresh(post)
        except SQLAlchemyError as e:
            self._fail("create", e)
        logger.debug("Post row inserted", post_id=post.id, image_count=len(image_paths))
        return post

    def update(self, post_id: int, fields: PostFields, new_image_paths: Sequence[str] = ()) -> Post:
        """Overwrite text fields; replace images only when new ones are given."""
        require_post_text(fields)
        post = self.get(post_id)

        post.title = fields.title
        post.category = fields.category or ""
        post.content = fields.content
        post.affiliate_link = fields.affiliate_link or ""
        if new_image_paths:
            post.images, post.image_url = serialize_images(list(new_image_paths))
        else:
            # Rewrite in canonical form so legacy text/list variants converge
            kept = parse_images(post.images) or parse_images([post.image_url])
            post.images, post.image_url = serialize_images(kept)

        now = utc_now()
        created = ensure_utc(post.created_at)
        if now <= created:
            now = created + timedelta(microseconds=1)
        post.updated_at = now

        try:
            self.db.commit()
            self.db.refresh(post)
        except SQLAlchemyError as e:
            self._fail("update", e, post_id=post_id)
        return post

    def delete(self, post_id: int) -> None:
        try:
            result = self.db.execute(delete(Post).where(Post.id == post_id))
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("delete", e, post_id=post_id)
        if result.rowcount == 0:
            raise PostNotFoundError(post_id)

    def _fail(self, operation: str, exc: SQLAlchemyError, **context) -> NoReturn:
        self.db.rollback()
        logger.error(
            "Post storage operation failed",
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
            **context,
        )
        raise StorageError(f"{operation} failed: {exc}") from exc


__all__ = ["PostRepository", "require_post_text"]
