from __future__ import annotations
"""SQLAlchemy model for published posts."""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
from posthub.database import Base
from posthub.utils.time import utc_now


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(200), nullable=False, default="", server_default="")
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # JSON array of "/uploads/<name>" paths; image_url mirrors images[0]
    images: Mapped[str] = mapped_column(Text, nullable=False, default="[]", server_default="[]")
    image_url: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")

    affiliate_link: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Post id={self.id} title={self.title!r}>"
