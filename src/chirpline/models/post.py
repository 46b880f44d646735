# src/chirpline/models/post.py
"""SQLAlchemy models for posts and their likes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chirpline.db.session import Base
from chirpline.db.time import utcnow


class Post(Base):
    """Short message authored by a user, optionally reposting another post.

    Derived values (counts, viewer flags) are never stored here; they are
    computed per request by the enrichment engine.
    """

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_author_created", "author_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    author_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("app_user.id"),
        nullable=False,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Plain column rather than a foreign key: deleting the target must leave
    # reposts pointing at it intact.
    repost_target_id: Mapped[int | None] = mapped_column(
        BigInteger,
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    likes: Mapped[list[PostLike]] = relationship(
        "PostLike",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostLike.id",
        lazy="selectin",
    )

    @property
    def liker_ids(self) -> list[int]:
        """Return liker user ids in the order the likes were added."""
        return [like.user_id for like in self.likes]

    @property
    def is_repost(self) -> bool:
        """Return True if this post points at another post."""
        return self.repost_target_id is not None


class PostLike(Base):
    """Single user's like on a post.

    The monotonic ``id`` keeps append order for the liker list; the unique
    ``(post_id, user_id)`` pair forbids liking the same post twice.
    """

    __tablename__ = "post_like"
    __table_args__ = (
        Index("ux_post_like_post_user", "post_id", "user_id", unique=True),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("app_user.id"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    post: Mapped[Post] = relationship("Post", back_populates="likes")
