"""SQLAlchemy models for Video Service."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all SQLAlchemy models for Video Service."""

    pass


class CatalogIdentity(Base):
    """Append-only ledger of allocated catalog ids.

    A row is committed before the entry insert, so an id consumed by a failed
    creation stays burned.
    """

    __tablename__ = "catalog_identity"
    # SQLite reuses max(rowid)+1 without AUTOINCREMENT
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    allocated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )


class CatalogEntryRecord(Base):
    """Persisted catalog metadata."""

    __tablename__ = "catalog_entries"

    # Assigned by the identity allocator, never by the database
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    content_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payload_key: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )


class VideoLike(Base):
    """One row per (video, user) like; the composite key enforces uniqueness."""

    __tablename__ = "video_likes"

    video_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("catalog_entries.id"),
        primary_key=True,
    )
    username: Mapped[str] = mapped_column(String(255), primary_key=True)
    liked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )
