"""Database-backed engagement registry implementation for Video Service.

One row per like in video_likes. The composite primary key (video_id,
username) makes a duplicate like fail at insert time, so concurrent likes by
the same user resolve to exactly one success without application locks.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from videoup_service_libs.error_handling import (
    raise_already_liked,
    raise_not_liked,
    raise_resource_not_found,
)
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.domain_models import EngagementSnapshot
from services.video_service.models_db import CatalogEntryRecord, VideoLike
from services.video_service.protocols import EngagementRegistryProtocol

logger = create_service_logger("video.engagement.db")


class DatabaseEngagementRegistry(EngagementRegistryProtocol):
    """Engagement registry persisted alongside the catalog tables."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def _get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a database session with proper transaction handling."""
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def _require_entry(
        self, video_id: int, operation: str, correlation_id: UUID | None
    ) -> None:
        # Entries are never deleted, so a positive check stays valid afterwards
        async with self._get_session() as session:
            result = await session.execute(
                select(CatalogEntryRecord.id).where(CatalogEntryRecord.id == video_id)
            )
            if result.scalar_one_or_none() is None:
                raise_resource_not_found(
                    service="video_service",
                    operation=operation,
                    resource_type="video",
                    resource_id=str(video_id),
                    correlation_id=correlation_id,
                )

    async def _snapshot(self, video_id: int) -> EngagementSnapshot:
        async with self._get_session() as session:
            result = await session.execute(
                select(VideoLike.username)
                .where(VideoLike.video_id == video_id)
                .order_by(VideoLike.username)
            )
            return EngagementSnapshot(video_id=video_id, liked_by=tuple(result.scalars()))

    async def register(self, video_id: int) -> None:
        # Engagement rows hang off catalog_entries; nothing to create up front
        return None

    async def like(
        self,
        video_id: int,
        username: str,
        correlation_id: UUID | None = None,
    ) -> EngagementSnapshot:
        await self._require_entry(video_id, "like", correlation_id)

        try:
            async with self._get_session() as session:
                session.add(VideoLike(video_id=video_id, username=username))
        except IntegrityError:
            raise_already_liked(
                service="video_service",
                operation="like",
                video_id=video_id,
                username=username,
                correlation_id=correlation_id,
            )

        logger.debug("Like recorded", video_id=video_id)
        return await self._snapshot(video_id)

    async def unlike(
        self,
        video_id: int,
        username: str,
        correlation_id: UUID | None = None,
    ) -> EngagementSnapshot:
        await self._require_entry(video_id, "unlike", correlation_id)

        async with self._get_session() as session:
            result = await session.execute(
                delete(VideoLike).where(
                    VideoLike.video_id == video_id,
                    VideoLike.username == username,
                )
            )
            removed = result.rowcount

        if removed == 0:
            raise_not_liked(
                service="video_service",
                operation="unlike",
                video_id=video_id,
                username=username,
                correlation_id=correlation_id,
            )

        logger.debug("Like removed", video_id=video_id)
        return await self._snapshot(video_id)

    async def liked_by(self, video_id: int, correlation_id: UUID | None = None) -> list[str]:
        await self._require_entry(video_id, "liked_by", correlation_id)
        snapshot = await self._snapshot(video_id)
        return list(snapshot.liked_by)

    async def like_count(self, video_id: int, correlation_id: UUID | None = None) -> int:
        await self._require_entry(video_id, "like_count", correlation_id)
        async with self._get_session() as session:
            result = await session.execute(
                select(func.count()).select_from(VideoLike).where(VideoLike.video_id == video_id)
            )
            return result.scalar_one()

    async def like_counts(self, video_ids: Sequence[int]) -> dict[int, int]:
        counts = {video_id: 0 for video_id in video_ids}
        if not counts:
            return counts

        async with self._get_session() as session:
            result = await session.execute(
                select(VideoLike.video_id, func.count())
                .where(VideoLike.video_id.in_(list(counts)))
                .group_by(VideoLike.video_id)
            )
            for video_id, count in result.all():
                counts[video_id] = count
        return counts
