"""In-memory engagement registry implementation."""

from __future__ import annotations

import asyncio
from typing import Sequence
from uuid import UUID

from videoup_service_libs.error_handling import (
    raise_already_liked,
    raise_not_liked,
    raise_resource_not_found,
)
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.domain_models import EngagementSnapshot
from services.video_service.protocols import EngagementRegistryProtocol

logger = create_service_logger("video.engagement.memory")


class InMemoryEngagementRegistry(EngagementRegistryProtocol):
    """Per-video sets of usernames guarded by per-video locks.

    The like count is always len() of the set, so count and membership can
    never disagree.
    """

    def __init__(self) -> None:
        self._likers: dict[int, set[str]] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def _get_lock(self, video_id: int) -> asyncio.Lock:
        """Get or create the lock for a video (row-level locking equivalent)."""
        if video_id not in self._locks:
            self._locks[video_id] = asyncio.Lock()
        return self._locks[video_id]

    def _require_likers(self, video_id: int, operation: str, correlation_id: UUID | None) -> set[str]:
        likers = self._likers.get(video_id)
        if likers is None:
            raise_resource_not_found(
                service="video_service",
                operation=operation,
                resource_type="video",
                resource_id=str(video_id),
                correlation_id=correlation_id,
            )
        return likers

    async def register(self, video_id: int) -> None:
        self._likers.setdefault(video_id, set())

    async def like(
        self,
        video_id: int,
        username: str,
        correlation_id: UUID | None = None,
    ) -> EngagementSnapshot:
        async with self._get_lock(video_id):
            likers = self._require_likers(video_id, "like", correlation_id)
            if username in likers:
                raise_already_liked(
                    service="video_service",
                    operation="like",
                    video_id=video_id,
                    username=username,
                    correlation_id=correlation_id,
                )
            likers.add(username)
            snapshot = EngagementSnapshot(video_id=video_id, liked_by=tuple(sorted(likers)))

        logger.debug("Like recorded", video_id=video_id, like_count=snapshot.like_count)
        return snapshot

    async def unlike(
        self,
        video_id: int,
        username: str,
        correlation_id: UUID | None = None,
    ) -> EngagementSnapshot:
        async with self._get_lock(video_id):
            likers = self._require_likers(video_id, "unlike", correlation_id)
            if username not in likers:
                raise_not_liked(
                    service="video_service",
                    operation="unlike",
                    video_id=video_id,
                    username=username,
                    correlation_id=correlation_id,
                )
            likers.discard(username)
            snapshot = EngagementSnapshot(video_id=video_id, liked_by=tuple(sorted(likers)))

        logger.debug("Like removed", video_id=video_id, like_count=snapshot.like_count)
        return snapshot

    async def liked_by(self, video_id: int, correlation_id: UUID | None = None) -> list[str]:
        likers = self._require_likers(video_id, "liked_by", correlation_id)
        return sorted(likers)

    async def like_count(self, video_id: int, correlation_id: UUID | None = None) -> int:
        return len(self._require_likers(video_id, "like_count", correlation_id))

    async def like_counts(self, video_ids: Sequence[int]) -> dict[int, int]:
        return {video_id: len(self._likers.get(video_id, ())) for video_id in video_ids}
