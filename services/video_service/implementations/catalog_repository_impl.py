"""In-memory catalog repository implementation."""

from __future__ import annotations

import asyncio
from uuid import UUID

from videoup_service_libs.error_handling import (
    raise_duplicate_identity,
    raise_resource_not_found,
)
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.domain_models import CatalogEntry
from services.video_service.protocols import CatalogRepositoryProtocol

logger = create_service_logger("video.repository.memory")


class InMemoryCatalogRepository(CatalogRepositoryProtocol):
    """Catalog metadata held in a process-local dict.

    Entries are frozen models; updates swap in a new instance so readers
    always see a complete entry.
    """

    def __init__(self) -> None:
        self._entries: dict[int, CatalogEntry] = {}
        # Per-entry locks serialize writers for the same id
        self._locks: dict[int, asyncio.Lock] = {}

    def _get_lock(self, video_id: int) -> asyncio.Lock:
        if video_id not in self._locks:
            self._locks[video_id] = asyncio.Lock()
        return self._locks[video_id]

    async def insert(self, entry: CatalogEntry, correlation_id: UUID | None = None) -> CatalogEntry:
        async with self._get_lock(entry.id):
            if entry.id in self._entries:
                logger.error(
                    "Refusing to overwrite existing catalog entry",
                    video_id=entry.id,
                    correlation_id=str(correlation_id) if correlation_id else None,
                )
                raise_duplicate_identity(
                    service="video_service",
                    operation="insert",
                    video_id=entry.id,
                    correlation_id=correlation_id,
                )
            self._entries[entry.id] = entry
            return entry

    async def get(self, video_id: int) -> CatalogEntry | None:
        return self._entries.get(video_id)

    async def all(self) -> list[CatalogEntry]:
        return sorted(self._entries.values(), key=lambda entry: entry.id)

    async def find_by_title(self, title: str) -> list[CatalogEntry]:
        return [entry for entry in await self.all() if entry.title == title]

    async def find_by_duration_less_than(self, threshold: float) -> list[CatalogEntry]:
        return [entry for entry in await self.all() if entry.duration_seconds < threshold]

    async def attach_payload(
        self,
        video_id: int,
        payload_key: str,
        content_type: str,
        correlation_id: UUID | None = None,
    ) -> str | None:
        async with self._get_lock(video_id):
            current = self._entries.get(video_id)
            if current is None:
                raise_resource_not_found(
                    service="video_service",
                    operation="attach_payload",
                    resource_type="video",
                    resource_id=str(video_id),
                    correlation_id=correlation_id,
                )
            self._entries[video_id] = current.model_copy(
                update={"payload_key": payload_key, "content_type": content_type}
            )
            return current.payload_key
