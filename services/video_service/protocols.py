"""
Video Service behavioral contracts and protocols.

This module defines the protocols (interfaces) that Video Service components
must implement, enabling dependency injection and testability.
"""

from __future__ import annotations

from typing import AsyncIterable, AsyncIterator, Protocol, Sequence, runtime_checkable
from uuid import UUID

from videoup_common.observability_enums import OperationType
from videoup_common.status_enums import OperationStatus
from videoup_service_libs import Result

from services.video_service.domain_models import (
    CatalogEntry,
    CatalogEntryView,
    CatalogFailure,
    EngagementSnapshot,
    PayloadStream,
    StoredPayload,
    VideoStatus,
)


class IdentityAllocatorProtocol(Protocol):
    """Protocol for catalog id allocation."""

    async def next_id(self) -> int:
        """
        Allocate a new catalog id.

        Returns:
            A strictly positive id greater than every id returned before.
            Concurrent callers never receive the same id.
        """
        ...


class CatalogRepositoryProtocol(Protocol):
    """Protocol for catalog metadata persistence."""

    async def insert(self, entry: CatalogEntry, correlation_id: UUID | None = None) -> CatalogEntry:
        """
        Store a new entry.

        Raises:
            VideoUpError: DUPLICATE_IDENTITY if the id is already stored
        """
        ...

    async def get(self, video_id: int) -> CatalogEntry | None:
        """Return the entry for video_id, or None."""
        ...

    async def all(self) -> list[CatalogEntry]:
        """Return every entry in id order."""
        ...

    async def find_by_title(self, title: str) -> list[CatalogEntry]:
        """Return entries whose title equals title exactly."""
        ...

    async def find_by_duration_less_than(self, threshold: float) -> list[CatalogEntry]:
        """Return entries with duration_seconds strictly below threshold."""
        ...

    async def attach_payload(
        self,
        video_id: int,
        payload_key: str,
        content_type: str,
        correlation_id: UUID | None = None,
    ) -> str | None:
        """
        Point a stored entry at a payload and set its content type in one write.

        Returns:
            The payload key the entry referenced before, or None

        Raises:
            VideoUpError: RESOURCE_NOT_FOUND if no entry exists
        """
        ...


@runtime_checkable
class PayloadSinkProtocol(Protocol):
    """Destination for streamed payload bytes."""

    async def write(self, chunk: bytes) -> None: ...


class PayloadStoreProtocol(Protocol):
    """Protocol for binary payload storage.

    Each save is stored under a new key. The catalog row records which key
    is current, so stored bytes are only reachable through the catalog.
    """

    async def save(
        self,
        video_id: int,
        byte_stream: AsyncIterable[bytes],
        correlation_id: UUID | None = None,
    ) -> StoredPayload:
        """
        Persist the full stream under a fresh key.

        The key resolves only once the whole stream has been written.

        Returns:
            The new key and the number of bytes stored

        Raises:
            VideoUpError: STORAGE_FAILURE if the stream or the write fails
        """
        ...

    async def has(self, payload_key: str) -> bool:
        """Return True if a complete payload is stored under payload_key."""
        ...

    async def open_stream(
        self,
        payload_key: str,
        correlation_id: UUID | None = None,
    ) -> AsyncIterator[bytes]:
        """
        Open the payload and return an iterator over its chunks.

        Raises:
            VideoUpError: RESOURCE_NOT_FOUND if nothing is stored,
                STORAGE_FAILURE on read errors
        """
        ...

    async def copy_to(
        self,
        payload_key: str,
        sink: PayloadSinkProtocol,
        correlation_id: UUID | None = None,
    ) -> int:
        """
        Stream the stored bytes into sink.

        Returns:
            Number of bytes written

        Raises:
            VideoUpError: RESOURCE_NOT_FOUND if nothing is stored,
                STORAGE_FAILURE on read errors
        """
        ...

    async def delete(self, payload_key: str, correlation_id: UUID | None = None) -> bool:
        """
        Remove a payload that no catalog entry references any more.

        Returns:
            False if nothing was stored under payload_key

        Raises:
            VideoUpError: STORAGE_FAILURE if removal fails
        """
        ...


class EngagementRegistryProtocol(Protocol):
    """Protocol for per-video like tracking."""

    async def register(self, video_id: int) -> None:
        """Create the empty engagement record for a new entry."""
        ...

    async def like(
        self,
        video_id: int,
        username: str,
        correlation_id: UUID | None = None,
    ) -> EngagementSnapshot:
        """
        Add username to the likers of video_id.

        Raises:
            VideoUpError: RESOURCE_NOT_FOUND, ALREADY_LIKED
        """
        ...

    async def unlike(
        self,
        video_id: int,
        username: str,
        correlation_id: UUID | None = None,
    ) -> EngagementSnapshot:
        """
        Remove username from the likers of video_id.

        Raises:
            VideoUpError: RESOURCE_NOT_FOUND, NOT_LIKED
        """
        ...

    async def liked_by(self, video_id: int, correlation_id: UUID | None = None) -> list[str]:
        """
        Return the current likers, sorted.

        Raises:
            VideoUpError: RESOURCE_NOT_FOUND
        """
        ...

    async def like_count(self, video_id: int, correlation_id: UUID | None = None) -> int:
        """
        Return the number of likers, derived from membership.

        Raises:
            VideoUpError: RESOURCE_NOT_FOUND
        """
        ...

    async def like_counts(self, video_ids: Sequence[int]) -> dict[int, int]:
        """Return like counts for the given ids; unknown ids map to 0."""
        ...


class CatalogServiceProtocol(Protocol):
    """Protocol for the catalog orchestrator consumed by the HTTP layer."""

    async def create_entry(
        self, title: str, duration_seconds: int, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]: ...

    async def get_entry(
        self, video_id: int, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]: ...

    async def list_entries(self, correlation_id: UUID) -> list[CatalogEntryView]: ...

    async def bind_payload(
        self,
        video_id: int,
        content_type: str,
        byte_stream: AsyncIterable[bytes],
        correlation_id: UUID,
    ) -> Result[VideoStatus, CatalogFailure]: ...

    async def open_payload(
        self, video_id: int, correlation_id: UUID
    ) -> Result[PayloadStream, CatalogFailure]: ...

    async def read_payload(
        self, video_id: int, sink: PayloadSinkProtocol, correlation_id: UUID
    ) -> Result[str, CatalogFailure]: ...

    async def like(
        self, video_id: int, username: str, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]: ...

    async def unlike(
        self, video_id: int, username: str, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]: ...

    async def liked_by(
        self, video_id: int, correlation_id: UUID
    ) -> Result[list[str], CatalogFailure]: ...

    async def search_by_title(self, title: str, correlation_id: UUID) -> list[CatalogEntryView]: ...

    async def search_by_duration_less_than(
        self, threshold: float, correlation_id: UUID
    ) -> list[CatalogEntryView]: ...


@runtime_checkable
class CatalogMetricsProtocol(Protocol):
    """Protocol for video service metrics collection."""

    def record_operation(self, operation: OperationType, status: OperationStatus) -> None:
        """
        Record a catalog operation metric.

        Args:
            operation: Operation type (OperationType enum)
            status: Operation status (OperationStatus enum)
        """
        ...
