"""Catalog orchestrator for Video Service.

Every externally visible operation enters here. The orchestrator checks that
the referenced entry exists before touching the payload store or the
engagement registry, and turns expected store errors into Result failures.
"""

from __future__ import annotations

from typing import AsyncIterable, Sequence
from uuid import UUID

from videoup_common.error_enums import CatalogErrorCode, ErrorCode
from videoup_common.observability_enums import OperationType
from videoup_common.status_enums import OperationStatus, VideoState
from videoup_service_libs import Result
from videoup_service_libs.error_handling import VideoUpError
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.domain_models import (
    CatalogEntry,
    CatalogEntryView,
    CatalogFailure,
    PayloadStream,
    VideoStatus,
    payload_locator,
)
from services.video_service.protocols import (
    CatalogMetricsProtocol,
    CatalogRepositoryProtocol,
    CatalogServiceProtocol,
    EngagementRegistryProtocol,
    IdentityAllocatorProtocol,
    PayloadSinkProtocol,
    PayloadStoreProtocol,
)

logger = create_service_logger("video.catalog_service")

DEFAULT_PAYLOAD_CONTENT_TYPE = "application/octet-stream"

_STATUS_BY_FAILURE = {
    ErrorCode.RESOURCE_NOT_FOUND: OperationStatus.NOT_FOUND,
    CatalogErrorCode.ALREADY_LIKED: OperationStatus.FAILED,
    CatalogErrorCode.NOT_LIKED: OperationStatus.FAILED,
    CatalogErrorCode.DUPLICATE_IDENTITY: OperationStatus.ERROR,
    CatalogErrorCode.STORAGE_FAILURE: OperationStatus.ERROR,
}


class CatalogServiceImpl(CatalogServiceProtocol):
    """Composes allocator, catalog, payload store and engagement registry."""

    def __init__(
        self,
        identity_allocator: IdentityAllocatorProtocol,
        catalog_repository: CatalogRepositoryProtocol,
        payload_store: PayloadStoreProtocol,
        engagement_registry: EngagementRegistryProtocol,
        metrics: CatalogMetricsProtocol,
        public_base_url: str,
    ) -> None:
        self._identity_allocator = identity_allocator
        self._catalog = catalog_repository
        self._payload_store = payload_store
        self._engagement = engagement_registry
        self._metrics = metrics
        self._public_base_url = public_base_url

    def _view(self, entry: CatalogEntry, likes: int) -> CatalogEntryView:
        return CatalogEntryView.from_entry(
            entry,
            data_url=payload_locator(self._public_base_url, entry.id),
            likes=likes,
        )

    async def _views(self, entries: Sequence[CatalogEntry]) -> list[CatalogEntryView]:
        counts = await self._engagement.like_counts([entry.id for entry in entries])
        return [self._view(entry, counts.get(entry.id, 0)) for entry in entries]

    def _fail(
        self,
        operation: OperationType,
        failure: CatalogFailure,
        correlation_id: UUID,
    ) -> Result:
        self._metrics.record_operation(
            operation, _STATUS_BY_FAILURE.get(failure.kind, OperationStatus.FAILED)
        )
        logger.info(
            "Catalog operation rejected",
            operation=operation.value,
            failure=failure.kind.value,
            video_id=failure.video_id,
            correlation_id=str(correlation_id),
        )
        return Result.err(failure)

    def _from_error(self, error: VideoUpError, video_id: int | None) -> CatalogFailure:
        detail = error.error_detail
        return CatalogFailure(
            kind=detail.error_code,
            message=detail.message,
            video_id=video_id,
            details=dict(detail.details),
        )

    def _not_found(self, video_id: int, what: str = "Video") -> CatalogFailure:
        return CatalogFailure(
            kind=ErrorCode.RESOURCE_NOT_FOUND,
            message=f"{what} with ID '{video_id}' not found",
            video_id=video_id,
        )

    async def create_entry(
        self, title: str, duration_seconds: int, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]:
        video_id = await self._identity_allocator.next_id()
        entry = CatalogEntry(id=video_id, title=title, duration_seconds=duration_seconds)

        try:
            stored = await self._catalog.insert(entry, correlation_id)
        except VideoUpError as error:
            return self._fail(OperationType.CREATE, self._from_error(error, video_id), correlation_id)
        # Only ids that made it into the catalog get an engagement record
        await self._engagement.register(video_id)

        self._metrics.record_operation(OperationType.CREATE, OperationStatus.SUCCESS)
        logger.info(
            "Created catalog entry",
            video_id=video_id,
            title=title,
            correlation_id=str(correlation_id),
        )
        return Result.ok(self._view(stored, likes=0))

    async def get_entry(
        self, video_id: int, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]:
        entry = await self._catalog.get(video_id)
        if entry is None:
            return self._fail(OperationType.READ, self._not_found(video_id), correlation_id)

        views = await self._views([entry])
        self._metrics.record_operation(OperationType.READ, OperationStatus.SUCCESS)
        return Result.ok(views[0])

    async def list_entries(self, correlation_id: UUID) -> list[CatalogEntryView]:
        views = await self._views(await self._catalog.all())
        self._metrics.record_operation(OperationType.LIST, OperationStatus.SUCCESS)
        return views

    async def bind_payload(
        self,
        video_id: int,
        content_type: str,
        byte_stream: AsyncIterable[bytes],
        correlation_id: UUID,
    ) -> Result[VideoStatus, CatalogFailure]:
        # Checked before any byte is written so no payload can be orphaned
        if await self._catalog.get(video_id) is None:
            return self._fail(OperationType.UPLOAD, self._not_found(video_id), correlation_id)

        try:
            stored = await self._payload_store.save(video_id, byte_stream, correlation_id)
        except VideoUpError as error:
            return self._fail(
                OperationType.UPLOAD, self._from_error(error, video_id), correlation_id
            )

        # Key and content type land in the row together, so concurrent binds
        # from any worker leave one consistent pair behind
        try:
            previous_key = await self._catalog.attach_payload(
                video_id, stored.payload_key, content_type, correlation_id
            )
        except VideoUpError as error:
            await self._discard_payload(stored.payload_key, correlation_id)
            return self._fail(
                OperationType.UPLOAD, self._from_error(error, video_id), correlation_id
            )

        if previous_key is not None and previous_key != stored.payload_key:
            await self._discard_payload(previous_key, correlation_id)

        self._metrics.record_operation(OperationType.UPLOAD, OperationStatus.SUCCESS)
        logger.info(
            "Bound payload to catalog entry",
            video_id=video_id,
            content_type=content_type,
            payload_key=stored.payload_key,
            size_bytes=stored.size_bytes,
            correlation_id=str(correlation_id),
        )
        return Result.ok(VideoStatus(state=VideoState.READY))

    async def _discard_payload(self, payload_key: str, correlation_id: UUID) -> None:
        try:
            await self._payload_store.delete(payload_key, correlation_id)
        except VideoUpError as error:
            # The catalog no longer points at it; only disk space is lost
            logger.warning(
                "Unreferenced payload left in store",
                payload_key=payload_key,
                error=error.error_detail.message,
                correlation_id=str(correlation_id),
            )

    async def _open_current_payload(
        self, video_id: int, correlation_id: UUID
    ) -> Result[PayloadStream, CatalogFailure]:
        tried_key: str | None = None
        while True:
            entry = await self._catalog.get(video_id)
            if entry is None:
                return self._fail(OperationType.DOWNLOAD, self._not_found(video_id), correlation_id)
            if entry.payload_key is None or entry.payload_key == tried_key:
                return self._fail(
                    OperationType.DOWNLOAD,
                    self._not_found(video_id, what="Payload for video"),
                    correlation_id,
                )

            try:
                chunks = await self._payload_store.open_stream(entry.payload_key, correlation_id)
            except VideoUpError as error:
                if error.error_detail.error_code is ErrorCode.RESOURCE_NOT_FOUND:
                    # Replaced by another bind between lookup and open; look again
                    tried_key = entry.payload_key
                    continue
                return self._fail(
                    OperationType.DOWNLOAD, self._from_error(error, video_id), correlation_id
                )

            # Bytes and content type come from the same catalog row
            return Result.ok(
                PayloadStream(
                    content_type=entry.content_type or DEFAULT_PAYLOAD_CONTENT_TYPE,
                    chunks=chunks,
                )
            )

    async def open_payload(
        self, video_id: int, correlation_id: UUID
    ) -> Result[PayloadStream, CatalogFailure]:
        result = await self._open_current_payload(video_id, correlation_id)
        if result.is_ok:
            self._metrics.record_operation(OperationType.DOWNLOAD, OperationStatus.SUCCESS)
        return result

    async def read_payload(
        self, video_id: int, sink: PayloadSinkProtocol, correlation_id: UUID
    ) -> Result[str, CatalogFailure]:
        result = await self._open_current_payload(video_id, correlation_id)
        if result.is_err:
            return Result.err(result.error)

        stream = result.value
        try:
            async for chunk in stream.chunks:
                await sink.write(chunk)
        except VideoUpError as error:
            return self._fail(
                OperationType.DOWNLOAD, self._from_error(error, video_id), correlation_id
            )

        self._metrics.record_operation(OperationType.DOWNLOAD, OperationStatus.SUCCESS)
        return Result.ok(stream.content_type)

    async def like(
        self, video_id: int, username: str, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]:
        return await self._toggle(OperationType.LIKE, video_id, username, correlation_id)

    async def unlike(
        self, video_id: int, username: str, correlation_id: UUID
    ) -> Result[CatalogEntryView, CatalogFailure]:
        return await self._toggle(OperationType.UNLIKE, video_id, username, correlation_id)

    async def _toggle(
        self,
        operation: OperationType,
        video_id: int,
        username: str,
        correlation_id: UUID,
    ) -> Result[CatalogEntryView, CatalogFailure]:
        entry = await self._catalog.get(video_id)
        if entry is None:
            return self._fail(operation, self._not_found(video_id), correlation_id)

        try:
            if operation is OperationType.LIKE:
                snapshot = await self._engagement.like(video_id, username, correlation_id)
            else:
                snapshot = await self._engagement.unlike(video_id, username, correlation_id)
        except VideoUpError as error:
            return self._fail(operation, self._from_error(error, video_id), correlation_id)

        self._metrics.record_operation(operation, OperationStatus.SUCCESS)
        logger.info(
            "Engagement updated",
            operation=operation.value,
            video_id=video_id,
            username=username,
            likes=snapshot.like_count,
            correlation_id=str(correlation_id),
        )
        return Result.ok(self._view(entry, snapshot.like_count))

    async def liked_by(
        self, video_id: int, correlation_id: UUID
    ) -> Result[list[str], CatalogFailure]:
        if await self._catalog.get(video_id) is None:
            return self._fail(OperationType.READ, self._not_found(video_id), correlation_id)

        try:
            likers = await self._engagement.liked_by(video_id, correlation_id)
        except VideoUpError as error:
            return self._fail(OperationType.READ, self._from_error(error, video_id), correlation_id)

        self._metrics.record_operation(OperationType.READ, OperationStatus.SUCCESS)
        return Result.ok(likers)

    async def search_by_title(self, title: str, correlation_id: UUID) -> list[CatalogEntryView]:
        views = await self._views(await self._catalog.find_by_title(title))
        self._metrics.record_operation(OperationType.SEARCH, OperationStatus.SUCCESS)
        return views

    async def search_by_duration_less_than(
        self, threshold: float, correlation_id: UUID
    ) -> list[CatalogEntryView]:
        views = await self._views(await self._catalog.find_by_duration_less_than(threshold))
        self._metrics.record_operation(OperationType.SEARCH, OperationStatus.SUCCESS)
        return views
