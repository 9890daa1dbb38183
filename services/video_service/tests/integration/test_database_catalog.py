"""Integration tests for the SQLAlchemy catalog backend on SQLite."""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import AsyncIterable

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from videoup_common.error_enums import CatalogErrorCode, ErrorCode
from videoup_service_libs.error_handling import VideoUpError

from services.video_service.domain_models import CatalogEntry, StoredPayload
from services.video_service.implementations.catalog_repository_db_impl import (
    DatabaseCatalogRepository,
)
from services.video_service.implementations.catalog_service_impl import CatalogServiceImpl
from services.video_service.implementations.engagement_registry_db_impl import (
    DatabaseEngagementRegistry,
)
from services.video_service.implementations.filesystem_payload_store import (
    FileSystemPayloadStore,
)
from services.video_service.implementations.identity_allocator_impl import (
    DatabaseIdentityAllocator,
)
from services.video_service.implementations.prometheus_catalog_metrics import (
    PrometheusCatalogMetrics,
)
from services.video_service.models_db import VideoLike
from services.video_service.tests._helpers import TEST_BASE_URL, CollectingSink, stream_of


@pytest.fixture
def repository(db_engine: AsyncEngine) -> DatabaseCatalogRepository:
    return DatabaseCatalogRepository(db_engine)


@pytest.fixture
def engagement(db_engine: AsyncEngine) -> DatabaseEngagementRegistry:
    return DatabaseEngagementRegistry(db_engine)


@pytest.fixture
async def seeded(repository: DatabaseCatalogRepository) -> DatabaseCatalogRepository:
    await repository.insert(CatalogEntry(id=1, title="Cats", duration_seconds=90))
    await repository.insert(CatalogEntry(id=2, title="Dogs", duration_seconds=30))
    return repository


class _PausingPayloadStore(FileSystemPayloadStore):
    """Holds every save after its bytes are on disk until released."""

    def __init__(self, store_root: Path) -> None:
        super().__init__(store_root)
        self.saved = asyncio.Event()
        self.release = asyncio.Event()

    async def save(
        self,
        video_id: int,
        byte_stream: AsyncIterable[bytes],
        correlation_id: uuid.UUID | None = None,
    ) -> StoredPayload:
        stored = await super().save(video_id, byte_stream, correlation_id)
        self.saved.set()
        await self.release.wait()
        return stored


class TestDatabaseIdentityAllocator:
    async def test_ids_increase(self, db_engine: AsyncEngine) -> None:
        allocator = DatabaseIdentityAllocator(db_engine)

        assert [await allocator.next_id() for _ in range(3)] == [1, 2, 3]

    async def test_ids_survive_allocator_restart(self, db_engine: AsyncEngine) -> None:
        await DatabaseIdentityAllocator(db_engine).next_id()
        await DatabaseIdentityAllocator(db_engine).next_id()

        assert await DatabaseIdentityAllocator(db_engine).next_id() == 3


class TestDatabaseCatalogRepository:
    async def test_insert_and_get(self, seeded: DatabaseCatalogRepository) -> None:
        entry = await seeded.get(1)

        assert entry == CatalogEntry(id=1, title="Cats", duration_seconds=90)
        assert await seeded.get(3) is None

    async def test_duplicate_insert_is_rejected(self, seeded: DatabaseCatalogRepository) -> None:
        with pytest.raises(VideoUpError) as exc_info:
            await seeded.insert(CatalogEntry(id=1, title="Other", duration_seconds=5))

        assert exc_info.value.error_detail.error_code == CatalogErrorCode.DUPLICATE_IDENTITY
        stored = await seeded.get(1)
        assert stored is not None and stored.title == "Cats"

    async def test_queries(self, seeded: DatabaseCatalogRepository) -> None:
        assert [e.id for e in await seeded.all()] == [1, 2]
        assert [e.id for e in await seeded.find_by_title("Dogs")] == [2]
        assert await seeded.find_by_title("dogs") == []
        assert [e.id for e in await seeded.find_by_duration_less_than(90)] == [2]
        assert await seeded.find_by_duration_less_than(30) == []

    async def test_attach_payload_returns_previous_key(
        self, seeded: DatabaseCatalogRepository
    ) -> None:
        first = await seeded.attach_payload(2, "2.first.bin", "video/mp4")
        second = await seeded.attach_payload(2, "2.second.bin", "video/webm")

        assert (first, second) == (None, "2.first.bin")
        refreshed = await seeded.get(2)
        assert refreshed is not None
        assert (refreshed.payload_key, refreshed.content_type) == ("2.second.bin", "video/webm")

    async def test_attach_to_unknown_is_not_found(self, seeded: DatabaseCatalogRepository) -> None:
        with pytest.raises(VideoUpError) as exc_info:
            await seeded.attach_payload(7, "7.x.bin", "video/mp4")

        assert exc_info.value.error_detail.error_code == ErrorCode.RESOURCE_NOT_FOUND


class TestDatabaseEngagementRegistry:
    async def test_like_unlike_cycle(
        self, seeded: DatabaseCatalogRepository, engagement: DatabaseEngagementRegistry
    ) -> None:
        liked = await engagement.like(1, "bob")
        await engagement.like(1, "alice")

        assert liked.liked_by == ("bob",)
        assert await engagement.liked_by(1) == ["alice", "bob"]
        assert await engagement.like_counts([1, 2, 3]) == {1: 2, 2: 0, 3: 0}

        remaining = await engagement.unlike(1, "bob")
        assert remaining.liked_by == ("alice",)
        assert await engagement.like_count(1) == 1
        assert await engagement.like_count(2) == 0

    async def test_duplicate_like_is_rejected_without_extra_row(
        self,
        seeded: DatabaseCatalogRepository,
        engagement: DatabaseEngagementRegistry,
        db_engine: AsyncEngine,
    ) -> None:
        await engagement.like(1, "alice")

        with pytest.raises(VideoUpError) as exc_info:
            await engagement.like(1, "alice")

        assert exc_info.value.error_detail.error_code == CatalogErrorCode.ALREADY_LIKED
        sessionmaker = async_sessionmaker(db_engine, class_=AsyncSession)
        async with sessionmaker() as session:
            rows = (await session.execute(select(VideoLike))).scalars().all()
        assert [(row.video_id, row.username) for row in rows] == [(1, "alice")]

    async def test_concurrent_likes_by_one_user_store_one_row(
        self, seeded: DatabaseCatalogRepository, engagement: DatabaseEngagementRegistry
    ) -> None:
        results = await asyncio.gather(
            *(engagement.like(1, "alice") for _ in range(8)),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, BaseException)]
        rejected = [r for r in results if isinstance(r, VideoUpError)]
        assert len(succeeded) == 1
        assert len(rejected) == 7
        assert all(
            r.error_detail.error_code == CatalogErrorCode.ALREADY_LIKED for r in rejected
        )
        assert await engagement.like_count(1) == 1
        assert await engagement.liked_by(1) == ["alice"]

    async def test_unlike_without_like_is_rejected(
        self, seeded: DatabaseCatalogRepository, engagement: DatabaseEngagementRegistry
    ) -> None:
        with pytest.raises(VideoUpError) as exc_info:
            await engagement.unlike(2, "alice")

        assert exc_info.value.error_detail.error_code == CatalogErrorCode.NOT_LIKED

    async def test_unknown_video_is_not_found(
        self, seeded: DatabaseCatalogRepository, engagement: DatabaseEngagementRegistry
    ) -> None:
        with pytest.raises(VideoUpError) as exc_info:
            await engagement.like(99, "alice")

        assert exc_info.value.error_detail.error_code == ErrorCode.RESOURCE_NOT_FOUND


class TestDatabaseBackedCatalogService:
    @pytest.fixture
    def service(
        self,
        db_engine: AsyncEngine,
        payload_root: Path,
        catalog_metrics: PrometheusCatalogMetrics,
    ) -> CatalogServiceImpl:
        return CatalogServiceImpl(
            identity_allocator=DatabaseIdentityAllocator(db_engine),
            catalog_repository=DatabaseCatalogRepository(db_engine),
            payload_store=FileSystemPayloadStore(payload_root),
            engagement_registry=DatabaseEngagementRegistry(db_engine),
            metrics=catalog_metrics,
            public_base_url=TEST_BASE_URL,
        )

    async def test_full_flow_persists_across_service_instances(
        self,
        service: CatalogServiceImpl,
        db_engine: AsyncEngine,
        payload_root: Path,
        catalog_metrics: PrometheusCatalogMetrics,
    ) -> None:
        correlation_id = uuid.uuid4()
        cats = (await service.create_entry("Cats", 90, correlation_id)).value
        await service.bind_payload(cats.id, "video/mp4", stream_of([b"meow"]), correlation_id)
        await service.like(cats.id, "alice", correlation_id)

        # A second process sharing the database sees the same state
        other = CatalogServiceImpl(
            identity_allocator=DatabaseIdentityAllocator(db_engine),
            catalog_repository=DatabaseCatalogRepository(db_engine),
            payload_store=FileSystemPayloadStore(payload_root),
            engagement_registry=DatabaseEngagementRegistry(db_engine),
            metrics=catalog_metrics,
            public_base_url=TEST_BASE_URL,
        )
        view = (await other.get_entry(cats.id, correlation_id)).value
        sink = CollectingSink()
        content_type = (await other.read_payload(cats.id, sink, correlation_id)).value
        dogs = (await other.create_entry("Dogs", 30, correlation_id)).value

        assert view.likes == 1
        assert view.content_type == "video/mp4"
        assert content_type == "video/mp4"
        assert sink.data == b"meow"
        assert dogs.id == cats.id + 1

    async def test_failed_create_burns_the_id(
        self, service: CatalogServiceImpl, db_engine: AsyncEngine
    ) -> None:
        correlation_id = uuid.uuid4()
        # Occupy the id the allocator hands out next
        await DatabaseCatalogRepository(db_engine).insert(
            CatalogEntry(id=1, title="squatter", duration_seconds=1)
        )

        failed = await service.create_entry("Cats", 90, correlation_id)
        created = await service.create_entry("Dogs", 30, correlation_id)

        assert failed.error.kind == CatalogErrorCode.DUPLICATE_IDENTITY
        assert created.value.id == 2

    async def test_interleaved_binds_from_two_workers_keep_bytes_and_type_paired(
        self,
        service: CatalogServiceImpl,
        db_engine: AsyncEngine,
        payload_root: Path,
        catalog_metrics: PrometheusCatalogMetrics,
    ) -> None:
        correlation_id = uuid.uuid4()
        cats = (await service.create_entry("Cats", 90, correlation_id)).value
        pausing_store = _PausingPayloadStore(payload_root)
        slow_worker = CatalogServiceImpl(
            identity_allocator=DatabaseIdentityAllocator(db_engine),
            catalog_repository=DatabaseCatalogRepository(db_engine),
            payload_store=pausing_store,
            engagement_registry=DatabaseEngagementRegistry(db_engine),
            metrics=catalog_metrics,
            public_base_url=TEST_BASE_URL,
        )

        slow_bind = asyncio.create_task(
            slow_worker.bind_payload(cats.id, "video/mp4", stream_of([b"MP4"]), correlation_id)
        )
        await pausing_store.saved.wait()
        # The other worker binds start to finish while the slow one sits between
        # writing its bytes and recording them in the catalog
        fast_bind = await service.bind_payload(
            cats.id, "video/webm", stream_of([b"WEBM"]), correlation_id
        )
        pausing_store.release.set()
        slow_result = await slow_bind

        assert fast_bind.is_ok and slow_result.is_ok
        for worker in (service, slow_worker):
            sink = CollectingSink()
            content_type = (await worker.read_payload(cats.id, sink, correlation_id)).value
            assert (content_type, sink.data) == ("video/mp4", b"MP4")
        # The replaced webm payload is no longer kept
        assert len(list(payload_root.iterdir())) == 1
