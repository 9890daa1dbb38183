"""Unit tests for the in-memory catalog repository."""

from __future__ import annotations

import pytest
from videoup_common.error_enums import CatalogErrorCode, ErrorCode
from videoup_service_libs.error_handling import VideoUpError

from services.video_service.domain_models import CatalogEntry
from services.video_service.implementations.catalog_repository_impl import (
    InMemoryCatalogRepository,
)


@pytest.fixture
async def repository() -> InMemoryCatalogRepository:
    repo = InMemoryCatalogRepository()
    await repo.insert(CatalogEntry(id=2, title="Cats", duration_seconds=90))
    await repo.insert(CatalogEntry(id=1, title="Dogs", duration_seconds=30))
    await repo.insert(CatalogEntry(id=3, title="Cats", duration_seconds=300))
    return repo


class TestInMemoryCatalogRepository:
    async def test_get_returns_inserted_entry(self, repository: InMemoryCatalogRepository) -> None:
        entry = await repository.get(1)

        assert entry is not None
        assert entry.title == "Dogs"
        assert entry.content_type is None

    async def test_get_unknown_returns_none(self, repository: InMemoryCatalogRepository) -> None:
        assert await repository.get(99) is None

    async def test_all_is_ordered_by_id(self, repository: InMemoryCatalogRepository) -> None:
        entries = await repository.all()

        assert [entry.id for entry in entries] == [1, 2, 3]

    async def test_insert_existing_id_is_rejected(
        self, repository: InMemoryCatalogRepository
    ) -> None:
        with pytest.raises(VideoUpError) as exc_info:
            await repository.insert(CatalogEntry(id=1, title="Other", duration_seconds=1))

        assert exc_info.value.error_detail.error_code == CatalogErrorCode.DUPLICATE_IDENTITY
        stored = await repository.get(1)
        assert stored is not None and stored.title == "Dogs"

    async def test_find_by_title_is_exact(self, repository: InMemoryCatalogRepository) -> None:
        assert [e.id for e in await repository.find_by_title("Cats")] == [2, 3]
        assert await repository.find_by_title("cats") == []
        assert await repository.find_by_title("Cat") == []

    async def test_find_by_duration_is_strict(self, repository: InMemoryCatalogRepository) -> None:
        assert [e.id for e in await repository.find_by_duration_less_than(90)] == [1]
        assert [e.id for e in await repository.find_by_duration_less_than(90.5)] == [1, 2]
        assert await repository.find_by_duration_less_than(0) == []

    async def test_attach_payload_sets_key_and_type_together(
        self, repository: InMemoryCatalogRepository
    ) -> None:
        before = await repository.get(2)

        previous = await repository.attach_payload(2, "2.first.bin", "video/mp4")
        replaced = await repository.attach_payload(2, "2.second.bin", "video/webm")

        assert before is not None and before.payload_key is None
        assert (previous, replaced) == (None, "2.first.bin")
        after = await repository.get(2)
        assert after is not None
        assert (after.payload_key, after.content_type) == ("2.second.bin", "video/webm")

    async def test_attach_to_unknown_entry_is_not_found(
        self, repository: InMemoryCatalogRepository
    ) -> None:
        with pytest.raises(VideoUpError) as exc_info:
            await repository.attach_payload(99, "99.x.bin", "video/mp4")

        assert exc_info.value.error_detail.error_code == ErrorCode.RESOURCE_NOT_FOUND
