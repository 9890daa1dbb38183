"""Database-backed catalog repository implementation for Video Service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from videoup_service_libs.error_handling import (
    raise_duplicate_identity,
    raise_resource_not_found,
)
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.domain_models import CatalogEntry
from services.video_service.models_db import CatalogEntryRecord
from services.video_service.protocols import CatalogRepositoryProtocol

logger = create_service_logger("video.repository.db")


def _to_domain(record: CatalogEntryRecord) -> CatalogEntry:
    return CatalogEntry(
        id=record.id,
        title=record.title,
        duration_seconds=record.duration_seconds,
        content_type=record.content_type,
        payload_key=record.payload_key,
    )


class DatabaseCatalogRepository(CatalogRepositoryProtocol):
    """Repository implementation for persisted catalog metadata."""

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize the repository with a database engine."""
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Initialized DatabaseCatalogRepository")

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

    async def insert(self, entry: CatalogEntry, correlation_id: UUID | None = None) -> CatalogEntry:
        try:
            async with self._get_session() as session:
                session.add(
                    CatalogEntryRecord(
                        id=entry.id,
                        title=entry.title,
                        duration_seconds=entry.duration_seconds,
                        content_type=entry.content_type,
                        payload_key=entry.payload_key,
                    )
                )
        except IntegrityError:
            logger.error(
                "Catalog entry id already stored",
                video_id=entry.id,
                correlation_id=str(correlation_id) if correlation_id else None,
            )
            raise_duplicate_identity(
                service="video_service",
                operation="insert",
                video_id=entry.id,
                correlation_id=correlation_id,
            )

        logger.info("Stored catalog entry", video_id=entry.id)
        return entry

    async def get(self, video_id: int) -> CatalogEntry | None:
        async with self._get_session() as session:
            record = await session.get(CatalogEntryRecord, video_id)
            return _to_domain(record) if record is not None else None

    async def all(self) -> list[CatalogEntry]:
        async with self._get_session() as session:
            result = await session.execute(select(CatalogEntryRecord).order_by(CatalogEntryRecord.id))
            return [_to_domain(record) for record in result.scalars()]

    async def find_by_title(self, title: str) -> list[CatalogEntry]:
        stmt = (
            select(CatalogEntryRecord)
            .where(CatalogEntryRecord.title == title)
            .order_by(CatalogEntryRecord.id)
        )
        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [_to_domain(record) for record in result.scalars()]

    async def find_by_duration_less_than(self, threshold: float) -> list[CatalogEntry]:
        stmt = (
            select(CatalogEntryRecord)
            .where(CatalogEntryRecord.duration_seconds < threshold)
            .order_by(CatalogEntryRecord.id)
        )
        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [_to_domain(record) for record in result.scalars()]

    async def attach_payload(
        self,
        video_id: int,
        payload_key: str,
        content_type: str,
        correlation_id: UUID | None = None,
    ) -> str | None:
        async with self._get_session() as session:
            # Row lock so concurrent binds hand back each other's key in order
            result = await session.execute(
                select(CatalogEntryRecord)
                .where(CatalogEntryRecord.id == video_id)
                .with_for_update()
            )
            record = result.scalar_one_or_none()
            if record is None:
                raise_resource_not_found(
                    service="video_service",
                    operation="attach_payload",
                    resource_type="video",
                    resource_id=str(video_id),
                    correlation_id=correlation_id,
                )
            previous_key = record.payload_key
            record.payload_key = payload_key
            record.content_type = content_type

        logger.info(
            "Attached payload to catalog entry",
            video_id=video_id,
            payload_key=payload_key,
            correlation_id=str(correlation_id) if correlation_id else None,
        )
        return previous_key
