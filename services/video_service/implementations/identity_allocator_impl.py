"""Catalog id allocators."""

from __future__ import annotations

import threading

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.models_db import CatalogIdentity
from services.video_service.protocols import IdentityAllocatorProtocol

logger = create_service_logger("video.identity")


class InMemoryIdentityAllocator(IdentityAllocatorProtocol):
    """Process-local monotonically increasing counter."""

    def __init__(self, start_after: int = 0) -> None:
        if start_after < 0:
            raise ValueError(f"start_after must be >= 0, got {start_after}")
        self._last_id = start_after
        # threading lock: the counter may be shared with worker threads
        self._lock = threading.Lock()

    async def next_id(self) -> int:
        with self._lock:
            self._last_id += 1
            return self._last_id


class DatabaseIdentityAllocator(IdentityAllocatorProtocol):
    """Allocates ids from an autoincrement ledger table.

    Each allocation commits in its own transaction, so the id is burned even
    if the caller's subsequent insert fails.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def next_id(self) -> int:
        async with self._sessionmaker() as session:
            async with session.begin():
                identity = CatalogIdentity()
                session.add(identity)
                await session.flush()
                allocated = identity.id

        logger.debug("Allocated catalog id", video_id=allocated)
        return allocated
