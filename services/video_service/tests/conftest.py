"""Shared fixtures for Video Service tests."""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator

import pytest
from prometheus_client import CollectorRegistry, Counter
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from services.video_service.config import Settings
from services.video_service.implementations.prometheus_catalog_metrics import (
    PrometheusCatalogMetrics,
)
from services.video_service.models_db import Base

from services.video_service.tests._helpers import TEST_BASE_URL


@pytest.fixture
def registry() -> CollectorRegistry:
    """Provide a fresh registry for each test."""
    return CollectorRegistry()


@pytest.fixture
def catalog_metrics(registry: CollectorRegistry) -> PrometheusCatalogMetrics:
    counter = Counter(
        "video_operations_total",
        "Total video catalog operations",
        ["operation", "status"],
        registry=registry,
    )
    return PrometheusCatalogMetrics(counter)


@pytest.fixture
def payload_root(tmp_path: Path) -> Path:
    return tmp_path / "payloads"


@pytest.fixture
def test_settings(tmp_path: Path, payload_root: Path) -> Settings:
    return Settings(
        PAYLOAD_STORE_ROOT_PATH=payload_root,
        PUBLIC_BASE_URL=TEST_BASE_URL,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
    )


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """SQLite engine on a temp file with the catalog schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()
