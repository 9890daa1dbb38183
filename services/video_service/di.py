"""
Video Service dependency injection configuration.

The catalog backend decides which provider supplies the identity allocator,
catalog repository and engagement registry; everything else is shared.
"""

from __future__ import annotations

from typing import AsyncIterator

from dishka import Provider, Scope, provide
from prometheus_client import CollectorRegistry, Counter
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from videoup_common.config_enums import CatalogBackend

from services.video_service.config import Settings, settings
from services.video_service.implementations.catalog_repository_db_impl import (
    DatabaseCatalogRepository,
)
from services.video_service.implementations.catalog_repository_impl import (
    InMemoryCatalogRepository,
)
from services.video_service.implementations.catalog_service_impl import CatalogServiceImpl
from services.video_service.implementations.engagement_registry_db_impl import (
    DatabaseEngagementRegistry,
)
from services.video_service.implementations.engagement_registry_impl import (
    InMemoryEngagementRegistry,
)
from services.video_service.implementations.filesystem_payload_store import (
    FileSystemPayloadStore,
)
from services.video_service.implementations.identity_allocator_impl import (
    DatabaseIdentityAllocator,
    InMemoryIdentityAllocator,
)
from services.video_service.implementations.prometheus_catalog_metrics import (
    PrometheusCatalogMetrics,
)
from services.video_service.protocols import (
    CatalogMetricsProtocol,
    CatalogRepositoryProtocol,
    CatalogServiceProtocol,
    EngagementRegistryProtocol,
    IdentityAllocatorProtocol,
    PayloadStoreProtocol,
)


class VideoServiceProvider(Provider):
    """DI provider for backend-independent Video Service dependencies."""

    def __init__(self, service_settings: Settings | None = None) -> None:
        super().__init__()
        self._settings = service_settings or settings

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide service settings."""
        return self._settings

    @provide(scope=Scope.APP)
    def provide_collector_registry(self) -> CollectorRegistry:
        """Provide Prometheus collector registry."""
        return CollectorRegistry()

    @provide(scope=Scope.APP)
    def provide_catalog_metrics(
        self,
        registry: CollectorRegistry,
    ) -> CatalogMetricsProtocol:
        """Provide catalog metrics implementation."""
        video_operations = Counter(
            "video_operations_total",
            "Total video catalog operations",
            ["operation", "status"],
            registry=registry,
        )
        return PrometheusCatalogMetrics(video_operations)

    @provide(scope=Scope.APP)
    def provide_payload_store(self, settings: Settings) -> PayloadStoreProtocol:
        """Provide filesystem-backed payload store."""
        return FileSystemPayloadStore(
            settings.PAYLOAD_STORE_ROOT_PATH,
            chunk_size=settings.PAYLOAD_CHUNK_SIZE,
        )

    @provide(scope=Scope.APP)
    def provide_catalog_service(
        self,
        settings: Settings,
        identity_allocator: IdentityAllocatorProtocol,
        catalog_repository: CatalogRepositoryProtocol,
        payload_store: PayloadStoreProtocol,
        engagement_registry: EngagementRegistryProtocol,
        metrics: CatalogMetricsProtocol,
    ) -> CatalogServiceProtocol:
        """Provide the catalog orchestrator; one instance per process."""
        return CatalogServiceImpl(
            identity_allocator=identity_allocator,
            catalog_repository=catalog_repository,
            payload_store=payload_store,
            engagement_registry=engagement_registry,
            metrics=metrics,
            public_base_url=settings.PUBLIC_BASE_URL,
        )


class InMemoryCatalogProvider(Provider):
    """Process-local catalog state. Only valid with a single worker."""

    @provide(scope=Scope.APP)
    def provide_identity_allocator(self) -> IdentityAllocatorProtocol:
        return InMemoryIdentityAllocator()

    @provide(scope=Scope.APP)
    def provide_catalog_repository(self) -> CatalogRepositoryProtocol:
        return InMemoryCatalogRepository()

    @provide(scope=Scope.APP)
    def provide_engagement_registry(self) -> EngagementRegistryProtocol:
        return InMemoryEngagementRegistry()


class DatabaseCatalogProvider(Provider):
    """SQLAlchemy-backed catalog state shared by every worker."""

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide async database engine for Video Service."""
        engine = create_async_engine(
            settings.DATABASE_URL,
            echo=False,
            pool_pre_ping=settings.DATABASE_POOL_PRE_PING,
        )
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def provide_identity_allocator(self, engine: AsyncEngine) -> IdentityAllocatorProtocol:
        return DatabaseIdentityAllocator(engine)

    @provide(scope=Scope.APP)
    def provide_catalog_repository(self, engine: AsyncEngine) -> CatalogRepositoryProtocol:
        return DatabaseCatalogRepository(engine)

    @provide(scope=Scope.APP)
    def provide_engagement_registry(self, engine: AsyncEngine) -> EngagementRegistryProtocol:
        return DatabaseEngagementRegistry(engine)


def catalog_provider_for(backend: CatalogBackend) -> Provider:
    """Select the catalog state provider for the configured backend."""
    if backend is CatalogBackend.DATABASE:
        return DatabaseCatalogProvider()
    return InMemoryCatalogProvider()
