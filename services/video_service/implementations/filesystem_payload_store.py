"""Filesystem-based payload storage implementation."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any, AsyncIterable, AsyncIterator
from uuid import UUID

import aiofiles
import aiofiles.os
from videoup_service_libs.error_handling import (
    raise_resource_not_found,
    raise_storage_failure,
    raise_validation_error,
)
from videoup_service_libs.logging_utils import create_service_logger

from services.video_service.domain_models import StoredPayload
from services.video_service.protocols import PayloadSinkProtocol, PayloadStoreProtocol

logger = create_service_logger("video.store.filesystem")

DEFAULT_CHUNK_SIZE = 64 * 1024


class FileSystemPayloadStore(PayloadStoreProtocol):
    """Stores each upload as ``<root>/<video_id>.<random hex>.bin``.

    Every save gets a fresh key, so a file is never overwritten in place and
    a key only resolves to bytes once the catalog row that names it has been
    written. Files left under the root by an earlier process are never
    reachable through a new catalog.

    Writes land in a hidden temporary file that is renamed to the final name
    only once the whole stream has been written, so a key never names a
    partial payload.
    """

    def __init__(self, store_root: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """
        Initialize filesystem payload store.

        Args:
            store_root: Root directory for payload storage
            chunk_size: Read size used when streaming payloads out
        """
        self.store_root = store_root
        self.chunk_size = chunk_size

    def _payload_path(self, payload_key: str, correlation_id: UUID | None = None) -> Path:
        # Keys are plain file names minted by save()
        if (
            not payload_key
            or payload_key.startswith(".")
            or Path(payload_key).name != payload_key
        ):
            raise_validation_error(
                service="video_service",
                operation="resolve_payload",
                field="payload_key",
                message="Payload key is not a plain file name",
                correlation_id=correlation_id,
                value=payload_key,
            )
        return self.store_root / payload_key

    async def save(
        self,
        video_id: int,
        byte_stream: AsyncIterable[bytes],
        correlation_id: UUID | None = None,
    ) -> StoredPayload:
        token = uuid.uuid4().hex
        payload_key = f"{video_id}.{token}.bin"
        final_path = self.store_root / payload_key
        temp_path = self.store_root / f".{video_id}.{token}.partial"
        written = 0
        committed = False

        try:
            await aiofiles.os.makedirs(self.store_root, exist_ok=True)
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in byte_stream:
                    await f.write(chunk)
                    written += len(chunk)
                await f.flush()

            await aiofiles.os.replace(temp_path, final_path)
            committed = True
        except Exception as e:
            logger.error(
                "Failed to store payload",
                video_id=video_id,
                bytes_received=written,
                error=str(e),
                correlation_id=str(correlation_id) if correlation_id else None,
                exc_info=True,
            )
            raise_storage_failure(
                service="video_service",
                operation="save_payload",
                message=f"Failed to store payload: {e}",
                correlation_id=correlation_id,
                video_id=video_id,
            )
        finally:
            if not committed:
                await self._discard(temp_path)

        logger.info(
            "Stored payload",
            video_id=video_id,
            payload_key=payload_key,
            size_bytes=written,
            path=str(final_path.resolve()),
            correlation_id=str(correlation_id) if correlation_id else None,
        )
        return StoredPayload(payload_key=payload_key, size_bytes=written)

    async def has(self, payload_key: str) -> bool:
        return bool(await aiofiles.os.path.isfile(str(self._payload_path(payload_key))))

    async def open_stream(
        self,
        payload_key: str,
        correlation_id: UUID | None = None,
    ) -> AsyncIterator[bytes]:
        file_path = self._payload_path(payload_key, correlation_id)

        # Opened before returning: the handle keeps the bytes readable even if
        # a later bind deletes the file while the stream is being consumed
        try:
            handle = await aiofiles.open(file_path, "rb")
        except FileNotFoundError:
            logger.warning(
                "Payload not found",
                payload_key=payload_key,
                correlation_id=str(correlation_id) if correlation_id else None,
            )
            raise_resource_not_found(
                service="video_service",
                operation="open_payload",
                resource_type="video_payload",
                resource_id=payload_key,
                correlation_id=correlation_id,
            )
        except OSError as e:
            self._log_read_failure(payload_key, e, correlation_id)
            raise_storage_failure(
                service="video_service",
                operation="open_payload",
                message=f"Failed to read payload: {e}",
                correlation_id=correlation_id,
                payload_key=payload_key,
            )

        return self._read_chunks(handle, payload_key, correlation_id)

    async def _read_chunks(
        self,
        handle: Any,
        payload_key: str,
        correlation_id: UUID | None,
    ) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await handle.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk
        except OSError as e:
            self._log_read_failure(payload_key, e, correlation_id)
            raise_storage_failure(
                service="video_service",
                operation="read_payload",
                message=f"Failed to read payload: {e}",
                correlation_id=correlation_id,
                payload_key=payload_key,
            )
        finally:
            await handle.close()

    async def copy_to(
        self,
        payload_key: str,
        sink: PayloadSinkProtocol,
        correlation_id: UUID | None = None,
    ) -> int:
        copied = 0
        async for chunk in await self.open_stream(payload_key, correlation_id):
            await sink.write(chunk)
            copied += len(chunk)
        return copied

    async def delete(self, payload_key: str, correlation_id: UUID | None = None) -> bool:
        file_path = self._payload_path(payload_key, correlation_id)
        try:
            await aiofiles.os.remove(file_path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(
                "Failed to delete payload",
                payload_key=payload_key,
                error=str(e),
                correlation_id=str(correlation_id) if correlation_id else None,
                exc_info=True,
            )
            raise_storage_failure(
                service="video_service",
                operation="delete_payload",
                message=f"Failed to delete payload: {e}",
                correlation_id=correlation_id,
                payload_key=payload_key,
            )

        logger.info(
            "Deleted payload",
            payload_key=payload_key,
            correlation_id=str(correlation_id) if correlation_id else None,
        )
        return True

    def _log_read_failure(
        self, payload_key: str, error: OSError, correlation_id: UUID | None
    ) -> None:
        logger.error(
            "Failed to read payload",
            payload_key=payload_key,
            error=str(error),
            correlation_id=str(correlation_id) if correlation_id else None,
            exc_info=True,
        )

    async def _discard(self, temp_path: Path) -> None:
        if await aiofiles.os.path.exists(str(temp_path)):
            await aiofiles.os.remove(temp_path)
