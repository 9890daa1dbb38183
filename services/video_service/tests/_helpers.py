"""Test helpers for payload streaming."""

from __future__ import annotations

from typing import AsyncIterable, Iterable

TEST_BASE_URL = "http://videos.test"


async def stream_of(chunks: Iterable[bytes]) -> AsyncIterable[bytes]:
    """Turn byte chunks into the async stream the payload store consumes."""
    for chunk in chunks:
        yield chunk


class CollectingSink:
    """Payload sink that keeps everything written to it."""

    def __init__(self) -> None:
        self.chunks: list[bytes] = []

    async def write(self, chunk: bytes) -> None:
        self.chunks.append(chunk)

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)
