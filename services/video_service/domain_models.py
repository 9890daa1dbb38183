"""Domain models for the Video Service catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Union

from pydantic import BaseModel, ConfigDict, Field
from videoup_common.error_enums import CatalogErrorCode, ErrorCode
from videoup_common.status_enums import VideoState


class CatalogEntry(BaseModel):
    """Stored metadata for one video.

    Entries are immutable snapshots; stores replace them wholesale on update so
    a reader never observes a half-applied change.
    """

    id: int = Field(..., gt=0)
    title: str
    duration_seconds: int = Field(..., ge=0)
    content_type: str | None = None
    # Storage key of the bound payload; set together with content_type
    payload_key: str | None = None

    model_config = ConfigDict(frozen=True)


class EngagementSnapshot(BaseModel):
    """Point-in-time view of who likes a video."""

    video_id: int
    liked_by: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def like_count(self) -> int:
        return len(self.liked_by)


class CatalogEntryView(BaseModel):
    """Entry as handed to callers: stored fields plus derived data_url and likes.

    Dumped with ``by_alias=True`` it serializes as the public video JSON:
    ``id, name, duration, contentType, dataUrl, likes``.
    """

    id: int
    title: str = Field(..., serialization_alias="name")
    duration: int
    content_type: str | None = Field(default=None, serialization_alias="contentType")
    data_url: str = Field(..., serialization_alias="dataUrl")
    likes: int = 0

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_entry(cls, entry: CatalogEntry, data_url: str, likes: int) -> CatalogEntryView:
        return cls(
            id=entry.id,
            title=entry.title,
            duration=entry.duration_seconds,
            content_type=entry.content_type,
            data_url=data_url,
            likes=likes,
        )


class VideoStatus(BaseModel):
    """Outcome of a payload bind."""

    state: VideoState

    model_config = ConfigDict(frozen=True)


class StoredPayload(BaseModel):
    """Key and size of a freshly written payload."""

    payload_key: str
    size_bytes: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class PayloadStream:
    """An opened payload: its content type and the chunks to send."""

    content_type: str
    chunks: AsyncIterator[bytes]


@dataclass(frozen=True)
class CatalogFailure:
    """Expected failure of a catalog operation.

    Carried in Result.err so the HTTP layer can pick a status without parsing
    exceptions.
    """

    kind: Union[ErrorCode, CatalogErrorCode]
    message: str
    video_id: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


def payload_locator(base_url: str, video_id: int) -> str:
    """Public URL of a video's binary payload."""
    return f"{base_url.rstrip('/')}/video/{video_id}/data"
