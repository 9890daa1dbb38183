"""API request models for Video Service."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class VideoCreateRequestV1(BaseModel):
    """Metadata supplied by a client when adding a video to the catalog.

    Older clients send the title as ``name``; both spellings are accepted.
    """

    title: str = Field(
        ...,
        validation_alias=AliasChoices("title", "name"),
        min_length=1,
        description="Video title, matched exactly by title search.",
    )
    duration: int = Field(
        ...,
        ge=0,
        description="Video duration in seconds.",
    )
