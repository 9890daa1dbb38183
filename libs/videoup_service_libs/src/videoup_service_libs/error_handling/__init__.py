"""Error handling utilities for VideoUp services."""

from .error_detail_factory import create_error_detail_with_context
from .factories import (
    raise_already_liked,
    raise_authentication_error,
    raise_duplicate_identity,
    raise_not_liked,
    raise_resource_not_found,
    raise_storage_failure,
    raise_unknown_error,
    raise_validation_error,
)
from .videoup_error import VideoUpError

__all__ = [
    "VideoUpError",
    "create_error_detail_with_context",
    "raise_already_liked",
    "raise_authentication_error",
    "raise_duplicate_identity",
    "raise_not_liked",
    "raise_resource_not_found",
    "raise_storage_failure",
    "raise_unknown_error",
    "raise_validation_error",
]
