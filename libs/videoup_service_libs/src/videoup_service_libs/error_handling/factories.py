"""
Error factory functions.

Each factory builds an ErrorDetail for its error code and raises VideoUpError.
All of them return NoReturn so type checkers treat the call as terminal.
"""

from __future__ import annotations

from typing import Any, NoReturn
from uuid import UUID

from videoup_common.error_enums import CatalogErrorCode, ErrorCode

from .error_detail_factory import create_error_detail_with_context
from .videoup_error import VideoUpError

# =============================================================================
# Generic error factories
# =============================================================================


def raise_unknown_error(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID | None = None,
    **additional_context: Any,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=ErrorCode.UNKNOWN_ERROR,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=additional_context,
    )
    raise VideoUpError(error_detail)


def raise_validation_error(
    service: str,
    operation: str,
    field: str,
    message: str,
    correlation_id: UUID | None = None,
    value: Any = None,
    **additional_context: Any,
) -> NoReturn:
    details: dict[str, Any] = {"field": field, **additional_context}
    if value is not None:
        details["value"] = value

    error_detail = create_error_detail_with_context(
        error_code=ErrorCode.VALIDATION_ERROR,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=details,
    )
    raise VideoUpError(error_detail)


def raise_resource_not_found(
    service: str,
    operation: str,
    resource_type: str,
    resource_id: str,
    correlation_id: UUID | None = None,
    **additional_context: Any,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=ErrorCode.RESOURCE_NOT_FOUND,
        message=f"{resource_type} with ID '{resource_id}' not found",
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details={"resource_type": resource_type, "resource_id": resource_id, **additional_context},
    )
    raise VideoUpError(error_detail)


def raise_authentication_error(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID | None = None,
    **additional_context: Any,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=ErrorCode.AUTHENTICATION_ERROR,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=additional_context,
        capture_stack=False,
    )
    raise VideoUpError(error_detail)


# =============================================================================
# Catalog-specific error factories
# =============================================================================


def raise_already_liked(
    service: str,
    operation: str,
    video_id: int,
    username: str,
    correlation_id: UUID | None = None,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=CatalogErrorCode.ALREADY_LIKED,
        message=f"User '{username}' has already liked video {video_id}",
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details={"video_id": video_id, "username": username},
        capture_stack=False,
    )
    raise VideoUpError(error_detail)


def raise_not_liked(
    service: str,
    operation: str,
    video_id: int,
    username: str,
    correlation_id: UUID | None = None,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=CatalogErrorCode.NOT_LIKED,
        message=f"User '{username}' has not liked video {video_id}",
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details={"video_id": video_id, "username": username},
        capture_stack=False,
    )
    raise VideoUpError(error_detail)


def raise_duplicate_identity(
    service: str,
    operation: str,
    video_id: int,
    correlation_id: UUID | None = None,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=CatalogErrorCode.DUPLICATE_IDENTITY,
        message=f"Catalog entry with ID {video_id} already exists",
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details={"video_id": video_id},
    )
    raise VideoUpError(error_detail)


def raise_storage_failure(
    service: str,
    operation: str,
    message: str,
    correlation_id: UUID | None = None,
    **additional_context: Any,
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=CatalogErrorCode.STORAGE_FAILURE,
        message=message,
        service=service,
        operation=operation,
        correlation_id=correlation_id,
        details=additional_context,
    )
    raise VideoUpError(error_detail)
