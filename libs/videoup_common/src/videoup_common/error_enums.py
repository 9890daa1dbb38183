"""
videoup_common.error_enums - Centralized error code definitions.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"  # For APIs
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"  # Internal processing failures


class CatalogErrorCode(str, Enum):
    """
    Business logic specific error codes for the video catalog.

    Note: Missing catalog entries use the generic ErrorCode.RESOURCE_NOT_FOUND.
    """

    ALREADY_LIKED = "ALREADY_LIKED"
    NOT_LIKED = "NOT_LIKED"
    DUPLICATE_IDENTITY = "DUPLICATE_IDENTITY"
    STORAGE_FAILURE = "STORAGE_FAILURE"
