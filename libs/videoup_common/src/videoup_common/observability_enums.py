"""
videoup_common.observability_enums - Enums for metrics, monitoring, and observability.
"""

from __future__ import annotations

from enum import Enum


class OperationType(str, Enum):
    """Types of operations for metrics collection."""

    CREATE = "create"
    READ = "read"
    LIST = "list"
    SEARCH = "search"
    UPLOAD = "upload"
    DOWNLOAD = "download"
    LIKE = "like"
    UNLIKE = "unlike"
