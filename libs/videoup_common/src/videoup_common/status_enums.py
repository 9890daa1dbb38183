"""Status enums for payload readiness and operation outcomes.

VideoState: Payload lifecycle reported back to uploading clients.
OperationStatus: Operation outcomes recorded as metric labels.
"""

from __future__ import annotations

from enum import Enum


class VideoState(str, Enum):
    """Payload state returned after a bind.

    PROCESSING is part of the client contract but never produced: payloads are
    stored as-is, so a successful bind is immediately READY.
    """

    READY = "READY"
    PROCESSING = "PROCESSING"


class OperationStatus(str, Enum):
    """Operation outcomes for metrics collection."""

    SUCCESS = "success"
    FAILED = "failed"
    ERROR = "error"
    NOT_FOUND = "not_found"
