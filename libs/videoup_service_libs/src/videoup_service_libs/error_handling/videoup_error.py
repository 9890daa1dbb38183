"""
VideoUpError - the single exception type raised by VideoUp components.

The exception wraps an immutable ErrorDetail so callers can branch on
error_code and serialize the full context without parsing messages.
"""

from __future__ import annotations

from typing import Any

from opentelemetry.trace import Status, StatusCode, get_current_span
from videoup_common.models.error_models import ErrorDetail


class VideoUpError(Exception):
    """Exception carrying a structured ErrorDetail."""

    def __init__(self, error_detail: ErrorDetail) -> None:
        super().__init__(error_detail.message)
        self.error_detail = error_detail
        self._record_to_span()

    def _record_to_span(self) -> None:
        """Attach the error to the active span when one is recording."""
        span = get_current_span()
        if span is None or not span.is_recording():
            return

        span.record_exception(self)
        span.set_status(Status(StatusCode.ERROR, self.error_detail.message))
        span.set_attribute("error.code", self.error_code)
        span.set_attribute("error.service", self.service)
        span.set_attribute("error.operation", self.operation)
        for key, value in self.error_detail.details.items():
            if isinstance(value, (str, bool, int, float)):
                span.set_attribute(f"error.details.{key}", value)

    @property
    def correlation_id(self) -> str:
        return str(self.error_detail.correlation_id)

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging or API error bodies."""
        return {
            "error": str(self),
            "error_detail": self.error_detail.model_dump(mode="json"),
        }

    def add_detail(self, key: str, value: Any) -> VideoUpError:
        """Return a new error with an extra detail entry; self is unchanged."""
        details = {**self.error_detail.details, key: value}
        return VideoUpError(self.error_detail.model_copy(update={"details": details}))

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.error_detail.message}"

    def __repr__(self) -> str:
        return (
            f"VideoUpError(error_code={self.error_code!r}, "
            f"service={self.service!r}, operation={self.operation!r}, "
            f"correlation_id={self.correlation_id!r})"
        )
