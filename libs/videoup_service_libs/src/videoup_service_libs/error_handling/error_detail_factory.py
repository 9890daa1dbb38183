"""Factory for ErrorDetail instances enriched with runtime context."""

from __future__ import annotations

import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Union
from uuid import UUID

from opentelemetry import trace
from videoup_common.error_enums import CatalogErrorCode, ErrorCode
from videoup_common.models.error_models import ErrorDetail

_NO_EXCEPTION_MARKER = "NoneType: None\n"


def create_error_detail_with_context(
    error_code: Union[ErrorCode, CatalogErrorCode],
    message: str,
    service: str,
    operation: str,
    correlation_id: UUID | None = None,
    details: dict[str, Any] | None = None,
    capture_stack: bool = True,
) -> ErrorDetail:
    """
    Build an ErrorDetail, capturing stack and trace context automatically.

    Args:
        error_code: Error code enum value
        message: Human-readable description
        service: Service raising the error
        operation: Operation that failed
        correlation_id: Request correlation ID (generated when omitted)
        details: Additional structured context
        capture_stack: Whether to record a stack trace

    Returns:
        Immutable ErrorDetail
    """
    stack_trace: str | None = None
    if capture_stack:
        stack_trace = traceback.format_exc()
        if stack_trace == _NO_EXCEPTION_MARKER:
            # Not inside an except block: use the caller's stack instead
            stack_trace = "".join(traceback.format_stack()[:-1])

    trace_id: str | None = None
    span_id: str | None = None
    span = trace.get_current_span()
    if span is not None and span.is_recording():
        span_context = span.get_span_context()
        if span_context.is_valid:
            trace_id = format(span_context.trace_id, "032x")
            span_id = format(span_context.span_id, "016x")

    return ErrorDetail(
        error_code=error_code,
        message=message,
        correlation_id=correlation_id or uuid.uuid4(),
        timestamp=datetime.now(timezone.utc),
        service=service,
        operation=operation,
        details=details or {},
        stack_trace=stack_trace,
        trace_id=trace_id,
        span_id=span_id,
    )
