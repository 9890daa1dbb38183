"""Video catalog routes for Video Service.

Thin HTTP collaborator around CatalogServiceProtocol: it resolves the caller
identity and correlation ID from gateway headers, decodes requests, and maps
failure kinds onto HTTP statuses.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import AsyncIterator

from dishka import FromDishka
from pydantic import ValidationError
from quart import Blueprint, Response, g, jsonify, request
from quart.datastructures import FileStorage
from quart_dishka import inject
from videoup_common.error_enums import CatalogErrorCode, ErrorCode
from videoup_service_libs.logging_utils import bind_request_context, create_service_logger
from werkzeug.exceptions import HTTPException

from services.video_service.config import Settings
from services.video_service.domain_models import CatalogFailure
from services.video_service.models_api import VideoCreateRequestV1
from services.video_service.protocols import CatalogServiceProtocol

logger = create_service_logger("video.api.video")
video_bp = Blueprint("video_routes", __name__, url_prefix="/video")

USER_ID_HEADER = "X-User-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"
UPLOAD_PART_NAME = "data"
DEFAULT_UPLOAD_CONTENT_TYPE = "application/octet-stream"

_HTTP_STATUS_BY_FAILURE = {
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.VALIDATION_ERROR: 400,
    CatalogErrorCode.ALREADY_LIKED: 400,
    CatalogErrorCode.NOT_LIKED: 400,
    CatalogErrorCode.DUPLICATE_IDENTITY: 500,
    CatalogErrorCode.STORAGE_FAILURE: 500,
}


def _resolve_correlation_id() -> uuid.UUID:
    header = request.headers.get(CORRELATION_ID_HEADER)
    if header:
        try:
            return uuid.UUID(header)
        except ValueError:
            logger.debug("Ignoring malformed correlation header", header=header)
    return uuid.uuid4()


def _error_response(
    error_code: str,
    message: str,
    status_code: int,
    **details: object,
) -> tuple[Response, int]:
    body = {
        "error": {
            "error_code": error_code,
            "message": message,
            "correlation_id": str(g.correlation_id),
            **({"details": details} if details else {}),
        }
    }
    return jsonify(body), status_code


def _failure_response(failure: CatalogFailure) -> tuple[Response, int]:
    status_code = _HTTP_STATUS_BY_FAILURE.get(failure.kind, 400)
    return _error_response(failure.kind.value, failure.message, status_code, **failure.details)


def _require_caller() -> str | None:
    """Identity resolved upstream by the gateway; never authenticated here."""
    username = request.headers.get(USER_ID_HEADER, "").strip()
    return username or None


async def _iter_upload(upload: FileStorage, chunk_size: int) -> AsyncIterator[bytes]:
    while True:
        chunk = await asyncio.to_thread(upload.stream.read, chunk_size)
        if not chunk:
            break
        yield chunk


async def _iter_request_body() -> AsyncIterator[bytes]:
    async for chunk in request.body:
        yield chunk


@video_bp.before_request
async def bind_correlation() -> None:
    g.correlation_id = _resolve_correlation_id()
    bind_request_context(str(g.correlation_id), path=request.path)


@video_bp.after_request
async def attach_correlation(response: Response) -> Response:
    correlation_id = getattr(g, "correlation_id", None)
    if correlation_id is not None:
        response.headers[CORRELATION_ID_HEADER] = str(correlation_id)
    return response


@video_bp.errorhandler(Exception)
async def handle_unexpected_error(error: Exception) -> Response | tuple[Response, int]:
    if isinstance(error, HTTPException):
        return error  # type: ignore[return-value]

    logger.error(
        f"Unexpected error in video routes: {error}",
        correlation_id=str(getattr(g, "correlation_id", "")),
        exc_info=True,
    )
    return _error_response(
        ErrorCode.UNKNOWN_ERROR.value,
        "An unexpected error occurred",
        500,
    )


@video_bp.route("", methods=["GET"])
@inject
async def list_videos(catalog: FromDishka[CatalogServiceProtocol]) -> Response:
    """Return every catalog entry."""
    views = await catalog.list_entries(g.correlation_id)
    return jsonify([view.model_dump(mode="json", by_alias=True) for view in views])


@video_bp.route("", methods=["POST"])
@inject
async def add_video(
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """Create a catalog entry from JSON metadata; the server assigns the id."""
    payload = await request.get_json(silent=True)
    if payload is None:
        return _error_response(
            ErrorCode.VALIDATION_ERROR.value,
            "Request body must be a JSON object",
            400,
        )

    try:
        create_request = VideoCreateRequestV1.model_validate(payload)
    except ValidationError as e:
        logger.warning("Rejected invalid video metadata", errors=e.error_count())
        return _error_response(
            ErrorCode.VALIDATION_ERROR.value,
            "Invalid video metadata",
            400,
            errors=e.errors(include_url=False, include_context=False),
        )

    result = await catalog.create_entry(
        create_request.title,
        create_request.duration,
        g.correlation_id,
    )
    if result.is_err:
        return _failure_response(result.error)
    return jsonify(result.value.model_dump(mode="json", by_alias=True))


@video_bp.route("/<int:video_id>", methods=["GET"])
@inject
async def get_video(
    video_id: int,
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """Return one entry or 404."""
    result = await catalog.get_entry(video_id, g.correlation_id)
    if result.is_err:
        return _failure_response(result.error)
    return jsonify(result.value.model_dump(mode="json", by_alias=True))


@video_bp.route("/<int:video_id>/data", methods=["POST"])
@inject
async def set_video_data(
    video_id: int,
    catalog: FromDishka[CatalogServiceProtocol],
    settings: FromDishka[Settings],
) -> Response | tuple[Response, int]:
    """Bind a binary payload to an existing entry.

    Accepts a multipart upload with a ``data`` part or a raw request body.
    """
    if request.mimetype == "multipart/form-data":
        files = await request.files
        upload = files.get(UPLOAD_PART_NAME)
        if upload is None:
            return _error_response(
                ErrorCode.MISSING_REQUIRED_FIELD.value,
                f"Multipart request is missing the '{UPLOAD_PART_NAME}' part",
                400,
            )
        content_type = upload.content_type or DEFAULT_UPLOAD_CONTENT_TYPE
        byte_stream = _iter_upload(upload, settings.PAYLOAD_CHUNK_SIZE)
    else:
        if request.content_length == 0:
            return _error_response(
                ErrorCode.VALIDATION_ERROR.value,
                "No data provided in request body",
                400,
            )
        content_type = request.headers.get("Content-Type") or DEFAULT_UPLOAD_CONTENT_TYPE
        byte_stream = _iter_request_body()

    result = await catalog.bind_payload(video_id, content_type, byte_stream, g.correlation_id)
    if result.is_err:
        return _failure_response(result.error)
    return jsonify(result.value.model_dump(mode="json", by_alias=True))


@video_bp.route("/<int:video_id>/data", methods=["GET"])
@inject
async def get_video_data(
    video_id: int,
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """Return the stored payload with its content type, or 404."""
    result = await catalog.open_payload(video_id, g.correlation_id)
    if result.is_err:
        return _failure_response(result.error)
    # Sent chunk by chunk as the file is read
    stream = result.value
    return Response(response=stream.chunks, content_type=stream.content_type)


@video_bp.route("/<int:video_id>/like", methods=["POST"])
@inject
async def like_video(
    video_id: int,
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """Like a video once per user; a repeat like is a 400."""
    username = _require_caller()
    if username is None:
        return _error_response(
            ErrorCode.AUTHENTICATION_ERROR.value,
            f"Missing caller identity header {USER_ID_HEADER}",
            401,
        )

    result = await catalog.like(video_id, username, g.correlation_id)
    if result.is_err:
        return _failure_response(result.error)
    return jsonify(result.value.model_dump(mode="json", by_alias=True))


@video_bp.route("/<int:video_id>/unlike", methods=["POST"])
@inject
async def unlike_video(
    video_id: int,
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """Withdraw an earlier like; unliking without a like is a 400."""
    username = _require_caller()
    if username is None:
        return _error_response(
            ErrorCode.AUTHENTICATION_ERROR.value,
            f"Missing caller identity header {USER_ID_HEADER}",
            401,
        )

    result = await catalog.unlike(video_id, username, g.correlation_id)
    if result.is_err:
        return _failure_response(result.error)
    return jsonify(result.value.model_dump(mode="json", by_alias=True))


@video_bp.route("/<int:video_id>/likedby", methods=["GET"])
@inject
async def video_liked_by(
    video_id: int,
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """List the usernames that currently like a video."""
    result = await catalog.liked_by(video_id, g.correlation_id)
    if result.is_err:
        return _failure_response(result.error)
    return jsonify(result.value)


@video_bp.route("/search/findByName", methods=["GET"])
@inject
async def find_by_name(
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """Entries whose title matches exactly; empty list when none do."""
    title = request.args.get("title")
    if title is None:
        return _error_response(
            ErrorCode.MISSING_REQUIRED_FIELD.value,
            "Query parameter 'title' is required",
            400,
        )

    views = await catalog.search_by_title(title, g.correlation_id)
    return jsonify([view.model_dump(mode="json", by_alias=True) for view in views])


@video_bp.route("/search/findByDurationLessThan", methods=["GET"])
@inject
async def find_by_duration_less_than(
    catalog: FromDishka[CatalogServiceProtocol],
) -> Response | tuple[Response, int]:
    """Entries strictly shorter than ``duration`` seconds."""
    threshold = request.args.get("duration", type=float)
    if threshold is None:
        return _error_response(
            ErrorCode.VALIDATION_ERROR.value,
            "Query parameter 'duration' must be a number",
            400,
        )

    views = await catalog.search_by_duration_less_than(threshold, g.correlation_id)
    return jsonify([view.model_dump(mode="json", by_alias=True) for view in views])
