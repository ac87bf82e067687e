"""Request middleware for SecureLink.

  RequestIDMiddleware:
      Assigns a ULID to every request, binds it into the structlog context for the
      duration of the request and echoes it back as ``X-Request-ID``.

  BodySizeLimitMiddleware:
      Enforces MAX_FORM_BODY_BYTES on inbound bodies. The check form carries a
      single URL, so anything larger is rejected with HTTP 413 before the form is
      parsed or any lookup is attempted.
      Two-phase check:
        1. Content-Length fast path: reject on an oversized header value.
        2. Chunked slow path: accumulate with a rolling cap.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from securelink.constants import MAX_FORM_BODY_BYTES
from securelink.utils.logger import clear_request_id, get_logger, set_request_id
from securelink.utils.ulid import generate_ulid

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

_PAYLOAD_TOO_LARGE_BODY: dict = {
    "error": {
        "message": f"Request body too large. Maximum size: {MAX_FORM_BODY_BYTES} bytes",
        "code": "payload_too_large",
    }
}

_INVALID_CONTENT_LENGTH_BODY: dict = {
    "error": {
        "message": "Invalid Content-Length header",
        "code": "bad_request",
    }
}


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with a ULID for log correlation."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = generate_ulid()
        set_request_id(request_id)
        try:
            logger.debug(
                "Request received",
                method=request.method,
                path=request.url.path,
            )
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than MAX_FORM_BODY_BYTES with HTTP 413.

      - Content-Length > limit               → 413 (no body read)
      - Content-Length not an integer        → 400
      - No Content-Length, body > limit      → 413 (rolling cap)
      - No Content-Length, body within limit → accepted, body cached on the request
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        content_length_header = request.headers.get("content-length")

        if content_length_header is not None:
            try:
                declared_size = int(content_length_header)
            except ValueError:
                logger.warning(
                    "Invalid Content-Length header",
                    value=content_length_header,
                    path=request.url.path,
                )
                return JSONResponse(status_code=400, content=_INVALID_CONTENT_LENGTH_BODY)

            if declared_size > MAX_FORM_BODY_BYTES:
                logger.warning(
                    "Request body too large (Content-Length)",
                    declared_size=declared_size,
                    limit=MAX_FORM_BODY_BYTES,
                    path=request.url.path,
                )
                return JSONResponse(status_code=413, content=_PAYLOAD_TOO_LARGE_BODY)

            return await call_next(request)

        if request.method in ("GET", "HEAD", "OPTIONS"):
            return await call_next(request)

        body_chunks: list[bytes] = []
        total_size: int = 0

        async for chunk in request.stream():
            total_size += len(chunk)
            if total_size > MAX_FORM_BODY_BYTES:
                logger.warning(
                    "Request body too large (chunked)",
                    accumulated_size=total_size,
                    limit=MAX_FORM_BODY_BYTES,
                    path=request.url.path,
                )
                return JSONResponse(status_code=413, content=_PAYLOAD_TOO_LARGE_BODY)
            body_chunks.append(chunk)

        # Starlette's Request.body() returns request._body when present, so the
        # form parser downstream reads the cached bytes instead of the spent stream.
        request._body = b"".join(body_chunks)  # type: ignore[attr-defined]

        return await call_next(request)
