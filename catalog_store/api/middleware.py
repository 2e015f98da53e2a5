"""Request correlation for the catalog HTTP API.

Every request gets a request id, taken from ``X-Request-ID`` when the
client sends a usable one. The id is stored on ``request.state`` for the
error envelope, echoed on the response, and bound into the structlog
context so catalog and storage log lines carry it.
"""

import re
import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids are copied into logs and headers, so keep them short and plain
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(header_value: str | None) -> str:
    """Use the client's request id if well formed, else generate one.

    Args:
        header_value: Raw ``X-Request-ID`` header, if any.

    Returns:
        Request id for this request.
    """
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return str(uuid4())


async def correlate_request(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Bind a request id around one catalog request and log its outcome."""
    request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
    request.state.request_id = request_id

    start_time = time.perf_counter()
    with structlog.contextvars.bound_contextvars(request_id=request_id):
        response = await call_next(request)
        logger.info(
            "Catalog request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )

    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def setup_middleware(app: FastAPI) -> None:
    """Install request correlation on the application.

    Args:
        app: FastAPI application instance.
    """
    app.middleware("http")(correlate_request)
