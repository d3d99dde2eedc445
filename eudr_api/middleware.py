"""
Request logging and error shaping.

RequestLoggingMiddleware logs one line per request and response and tags
every response with X-Request-ID and X-Processing-Time-MS.

Validation failures are answered with 400 (not FastAPI's default 422):
the dashboard front end treats 400 as "fix the form".
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and timing for every request."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.monotonic()
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id

        logger.info(
            "Request: method=%s path=%s request_id=%s",
            request.method, request.url.path, request_id,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = int((time.monotonic() - start_time) * 1000)
            logger.error(
                "Request failed: error=%s processing_time_ms=%d request_id=%s",
                exc, elapsed_ms, request_id,
            )
            raise

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time-MS"] = str(elapsed_ms)

        logger.info(
            "Response: status=%d processing_time_ms=%d request_id=%s",
            response.status_code, elapsed_ms, request_id,
        )
        return response


def _invalid_input(request: Request, errors: list) -> JSONResponse:
    logger.info(
        "Rejected invalid input: path=%s errors=%d request_id=%s",
        request.url.path, len(errors), getattr(request.state, "request_id", "unknown"),
    )
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid input", "errors": jsonable_encoder(errors)},
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _invalid_input(request, exc.errors())


async def model_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    # Raised by the store when a partial update would leave a record
    # invalid, e.g. {"name": null} on a supplier.
    return _invalid_input(request, exc.errors(include_url=False))


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, model_validation_handler)
