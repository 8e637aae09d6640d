"""
Exception handlers that render every failure as a response envelope.

Transport status is always 200; the outcome is carried in the envelope code.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from api.response import BAD_REQUEST, SERVER_ERROR, TOO_MANY_REQUESTS, code_for, error
from core.errors import ErrorKind, ServiceError
from infrastructure.config.settings import settings

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """First validation error as ``field: reason``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    message = first.get("msg", "Invalid value")
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


async def service_error_handler(request: Request, exc: ServiceError):
    code = code_for(exc.kind)
    if exc.kind == ErrorKind.INTERNAL:
        logger.error("Service failure on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "Rejected %s %s: %s (%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.kind.value,
        )
    return error(code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error(BAD_REQUEST, _validation_message(exc))


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # Truncate in production so connection strings never reach the logs
    if settings.is_production:
        logger.error("Database error: %s: %s", type(exc).__name__, str(exc)[:200])
    else:
        logger.error("Database error: %s", str(exc), exc_info=True)
    return error(SERVER_ERROR, "Internal server error")


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("Rate limit exceeded on %s: %s", request.url.path, exc.detail)
    return error(TOO_MANY_REQUESTS, f"Rate limit exceeded: {exc.detail}")


async def global_exception_handler(request: Request, exc: Exception):
    if settings.is_production:
        logger.error("Unhandled exception: %s: %s", type(exc).__name__, str(exc)[:200])
    else:
        logger.error("Unhandled exception: %s", str(exc), exc_info=True)
    return error(SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on ``app``."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, global_exception_handler)
