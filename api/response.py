"""
Envelope helpers.

Every reply, success or failure, is ``{code, message, data}`` with HTTP 200.
"""

from typing import Any

from fastapi.responses import JSONResponse

from api.schemas.common import Envelope
from core.errors import ErrorKind

# Envelope codes
SUCCESS = 200
BAD_REQUEST = 400
UNAUTHORIZED = 401
FORBIDDEN = 403
NOT_FOUND = 404
CONFLICT = 409
PAYLOAD_TOO_LARGE = 413
TOO_MANY_REQUESTS = 429
SERVER_ERROR = 500

ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID: BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: UNAUTHORIZED,
    ErrorKind.FORBIDDEN: FORBIDDEN,
    ErrorKind.NOT_FOUND: NOT_FOUND,
    ErrorKind.CONFLICT: CONFLICT,
    ErrorKind.INTERNAL: SERVER_ERROR,
}


def ok(data: Any = None) -> Envelope:
    """Success envelope around ``data`` (may be None)."""
    return Envelope(code=SUCCESS, message="success", data=data)


def error(code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    """Failure envelope with an arbitrary code. Transport status stays 200."""
    return JSONResponse(
        status_code=200,
        content={"code": code, "message": message, "data": None},
        headers=headers,
    )


def code_for(kind: ErrorKind) -> int:
    return ERROR_CODES.get(kind, SERVER_ERROR)
