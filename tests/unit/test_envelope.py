"""Unit tests for envelope construction and error-kind mapping."""

import json

import pytest

from api.response import (
    BAD_REQUEST,
    CONFLICT,
    FORBIDDEN,
    NOT_FOUND,
    SERVER_ERROR,
    UNAUTHORIZED,
    code_for,
    error,
    ok,
)
from core.errors import APIError, ErrorKind, ServiceError


@pytest.mark.parametrize(
    "kind, code",
    [
        (ErrorKind.INVALID, BAD_REQUEST),
        (ErrorKind.UNAUTHORIZED, UNAUTHORIZED),
        (ErrorKind.FORBIDDEN, FORBIDDEN),
        (ErrorKind.NOT_FOUND, NOT_FOUND),
        (ErrorKind.CONFLICT, CONFLICT),
        (ErrorKind.INTERNAL, SERVER_ERROR),
    ],
)
def test_code_for_each_kind(kind, code):
    assert code_for(kind) == code


def test_ok_wraps_data():
    envelope = ok({"id": 1})
    assert envelope.model_dump() == {"code": 200, "message": "success", "data": {"id": 1}}


def test_ok_without_data():
    assert ok().data is None


def test_error_keeps_transport_status_200():
    response = error(NOT_FOUND, "Article not found")
    assert response.status_code == 200
    assert json.loads(response.body) == {"code": 404, "message": "Article not found", "data": None}


def test_service_error_factories():
    assert ServiceError.not_found("x").kind == ErrorKind.NOT_FOUND
    assert ServiceError.forbidden().message == "Permission denied"
    assert ServiceError.conflict("x").kind == ErrorKind.CONFLICT
    assert ServiceError.invalid("x").kind == ErrorKind.INVALID
    assert APIError.unauthorized().kind == ErrorKind.UNAUTHORIZED
    assert isinstance(APIError.unauthorized(), ServiceError)
