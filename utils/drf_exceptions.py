from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError, OperationalError, ProgrammingError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from utils.errors import db_unavailable_response, error_response

_logger = logging.getLogger(__name__)


def _db_error_response(exc: DatabaseError) -> Response:
    if isinstance(exc, (OperationalError, ProgrammingError)):
        return db_unavailable_response(exc)
    detail = "Server error"
    if settings.DEBUG:
        detail = f"{detail}: {exc.__class__.__name__}: {str(exc)}".strip()
    return error_response(detail, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, code="server_error")


def _envelope(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict) and isinstance(raw.get("detail"), str):
        return {"detail": str(raw["detail"])}
    if isinstance(raw, dict):
        return {"detail": "Invalid request", "fields": raw}
    if isinstance(raw, list):
        return {"detail": "Invalid request", "fields": {"non_field_errors": raw}}
    return {"detail": "Request failed" if raw is None else str(raw)}


def drf_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Project-wide DRF exception handler (REST_FRAMEWORK["EXCEPTION_HANDLER"]).

    Every error body is {"detail": str, "code"?: str, "fields"?: dict}.
    Database errors raised inside a view become 503 db_unavailable when the
    database is unreachable or unmigrated, else 500 server_error.
    Anything DRF itself does not handle is returned as None (Django's 500).
    """
    if isinstance(exc, DatabaseError):
        _logger.exception("Database error in %s", (context or {}).get("view"))
        return _db_error_response(exc)

    resp = exception_handler(exc, context)
    if resp is None:
        return None
    body = _envelope(resp.data)
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        body["code"] = codes if isinstance(codes, str) else "validation_error"
    resp.data = body
    return resp
