from __future__ import annotations

from typing import Any

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response


def error_response(
    detail: str,
    *,
    status_code: int,
    code: str | None = None,
    fields: dict[str, Any] | None = None,
) -> Response:
    payload: dict[str, Any] = {"detail": detail}
    if code:
        payload["code"] = code
    if fields:
        payload["fields"] = fields
    return Response(payload, status=int(status_code))


def db_unavailable_response(exc: BaseException | None = None, detail: str = "Database not initialized") -> Response:
    """503 envelope for a database that is unreachable or not migrated yet.

    The exception text is only exposed when DEBUG is on.
    """
    if exc is not None and settings.DEBUG:
        detail = f"{detail}: {exc.__class__.__name__}: {str(exc)}".strip()
    return error_response(detail, status_code=status.HTTP_503_SERVICE_UNAVAILABLE, code="db_unavailable")
