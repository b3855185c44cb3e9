"""DRF exception handler producing the uniform error envelope.

Every error response has the shape::

    {"error": {"kind": "conflict", "message": "...", "details": {...}}}

Internal exception text is only exposed while DEBUG is on.
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings  # type: ignore
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied  # type: ignore
from django.db import DatabaseError, IntegrityError  # type: ignore
from django.http import Http404  # type: ignore
from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

_DRF_KINDS = (
    (exceptions.ValidationError, ErrorKind.VALIDATION),
    (exceptions.ParseError, ErrorKind.VALIDATION),
    (exceptions.NotAuthenticated, ErrorKind.UNAUTHORIZED),
    (exceptions.AuthenticationFailed, ErrorKind.UNAUTHORIZED),
    (exceptions.PermissionDenied, ErrorKind.FORBIDDEN),
    (exceptions.NotFound, ErrorKind.NOT_FOUND),
)


def error_response(kind: str, message: str, details: Any = None, http_status: int = 400) -> Response:
    return Response(
        {"error": {"kind": kind, "message": message, "details": details}},
        status=http_status,
    )


def _internal_details(exc: Exception) -> Any:
    if settings.DEBUG:
        return {"exception": exc.__class__.__name__, "detail": str(exc)}
    return None


def api_exception_handler(exc: Exception, context: dict) -> Response | None:
    if isinstance(exc, DomainError):
        return error_response(exc.kind, exc.message, exc.details, exc.status_code)

    if isinstance(exc, IntegrityError):
        logger.warning(f"Integrity error mapped to conflict: {exc}")
        return error_response(
            ErrorKind.CONFLICT,
            "Resource conflicts with existing data.",
            _internal_details(exc),
            status.HTTP_409_CONFLICT,
        )

    if isinstance(exc, DatabaseError):
        logger.error(f"Database error: {exc}", exc_info=True)
        return error_response(
            ErrorKind.INTERNAL,
            "Internal server error.",
            _internal_details(exc),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # DRF converts these internally, the kind lookup below needs the DRF class
    if isinstance(exc, Http404):
        exc = exceptions.NotFound(str(exc) or None)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied(str(exc) or None)

    response = drf_exception_handler(exc, context)
    if response is None:
        logger.error(f"Unhandled exception in API view: {exc}", exc_info=True)
        return error_response(
            ErrorKind.INTERNAL,
            "Internal server error.",
            _internal_details(exc),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    kind = str(getattr(exc, "default_code", "error"))
    for exc_class, mapped in _DRF_KINDS:
        if isinstance(exc, exc_class):
            kind = mapped
            break

    if isinstance(exc, exceptions.ValidationError):
        message = "Invalid input."
        details = response.data
    else:
        message = str(response.data.get("detail", "")) if isinstance(response.data, dict) else str(response.data)
        details = None

    response.data = {"error": {"kind": kind, "message": message, "details": details}}
    return response
