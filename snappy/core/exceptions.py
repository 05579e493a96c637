"""API error taxonomy and the single DRF exception handler.

Every error leaves the API as ``{"error": {"message": ..., "code": ...}}``.
Handlers and services raise the exceptions below; anything else that escapes a
view is logged and rendered as a generic 500.
"""

from __future__ import annotations

import logging
from typing import Any

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class AuthError(exceptions.AuthenticationFailed):
    """Base class for bearer token failures (HTTP 401, socket reject)."""

    default_detail = "Authentication failed"
    default_code = "unauthorized"


class MissingToken(AuthError):
    default_detail = "No token provided"
    default_code = "missing_token"


class MalformedToken(AuthError):
    default_detail = "Invalid token"
    default_code = "malformed_token"


class TokenExpired(AuthError):
    default_detail = "Token expired"
    default_code = "token_expired"


class UserNotFound(AuthError):
    default_detail = "User not found"
    default_code = "user_not_found"


class Forbidden(exceptions.PermissionDenied):
    default_detail = "Permission denied"
    default_code = "forbidden"


class NotFound(exceptions.NotFound):
    default_detail = "Not found"
    default_code = "not_found"


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"
    default_code = "conflict"


class UpstreamError(exceptions.APIException):
    """An external collaborator (AI provider, store) failed for good."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Upstream service failed"
    default_code = "upstream_error"


def _error_payload(
    message: str,
    code: str | None = None,
    details: Any | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"message": message}
    if code:
        error["code"] = code
    if details is not None:
        error["details"] = details
    return {"error": error}


def _headers_for(exc: exceptions.APIException) -> dict[str, str]:
    headers = {}
    if getattr(exc, "auth_header", None):
        headers["WWW-Authenticate"] = exc.auth_header
    if getattr(exc, "wait", None):
        headers["Retry-After"] = str(int(exc.wait))
    return headers


def api_exception_handler(exc, context):
    # rest_framework.views resolves the authentication classes on import.
    from rest_framework.views import set_rollback

    if isinstance(exc, Http404):
        exc = NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = Forbidden()

    if isinstance(exc, exceptions.ValidationError):
        set_rollback()
        return Response(
            _error_payload("Validation error", "validation_error", exc.detail),
            status=exc.status_code,
        )

    if isinstance(exc, exceptions.NotAuthenticated):
        set_rollback()
        return Response(
            _error_payload(MissingToken.default_detail, MissingToken.default_code),
            status=exc.status_code,
            headers=_headers_for(exc),
        )

    if isinstance(exc, exceptions.APIException):
        set_rollback()
        detail = exc.detail
        if isinstance(detail, (list, dict)):
            return Response(
                _error_payload(str(exc.default_detail), exc.default_code, detail),
                status=exc.status_code,
                headers=_headers_for(exc),
            )
        code = getattr(detail, "code", None) or exc.default_code
        return Response(
            _error_payload(str(detail), code),
            status=exc.status_code,
            headers=_headers_for(exc),
        )

    view = context.get("view")
    logger.exception(
        "Unhandled exception in %s",
        view.__class__.__name__ if view is not None else "request",
    )
    set_rollback()
    return Response(
        _error_payload("Internal server error", "internal_error"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
