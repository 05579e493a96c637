"""Bearer token issuance and verification.

``verify_token`` is the single gate used by both the REST authentication class
and the Socket.IO handshake, so an expired or forged token is rejected the same
way on either path.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import ExpiredTokenError
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from snappy.core.exceptions import MalformedToken
from snappy.core.exceptions import MissingToken
from snappy.core.exceptions import TokenExpired
from snappy.core.exceptions import UserNotFound


def issue_token(user_id: int) -> str:
    token = AccessToken()
    token[api_settings.USER_ID_CLAIM] = user_id
    return str(token)


def verify_token(raw: str | None):
    """Return the user bound to ``raw`` or raise an ``AuthError`` subclass."""

    if not raw:
        raise MissingToken

    try:
        validated = AccessToken(raw)
    except ExpiredTokenError as exc:
        raise TokenExpired from exc
    except TokenError as exc:
        raise MalformedToken from exc

    user_id = validated.get(api_settings.USER_ID_CLAIM)
    if user_id is None:
        raise MalformedToken

    user_model = get_user_model()
    try:
        user = user_model.objects.get(pk=user_id)
    except (user_model.DoesNotExist, ValueError, TypeError) as exc:
        raise UserNotFound from exc
    if not user.is_active:
        raise UserNotFound
    return user
