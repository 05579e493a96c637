from __future__ import annotations

from rest_framework.authentication import BaseAuthentication
from rest_framework.authentication import get_authorization_header

from snappy.core.exceptions import MalformedToken
from snappy.core.exceptions import MissingToken

from .tokens import verify_token


class BearerTokenAuthentication(BaseAuthentication):
    """``Authorization: Bearer <token>`` authentication for the REST API."""

    keyword = "Bearer"

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) == 1:
            raise MissingToken
        if len(auth) > 2:  # noqa: PLR2004
            raise MalformedToken

        try:
            raw = auth[1].decode()
        except UnicodeError as exc:
            raise MalformedToken from exc

        return verify_token(raw), raw

    def authenticate_header(self, request):
        return self.keyword
