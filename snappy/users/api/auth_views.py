from __future__ import annotations

import logging

from django.db import IntegrityError
from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from snappy.core.exceptions import Conflict
from snappy.users.models import User
from snappy.users.tokens import issue_token

from .serializers import AuthResponseSerializer
from .serializers import LoginSerializer
from .serializers import RegisterSerializer
from .serializers import UserSerializer

logger = logging.getLogger(__name__)


class InvalidCredentials(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid email or password"
    default_code = "invalid_credentials"


def _client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def _auth_payload(user: User, request) -> dict:
    return {
        "user": UserSerializer(user, context={"request": request}).data,
        "token": issue_token(user.pk),
    }


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        tags=["Authentication"],
        request=RegisterSerializer,
        responses={201: AuthResponseSerializer},
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if User.objects.filter(email__iexact=data["email"]).exists():
            msg = "Email already registered"
            raise Conflict(msg)
        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    email=data["email"],
                    password=data["password"],
                    name=data["name"],
                )
        except IntegrityError as exc:
            msg = "Email already registered"
            raise Conflict(msg) from exc

        logger.info("User registered: id=%s", user.pk)
        return Response(_auth_payload(user, request), status=status.HTTP_201_CREATED)


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(
        tags=["Authentication"],
        request=LoginSerializer,
        responses={200: AuthResponseSerializer},
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        if user is None:
            logger.warning(
                "Login failed for %s from %s",
                serializer.validated_data["email"],
                _client_ip(request),
            )
            raise InvalidCredentials

        logger.info("Login succeeded: id=%s ip=%s", user.pk, _client_ip(request))
        return Response(_auth_payload(user, request))


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Authentication"], responses={200: UserSerializer})
    def get(self, request):
        return Response(
            {"user": UserSerializer(request.user, context={"request": request}).data},
        )
