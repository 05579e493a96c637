from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.mixins import ListModelMixin
from rest_framework.mixins import RetrieveModelMixin
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from snappy.users.models import User

from .serializers import PublicUserSerializer
from .serializers import UserSerializer

SEARCH_LIMIT = 20


@extend_schema_view(
    list=extend_schema(
        tags=["Users"],
        parameters=[OpenApiParameter("search", str, description="Name or email")],
    ),
    retrieve=extend_schema(tags=["Users"]),
)
class UserViewSet(RetrieveModelMixin, ListModelMixin, GenericViewSet):
    serializer_class = PublicUserSerializer
    queryset = User.objects.filter(is_active=True)
    # Search results are capped instead of paginated.
    pagination_class = None

    def list(self, request, *args, **kwargs):
        qs = self.get_queryset().order_by("name", "id")
        term = (request.query_params.get("search") or "").strip()
        if term:
            qs = qs.filter(Q(name__icontains=term) | Q(email__icontains=term))
        data = PublicUserSerializer(qs[:SEARCH_LIMIT], many=True).data
        return Response({"results": data})

    @extend_schema(
        tags=["Users"],
        methods=["GET"],
        responses={200: UserSerializer},
    )
    @extend_schema(
        tags=["Users"],
        methods=["PATCH"],
        request=UserSerializer,
        responses={200: UserSerializer},
    )
    @action(detail=False, methods=["get", "patch"])
    def me(self, request):
        if request.method == "GET":
            serializer = UserSerializer(request.user, context={"request": request})
            return Response(status=status.HTTP_200_OK, data=serializer.data)

        serializer = UserSerializer(
            request.user,
            data=request.data,
            partial=True,
            context={"request": request},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
