from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser
from rest_framework.parsers import MultiPartParser
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from snappy.core.exceptions import NotFound
from snappy.uploads import storage


class StoredFileSerializer(serializers.Serializer):
    url = serializers.CharField()
    filename = serializers.CharField()
    original_name = serializers.CharField()
    size = serializers.IntegerField()
    mimetype = serializers.CharField()
    kind = serializers.CharField()


def _describe(request, stored: storage.StoredFile) -> dict:
    return {
        "url": request.build_absolute_uri(storage.url_for(stored)),
        "filename": stored.filename,
        "original_name": stored.original_name,
        "size": stored.size,
        "mimetype": stored.mimetype,
        "kind": stored.kind,
    }


class UploadViewSet(ViewSet):
    parser_classes = [MultiPartParser, FormParser]

    def _single(self, request, field: str, expected_kind: str | None):
        upload = request.FILES.get(field)
        if upload is None:
            raise ValidationError({field: ["No file uploaded"]})
        try:
            kind = storage.check_upload(upload.name, upload.content_type, expected_kind)
        except storage.InvalidUpload as exc:
            raise ValidationError({field: [str(exc)]}) from exc
        stored = storage.save_upload(upload, request.user.pk, kind)
        return Response({"file": _describe(request, stored)}, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Uploads"], request={"multipart/form-data": OpenApiTypes.BINARY}, responses={201: StoredFileSerializer})
    @action(detail=False, methods=["post"])
    def voice(self, request):
        return self._single(request, "voice", storage.VOICE)

    @extend_schema(tags=["Uploads"], request={"multipart/form-data": OpenApiTypes.BINARY}, responses={201: StoredFileSerializer})
    @action(detail=False, methods=["post"])
    def image(self, request):
        return self._single(request, "image", storage.IMAGES)

    @extend_schema(tags=["Uploads"], request={"multipart/form-data": OpenApiTypes.BINARY}, responses={201: StoredFileSerializer})
    @action(detail=False, methods=["post"])
    def file(self, request):
        return self._single(request, "file", None)

    @extend_schema(tags=["Uploads"], request={"multipart/form-data": OpenApiTypes.BINARY}, responses={201: StoredFileSerializer(many=True)})
    @action(detail=False, methods=["post"])
    def multiple(self, request):
        uploads = request.FILES.getlist("files")
        if not uploads:
            raise ValidationError({"files": ["No files uploaded"]})
        if len(uploads) > settings.SNAPPY_UPLOAD_MAX_FILES:
            msg = f"At most {settings.SNAPPY_UPLOAD_MAX_FILES} files per upload"
            raise ValidationError({"files": [msg]})

        # Validate everything before writing anything.
        kinds = []
        for upload in uploads:
            try:
                kinds.append(storage.check_upload(upload.name, upload.content_type))
            except storage.InvalidUpload as exc:
                raise ValidationError({"files": [f"{upload.name}: {exc}"]}) from exc

        stored = [
            storage.save_upload(upload, request.user.pk, kind)
            for upload, kind in zip(uploads, kinds, strict=True)
        ]
        return Response(
            {"files": [_describe(request, item) for item in stored]},
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(tags=["Uploads"], responses={204: None})
    @action(
        detail=False,
        methods=["delete"],
        url_path=r"(?P<kind>voice|images|files)/(?P<filename>[^/]+)",
    )
    def remove(self, request, kind=None, filename=None):
        if not storage.delete_upload(request.user.pk, kind, filename):
            msg = "File not found"
            raise NotFound(msg)
        return Response(status=status.HTTP_204_NO_CONTENT)
