"""Upload size ceiling enforced while the request body is still streaming.

``MaxSizeUploadHandler`` sits first in ``FILE_UPLOAD_HANDLERS``. It rejects
a request whose declared ``Content-Length`` cannot fit the allowed files, and
otherwise counts each file's bytes as chunks arrive, failing as soon as one
file crosses ``SNAPPY_UPLOAD_MAX_BYTES``. Nothing past that point is
buffered.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.files.uploadhandler import FileUploadHandler
from rest_framework import status
from rest_framework.exceptions import APIException

logger = logging.getLogger(__name__)

# Room for multipart boundaries and ordinary form fields.
MULTIPART_OVERHEAD = 64 * 1024


class FileTooLarge(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "File too large"
    default_code = "file_too_large"


def max_upload_bytes() -> int:
    return int(settings.SNAPPY_UPLOAD_MAX_BYTES)


class MaxSizeUploadHandler(FileUploadHandler):
    def __init__(self, request=None):
        super().__init__(request)
        self.max_bytes = max_upload_bytes()
        self.max_files = int(settings.SNAPPY_UPLOAD_MAX_FILES)
        self.received = 0

    def handle_raw_input(self, input_data, META, content_length, boundary, encoding=None):  # noqa: N803, PLR0913
        ceiling = self.max_bytes * self.max_files + MULTIPART_OVERHEAD
        if content_length and content_length > ceiling:
            logger.info("Rejected upload: Content-Length %s > %s", content_length, ceiling)
            raise FileTooLarge(self._message())
        # Let the normal multipart parsing go ahead.

    def new_file(self, *args, **kwargs):
        super().new_file(*args, **kwargs)
        self.received = 0

    def receive_data_chunk(self, raw_data, start):
        self.received += len(raw_data)
        if self.received > self.max_bytes:
            logger.info("Rejected upload %r: exceeds %s bytes", self.file_name, self.max_bytes)
            raise FileTooLarge(self._message())
        return raw_data

    def file_complete(self, file_size):
        # The next handler builds the uploaded file object.
        return None

    def _message(self) -> str:
        return f"File too large. Maximum size is {self.max_bytes // (1024 * 1024) or 1}MB"
