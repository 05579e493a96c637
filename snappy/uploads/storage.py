"""Local storage of uploaded binaries under ``MEDIA_ROOT/uploads``.

Files live in ``uploads/<kind>/<user id>/`` so a user can only ever delete
their own uploads.
"""

from __future__ import annotations

import logging
import os
import secrets
import time
from dataclasses import dataclass

from django.core.exceptions import SuspiciousFileOperation
from django.core.files.storage import default_storage
from django.utils.text import get_valid_filename

logger = logging.getLogger(__name__)

VOICE = "voice"
IMAGES = "images"
FILES = "files"
KINDS = (VOICE, IMAGES, FILES)

ALLOWED_TYPES = {
    VOICE: ("audio/mpeg", "audio/wav", "audio/ogg", "audio/webm", "audio/mp4"),
    IMAGES: ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"),
    FILES: (
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ),
}
MIME_EXTENSIONS = {
    "audio/mpeg": (".mp3", ".mpeg"),
    "audio/wav": (".wav",),
    "audio/ogg": (".ogg",),
    "audio/webm": (".webm",),
    "audio/mp4": (".mp4", ".m4a"),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/jpg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/gif": (".gif",),
    "image/webp": (".webp",),
    "application/pdf": (".pdf",),
    "text/plain": (".txt",),
}


class InvalidUpload(ValueError):
    pass


@dataclass(frozen=True)
class StoredFile:
    kind: str
    path: str
    filename: str
    original_name: str
    size: int
    mimetype: str


def kind_for(mimetype: str) -> str | None:
    for kind, types in ALLOWED_TYPES.items():
        if mimetype in types:
            return kind
    return None


def check_upload(original_name: str, mimetype: str, expected_kind: str | None = None) -> str:
    """Return the storage kind for an upload or raise ``InvalidUpload``."""
    kind = kind_for(mimetype)
    if kind is None:
        msg = "Invalid file type. Only audio, image, PDF and text files are allowed."
        raise InvalidUpload(msg)
    if expected_kind is not None and kind != expected_kind:
        msg = f"Expected a {expected_kind} upload, got {mimetype}"
        raise InvalidUpload(msg)
    ext = os.path.splitext(os.path.basename(original_name))[1].lower()
    valid = MIME_EXTENSIONS.get(mimetype, ())
    if valid and ext not in valid:
        msg = "File extension does not match MIME type"
        raise InvalidUpload(msg)
    return kind


def _valid(part: str, fallback: str) -> str:
    try:
        return get_valid_filename(part)
    except SuspiciousFileOperation:
        return fallback


def unique_name(original_name: str) -> str:
    base = os.path.basename(original_name.replace("\\", "/"))
    stem, ext = os.path.splitext(base)
    stem = _valid(stem, "upload")[:80]
    ext = _valid(ext.lower(), "") if ext else ""
    return f"{stem}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


def user_dir(kind: str, user_id: int) -> str:
    return f"uploads/{kind}/{user_id}"


def save_upload(upload, user_id: int, kind: str) -> StoredFile:
    name = unique_name(upload.name)
    path = default_storage.save(f"{user_dir(kind, user_id)}/{name}", upload)
    logger.info("Stored upload %s (%s bytes) for user %s", path, upload.size, user_id)
    return StoredFile(
        kind=kind,
        path=path,
        filename=os.path.basename(path),
        original_name=os.path.basename(upload.name),
        size=upload.size,
        mimetype=upload.content_type,
    )


def delete_upload(user_id: int, kind: str, filename: str) -> bool:
    """Delete one of the user's uploads; False when it does not exist."""
    if kind not in KINDS or filename != os.path.basename(filename) or filename in ("", ".", ".."):
        return False
    path = f"{user_dir(kind, user_id)}/{filename}"
    if not default_storage.exists(path):
        return False
    default_storage.delete(path)
    logger.info("Deleted upload %s", path)
    return True


def url_for(stored: StoredFile) -> str:
    return default_storage.url(stored.path)
