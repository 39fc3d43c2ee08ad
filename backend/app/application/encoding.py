"""DocumentEncoder: uploaded form file -> (bytes, media type) and base64 transport."""

from __future__ import annotations

import base64

from app.core.errors import NoFileError
from app.domain.models import UploadedDocument

DEFAULT_MEDIA_TYPE = "application/pdf"
PDF_MEDIA_TYPE = "application/pdf"

_UNDECLARED = {"", "application/octet-stream"}
_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "application/x-pdf": "application/pdf",
}


def normalize_media_type(value: str | None) -> str:
    # "Application/PDF; charset=binary" -> "application/pdf"
    raw = (value or "").split(";", 1)[0].strip().lower()
    if raw in _UNDECLARED:
        return DEFAULT_MEDIA_TYPE
    return _ALIASES.get(raw, raw)


def encode(document: UploadedDocument | None) -> tuple[bytes, str]:
    if document is None or not document.content:
        raise NoFileError()
    return document.content, normalize_media_type(document.media_type)


def to_base64(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


def is_text_extractable(media_type: str) -> bool:
    """Only PDFs carry a text layer worth extracting."""
    return normalize_media_type(media_type) == PDF_MEDIA_TYPE
