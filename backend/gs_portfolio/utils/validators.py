"""Upload checks for splat assets and thumbnails, plus storage key generation."""
from __future__ import annotations

import re
import secrets
import time
from typing import Optional

from gs_portfolio.core.config import settings

_DISALLOWED = re.compile(r"[^a-zA-Z0-9._-]")
_REPEATED_UNDERSCORE = re.compile(r"_{2,}")


class FileValidationError(ValueError):
    """Raised when an uploaded file fails a size, extension or MIME check."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def _extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def _megabytes(n: int) -> int:
    return n // (1024 * 1024)


def validate_gs_file(filename: Optional[str], content_type: Optional[str], size: int) -> None:
    if size > settings.MAX_GS_FILE_SIZE:
        raise FileValidationError(
            f"File is too large. The maximum size is {_megabytes(settings.MAX_GS_FILE_SIZE)}MB."
        )

    if _extension(filename) not in settings.ALLOWED_GS_EXTENSIONS:
        raise FileValidationError("Unsupported file format. Only .splat and .ply files are supported.")

    if (content_type or "").lower() not in settings.ALLOWED_GS_TYPES:
        raise FileValidationError(f"Unsupported MIME type: {content_type or 'unknown'}.")


def validate_thumbnail(content_type: Optional[str], size: int) -> None:
    if size > settings.MAX_THUMBNAIL_SIZE:
        raise FileValidationError(
            f"Thumbnail is too large. The maximum size is {_megabytes(settings.MAX_THUMBNAIL_SIZE)}MB."
        )

    if (content_type or "").lower() not in settings.ALLOWED_THUMBNAIL_TYPES:
        raise FileValidationError("Unsupported image format. Only JPEG, PNG and WebP are supported.")


def sanitize_filename(filename: str) -> str:
    cleaned = _DISALLOWED.sub("_", filename)
    cleaned = _REPEATED_UNDERSCORE.sub("_", cleaned)
    return cleaned[:255]


def generate_file_path(filename: str, prefix: str = "gs-files") -> str:
    timestamp = int(time.time() * 1000)
    random_id = secrets.token_hex(4)
    return f"{prefix}/{timestamp}-{random_id}-{sanitize_filename(filename)}"
