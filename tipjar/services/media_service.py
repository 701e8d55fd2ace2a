"""
Media storage on local disk.

Uploads are written under UPLOAD_DIR with a generated name
(<epoch millis>-<32 hex chars><original extension>) and served back under
/uploads. The MIME type is checked before anything touches the disk; a file
that grows past the size limit while streaming is removed again.
"""

import logging
import os
import secrets
import time
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Optional

from tipjar.core.categories import ContentCategory
from tipjar.core.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

ALLOWED_MEDIA_MIMES: List[str] = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/webm",
    "audio/mpeg",
    "audio/wav",
    "audio/ogg",
    "application/pdf",
    "text/plain",
]

CATEGORY_MIME_PREFIXES: Dict[ContentCategory, List[str]] = {
    ContentCategory.MUSIC: ["audio/"],
    ContentCategory.PODCAST: ["audio/"],
    ContentCategory.VIDEO: ["video/"],
    ContentCategory.ART: ["image/"],
    ContentCategory.ARTICLE: ["application/pdf", "text/"],
    ContentCategory.MOTIVATION: ["audio/", "video/", "image/", "text/"],
    ContentCategory.BUSINESS: ["application/pdf", "text/", "video/"],
    ContentCategory.EDUCATION: ["video/", "audio/", "application/pdf", "text/"],
}

DEFAULT_MIME_PREFIXES = ["image/", "video/", "audio/", "application/pdf"]


class MediaError(Exception):
    """Upload rejected; message is safe to show to the client."""


class FileTooLarge(MediaError):
    def __init__(self):
        super().__init__("File too large")


class FileTypeNotAllowed(MediaError):
    def __init__(self, mimetype: str, reason: Optional[str] = None):
        super().__init__(reason or f"File type {mimetype} not allowed")


def upload_dir() -> Path:
    return Path(settings.UPLOAD_DIR)


def get_file_url(filename: str) -> str:
    return f"/uploads/{filename}"


def is_valid_file_type(mimetype: str, allowed_types: Iterable[str]) -> bool:
    return any(mimetype.startswith(allowed) for allowed in allowed_types)


def get_allowed_mime_types(category: str | ContentCategory) -> List[str]:
    try:
        return CATEGORY_MIME_PREFIXES[ContentCategory.parse(category)]
    except ValueError:
        return DEFAULT_MIME_PREFIXES


def generate_filename(original_name: Optional[str]) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"{int(time.time() * 1000)}-{secrets.token_hex(16)}{ext}"


def ensure_upload_dir() -> Path:
    path = upload_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def delete_file(filename: str) -> None:
    """Remove a stored file; a missing file is not an error."""
    try:
        (upload_dir() / filename).unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error("Error deleting file %s: %s", filename, e)


def save_upload(
    stream: BinaryIO,
    original_name: Optional[str],
    mimetype: str,
    max_size: int,
    allowed_mimes: Iterable[str],
    exact: bool = True,
) -> tuple[str, int]:
    """
    Validate and store an uploaded stream.

    Args:
        stream: file object positioned at the start of the upload
        original_name: client file name, only its extension is kept
        mimetype: declared content type
        max_size: size limit in bytes
        allowed_mimes: exact MIME types (exact=True) or prefixes (exact=False)

    Returns:
        (stored filename, size in bytes)

    Raises:
        FileTypeNotAllowed: before anything is written
        FileTooLarge: after removing the partial file
    """
    allowed = list(allowed_mimes)
    if exact and mimetype not in allowed:
        raise FileTypeNotAllowed(mimetype)
    if not exact and not is_valid_file_type(mimetype, allowed):
        raise FileTypeNotAllowed(mimetype)

    directory = ensure_upload_dir()
    filename = generate_filename(original_name)
    size = 0
    with open(directory / filename, "wb") as out:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_size:
                break
            out.write(chunk)

    if size > max_size:
        delete_file(filename)
        raise FileTooLarge()

    logger.info("Stored upload %s (%s, %d bytes)", filename, mimetype, size)
    return filename, size
