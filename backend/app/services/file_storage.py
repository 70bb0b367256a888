"""Local file storage for payment receipts and signed documents."""

import re
import time
from pathlib import Path

from backend.app.core.logging import get_logger
from backend.app.core.settings import get_settings

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif", "application/pdf"}


class FileStorageError(ValueError):
    pass


def sanitize_filename(filename: str) -> str:
    return re.sub(r"[^a-zA-Z0-9.]", "_", filename or "upload")


def get_upload_dir() -> Path:
    upload_dir = Path(get_settings().upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def store_upload(filename: str, content_type: str | None, data: bytes) -> str:
    """Validate and persist an upload; return the stored file name."""
    settings = get_settings()
    if len(data) > settings.max_upload_size:
        limit_mb = settings.max_upload_size // (1024 * 1024)
        raise FileStorageError(f"File size exceeds the {limit_mb}MB limit")
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise FileStorageError("File type not allowed. Please upload an image or PDF.")

    stored_name = f"{int(time.time() * 1000)}-{sanitize_filename(filename)}"
    path = get_upload_dir() / stored_name
    path.write_bytes(data)
    logger.info("file_uploaded", stored_name=stored_name, size=len(data), content_type=content_type)
    return stored_name
