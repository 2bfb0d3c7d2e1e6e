"""
Stores uploaded event images on local disk, served under /uploads.
"""

import os
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile, status
from starlette.concurrency import run_in_threadpool

from eventbooking.core.config import get_settings
from eventbooking.core.logging import get_logger

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}

UPLOAD_URL_PREFIX = "/uploads"


def _write_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)


async def save_event_image(file: Optional[UploadFile]) -> Optional[str]:
    """
    Validate and persist an uploaded image.
    Returns its public URL, or None when no file was sent.
    """
    if file is None or not file.filename:
        return None

    settings = get_settings()
    extension = os.path.splitext(file.filename)[1].lower()
    if extension not in ALLOWED_EXTENSIONS or file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed!",
        )

    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Image exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit",
        )

    filename = f"file-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
    await run_in_threadpool(_write_file, Path(settings.UPLOAD_DIR) / filename, content)

    logger.info("image_uploaded", filename=filename, size=len(content))
    return f"{UPLOAD_URL_PREFIX}/{filename}"


def _remove_file(path: Path) -> None:
    path.unlink(missing_ok=True)


async def discard_event_image(image_url: Optional[str]) -> None:
    """Delete an image stored by save_event_image whose event was never created."""
    if not image_url or not image_url.startswith(f"{UPLOAD_URL_PREFIX}/"):
        return

    filename = image_url[len(UPLOAD_URL_PREFIX) + 1:]
    await run_in_threadpool(_remove_file, Path(get_settings().UPLOAD_DIR) / filename)
    logger.info("image_discarded", filename=filename)
