"""
Provider logo storage on the local upload directory.
"""
import os
import uuid

from fastapi import UploadFile

from app.core.config import settings
from app.core.logging import get_logger
from app.services.errors import InvalidRecordError

logger = get_logger(__name__)


def public_path(stored_filename: str) -> str:
    """URL path under which a stored file is served, always with forward slashes."""
    path = f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{stored_filename}"
    return path.replace("\\", "/")


async def save_logo(file: UploadFile) -> str:
    """Validate and store an uploaded logo; returns its public path."""
    file_ext = os.path.splitext(file.filename)[1].lower() if file.filename else ""
    if file_ext not in settings.ALLOWED_LOGO_EXTENSIONS:
        raise InvalidRecordError(
            f"Logo must be one of: {', '.join(settings.ALLOWED_LOGO_EXTENSIONS)}"
        )

    file_content = await file.read()
    if not file_content:
        raise InvalidRecordError("Logo file is empty")

    max_size = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(file_content) > max_size:
        raise InvalidRecordError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored_filename = f"{uuid.uuid4()}{file_ext}"
    file_path = os.path.join(settings.UPLOAD_DIR, stored_filename)

    with open(file_path, "wb") as f:
        f.write(file_content)

    logger.info(f"Logo uploaded: {file.filename} stored as {stored_filename}")
    return public_path(stored_filename)


def discard_logo(logo_location: str) -> None:
    """Remove a stored logo by its public path, e.g. after a failed write."""
    file_path = os.path.join(settings.UPLOAD_DIR, logo_location.rsplit("/", 1)[-1])
    if os.path.exists(file_path):
        os.remove(file_path)
        logger.info(f"Logo discarded: {file_path}")
