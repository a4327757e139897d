"""
Validates and stores file attachments sent with the contact form.
Files land in the upload directory and are served back from /uploads.
"""

import logging
import os
import re
import time
import uuid
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile, status


# Allowed attachment MIME types
ALLOWED_FILE_TYPES = ("application/pdf", "image/jpeg", "image/png")

# Max attachment size: 5MB
MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024

CHUNK_SIZE = 1024 * 1024

INVALID_FILE_TYPE_ERROR = "Invalid file type. Only PDF, JPG, PNG allowed."
FILE_TOO_LARGE_ERROR = "File too large. Maximum size is 5 MB."


def sanitize_filename(filename: str) -> Optional[str]:
    """
    Sanitizes filename to prevent path traversal and other security issues.
    Returns a safe filename with only alphanumeric, dots, hyphens, and underscores.
    """
    if not filename:
        return None

    # Remove path components (prevent directory traversal)
    filename = os.path.basename(filename.replace('\\', '/'))

    name, ext = os.path.splitext(filename)

    # Whitespace and anything unusual becomes an underscore
    name = re.sub(r'[^a-zA-Z0-9._-]', '_', name)
    ext = re.sub(r'[^a-zA-Z0-9.]', '', ext)

    name = name[:100]
    ext = ext[:10]

    # If name is empty after sanitization, use UUID
    if not name or name.strip('_.') == '':
        name = str(uuid.uuid4())[:8]

    return name + ext if ext else name


def build_stored_filename(filename: str, now: Optional[float] = None) -> str:
    """Returns '<epoch ms>-<sanitized name>' so uploads with the same name don't collide."""
    timestamp_ms = int((time.time() if now is None else now) * 1000)
    sanitized = sanitize_filename(filename) or str(uuid.uuid4())[:8]
    return f"{timestamp_ms}-{sanitized}"


def has_attachment(file: Optional[UploadFile]) -> bool:
    """Browsers send an empty file part when no file was chosen."""
    return file is not None and bool(file.filename)


def validate_attachment(file: UploadFile) -> None:
    """Rejects attachments whose declared content type is not allowed."""
    if file.content_type not in ALLOWED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_FILE_TYPE_ERROR
        )


async def save_attachment(file: UploadFile, upload_dir: Path,
                          max_size: int = MAX_FILE_SIZE_BYTES) -> Path:
    """
    Streams the upload into upload_dir under a collision-resistant name.
    Stops as soon as more than max_size bytes have been read and removes the
    partial file. Returns the path of the stored file.
    """
    await file.seek(0)

    destination = upload_dir / build_stored_filename(file.filename)
    written = 0
    try:
        with open(destination, "wb") as out:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_size:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=FILE_TOO_LARGE_ERROR
                    )
                out.write(chunk)
    except Exception:
        destination.unlink(missing_ok=True)
        raise

    logging.info(f"Stored attachment {destination} ({written} bytes)")
    return destination


def ensure_upload_dir(upload_dir: Path) -> Path:
    """Creates the upload directory if it does not exist yet."""
    if not upload_dir.exists():
        upload_dir.mkdir(parents=True, exist_ok=True)
        logging.info(f"Created upload directory {upload_dir}")
    return upload_dir
