"""
File storage for uploaded documents.

Files live flat in ``UPLOAD_FOLDER`` under a generated name:
32 random hex chars + the original (lower-cased) extension. The database
keeps that name in ``Document.path``; the user-facing name is kept
separately in ``Document.original_name``.
"""

import logging
import mimetypes
import os
import secrets

from flask import current_app
from werkzeug.datastructures import FileStorage

from lencondb.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = frozenset({
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".txt", ".csv", ".png", ".jpg", ".jpeg", ".gif",
    ".zip", ".rar", ".7z",
})


class StoredFile:
    """Result of saving an upload."""

    def __init__(self, stored_name: str, original_name: str, mime_type: str, size: int):
        self.stored_name = stored_name
        self.original_name = original_name
        self.mime_type = mime_type
        self.size = size


def upload_folder() -> str:
    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    return folder


def stored_path(stored_name: str) -> str:
    """Absolute path of a stored file. Rejects names that escape the folder."""
    if not stored_name or os.path.basename(stored_name) != stored_name:
        raise ValidationError("Invalid stored file name")
    return os.path.join(upload_folder(), stored_name)


def _original_name(file: FileStorage) -> str:
    # Browsers may send a full client path; keep the last component only
    name = (file.filename or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    if not name:
        raise ValidationError("Uploaded file has no name", details={"file": "missing filename"})
    return name


def _stream_size(file: FileStorage) -> int:
    stream = file.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def validate_upload(file: FileStorage) -> tuple[str, str]:
    """Check extension and size of an upload.

    Returns:
        (original_name, extension)
    """
    original = _original_name(file)
    ext = os.path.splitext(original)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            f"File type {ext or '(none)'} is not allowed",
            details={"allowed": sorted(ALLOWED_EXTENSIONS)},
        )
    limit = current_app.config.get("MAX_UPLOAD_SIZE", 50 * 1024 * 1024)
    size = _stream_size(file)
    if size > limit:
        raise ValidationError(
            f"File exceeds the {limit // (1024 * 1024)} MB limit",
            details={"size": size, "limit": limit},
        )
    return original, ext


def save_upload(file: FileStorage) -> StoredFile:
    """Validate and write an upload to UPLOAD_FOLDER under a random name."""
    original, ext = validate_upload(file)
    stored_name = f"{secrets.token_hex(16)}{ext}"
    path = os.path.join(upload_folder(), stored_name)
    file.save(path)
    mime_type = (
        file.mimetype
        if file.mimetype and file.mimetype != "application/octet-stream"
        else mimetypes.guess_type(original)[0] or "application/octet-stream"
    )
    size = os.path.getsize(path)
    logger.info("Stored upload %s as %s (%d bytes)", original, stored_name, size)
    return StoredFile(stored_name, original, mime_type, size)


def remove_file(stored_name: str | None) -> bool:
    """Delete a stored file. Missing files are logged, not raised."""
    if not stored_name:
        return False
    try:
        os.remove(stored_path(stored_name))
        return True
    except FileNotFoundError:
        logger.warning("Stored file %s already missing", stored_name)
        return False
    except OSError:
        logger.exception("Could not remove stored file %s", stored_name)
        return False


def remove_files(stored_names: list[str]) -> int:
    return sum(1 for name in stored_names if remove_file(name))
