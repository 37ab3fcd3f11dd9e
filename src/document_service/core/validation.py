"""
Upload Validation

File checks applied before anything is written to storage: extension
allow-list, size limit, MIME/extension consistency and filename safety.
"""

import re
from typing import Dict, Tuple

from document_service.core.errors import DocumentValidationError
from document_service.models.document import DocumentCategorie

MAX_FILENAME_LENGTH = 255

_UNSAFE_FILENAME = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

MIME_TYPES_BY_EXTENSION: Dict[str, Tuple[str, ...]] = {
    "pdf": ("application/pdf",),
    "jpg": ("image/jpeg",),
    "jpeg": ("image/jpeg",),
    "png": ("image/png",),
    "gif": ("image/gif",),
    "docx": ("application/vnd.openxmlformats-officedocument.wordprocessingml.document",),
    "doc": ("application/msword",),
    "xlsx": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",),
    "xls": ("application/vnd.ms-excel",),
}


def get_file_extension(filename: str) -> str:
    """Extension without the dot, lowercased; empty when there is none"""
    parts = filename.split(".")
    if len(parts) < 2:
        return ""
    return parts[-1].lower()


def validate_mime_type(mime_type: str, extension: str) -> bool:
    """Declared MIME type matches the extension.

    Extensions outside the known map pass; the category allow-list is the
    real gate for those.
    """
    allowed = MIME_TYPES_BY_EXTENSION.get(extension.lower())
    if allowed is None:
        return True
    return (mime_type or "").lower() in allowed


def is_safe_filename(filename: str) -> bool:
    """Non-empty, at most 255 characters, no path or control characters"""
    if not filename or len(filename) > MAX_FILENAME_LENGTH:
        return False
    return not _UNSAFE_FILENAME.search(filename)


def validate_upload(
    categorie: DocumentCategorie,
    filename: str,
    size_bytes: int,
    mime_type: str,
) -> str:
    """
    Run every upload check against a category.

    Args:
        categorie: Target category (must already be known to be active)
        filename: Original filename from the client
        size_bytes: Upload size
        mime_type: Declared content type

    Returns:
        The lowercased file extension

    Raises:
        DocumentValidationError: With a user-actionable message for the first failed check
    """
    if not is_safe_filename(filename):
        raise DocumentValidationError("Invalid filename")

    extension = get_file_extension(filename)
    if not extension:
        raise DocumentValidationError("File must have an extension")

    if extension not in categorie.allowed_extensions:
        raise DocumentValidationError(
            f"File type not allowed for this category. Allowed: {categorie.toegestane_extensies or ''}"
        )

    if size_bytes > categorie.max_size_bytes:
        raise DocumentValidationError(
            f"File too large. Maximum size: {categorie.max_bestandsgrootte_mb} MB"
        )

    if not validate_mime_type(mime_type, extension):
        raise DocumentValidationError("File MIME type does not match extension")

    return extension
