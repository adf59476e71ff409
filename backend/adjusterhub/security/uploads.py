"""Upload screening: size, MIME allow list, extension deny list, filename shape."""

import os
import re
from typing import Optional

from adjusterhub.security.sanitize import matches

ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)

DANGEROUS_EXTENSIONS = frozenset(
    {
        ".exe", ".bat", ".cmd", ".com", ".pif", ".scr", ".vbs", ".js", ".jar",
        ".php", ".asp", ".aspx", ".jsp", ".sh", ".ps1", ".py", ".rb", ".pl",
    }
)


def normalize_filename(filename: str) -> str:
    """Drop any client-side directory part and turn whitespace runs into underscores."""
    base = os.path.basename((filename or "").replace("\\", "/"))
    return re.sub(r"\s+", "_", base.strip())


def file_extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def validate_upload(filename: str, mime_type: str, size: int, max_bytes: int) -> Optional[str]:
    """Return the reason an upload is rejected, or None when it is acceptable."""
    if size <= 0:
        return "File is empty"
    if size > max_bytes:
        return f"File size exceeds {max_bytes // (1024 * 1024)}MB limit"
    if mime_type not in ALLOWED_MIME_TYPES:
        return "File type not allowed"
    if file_extension(filename) in DANGEROUS_EXTENSIONS:
        return "File extension not allowed"
    if not matches("filename", filename):
        return "Invalid filename characters"
    return None
