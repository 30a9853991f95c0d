"""
File gate for candidate policy documents.

Provides the checks that run before any byte of the file is read:
- File size ceiling
- MIME type allow-list
- MIME sniffing for callers without a declared type
- Filename sanitization for logs and responses
"""

import re
from pathlib import Path
from typing import Optional

import magic

from poligap.models.validation import GateResult, RejectionCode

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes
ALLOWED_MIME_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
)
ALLOWED_EXTENSIONS = (".pdf", ".doc", ".docx", ".txt")
EXTENSION_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}

FILE_TOO_LARGE_REASON = "File too large. Please upload a file smaller than 10MB."
INVALID_FILE_TYPE_REASON = (
    "Invalid file type. Please upload PDF, Word document (.doc/.docx), or text file."
)

# Types that say nothing about the content and are worth sniffing
GENERIC_MIME_TYPES = {"", "application/octet-stream"}


def check_file(mime_type: str, size_bytes: int) -> GateResult:
    """
    Decide whether a file may proceed to text extraction.

    Args:
        mime_type: Declared MIME type of the file
        size_bytes: File size in bytes

    Returns:
        GateResult with ``passed`` and, on failure, a reason and code

    Size is checked first so an oversized file is always reported as too
    large, whatever its type. Exactly MAX_FILE_SIZE bytes is allowed.
    """
    if size_bytes > MAX_FILE_SIZE:
        return GateResult(
            passed=False,
            reason=FILE_TOO_LARGE_REASON,
            code=RejectionCode.FILE_TOO_LARGE,
        )

    if mime_type not in ALLOWED_MIME_TYPES:
        return GateResult(
            passed=False,
            reason=INVALID_FILE_TYPE_REASON,
            code=RejectionCode.INVALID_FILE_TYPE,
        )

    return GateResult(passed=True)


def detect_mime_type(content: bytes, declared: Optional[str] = None) -> str:
    """
    Return the declared MIME type, or sniff one when it is missing or generic.

    Args:
        content: Leading bytes of the file (2KB is plenty for libmagic)
        declared: MIME type reported by the client, if any

    Returns:
        MIME type string
    """
    if declared and declared not in GENERIC_MIME_TYPES:
        return declared
    return magic.from_buffer(content[:2048], mime=True)


def mime_type_for_extension(filename: str) -> Optional[str]:
    """Return the allowed MIME type implied by a known document extension."""
    _, suffix = _split_extension(filename)
    return EXTENSION_MIME_TYPES.get(suffix.lower())


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename before echoing it in logs or responses.

    Args:
        filename: Original filename from upload

    Returns:
        Filename with only alphanumeric, dash, underscore and dot characters

    Security:
        - Removes directory separators (/, \\)
        - Removes parent directory references (..)
        - Removes null bytes
        - Limits length to 255 characters, keeping the extension
    """
    # Windows separators are not path separators on POSIX, normalise first
    filename = Path(filename.replace("\\", "/")).name

    filename = filename.replace("..", "").replace("/", "")
    filename = filename.replace("\0", "")
    filename = re.sub(r'[^a-zA-Z0-9._-]', '_', filename)

    stem, suffix = _split_extension(filename)
    if not stem.strip("._"):
        return "upload" + suffix

    if len(filename) > 255:
        filename = stem[:255 - len(suffix)] + suffix

    return filename


def _split_extension(filename: str) -> tuple[str, str]:
    """Split off a known document extension (case-insensitive)."""
    lowered = filename.lower()
    for extension in ALLOWED_EXTENSIONS:
        if lowered.endswith(extension):
            return filename[:-len(extension)], filename[-len(extension):]
    return filename, ""
