"""
Document validation API endpoints.

Backs the upload form: a file is gated, sampled and scored, and the form
either keeps the file or shows a rejection dialog built from the verdict.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from poligap.config import get_settings
from poligap.middleware.rate_limit import get_limiter, validate_rate_limit
from poligap.models.candidate_file import CandidateFile
from poligap.services.file_gate import (
    ALLOWED_EXTENSIONS,
    ALLOWED_MIME_TYPES,
    GENERIC_MIME_TYPES,
    MAX_FILE_SIZE,
    detect_mime_type,
)
from poligap.services.validation_pipeline import SessionRegistry, validate_document

router = APIRouter(prefix="/api/documents", tags=["validation"])
limiter = get_limiter()
logger = logging.getLogger(__name__)

_session_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    """Return the process-wide upload session registry."""
    global _session_registry
    if _session_registry is None:
        _session_registry = SessionRegistry(max_sessions=get_settings().max_sessions)
    return _session_registry


@router.post("/validate")
@limiter.limit(validate_rate_limit)  # type: ignore[untyped-decorator]
async def validate_upload(
    request: Request,
    file: UploadFile = File(..., description="Policy document (PDF, Word or text, max 10MB)"),
    session_id: Optional[str] = Form(None, description="Upload form session; enables stale-result detection"),
) -> JSONResponse:
    """
    Validate an uploaded document before it is accepted for analysis.

    Always answers 200: rejections are part of the verdict, not HTTP errors.

    Args:
        file: Uploaded document
        session_id: Optional id of the upload form issuing the request

    Returns:
        200: camelCase verdict with ``requestToken`` and ``isLatest``.
        Headers ``X-Validation-Verdict`` and, on rejection, ``X-Rejection-Code``.
        422: No file in the request
        429: Rate limit exceeded
    """
    candidate = CandidateFile.from_upload(file)

    # Clients that cannot tell the type send octet-stream; look at the bytes
    if candidate.mime_type in GENERIC_MIME_TYPES and candidate.size_bytes <= MAX_FILE_SIZE:
        head = await file.read(2048)
        await file.seek(0)
        candidate = candidate.model_copy(
            update={"mime_type": detect_mime_type(head, candidate.mime_type)}
        )
        logger.debug("Sniffed %s as %s", file.filename, candidate.mime_type)

    if session_id:
        session = get_session_registry().get(session_id)
        verdict = await session.validate(candidate)
        is_latest = session.is_current(verdict.request_token)
    else:
        verdict = await validate_document(candidate)
        is_latest = True

    body: Dict[str, Any] = verdict.to_response()
    body["isLatest"] = is_latest

    headers = {"X-Validation-Verdict": "accepted" if verdict.is_valid else "rejected"}
    if verdict.code is not None:
        headers["X-Rejection-Code"] = verdict.code.value

    return JSONResponse(content=body, headers=headers)


@router.get("/constraints")
async def upload_constraints() -> Dict[str, Any]:
    """
    File picker constraints for the upload form.

    Returns:
        Allowed MIME types, extensions and the size ceiling in bytes.
    """
    return {
        "allowedMimeTypes": list(ALLOWED_MIME_TYPES),
        "allowedExtensions": list(ALLOWED_EXTENSIONS),
        "maxFileSizeBytes": MAX_FILE_SIZE,
    }
