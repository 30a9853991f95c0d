"""
Document validation pipeline.

Runs the file gate, text extraction and policy classification in order and
always returns a ClassificationVerdict, never an exception.

ValidationSession guards the upload form against stale results: every
validation gets a request token and only the newest one becomes the
session's latest verdict.
"""

import itertools
import logging
from collections import OrderedDict
from typing import Optional

from poligap.models.candidate_file import CandidateFile
from poligap.models.validation import ClassificationVerdict, RejectionCode
from poligap.services.errors import DocumentValidationError
from poligap.services.file_gate import check_file, sanitize_filename
from poligap.services.policy_classifier import classify_policy_text
from poligap.services.text_extractor import extract_text

logger = logging.getLogger(__name__)


async def validate_document(
    file: CandidateFile,
    request_token: Optional[int] = None,
) -> ClassificationVerdict:
    """
    Validate a candidate file for policy analysis.

    Args:
        file: Candidate file with name, MIME type, size and async read
        request_token: Token echoed back on the verdict

    Returns:
        ClassificationVerdict. Gate and extraction failures carry no details;
        classifier verdicts are passed through unchanged.
    """
    display_name = sanitize_filename(file.name)

    gate = check_file(file.mime_type, file.size_bytes)
    if not gate.passed:
        logger.info("Rejected %s at file gate: %s", display_name, gate.code.value)
        return ClassificationVerdict(
            is_valid=False,
            reason=gate.reason,
            code=gate.code,
            request_token=request_token,
        )

    try:
        extraction = await extract_text(file)
    except DocumentValidationError as e:
        logger.info("Extraction failed for %s: %s", display_name, e.message)
        return _error_verdict(e.message, e.code, request_token)
    except Exception as e:
        logger.exception("Unexpected error extracting %s", display_name)
        return _error_verdict(str(e), RejectionCode.EXTRACTION_FAILED, request_token)

    verdict = classify_policy_text(extraction.text)
    logger.info(
        "Validated %s: %s (score %s)",
        display_name,
        "accepted" if verdict.is_valid else verdict.code.value,
        verdict.details.keyword_score if verdict.details else "n/a",
    )
    return verdict.model_copy(update={"request_token": request_token})


def _error_verdict(
    message: str, code: RejectionCode, request_token: Optional[int]
) -> ClassificationVerdict:
    return ClassificationVerdict(
        is_valid=False,
        reason=f"Error analyzing document: {message}",
        code=code,
        request_token=request_token,
    )


class ValidationSession:
    """Tracks the newest validation for one upload form."""

    def __init__(self) -> None:
        self._tokens = itertools.count(1)
        self._current = 0
        self.latest: Optional[ClassificationVerdict] = None

    def begin(self) -> int:
        """Issue a new request token; older tokens become stale."""
        self._current = next(self._tokens)
        return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current

    async def validate(self, file: CandidateFile) -> ClassificationVerdict:
        """
        Validate a file and record the verdict if it is still the newest.

        The verdict is returned either way; callers compare
        ``verdict.request_token`` with ``is_current`` before applying it.
        """
        token = self.begin()
        verdict = await validate_document(file, request_token=token)
        if self.is_current(token):
            self.latest = verdict
        else:
            logger.debug("Discarding stale verdict for token %d", token)
        return verdict


class SessionRegistry:
    """Bounded map of client session ids to ValidationSession objects."""

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, ValidationSession]" = OrderedDict()

    def get(self, session_id: str) -> ValidationSession:
        session = self._sessions.pop(session_id, None)
        if session is None:
            session = ValidationSession()
        self._sessions[session_id] = session
        # Least recently used sessions go first
        while len(self._sessions) > self.max_sessions:
            self._sessions.popitem(last=False)
        return session

    def __len__(self) -> int:
        return len(self._sessions)
