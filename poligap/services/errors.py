"""Exceptions raised by the validation pipeline stages.

All of them are advisory: ``validate_document`` turns each one into a
rejection verdict, so none reach the caller.
"""

from poligap.models.validation import RejectionCode


class DocumentValidationError(Exception):
    """Base class carrying the rejection code surfaced to the UI."""

    code: RejectionCode = RejectionCode.EXTRACTION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExtractionTimeout(DocumentValidationError):
    code = RejectionCode.EXTRACTION_TIMEOUT


class ExtractionFailed(DocumentValidationError):
    code = RejectionCode.EXTRACTION_FAILED


class UnsupportedType(DocumentValidationError):
    code = RejectionCode.UNSUPPORTED_TYPE
