"""Pydantic models for the document validation pipeline.

The verdict models are serialized in camelCase because the upload form
reads ``isValid``, ``details.keywordScore`` and friends directly.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RejectionCode(str, Enum):
    """Why a candidate file was not accepted for analysis."""

    INVALID_FILE_TYPE = "InvalidFileType"
    FILE_TOO_LARGE = "FileTooLarge"
    EXTRACTION_TIMEOUT = "ExtractionTimeout"
    EXTRACTION_FAILED = "ExtractionFailed"
    UNSUPPORTED_TYPE = "UnsupportedType"
    DOCUMENT_TOO_SHORT = "DocumentTooShort"
    NOT_A_POLICY_DOCUMENT = "NotAPolicyDocument"
    INSUFFICIENT_POLICY_LANGUAGE = "InsufficientPolicyLanguage"


class CamelModel(BaseModel):
    """Base model that accepts snake_case and dumps camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class GateResult(CamelModel):
    """Outcome of the file type / size gate."""

    passed: bool
    reason: str = ""
    code: Optional[RejectionCode] = None


class ExtractionResult(CamelModel):
    """Best-effort text sample pulled out of a candidate file."""

    text: str = Field(description="Extracted (possibly truncated) text")
    pages_read: int = Field(ge=0, description="Pages that yielded text")
    succeeded: bool = True


class VerdictDetails(CamelModel):
    """Diagnostics shown in the rejection dialog or kept on acceptance."""

    content_length: int = Field(ge=0)
    keyword_score: int = Field(ge=0)
    found_keywords: List[str] = Field(default_factory=list)
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    suggestion: Optional[str] = None


class ClassificationVerdict(CamelModel):
    """Terminal accept/reject structure returned by the pipeline."""

    is_valid: bool
    reason: str = ""
    code: Optional[RejectionCode] = None
    details: Optional[VerdictDetails] = None
    request_token: Optional[int] = None

    def to_response(self) -> dict:
        """Dump in the shape the upload form consumes."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
