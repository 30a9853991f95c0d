"""
Bounded-time text extraction for candidate documents.

Only a sample of the document is needed to decide whether it reads like a
policy, so both extractors stop early:
- PDF: first 3 pages at most, stop once 2000 characters are gathered, 10s time limit
- Plain text / Word: first 5000 characters, 5s time limit

Each time limit covers the read as well as the parse. When it runs out
the pending work is cancelled; PDF page parsing runs in a worker thread and
checks a cancellation event between pages.
"""

import asyncio
import io
import logging
import re
import threading
import time
from abc import ABC, abstractmethod
from typing import List, Optional

from pypdf import PdfReader

from poligap.models.candidate_file import CandidateFile
from poligap.models.validation import ExtractionResult
from poligap.services.errors import ExtractionFailed, ExtractionTimeout, UnsupportedType

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
PDF_PAGE_CAP = 3
PDF_EARLY_EXIT_CHARS = 2000
PDF_MIN_TEXT_CHARS = 50
PDF_TIMEOUT_SECONDS = 10.0

TEXT_READ_CAP_CHARS = 5000
TEXT_TIMEOUT_SECONDS = 5.0

_TEXT_LIKE_PREFIXES = (
    "text/",
    "application/msword",
    "application/vnd.openxmlformats-officedocument",
)


def clean_extracted_text(text: str) -> str:
    """Strip page furniture and whitespace noise left by PDF text layers."""
    text = re.sub(r'Page \d+ of \d+', '', text, flags=re.IGNORECASE)
    text = re.sub(r'Confidential[^\n]*', '', text, flags=re.IGNORECASE)
    text = re.sub(r'Copyright[^\n]*', '', text, flags=re.IGNORECASE)
    text = re.sub(r'Last Modified[^\n]*', '', text, flags=re.IGNORECASE)
    text = re.sub(r'\s{3,}', ' ', text)
    text = re.sub(r'\n{3,}', '\n\n', text)
    # Words glued together by the text layer ("privacyPolicy")
    text = re.sub(r'([a-z])([A-Z])', r'\1 \2', text)
    return text.strip()


class TextExtractor(ABC):
    """Produces a bounded text sample from a candidate file."""

    timeout_seconds: float

    async def extract(self, file: CandidateFile) -> ExtractionResult:
        """
        Extract text within the extractor's time limit.

        Raises:
            ExtractionTimeout: Time limit reached, whatever was gathered so far
            ExtractionFailed: File unreadable or yielded no usable text
        """
        cancel = threading.Event()
        started = time.monotonic()
        try:
            result = await asyncio.wait_for(
                self._extract(file, cancel), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            cancel.set()
            logger.warning(
                "Extraction of %s timed out after %gs", file.name, self.timeout_seconds
            )
            raise ExtractionTimeout(
                f"Document processing timed out after {self.timeout_seconds:g} seconds"
            )

        logger.debug(
            "Extracted %d characters from %s in %.1fms",
            len(result.text), file.name, (time.monotonic() - started) * 1000,
        )
        return result

    @abstractmethod
    async def _extract(self, file: CandidateFile, cancel: threading.Event) -> ExtractionResult:
        pass


class PDFTextExtractor(TextExtractor):
    """Reads the first few pages of a PDF with pypdf."""

    def __init__(
        self,
        timeout_seconds: Optional[float] = None,
        page_cap: int = PDF_PAGE_CAP,
        early_exit_chars: int = PDF_EARLY_EXIT_CHARS,
    ):
        self.timeout_seconds = PDF_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        self.page_cap = page_cap
        self.early_exit_chars = early_exit_chars

    async def _extract(self, file: CandidateFile, cancel: threading.Event) -> ExtractionResult:
        try:
            content = await file.read()
        except Exception as e:
            raise ExtractionFailed(f"Failed to read PDF file: {e}") from e

        return await asyncio.to_thread(self._parse_pages, content, cancel)

    def _parse_pages(self, content: bytes, cancel: threading.Event) -> ExtractionResult:
        try:
            reader = PdfReader(io.BytesIO(content))
            total_pages = len(reader.pages)
        except Exception as e:
            raise ExtractionFailed(f"Unable to read PDF: {e}") from e

        page_texts: List[str] = []
        text_length = 0

        for index in range(min(total_pages, self.page_cap)):
            if cancel.is_set():
                break
            try:
                page_text = reader.pages[index].extract_text() or ""
            except Exception as e:
                logger.warning("Page %d extraction failed: %s", index + 1, e)
                continue

            page_text = page_text.strip()
            if not page_text:
                continue

            page_texts.append(page_text)
            # Length of the space-joined text so far
            text_length += len(page_text) + (1 if len(page_texts) > 1 else 0)
            if text_length > self.early_exit_chars:
                break

        text = " ".join(page_texts)
        if not page_texts or len(text.strip()) < PDF_MIN_TEXT_CHARS:
            raise ExtractionFailed("Unable to extract readable text from PDF")

        logger.info(
            "Read %d of %d PDF pages (%d characters)",
            len(page_texts), total_pages, len(text),
        )
        return ExtractionResult(
            text=clean_extracted_text(text),
            pages_read=len(page_texts),
            succeeded=True,
        )


class PlainTextExtractor(TextExtractor):
    """Decodes text-like files (including Word formats) as raw UTF-8."""

    def __init__(self, timeout_seconds: Optional[float] = None, read_cap: int = TEXT_READ_CAP_CHARS):
        self.timeout_seconds = TEXT_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        self.read_cap = read_cap

    async def _extract(self, file: CandidateFile, cancel: threading.Event) -> ExtractionResult:
        try:
            content = await file.read()
            text = content.decode("utf-8", errors="replace")
        except Exception as e:
            raise ExtractionFailed(f"Failed to read file: {e}") from e

        return ExtractionResult(text=text[:self.read_cap], pages_read=1, succeeded=True)


def get_extractor(mime_type: str) -> TextExtractor:
    """
    Pick the extractor for a MIME type.

    Raises:
        UnsupportedType: No extractor can produce text for this type
    """
    if mime_type == PDF_MIME_TYPE:
        return PDFTextExtractor()
    if mime_type.startswith(_TEXT_LIKE_PREFIXES):
        return PlainTextExtractor()
    raise UnsupportedType(f"Unsupported file type: {mime_type or 'unknown'}")


async def extract_text(file: CandidateFile) -> ExtractionResult:
    """Extract a text sample from a file that already passed the file gate."""
    return await get_extractor(file.mime_type).extract(file)
