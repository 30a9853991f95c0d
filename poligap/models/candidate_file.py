"""CandidateFile: a user-selected file pending validation.

Wraps name, declared MIME type and size together with an async ``read``
so the pipeline can gate on metadata before touching the bytes.
"""

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional

from fastapi import UploadFile
from pydantic import BaseModel, ConfigDict, Field

Reader = Callable[[], Awaitable[bytes]]


class CandidateFile(BaseModel):
    """Immutable handle on an uploaded document."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    mime_type: str
    size_bytes: int = Field(ge=0)
    reader: Reader = Field(exclude=True, repr=False)

    async def read(self) -> bytes:
        return await self.reader()

    @classmethod
    def from_bytes(cls, name: str, mime_type: str, content: bytes) -> "CandidateFile":
        async def _read() -> bytes:
            return content

        return cls(name=name, mime_type=mime_type, size_bytes=len(content), reader=_read)

    @classmethod
    def from_path(cls, path: Path, mime_type: str) -> "CandidateFile":
        """Lazily read a file from disk; size comes from ``stat`` only."""
        async def _read() -> bytes:
            return await asyncio.to_thread(path.read_bytes)

        return cls(
            name=path.name,
            mime_type=mime_type,
            size_bytes=path.stat().st_size,
            reader=_read,
        )

    @classmethod
    def from_upload(cls, upload: UploadFile, mime_type: Optional[str] = None) -> "CandidateFile":
        """Build from a FastAPI upload without reading its body.

        Starlette records ``size`` while spooling the multipart part; older
        versions leave it unset, so fall back to seeking the spooled file.
        """
        size = upload.size
        if size is None:
            upload.file.seek(0, 2)
            size = upload.file.tell()
            upload.file.seek(0)

        async def _read() -> bytes:
            await upload.seek(0)
            return await upload.read()

        return cls(
            name=upload.filename or "upload",
            mime_type=mime_type or upload.content_type or "",
            size_bytes=size,
            reader=_read,
        )
