"""
Document parsing and ingestion services.

``DocumentParser`` is the call boundary the rest of the application uses
for uploads: it enforces the size limit, routes to the format
extractors and caps the output length. ``DocumentIngestionService``
turns a parsed upload into a stored project artifact.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from pmdesk.config import get_settings
from pmdesk.extraction.errors import FileTooLargeError
from pmdesk.extraction.extractor import DocumentExtractor
from pmdesk.extraction.formats import detect_format
from pmdesk.models import Artifact, DocumentFormat
from pmdesk.utils.text import truncate_text

if TYPE_CHECKING:
    from pmdesk.storage.repository import ProjectStore

logger = logging.getLogger(__name__)


@dataclass
class ParsedDocument:
    """Text extracted from one upload."""
    text: str
    format: DocumentFormat
    truncated: bool = False

    @property
    def char_count(self) -> int:
        return len(self.text)


class DocumentParser:
    """Size-limited, length-capped front door to ``DocumentExtractor``."""

    def __init__(
        self,
        extractor: Optional[DocumentExtractor] = None,
        max_upload_bytes: Optional[int] = None,
        max_text_length: Optional[int] = None,
    ):
        settings = get_settings()
        self.extractor = extractor or DocumentExtractor()
        self.max_upload_bytes = (
            max_upload_bytes if max_upload_bytes is not None else settings.max_upload_bytes
        )
        self.max_text_length = (
            max_text_length if max_text_length is not None else settings.max_text_length
        )

    def is_supported(self, content_type: Optional[str], filename: str = "") -> bool:
        fmt = detect_format(content_type, filename)
        return fmt is not None and fmt in self.extractor.formats

    def parse(
        self,
        content: bytes,
        content_type: Optional[str],
        filename: str = "",
    ) -> ParsedDocument:
        """Extract the text of one upload.

        Raises:
            FileTooLargeError: content exceeds ``max_upload_bytes``.
            UnsupportedFormatError: no extractor for the file.
            ExtractionError subclass: the format's parse failure.
        """
        if len(content) > self.max_upload_bytes:
            raise FileTooLargeError(len(content), self.max_upload_bytes)

        fmt, text = self.extractor.extract(content, content_type, filename)

        text, truncated = truncate_text(text, self.max_text_length)
        if truncated:
            logger.warning(
                "Extracted text of %s exceeds %d chars, truncated",
                filename or "<upload>", self.max_text_length,
            )
        return ParsedDocument(text=text, format=fmt, truncated=truncated)

    async def parse_async(
        self,
        content: bytes,
        content_type: Optional[str],
        filename: str = "",
    ) -> ParsedDocument:
        """Run ``parse`` in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.parse, content, content_type, filename)


class DocumentIngestionService:
    """Parse an upload and store its text as a project artifact."""

    def __init__(self, parser: DocumentParser, store: "ProjectStore"):
        self.parser = parser
        self.store = store

    async def ingest(
        self,
        project_id: str,
        filename: str,
        content_type: Optional[str],
        content: bytes,
        uploader_id: Optional[str] = None,
    ) -> Artifact:
        parsed = await self.parser.parse_async(content, content_type, filename)

        meta = {
            "channel": "upload",
            "file_name": filename,
            "file_size": len(content),
            "file_hash": hashlib.sha256(content).hexdigest(),
            "format": parsed.format.value,
            "truncated": parsed.truncated,
        }
        if uploader_id:
            meta["uploader_id"] = uploader_id

        artifact = await self.store.create_artifact(
            project_id=project_id,
            content_type=content_type or "application/octet-stream",
            original_content=parsed.text,
            meta=meta,
        )
        logger.info(
            "Stored artifact %s for %s (%d chars)", artifact.id, filename, parsed.char_count
        )
        return artifact
