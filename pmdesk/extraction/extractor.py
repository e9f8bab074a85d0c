"""
Document Extractor

Routes uploaded bytes to the matching per-format extractor by content
type / file extension so callers always receive text, never raw bytes.
"""

import logging
from typing import Iterable, Optional

from pmdesk.extraction.errors import UnsupportedFormatError
from pmdesk.extraction.extractors import TextExtractor, default_extractors
from pmdesk.extraction.formats import detect_format
from pmdesk.models.enums import DocumentFormat

logger = logging.getLogger(__name__)


class DocumentExtractor:
    """
    Format router over a registry of ``TextExtractor`` instances.

    Supported formats out of the box:
    - PDF          → PdfTextExtractor
    - DOCX / DOC   → WordTextExtractor
    - XLSX / XLS   → SpreadsheetTextExtractor

    Additional formats are added with ``register`` without touching
    callers.
    """

    def __init__(self, extractors: Optional[Iterable[TextExtractor]] = None):
        self._extractors: dict[DocumentFormat, TextExtractor] = {}
        for extractor in extractors if extractors is not None else default_extractors():
            self.register(extractor)

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def register(self, extractor: TextExtractor) -> None:
        """Register (or replace) the extractor for ``extractor.format``."""
        self._extractors[extractor.format] = extractor

    @property
    def formats(self) -> list[DocumentFormat]:
        return list(self._extractors)

    def resolve(self, content_type: Optional[str], filename: str = "") -> DocumentFormat:
        """Return the format for a file or raise ``UnsupportedFormatError``."""
        fmt = detect_format(content_type, filename)
        if fmt is None or fmt not in self._extractors:
            logger.warning(
                "Unsupported document: content_type=%r filename=%r", content_type, filename
            )
            raise UnsupportedFormatError()
        return fmt

    def extract(
        self,
        content: bytes,
        content_type: Optional[str],
        filename: str = "",
    ) -> tuple[DocumentFormat, str]:
        """
        Extract text from raw bytes based on content type / extension.

        Args:
            content:      Raw file bytes.
            content_type: Declared MIME type (may be empty).
            filename:     Original filename (used for extension fallback).

        Returns:
            (resolved format, extracted plain text)

        Raises:
            UnsupportedFormatError: no extractor handles the file.
            ExtractionError subclass: the format's generic parse failure.
        """
        fmt = self.resolve(content_type, filename)
        text = self._extractors[fmt].extract(content)
        logger.info("Extracted %d chars from %s (%s)", len(text), filename or "<upload>", fmt.value)
        return fmt, text
