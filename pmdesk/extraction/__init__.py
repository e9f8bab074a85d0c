"""Document extraction module: converts PDF / Word / Excel uploads to text."""

from pmdesk.extraction.errors import (
    ExtractionError,
    FileTooLargeError,
    PdfExtractionError,
    SpreadsheetExtractionError,
    UnsupportedFormatError,
    WordExtractionError,
)
from pmdesk.extraction.extractor import DocumentExtractor
from pmdesk.extraction.extractors import (
    PdfTextExtractor,
    SpreadsheetTextExtractor,
    TextExtractor,
    WordTextExtractor,
)
from pmdesk.extraction.service import (
    DocumentIngestionService,
    DocumentParser,
    ParsedDocument,
)

__all__ = [
    "DocumentExtractor",
    "DocumentIngestionService",
    "DocumentParser",
    "ExtractionError",
    "FileTooLargeError",
    "ParsedDocument",
    "PdfExtractionError",
    "PdfTextExtractor",
    "SpreadsheetExtractionError",
    "SpreadsheetTextExtractor",
    "TextExtractor",
    "UnsupportedFormatError",
    "WordExtractionError",
    "WordTextExtractor",
]
