"""
Per-format text extractors.

Each extractor is a thin wrapper over a third-party parser:

- PDF         → pypdf
- Word (DOCX) → mammoth
- Spreadsheet → openpyxl (XLSX) / xlrd (legacy XLS)

Failures are logged with the parser's diagnostic and re-raised as the
format's generic extraction error.
"""

import io
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from typing import Any, Iterable

from pmdesk.extraction.errors import (
    ExtractionError,
    PdfExtractionError,
    SpreadsheetExtractionError,
    WordExtractionError,
)
from pmdesk.models.enums import DocumentFormat

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"
SHEET_HEADER = "--- Sheet: {name} ---"

# Compound File Binary signature used by legacy .xls workbooks
_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class TextExtractor(ABC):
    """Common capability: turn the raw bytes of one format into text."""

    format: DocumentFormat
    error_class: type[ExtractionError] = ExtractionError

    def extract(self, content: bytes) -> str:
        """Extract text, converting any parser failure to ``error_class``."""
        try:
            return self._extract(content)
        except Exception as exc:
            logger.error("%s parse error: %s: %s", self.format.value, type(exc).__name__, exc)
            raise self.error_class() from None

    @abstractmethod
    def _extract(self, content: bytes) -> str:
        """Format-specific extraction; may raise anything."""


class PdfTextExtractor(TextExtractor):
    """Extract text from a PDF page by page using pypdf."""

    format = DocumentFormat.PDF
    error_class = PdfExtractionError

    def _extract(self, content: bytes) -> str:
        from pypdf import PdfReader

        reader = PdfReader(io.BytesIO(content))
        if reader.is_encrypted and not reader.decrypt(""):
            raise ValueError("PDF is password protected")

        pages = [self._page_text(page) for page in reader.pages]
        text = PAGE_SEPARATOR.join(pages).strip()
        if not text:
            logger.warning("PDF extraction produced zero text, file may be scanned/image-only")
        return text

    @staticmethod
    def _page_text(page: Any) -> str:
        """Join the page's text runs with single spaces."""
        raw = page.extract_text() or ""
        runs = (line.strip() for line in raw.splitlines())
        return " ".join(run for run in runs if run)


class WordTextExtractor(TextExtractor):
    """Extract raw text from a DOCX document using mammoth."""

    format = DocumentFormat.WORD
    error_class = WordExtractionError

    def _extract(self, content: bytes) -> str:
        import mammoth

        result = mammoth.extract_raw_text(io.BytesIO(content))
        if result.messages:
            logger.warning("Word extraction warnings: %s", [str(m) for m in result.messages])
        return result.value.strip()


class SpreadsheetTextExtractor(TextExtractor):
    """Serialize every sheet of a workbook to space-delimited rows."""

    format = DocumentFormat.SPREADSHEET
    error_class = SpreadsheetExtractionError

    def _extract(self, content: bytes) -> str:
        if content.startswith(_OLE2_MAGIC):
            sheets = self._read_xls(content)
        else:
            sheets = self._read_xlsx(content)

        blocks: list[str] = []
        for name, rows in sheets:
            lines = [SHEET_HEADER.format(name=name)]
            for row in rows:
                cells = [_cell_text(value) for value in row]
                while cells and cells[-1] == "":
                    cells.pop()
                if cells:
                    lines.append(" ".join(cells))
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks).strip()

    @staticmethod
    def _read_xlsx(content: bytes) -> list[tuple[str, list[tuple]]]:
        from openpyxl import load_workbook

        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        try:
            return [
                (ws.title, list(ws.iter_rows(values_only=True)))
                for ws in wb.worksheets
            ]
        finally:
            wb.close()

    @staticmethod
    def _read_xls(content: bytes) -> list[tuple[str, list[list]]]:
        import xlrd

        book = xlrd.open_workbook(file_contents=content)
        try:
            return [
                (sheet.name, [sheet.row_values(r) for r in range(sheet.nrows)])
                for sheet in book.sheets()
            ]
        finally:
            book.release_resources()


def _cell_text(value: Any) -> str:
    """Render a cell value the way a spreadsheet shows it."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def default_extractors() -> Iterable[TextExtractor]:
    """One extractor per supported format."""
    return (PdfTextExtractor(), WordTextExtractor(), SpreadsheetTextExtractor())
