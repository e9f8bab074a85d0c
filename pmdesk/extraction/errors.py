"""
Extraction errors.

Each carries a user-facing (zh-TW) message only. The underlying parser
exception is logged where it is caught and never handed to the caller.
"""

from typing import Optional

from pmdesk.models.enums import DocumentFormat


class ExtractionError(Exception):
    """Base class for document extraction failures."""

    default_message = "無法讀取檔案內容"
    format: Optional[DocumentFormat] = None

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PdfExtractionError(ExtractionError):
    default_message = "無法讀取 PDF 內容"
    format = DocumentFormat.PDF


class WordExtractionError(ExtractionError):
    default_message = "無法讀取 Word 內容"
    format = DocumentFormat.WORD


class SpreadsheetExtractionError(ExtractionError):
    default_message = "無法讀取 Excel 內容"
    format = DocumentFormat.SPREADSHEET


class UnsupportedFormatError(ExtractionError):
    default_message = "不支援的檔案類型"


class FileTooLargeError(ExtractionError):
    """Upload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        limit_mb = round(limit_bytes / 1024 / 1024)
        super().__init__(f"檔案大小超過限制（最大 {limit_mb}MB），請使用較小的檔案")
