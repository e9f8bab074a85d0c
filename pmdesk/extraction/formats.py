"""MIME type / extension resolution for uploaded documents."""

from typing import Optional

from pmdesk.models.enums import DocumentFormat

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MIME = "application/vnd.ms-excel"

MIME_FORMATS: dict[str, DocumentFormat] = {
    PDF_MIME: DocumentFormat.PDF,
    DOCX_MIME: DocumentFormat.WORD,
    DOC_MIME: DocumentFormat.WORD,
    XLSX_MIME: DocumentFormat.SPREADSHEET,
    XLS_MIME: DocumentFormat.SPREADSHEET,
}

EXTENSION_FORMATS: dict[str, DocumentFormat] = {
    "pdf": DocumentFormat.PDF,
    "docx": DocumentFormat.WORD,
    "doc": DocumentFormat.WORD,
    "xlsx": DocumentFormat.SPREADSHEET,
    "xls": DocumentFormat.SPREADSHEET,
}


def file_extension(filename: str) -> str:
    """Return lowercased file extension without the dot."""
    if "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    return ""


def detect_format(content_type: Optional[str], filename: str = "") -> Optional[DocumentFormat]:
    """Resolve a document format from the declared MIME type, then the extension.

    Parameters such as ``; charset=...`` on the MIME type are ignored.
    Returns ``None`` when neither identifies a supported format.
    """
    if content_type:
        mime = content_type.split(";", 1)[0].strip().lower()
        if mime in MIME_FORMATS:
            return MIME_FORMATS[mime]
    return EXTENSION_FORMATS.get(file_extension(filename))
