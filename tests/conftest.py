"""Shared fixtures: in-process document builders and an in-memory backend."""

import io
import json
import re
from datetime import datetime, timezone
from typing import Any, Callable, Optional
from uuid import uuid4

import httpx
import pytest

from pmdesk.config import Settings
from pmdesk.storage import BackendClient, ProjectStore

BACKEND_URL = "https://backend.test"
BACKEND_KEY = "anon-test-key"


# ===== Documents =====

def build_pdf(pages: list[str]) -> bytes:
    """Minimal PDF with one Helvetica text line per page."""
    page_count = len(pages)
    objects: list[str] = [
        "<< /Type /Catalog /Pages 2 0 R >>",
        "<< /Type /Pages /Kids [{}] /Count {} >>".format(
            " ".join(f"{4 + 2 * i} 0 R" for i in range(page_count)), page_count
        ),
        "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for i, text in enumerate(pages):
        stream = f"BT /F1 24 Tf 72 700 Td ({text}) Tj ET"
        objects.append(
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
        )
        objects.append(f"<< /Length {len(stream)} >>\nstream\n{stream}\nendstream")

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1"))

    xref_at = out.tell()
    out.write(f"xref\n0 {len(objects) + 1}\n".encode("latin-1"))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(f"{offset:010d} 00000 n \n".encode("latin-1"))
    out.write(
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_at}\n%%EOF\n".encode("latin-1")
    )
    return out.getvalue()


def build_docx(paragraphs: list[str]) -> bytes:
    from docx import Document

    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    out = io.BytesIO()
    document.save(out)
    return out.getvalue()


def build_xlsx(sheets: dict[str, list[list[Any]]]) -> bytes:
    from openpyxl import Workbook

    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


@pytest.fixture
def pdf_bytes() -> Callable[[list[str]], bytes]:
    return build_pdf


@pytest.fixture
def docx_bytes() -> Callable[[list[str]], bytes]:
    return build_docx


@pytest.fixture
def xlsx_bytes() -> Callable[[dict[str, list[list[Any]]]], bytes]:
    return build_xlsx


# ===== Settings =====

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        supabase_url=BACKEND_URL,
        supabase_anon_key=BACKEND_KEY,
        max_upload_bytes=1024 * 1024,
        max_text_length=10_000,
    )


# ===== In-memory backend =====

class FakeBackend:
    """
    Just enough of the PostgREST table API for the store and scripts.

    Supports eq / neq / ilike / in / is filters, limit, and returns the
    affected rows for writes. ``fail_when`` predicates turn matching
    requests into 500 responses; rows in ``hidden`` are skipped by writes.
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_when: list[Callable[[httpx.Request], bool]] = []
        # Row ids that row-level security hides from writes
        self.hidden: set[str] = set()

    def seed(self, table: str, **row: Any) -> dict[str, Any]:
        row.setdefault("id", str(uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self.tables.setdefault(table, []).append(row)
        return row

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.get(table, [])

    # ----- Filtering -----

    @staticmethod
    def _matches(row: dict[str, Any], column: str, expr: str) -> bool:
        op, _, value = expr.partition(".")
        actual = row.get(column)
        if op == "eq":
            return actual is not None and str(actual) == value
        if op == "neq":
            return str(actual) != value
        if op == "ilike":
            pattern = re.escape(value).replace(r"\*", ".*")
            return actual is not None and re.fullmatch(pattern, str(actual), re.IGNORECASE) is not None
        if op == "in":
            options = [v.strip().strip('"') for v in value.strip("()").split(",")]
            return actual is not None and str(actual) in options
        if op == "is":
            return actual is None if value == "null" else str(actual).lower() == value
        raise AssertionError(f"unsupported filter {expr!r}")

    def _select(self, table: str, request: httpx.Request) -> list[dict[str, Any]]:
        limit: Optional[int] = None
        rows = list(self.rows(table))
        for key, expr in request.url.params.multi_items():
            if key in ("select", "order"):
                continue
            if key == "limit":
                limit = int(expr)
                continue
            rows = [r for r in rows if self._matches(r, key, expr)]
        return rows[:limit] if limit is not None else rows

    # ----- Transport -----

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if any(check(request) for check in self.fail_when):
            return httpx.Response(500, json={"message": "injected failure", "code": "XX000"})

        table = request.url.path.rsplit("/", 1)[-1]
        if request.method == "GET":
            return httpx.Response(200, json=self._select(table, request))

        if request.method == "POST":
            payload = json.loads(request.content)
            created = [self.seed(table, **row) for row in (payload if isinstance(payload, list) else [payload])]
            return httpx.Response(201, json=created)

        matched = [r for r in self._select(table, request) if r.get("id") not in self.hidden]
        if request.method == "PATCH":
            values = json.loads(request.content)
            for row in matched:
                row.update(values)
            return httpx.Response(200, json=matched)

        if request.method == "DELETE":
            ids = {id(r) for r in matched}
            self.tables[table] = [r for r in self.rows(table) if id(r) not in ids]
            return httpx.Response(200, json=matched)

        return httpx.Response(405)

    def client(self) -> BackendClient:
        return BackendClient(BACKEND_URL, BACKEND_KEY, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store(backend: FakeBackend) -> ProjectStore:
    return ProjectStore(backend.client())
