"""
Tests for the HTTP API

Tests cover:
- Health endpoint
- Document extraction and upload endpoints with error mapping
- Project and item endpoints
- Accepting suggestions
"""

import pytest
from fastapi.testclient import TestClient

from pmdesk.api.main import create_app
from pmdesk.context import AppContext
from pmdesk.extraction.formats import DOCX_MIME, PDF_MIME, XLSX_MIME


@pytest.fixture
def client(settings, backend):
    context = AppContext.create(settings=settings, client=backend.client())
    with TestClient(create_app(context=context)) as test_client:
        yield test_client


class TestHealthEndpoint:

    def test_health_returns_200(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert data["version"] == "0.1.0"


class TestExtractEndpoint:

    def test_extract_pdf(self, client, pdf_bytes):
        response = client.post(
            "/api/v1/extract",
            files={"file": ("two.pdf", pdf_bytes(["A", "B"]), PDF_MIME)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["text"] == "A\n\nB"
        assert data["format"] == "pdf"
        assert data["char_count"] == 4
        assert data["truncated"] is False

    def test_extract_xlsx(self, client, xlsx_bytes):
        response = client.post(
            "/api/v1/extract",
            files={"file": ("book.xlsx", xlsx_bytes({"S1": [["x", "y"]]}), XLSX_MIME)},
        )
        assert response.status_code == 200
        assert response.json()["text"] == "--- Sheet: S1 ---\nx y"

    def test_unsupported_type_415(self, client):
        response = client.post(
            "/api/v1/extract",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 415
        assert response.json()["detail"] == "不支援的檔案類型"

    def test_corrupt_file_422_with_localized_message(self, client):
        response = client.post(
            "/api/v1/extract",
            files={"file": ("broken.docx", b"not a docx", DOCX_MIME)},
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "無法讀取 Word 內容"

    def test_too_large_413(self, client, settings):
        response = client.post(
            "/api/v1/extract",
            files={"file": ("big.pdf", b"0" * (settings.max_upload_bytes + 1), PDF_MIME)},
        )
        assert response.status_code == 413


class TestProjectEndpoints:

    def test_create_list_get(self, client):
        created = client.post("/api/v1/projects", json={"name": "典藏系統"})
        assert created.status_code == 201
        project_id = created.json()["id"]

        listed = client.get("/api/v1/projects")
        assert [p["id"] for p in listed.json()] == [project_id]

        fetched = client.get(f"/api/v1/projects/{project_id}")
        assert fetched.json()["name"] == "典藏系統"
        assert fetched.json()["status"] == "active"

    def test_missing_project_404(self, client):
        assert client.get("/api/v1/projects/nope").status_code == 404

    def test_backend_failure_502(self, client, backend):
        backend.fail_when.append(lambda r: True)
        response = client.get("/api/v1/projects")
        assert response.status_code == 502
        assert response.json()["detail"] == "injected failure"

    def test_upload_stores_artifact(self, client, backend, pdf_bytes):
        response = client.post(
            "/api/v1/projects/p1/uploads",
            files={"file": ("minutes.pdf", pdf_bytes(["A"]), PDF_MIME)},
            data={"uploader_id": "u1"},
        )

        assert response.status_code == 201
        artifact = response.json()
        assert artifact["original_content"] == "A"
        assert artifact["meta"]["file_name"] == "minutes.pdf"
        assert artifact["meta"]["uploader_id"] == "u1"

        listed = client.get("/api/v1/projects/p1/artifacts").json()
        assert [a["id"] for a in listed] == [artifact["id"]]

    def test_failed_upload_stores_nothing(self, client, backend):
        response = client.post(
            "/api/v1/projects/p1/uploads",
            files={"file": ("broken.pdf", b"garbage", PDF_MIME)},
        )
        assert response.status_code == 422
        assert response.json()["detail"] == "無法讀取 PDF 內容"
        assert backend.rows("artifacts") == []


class TestItemEndpoints:

    def test_create_and_filter(self, client):
        client.post("/api/v1/projects/p1/items", json={"title": "CR one", "type": "cr"})
        client.post("/api/v1/projects/p1/items", json={"title": "Task", "status": "blocked"})

        crs = client.get("/api/v1/projects/p1/items", params={"type": "cr"}).json()
        assert [i["title"] for i in crs] == ["CR one"]

        blocked = client.get("/api/v1/projects/p1/items", params={"status": "blocked"}).json()
        assert [i["title"] for i in blocked] == ["Task"]

    def test_patch_get_delete(self, client, backend):
        item_id = client.post("/api/v1/projects/p1/items", json={"title": "Task"}).json()["id"]

        patched = client.patch(f"/api/v1/items/{item_id}", json={"status": "completed"})
        assert patched.status_code == 200
        assert patched.json()["status"] == "completed"
        assert client.get(f"/api/v1/items/{item_id}").json()["status"] == "completed"

        assert client.delete(f"/api/v1/items/{item_id}").status_code == 204
        assert client.get(f"/api/v1/items/{item_id}").status_code == 404

    def test_empty_patch_400(self, client):
        item_id = client.post("/api/v1/projects/p1/items", json={"title": "Task"}).json()["id"]
        assert client.patch(f"/api/v1/items/{item_id}", json={}).status_code == 400

    def test_link_and_unlink(self, client, backend):
        item_id = client.post("/api/v1/projects/p1/items", json={"title": "Task"}).json()["id"]

        linked = client.post(f"/api/v1/items/{item_id}/artifacts/a1")
        assert linked.status_code == 201
        assert len(backend.rows("item_artifacts")) == 1

        assert client.delete(f"/api/v1/items/{item_id}/artifacts/a1").status_code == 204
        assert client.delete(f"/api/v1/items/{item_id}/artifacts/a1").status_code == 404

    def test_accept_suggestions(self, client, backend):
        response = client.post(
            "/api/v1/projects/p1/suggestions/accept",
            json={"suggestions": [
                {"id": "s1", "type": "decision", "title": "決議：採用新版設計",
                 "confidence": 0.9, "source_artifact_id": "a1"},
                {"id": "s2", "title": "Follow up"},
            ]},
        )

        assert response.status_code == 201
        items = response.json()
        assert [i["title"] for i in items] == ["決議：採用新版設計", "Follow up"]
        assert items[0]["meta"]["confidence"] == 0.9
        assert len(backend.rows("item_artifacts")) == 1


class TestStartup:

    def test_missing_configuration_fails_startup(self, monkeypatch):
        from pmdesk.config import MissingConfigurationError, Settings

        monkeypatch.setattr("pmdesk.context.get_settings", lambda: Settings(_env_file=None))
        for name in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "VITE_SUPABASE_URL", "VITE_SUPABASE_ANON_KEY"):
            monkeypatch.delenv(name, raising=False)

        with pytest.raises(MissingConfigurationError):
            with TestClient(create_app()):
                pass


class TestItemUpdates:

    def test_patch_parent_and_source_artifact(self, client, backend):
        item_id = client.post("/api/v1/projects/p1/items", json={"title": "Task"}).json()["id"]

        patched = client.patch(
            f"/api/v1/items/{item_id}",
            json={"parent_id": "parent-1", "source_artifact_id": "a1"},
        )

        assert patched.status_code == 200
        assert patched.json()["parent_id"] == "parent-1"
        assert patched.json()["source_artifact_id"] == "a1"

    @pytest.mark.parametrize("field", ["title", "type", "status"])
    def test_null_required_column_422(self, client, backend, field):
        item_id = client.post("/api/v1/projects/p1/items", json={"title": "Task"}).json()["id"]
        requests_before = len(backend.requests)

        response = client.patch(f"/api/v1/items/{item_id}", json={field: None})

        assert response.status_code == 422
        assert len(backend.requests) == requests_before

    def test_items_with_unknown_type_listed(self, client, backend):
        backend.seed("items", project_id="p1", title="Old rule", type="rule", status="open")

        response = client.get("/api/v1/projects/p1/items")

        assert response.status_code == 200
        assert response.json()[0]["type"] == "general"


class TestUploadReading:

    @pytest.mark.asyncio
    async def test_read_stops_past_limit(self):
        import io
        from types import SimpleNamespace

        from fastapi import UploadFile

        from pmdesk.api.routes import read_upload

        upload = UploadFile(file=io.BytesIO(b"x" * 1000), filename="big.pdf")
        context = SimpleNamespace(parser=SimpleNamespace(max_upload_bytes=10))

        content = await read_upload(upload, context)

        assert len(content) == 11

    def test_oversized_upload_not_stored(self, client, backend, settings):
        response = client.post(
            "/api/v1/projects/p1/uploads",
            files={"file": ("big.pdf", b"0" * (settings.max_upload_bytes * 3), PDF_MIME)},
        )
        assert response.status_code == 413
        assert backend.rows("artifacts") == []
