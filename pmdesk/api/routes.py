"""
API Routes

REST endpoints for:
- Document text extraction
- Projects and their uploaded artifacts
- Items (tasks, pending issues, decisions, change requests)
- Accepting suggested items
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from pydantic import BaseModel, Field, field_validator

from pmdesk.context import AppContext
from pmdesk.extraction import ExtractionError, FileTooLargeError, UnsupportedFormatError
from pmdesk.models import (
    Artifact,
    DocumentFormat,
    Item,
    ItemArtifactLink,
    ItemPriority,
    ItemStatus,
    ItemType,
    Project,
    Suggestion,
)
from pmdesk.storage import BackendError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def get_context(request: Request) -> AppContext:
    """The process-wide context set up by the application lifespan."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend is not configured",
        )
    return context


@contextmanager
def translate_errors() -> Iterator[None]:
    """Turn domain exceptions into HTTP errors at the route boundary."""
    try:
        yield
    except FileTooLargeError as exc:
        raise HTTPException(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=exc.message)
    except UnsupportedFormatError as exc:
        raise HTTPException(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=exc.message)
    except ExtractionError as exc:
        raise HTTPException(status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.message)
    except NotFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc))
    except BackendError as exc:
        logger.error("Backend request failed: %s", exc)
        raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=exc.message)



async def read_upload(file: UploadFile, context: AppContext) -> bytes:
    """Read at most one byte past the upload limit so the parser can reject it."""
    return await file.read(context.parser.max_upload_bytes + 1)


# ===== Request/Response Models =====

class ExtractResponse(BaseModel):
    """Text extracted from an uploaded document."""
    filename: str
    format: DocumentFormat
    text: str
    char_count: int
    truncated: bool


class ProjectCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    pm_id: Optional[str] = None


class ItemCreateRequest(BaseModel):
    """Request to create an item in a project."""
    title: str = Field(..., min_length=1)
    type: ItemType = ItemType.GENERAL
    status: ItemStatus = ItemStatus.NOT_STARTED
    description: str = ""
    assignee_id: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[ItemPriority] = None
    parent_id: Optional[str] = None
    work_package_id: Optional[str] = None
    source_artifact_id: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)


class ItemUpdateRequest(BaseModel):
    """Partial update; only fields that are sent are written."""
    title: Optional[str] = Field(default=None, min_length=1)
    type: Optional[ItemType] = None
    status: Optional[ItemStatus] = None
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    due_date: Optional[str] = None
    priority: Optional[ItemPriority] = None
    parent_id: Optional[str] = None
    work_package_id: Optional[str] = None
    source_artifact_id: Optional[str] = None
    notes: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    @field_validator("title", "type", "status", "meta", mode="before")
    @classmethod
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("may be omitted but not set to null")
        return v


class AcceptSuggestionsRequest(BaseModel):
    suggestions: list[Suggestion] = Field(..., min_length=1)


# ===== Extraction =====

@router.post("/extract", response_model=ExtractResponse)
async def extract_document(
    file: UploadFile = File(...),
    context: AppContext = Depends(get_context),
):
    """Extract plain text from a PDF, Word or Excel upload without storing it."""
    filename = file.filename or "unknown"
    content = await read_upload(file, context)

    with translate_errors():
        parsed = await context.parser.parse_async(content, file.content_type, filename)

    return ExtractResponse(
        filename=filename,
        format=parsed.format,
        text=parsed.text,
        char_count=parsed.char_count,
        truncated=parsed.truncated,
    )


# ===== Projects =====

@router.get("/projects", response_model=list[Project])
async def list_projects(context: AppContext = Depends(get_context)):
    with translate_errors():
        return await context.store.list_projects()


@router.post("/projects", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: ProjectCreateRequest,
    context: AppContext = Depends(get_context),
):
    with translate_errors():
        return await context.store.create_project(
            name=request.name,
            description=request.description,
            pm_id=request.pm_id,
        )


@router.get("/projects/{project_id}", response_model=Project)
async def get_project(project_id: str, context: AppContext = Depends(get_context)):
    with translate_errors():
        return await context.store.get_project(project_id)


# ===== Artifacts =====

@router.post(
    "/projects/{project_id}/uploads",
    response_model=Artifact,
    status_code=status.HTTP_201_CREATED,
)
async def upload_document(
    project_id: str,
    file: UploadFile = File(...),
    uploader_id: Optional[str] = Form(default=None),
    context: AppContext = Depends(get_context),
):
    """
    Upload a document to a project.

    Supported formats: PDF, DOCX/DOC, XLSX/XLS.
    The extracted text is stored as a project artifact.
    """
    filename = file.filename or "unknown"
    content = await read_upload(file, context)

    with translate_errors():
        return await context.ingestion.ingest(
            project_id=project_id,
            filename=filename,
            content_type=file.content_type,
            content=content,
            uploader_id=uploader_id,
        )


@router.get("/projects/{project_id}/artifacts", response_model=list[Artifact])
async def list_artifacts(project_id: str, context: AppContext = Depends(get_context)):
    with translate_errors():
        return await context.store.list_artifacts(project_id)


# ===== Items =====

@router.get("/projects/{project_id}/items", response_model=list[Item])
async def list_items(
    project_id: str,
    item_status: Optional[ItemStatus] = Query(default=None, alias="status"),
    item_type: Optional[ItemType] = Query(default=None, alias="type"),
    context: AppContext = Depends(get_context),
):
    with translate_errors():
        return await context.store.list_items(project_id, status=item_status, item_type=item_type)


@router.post(
    "/projects/{project_id}/items",
    response_model=Item,
    status_code=status.HTTP_201_CREATED,
)
async def create_item(
    project_id: str,
    request: ItemCreateRequest,
    context: AppContext = Depends(get_context),
):
    with translate_errors():
        return await context.store.create_item(
            project_id=project_id,
            title=request.title,
            item_type=request.type,
            status=request.status,
            description=request.description,
            assignee_id=request.assignee_id,
            due_date=request.due_date,
            priority=request.priority,
            parent_id=request.parent_id,
            work_package_id=request.work_package_id,
            source_artifact_id=request.source_artifact_id,
            meta=request.meta,
        )


@router.get("/items/{item_id}", response_model=Item)
async def get_item(item_id: str, context: AppContext = Depends(get_context)):
    with translate_errors():
        return await context.store.get_item(item_id)


@router.patch("/items/{item_id}", response_model=Item)
async def update_item(
    item_id: str,
    request: ItemUpdateRequest,
    context: AppContext = Depends(get_context),
):
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    with translate_errors():
        return await context.store.update_item(item_id, **updates)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, context: AppContext = Depends(get_context)):
    with translate_errors():
        await context.store.delete_item(item_id)


@router.post(
    "/items/{item_id}/artifacts/{artifact_id}",
    response_model=ItemArtifactLink,
    status_code=status.HTTP_201_CREATED,
)
async def link_artifact(
    item_id: str,
    artifact_id: str,
    context: AppContext = Depends(get_context),
):
    with translate_errors():
        return await context.store.link_item_to_artifact(item_id, artifact_id)


@router.delete("/items/{item_id}/artifacts/{artifact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unlink_artifact(
    item_id: str,
    artifact_id: str,
    context: AppContext = Depends(get_context),
):
    with translate_errors():
        removed = await context.store.unlink_item_from_artifact(item_id, artifact_id)
    if not removed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item {item_id} is not linked to artifact {artifact_id}",
        )


# ===== Suggestions =====

@router.post(
    "/projects/{project_id}/suggestions/accept",
    response_model=list[Item],
    status_code=status.HTTP_201_CREATED,
)
async def accept_suggestions(
    project_id: str,
    request: AcceptSuggestionsRequest,
    context: AppContext = Depends(get_context),
):
    """Persist accepted suggestions as items, in order."""
    items: list[Item] = []
    with translate_errors():
        for suggestion in request.suggestions:
            items.append(await context.store.accept_suggestion(project_id, suggestion))
    return items
