"""
Domain records mirrored from the backend schema.

These are passive transfer shapes. The backend owns every invariant
beyond type shape (ownership, uniqueness, referential integrity).
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pmdesk.models.enums import ItemPriority, ItemStatus, ItemType, ProjectStatus
from pmdesk.models.status import migrate_status, normalize_type


class _Record(BaseModel):
    """Backend rows carry extra columns (embeddings, notes metadata ...)."""

    model_config = ConfigDict(extra="ignore", use_enum_values=False)


class Project(_Record):
    """A project owned by a project manager."""

    id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    pm_id: Optional[str] = Field(default=None, description="Owning project manager")
    deleted_at: Optional[datetime] = None
    purge_at: Optional[datetime] = None
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("meta", mode="before")
    @classmethod
    def _null_meta(cls, v: Any) -> Any:
        return {} if v is None else v


class Artifact(_Record):
    """Stored raw content of a project, e.g. text extracted from an upload."""

    id: str
    project_id: str
    content_type: str = Field(..., description="MIME type of the source")
    original_content: str = ""
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @field_validator("original_content", mode="before")
    @classmethod
    def _null_content(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("meta", mode="before")
    @classmethod
    def _null_meta(cls, v: Any) -> Any:
        return {} if v is None else v


class Item(_Record):
    """A trackable work unit belonging to a project."""

    id: str
    project_id: str
    type: ItemType = ItemType.GENERAL
    status: ItemStatus = ItemStatus.NOT_STARTED
    title: str
    description: str = ""
    assignee_id: Optional[str] = None
    due_date: Optional[str] = Field(default=None, description="ISO date")
    priority: Optional[ItemPriority] = None
    parent_id: Optional[str] = None
    work_package_id: Optional[str] = None
    source_artifact_id: Optional[str] = None
    notes: Optional[str] = None
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return normalize_type(v)
        return v

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return migrate_status(v)
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("meta", mode="before")
    @classmethod
    def _null_meta(cls, v: Any) -> Any:
        return {} if v is None else v


class WorkPackage(_Record):
    """Grouping bucket for items within a project."""

    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    status: ItemStatus = ItemStatus.NOT_STARTED
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return migrate_status(v)
        return v


class ItemArtifactLink(_Record):
    """Row of the ``item_artifacts`` junction table."""

    item_id: str
    artifact_id: str
    created_at: Optional[datetime] = None


class Suggestion(BaseModel):
    """A system-proposed item that has not been persisted yet."""

    id: str
    type: ItemType = ItemType.GENERAL
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    reason: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    assignee_id: Optional[str] = None
    due_date: Optional[str] = Field(default=None, description="ISO date")
    source_artifact_id: Optional[str] = None
