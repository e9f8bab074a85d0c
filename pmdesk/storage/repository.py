"""
Project store: typed CRUD over the hosted backend tables.

Tables:
- projects
- artifacts
- items
- item_artifacts (item ↔ artifact links)
- work_packages
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from pmdesk.models import (
    Artifact,
    Item,
    ItemArtifactLink,
    ItemPriority,
    ItemStatus,
    ItemType,
    Project,
    ProjectStatus,
    Suggestion,
    WorkPackage,
)
from pmdesk.storage.backend import BackendClient, contains, eq

logger = logging.getLogger(__name__)

PROJECTS = "projects"
ARTIFACTS = "artifacts"
ITEMS = "items"
ITEM_ARTIFACTS = "item_artifacts"
WORK_PACKAGES = "work_packages"

PURGE_GRACE_PERIOD = timedelta(days=30)


class NotFoundError(LookupError):
    """A single-row lookup matched nothing (or nothing visible)."""

    def __init__(self, table: str, row_id: str):
        self.table = table
        self.row_id = row_id
        super().__init__(f"{table} row not found: {row_id}")


def _jsonable(values: dict[str, Any]) -> dict[str, Any]:
    """Enum members to their values, datetimes to ISO strings."""
    out: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, datetime):
            value = value.isoformat()
        out[key] = value
    return out


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ProjectStore:
    """Service class for backend CRUD operations."""

    def __init__(self, client: BackendClient):
        self.client = client

    def _single(self, table: str, row_id: str, rows: list[dict[str, Any]]) -> dict[str, Any]:
        if not rows:
            raise NotFoundError(table, row_id)
        return rows[0]

    # ----- Projects -----

    async def list_projects(self, status: Optional[ProjectStatus] = None) -> list[Project]:
        """List projects, newest first."""
        filters = [eq("status", status.value)] if status else []
        rows = await self.client.select(
            PROJECTS, filters=filters, order="created_at", descending=True
        )
        return [Project.model_validate(r) for r in rows]

    async def get_project(self, project_id: str) -> Project:
        rows = await self.client.select(PROJECTS, filters=[eq("id", project_id)], limit=1)
        return Project.model_validate(self._single(PROJECTS, project_id, rows))

    async def create_project(
        self,
        name: str,
        description: Optional[str] = None,
        pm_id: Optional[str] = None,
        meta: Optional[dict[str, Any]] = None,
    ) -> Project:
        rows = await self.client.insert(PROJECTS, {
            "name": name,
            "description": description,
            "status": ProjectStatus.ACTIVE.value,
            "pm_id": pm_id,
            "meta": meta or {},
        })
        return Project.model_validate(rows[0])

    async def update_project(self, project_id: str, **updates: Any) -> Project:
        rows = await self.client.update(PROJECTS, _jsonable(updates), [eq("id", project_id)])
        return Project.model_validate(self._single(PROJECTS, project_id, rows))

    async def soft_delete_project(self, project_id: str) -> Project:
        """Mark a project for deletion; it is purged after the grace period."""
        deleted_at = _now()
        return await self.update_project(
            project_id,
            status=ProjectStatus.PENDING_DELETION,
            deleted_at=deleted_at,
            purge_at=deleted_at + PURGE_GRACE_PERIOD,
        )

    async def restore_project(self, project_id: str) -> Project:
        return await self.update_project(
            project_id, status=ProjectStatus.ACTIVE, deleted_at=None, purge_at=None
        )

    # ----- Artifacts -----

    async def list_artifacts(self, project_id: str) -> list[Artifact]:
        rows = await self.client.select(
            ARTIFACTS,
            filters=[eq("project_id", project_id)],
            order="created_at",
            descending=True,
        )
        return [Artifact.model_validate(r) for r in rows]

    async def get_artifact(self, artifact_id: str) -> Artifact:
        rows = await self.client.select(ARTIFACTS, filters=[eq("id", artifact_id)], limit=1)
        return Artifact.model_validate(self._single(ARTIFACTS, artifact_id, rows))

    async def create_artifact(
        self,
        project_id: str,
        content_type: str,
        original_content: str,
        meta: Optional[dict[str, Any]] = None,
    ) -> Artifact:
        rows = await self.client.insert(ARTIFACTS, {
            "project_id": project_id,
            "content_type": content_type,
            "original_content": original_content,
            "meta": meta or {},
        })
        return Artifact.model_validate(rows[0])

    async def delete_artifact(self, artifact_id: str) -> None:
        await self.client.delete(ITEM_ARTIFACTS, [eq("artifact_id", artifact_id)])
        rows = await self.client.delete(ARTIFACTS, [eq("id", artifact_id)])
        self._single(ARTIFACTS, artifact_id, rows)

    # ----- Items -----

    async def list_items(
        self,
        project_id: str,
        status: Optional[ItemStatus] = None,
        item_type: Optional[ItemType] = None,
    ) -> list[Item]:
        """List a project's items, newest first, optionally filtered."""
        filters = [eq("project_id", project_id)]
        if status:
            filters.append(eq("status", status.value))
        if item_type:
            filters.append(eq("type", item_type.value))
        rows = await self.client.select(
            ITEMS, filters=filters, order="created_at", descending=True
        )
        return [Item.model_validate(r) for r in rows]

    async def get_item(self, item_id: str) -> Item:
        rows = await self.client.select(ITEMS, filters=[eq("id", item_id)], limit=1)
        return Item.model_validate(self._single(ITEMS, item_id, rows))

    async def find_items_by_title(
        self,
        pattern: str,
        columns: str = "id,title,status,type,created_at",
    ) -> list[dict[str, Any]]:
        """Rows whose title contains *pattern*, case-insensitively.

        Returns raw rows since callers usually select a column subset.
        """
        return await self.client.select(ITEMS, columns=columns, filters=[contains("title", pattern)])

    async def create_item(
        self,
        project_id: str,
        title: str,
        item_type: ItemType = ItemType.GENERAL,
        status: ItemStatus = ItemStatus.NOT_STARTED,
        description: str = "",
        assignee_id: Optional[str] = None,
        due_date: Optional[str] = None,
        priority: Optional[ItemPriority] = None,
        parent_id: Optional[str] = None,
        work_package_id: Optional[str] = None,
        source_artifact_id: Optional[str] = None,
        meta: Optional[dict[str, Any]] = None,
    ) -> Item:
        rows = await self.client.insert(ITEMS, {
            "project_id": project_id,
            "type": item_type.value,
            "status": status.value,
            "title": title,
            "description": description,
            "assignee_id": assignee_id,
            "due_date": due_date,
            "priority": (priority or ItemPriority.MEDIUM).value,
            "parent_id": parent_id,
            "work_package_id": work_package_id,
            "source_artifact_id": source_artifact_id,
            "meta": meta or {},
        })
        return Item.model_validate(rows[0])

    async def update_item(self, item_id: str, **updates: Any) -> Item:
        values = _jsonable(updates)
        values["updated_at"] = _now().isoformat()
        rows = await self.client.update(ITEMS, values, [eq("id", item_id)])
        return Item.model_validate(self._single(ITEMS, item_id, rows))

    async def update_item_status(self, item_id: str, status: ItemStatus) -> Item:
        return await self.update_item(item_id, status=status)

    async def delete_item(self, item_id: str, unlink: bool = True) -> None:
        """Delete an item, first removing its artifact links unless *unlink* is off."""
        if unlink:
            await self.delete_item_artifact_links(item_id)
        rows = await self.client.delete(ITEMS, [eq("id", item_id)])
        self._single(ITEMS, item_id, rows)

    # ----- Item ↔ artifact links -----

    async def link_item_to_artifact(self, item_id: str, artifact_id: str) -> ItemArtifactLink:
        rows = await self.client.insert(
            ITEM_ARTIFACTS, {"item_id": item_id, "artifact_id": artifact_id}
        )
        return ItemArtifactLink.model_validate(rows[0])

    async def unlink_item_from_artifact(self, item_id: str, artifact_id: str) -> int:
        rows = await self.client.delete(
            ITEM_ARTIFACTS, [eq("item_id", item_id), eq("artifact_id", artifact_id)]
        )
        return len(rows)

    async def list_item_artifacts(self, item_id: str) -> list[ItemArtifactLink]:
        rows = await self.client.select(ITEM_ARTIFACTS, filters=[eq("item_id", item_id)])
        return [ItemArtifactLink.model_validate(r) for r in rows]

    async def delete_item_artifact_links(self, item_id: str) -> int:
        """Remove every artifact link of an item; returns rows deleted."""
        rows = await self.client.delete(ITEM_ARTIFACTS, [eq("item_id", item_id)])
        return len(rows)

    # ----- Work packages -----

    async def list_work_packages(self, project_id: str) -> list[WorkPackage]:
        rows = await self.client.select(
            WORK_PACKAGES, filters=[eq("project_id", project_id)], order="created_at"
        )
        return [WorkPackage.model_validate(r) for r in rows]

    async def create_work_package(
        self,
        project_id: str,
        title: str,
        description: Optional[str] = None,
    ) -> WorkPackage:
        rows = await self.client.insert(WORK_PACKAGES, {
            "project_id": project_id,
            "title": title,
            "description": description,
            "status": ItemStatus.NOT_STARTED.value,
        })
        return WorkPackage.model_validate(rows[0])

    # ----- Suggestions -----

    async def accept_suggestion(self, project_id: str, suggestion: Suggestion) -> Item:
        """Persist a suggestion as a new item, linked to its source artifact."""
        meta: dict[str, Any] = {"suggestion_id": suggestion.id}
        if suggestion.confidence is not None:
            meta["confidence"] = suggestion.confidence
        if suggestion.reason:
            meta["reason"] = suggestion.reason

        item = await self.create_item(
            project_id=project_id,
            title=suggestion.title,
            item_type=suggestion.type,
            description=suggestion.description or "",
            assignee_id=suggestion.assignee_id,
            due_date=suggestion.due_date,
            source_artifact_id=suggestion.source_artifact_id,
            meta=meta,
        )
        if suggestion.source_artifact_id:
            await self.link_item_to_artifact(item.id, suggestion.source_artifact_id)
        logger.info("Accepted suggestion %s as item %s", suggestion.id, item.id)
        return item
