"""
Data models for pmdesk.

Pydantic records mirrored from the backend tables plus the enums and
status helpers shared across the package.
"""

from pmdesk.models.enums import (
    DocumentFormat,
    ItemPriority,
    ItemStatus,
    ItemType,
    ProjectStatus,
)
from pmdesk.models.domain import (
    Artifact,
    Item,
    ItemArtifactLink,
    Project,
    Suggestion,
    WorkPackage,
)
from pmdesk.models.status import (
    LEGACY_STATUS_MAP,
    is_active_status,
    is_legacy_status,
    migrate_status,
    normalize_type,
    status_label,
    type_label,
)

__all__ = [
    # Enums
    "DocumentFormat",
    "ItemPriority",
    "ItemStatus",
    "ItemType",
    "ProjectStatus",
    # Records
    "Artifact",
    "Item",
    "ItemArtifactLink",
    "Project",
    "Suggestion",
    "WorkPackage",
    # Status helpers
    "LEGACY_STATUS_MAP",
    "is_active_status",
    "is_legacy_status",
    "migrate_status",
    "normalize_type",
    "status_label",
    "type_label",
]
