"""Enumeration types for pmdesk."""

from enum import Enum


class ProjectStatus(str, Enum):
    """Lifecycle of a project."""
    ACTIVE = "active"
    ARCHIVED = "archived"
    PENDING_DELETION = "pending_deletion"  # soft-deleted, purged after 30 days
    DELETED = "deleted"


class ItemType(str, Enum):
    """Kind of trackable work unit."""
    GENERAL = "general"
    PENDING = "pending"
    DECISION = "decision"
    CHANGE_REQUEST = "cr"


class ItemStatus(str, Enum):
    """Standard item status."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    AWAITING_RESPONSE = "awaiting_response"
    COMPLETED = "completed"


class ItemPriority(str, Enum):
    """Priority level of an item."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DocumentFormat(str, Enum):
    """Document formats the text extractors understand."""
    PDF = "pdf"
    WORD = "word"
    SPREADSHEET = "spreadsheet"
