"""
Status and type helpers.

Older releases wrote free-form workflow statuses (``open``, ``done``,
CR- and decision-specific values ...). Rows carrying those values are
normalized to the five standard statuses when read, and the
``pmdesk-migrate-statuses`` script rewrites them in the backend.
"""

import logging

from pmdesk.models.enums import ItemStatus, ItemType

logger = logging.getLogger(__name__)


LEGACY_STATUS_MAP: dict[str, ItemStatus] = {
    # generic
    "open": ItemStatus.NOT_STARTED,
    "active": ItemStatus.IN_PROGRESS,
    "done": ItemStatus.COMPLETED,
    "pending": ItemStatus.AWAITING_RESPONSE,
    "waiting": ItemStatus.AWAITING_RESPONSE,
    "archived": ItemStatus.COMPLETED,
    # change requests
    "requested": ItemStatus.IN_PROGRESS,
    "reviewing": ItemStatus.IN_PROGRESS,
    "approved": ItemStatus.COMPLETED,
    "implemented": ItemStatus.COMPLETED,
    "canceled": ItemStatus.COMPLETED,
    # decisions
    "superseded": ItemStatus.COMPLETED,
    "deprecated": ItemStatus.COMPLETED,
}

STATUS_LABELS: dict[ItemStatus, str] = {
    ItemStatus.NOT_STARTED: "未開始",
    ItemStatus.IN_PROGRESS: "進行中",
    ItemStatus.BLOCKED: "卡關",
    ItemStatus.AWAITING_RESPONSE: "待回覆",
    ItemStatus.COMPLETED: "已完成",
}

TYPE_LABELS: dict[ItemType, str] = {
    ItemType.GENERAL: "一般",
    ItemType.PENDING: "待確認",
    ItemType.CHANGE_REQUEST: "變更",
    ItemType.DECISION: "決議",
}

_STANDARD_VALUES = {s.value for s in ItemStatus}
_STANDARD_TYPES = {t.value for t in ItemType}


def is_legacy_status(status: str) -> bool:
    """True if *status* is a known pre-migration value."""
    return status in LEGACY_STATUS_MAP


def migrate_status(status: str) -> ItemStatus:
    """Map any stored status string onto a standard ``ItemStatus``.

    Standard values pass through, legacy values are translated, and
    anything else falls back to ``not_started``.
    """
    if status in _STANDARD_VALUES:
        return ItemStatus(status)
    if status in LEGACY_STATUS_MAP:
        return LEGACY_STATUS_MAP[status]
    logger.warning("Unknown status %r, defaulting to %r", status, ItemStatus.NOT_STARTED.value)
    return ItemStatus.NOT_STARTED


def normalize_type(item_type: str) -> ItemType:
    """Map a stored item type onto ``ItemType``; unknown kinds read as ``general``."""
    if item_type in _STANDARD_TYPES:
        return ItemType(item_type)
    logger.warning("Unknown item type %r, defaulting to %r", item_type, ItemType.GENERAL.value)
    return ItemType.GENERAL


def status_label(status: str) -> str:
    """Display label for a status, tolerant of legacy values."""
    return STATUS_LABELS[migrate_status(status)]


def type_label(item_type: ItemType) -> str:
    return TYPE_LABELS.get(item_type, str(item_type))


def is_active_status(status: ItemStatus) -> bool:
    """In progress, including blocked and awaiting-response work."""
    return status in (
        ItemStatus.IN_PROGRESS,
        ItemStatus.BLOCKED,
        ItemStatus.AWAITING_RESPONSE,
    )
