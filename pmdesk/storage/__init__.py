"""Storage layer: hosted backend client and project store."""

from pmdesk.storage.backend import (
    BackendClient,
    BackendError,
    Filter,
    contains,
    eq,
    ilike,
    in_,
    is_,
    neq,
)
from pmdesk.storage.repository import NotFoundError, ProjectStore

__all__ = [
    "BackendClient",
    "BackendError",
    "Filter",
    "NotFoundError",
    "ProjectStore",
    "contains",
    "eq",
    "ilike",
    "in_",
    "is_",
    "neq",
]
