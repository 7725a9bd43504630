"""Exception hierarchy for collection sync failures.

Every error carries a human-readable ``message`` and a ``details`` dict
with the identifiers (source id, field ids, item ids) a caller needs to
render a useful message to the user.  Nothing in this package retries
automatically; retrying is always the caller's decision.
"""

from __future__ import annotations

from typing import Any


class CollectionSyncError(Exception):
    """Base class for all collection sync errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class UnsupportedPropertyType(CollectionSyncError):
    """Raised when an external property type has no host field mapping."""

    def __init__(self, declared_type: str) -> None:
        self.declared_type = declared_type
        super().__init__(
            f"Unsupported property type: {declared_type!r}",
            {"declared_type": declared_type},
        )


class AuthenticationFailed(CollectionSyncError):
    """Raised when the OAuth handshake or token exchange is rejected."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, {"status_code": status_code})


class SyncConflict(CollectionSyncError):
    """Raised when the host rejects the field schema (e.g. a name collision)."""

    def __init__(self, message: str, source_id: str, field_ids: list[str]) -> None:
        self.source_id = source_id
        self.field_ids = field_ids
        super().__init__(message, {"source_id": source_id, "field_ids": field_ids})


class PartialSyncFailure(CollectionSyncError):
    """Raised when item writes failed; the sync state was not advanced."""

    def __init__(self, message: str, source_id: str, failed_item_ids: list[str]) -> None:
        self.source_id = source_id
        self.failed_item_ids = failed_item_ids
        super().__init__(
            message, {"source_id": source_id, "failed_item_ids": failed_item_ids}
        )


class SyncInProgress(CollectionSyncError):
    """Raised when a sync is requested while another is running."""

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(
            f"A sync is already running for source {source_id}",
            {"source_id": source_id},
        )
