"""Keep a host CMS collection in sync with Notion, Airtable or Google Sheets."""

from collection_sync.errors import (
    AuthenticationFailed,
    CollectionSyncError,
    PartialSyncFailure,
    SyncConflict,
    SyncInProgress,
    UnsupportedPropertyType,
)

__all__ = [
    "AuthenticationFailed",
    "CollectionSyncError",
    "PartialSyncFailure",
    "SyncConflict",
    "SyncInProgress",
    "UnsupportedPropertyType",
]
