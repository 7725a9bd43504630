"""Sync engine: diffing, reconciliation and state persistence."""

from collection_sync.sync.differ import (
    SyncDiffer,
    SyncPlan,
    coerce_field_value,
    is_unchanged_since_last_sync,
)
from collection_sync.sync.engine import Reconciler
from collection_sync.sync.host import ExternalSource, HostCollection
from collection_sync.sync.models import (
    CollectionItem,
    CollectionSnapshot,
    ExternalItem,
    SourceSnapshot,
    SyncResult,
    SyncState,
)
from collection_sync.sync.state import PluginDataKey, SyncStateRepository

__all__ = [
    "CollectionItem",
    "CollectionSnapshot",
    "ExternalItem",
    "ExternalSource",
    "HostCollection",
    "PluginDataKey",
    "Reconciler",
    "SourceSnapshot",
    "SyncDiffer",
    "SyncPlan",
    "SyncResult",
    "SyncState",
    "SyncStateRepository",
    "coerce_field_value",
    "is_unchanged_since_last_sync",
]
