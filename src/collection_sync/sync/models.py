"""Snapshot, state and result models shared by the sync engine."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from collection_sync.mapping.field_types import (
    CollectionField,
    ExternalProperty,
    HostFieldType,
)


class ExternalItem(BaseModel):
    """One record fetched from the external source."""

    id: str
    field_values: dict[str, Any] = Field(default_factory=dict)


class CollectionItem(BaseModel):
    """An item as upserted into the host collection."""

    id: str
    slug: str
    field_data: dict[str, Any] = Field(default_factory=dict)

    def to_host(self) -> dict[str, Any]:
        """Serialize to the shape expected by the host ``addItems`` call."""
        return {"id": self.id, "slug": self.slug, "fieldData": self.field_data}


class CollectionSnapshot(BaseModel):
    """What the host collection currently contains."""

    item_ids: set[str] = Field(default_factory=set)
    fields: list[CollectionField] = Field(default_factory=list)


class SourceSnapshot(BaseModel):
    """A complete (never paginated) fetch of the external source."""

    items: list[ExternalItem] = Field(default_factory=list)
    fields: list[ExternalProperty] = Field(default_factory=list)


class SyncState(BaseModel):
    """Integration metadata that survives between sync runs."""

    integration_id: str
    source_id: str
    source_name: str | None = None
    disabled_field_ids: set[str] = Field(default_factory=set)
    slug_field_id: str | None = None
    field_type_overrides: dict[str, HostFieldType] = Field(default_factory=dict)
    last_synced_time: datetime | None = None

    def disable_field(self, field_id: str) -> SyncState:
        """Return a copy with ``field_id`` suppressed from the live schema."""
        return self.model_copy(
            update={"disabled_field_ids": self.disabled_field_ids | {field_id}}
        )

    def enable_field(self, field_id: str) -> SyncState:
        """Return a copy with ``field_id`` re-enabled.

        Items synced while the field was disabled carry no value for it,
        so the last sync time is cleared to force a full resync.
        """
        if field_id not in self.disabled_field_ids:
            return self
        return self.model_copy(
            update={
                "disabled_field_ids": self.disabled_field_ids - {field_id},
                "last_synced_time": None,
            }
        )

    def with_slug_field(self, slug_field_id: str | None) -> SyncState:
        """Return a copy using a different slug field; always resyncs."""
        if slug_field_id == self.slug_field_id:
            return self
        return self.model_copy(
            update={"slug_field_id": slug_field_id, "last_synced_time": None}
        )


class SyncResult(BaseModel):
    """Outcome of a successful sync run."""

    success: bool
    message: str
    source_id: str = ""
    added: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    fields: list[CollectionField] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    schema_changed: bool = False
    last_synced_time: datetime | None = None
