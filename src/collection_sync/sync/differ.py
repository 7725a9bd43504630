"""Diffing a live collection against a freshly fetched source snapshot.

``SyncDiffer.plan`` is pure: it decides the field schema, the items to
upsert and the ids to remove, without touching the host.  The engine
then applies the plan in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from collection_sync.mapping.field_types import (
    CollectionField,
    ExternalProperty,
    HostFieldType,
)
from collection_sync.mapping.slug import slugify
from collection_sync.mapping.type_map import PropertyTypeMap
from collection_sync.sync.models import (
    CollectionItem,
    CollectionSnapshot,
    ExternalItem,
    SourceSnapshot,
    SyncState,
)

logger = logging.getLogger(__name__)


@dataclass
class SyncPlan:
    """Everything needed to bring a collection in line with its source."""

    fields: list[CollectionField]
    items: list[CollectionItem]
    incoming_ids: set[str]
    to_add: list[str]
    to_update: list[str]
    to_remove: list[str]
    warnings: list[str] = field(default_factory=list)
    schema_changed: bool = True

    @property
    def live_fields(self) -> list[CollectionField]:
        """The enabled fields, in source order."""
        return [f for f in self.fields if f.enabled]


class SyncDiffer:
    """Stateless helper that turns a snapshot pair into a ``SyncPlan``."""

    @staticmethod
    def build_fields(
        properties: list[ExternalProperty],
        state: SyncState,
        type_map: PropertyTypeMap,
        warnings: list[str] | None = None,
    ) -> list[CollectionField]:
        """Map source properties to collection fields, preserving source order.

        Disabled properties are kept with ``enabled=False``.  Properties
        whose declared type is not supported are skipped.
        """
        fields: list[CollectionField] = []
        for prop in properties:
            if not type_map.supports(prop.declared_type):
                logger.warning(
                    "Skipping field %s: unsupported type %s", prop.name, prop.declared_type
                )
                if warnings is not None:
                    warnings.append(
                        f"Skipping field {prop.name}: unsupported type {prop.declared_type}"
                    )
                continue
            fields.append(
                type_map.collection_field_for_property(
                    prop,
                    state.field_type_overrides.get(prop.id),
                    enabled=prop.id not in state.disabled_field_ids,
                )
            )
        return fields

    def plan(
        self,
        current: CollectionSnapshot,
        incoming: SourceSnapshot,
        state: SyncState,
        type_map: PropertyTypeMap,
    ) -> SyncPlan:
        """Compute the changes needed to make ``current`` match ``incoming``.

        ``incoming`` must be a complete snapshot: every current item id
        missing from it is scheduled for removal.
        """
        warnings: list[str] = []
        fields = self.build_fields(incoming.fields, state, type_map, warnings)
        live = {f.id: f for f in fields if f.enabled}

        schema_changed = type_map.has_field_configuration_changed(
            current.fields,
            incoming.fields,
            state.disabled_field_ids,
            state.field_type_overrides,
        )
        if schema_changed and current.fields:
            logger.info("Field configuration of source %s changed", state.source_id)

        # Later duplicates replace earlier ones, keeping first-seen order.
        unique: dict[str, ExternalItem] = {}
        for item in incoming.items:
            if item.id in unique:
                logger.warning("Duplicate item id %s in source snapshot", item.id)
            unique[item.id] = item

        items = [
            self._collection_item(item, live, state.slug_field_id, warnings)
            for item in unique.values()
        ]
        incoming_ids = set(unique)

        return SyncPlan(
            fields=fields,
            items=items,
            incoming_ids=incoming_ids,
            to_add=[i for i in unique if i not in current.item_ids],
            to_update=[i for i in unique if i in current.item_ids],
            to_remove=sorted(current.item_ids - incoming_ids),
            warnings=warnings,
            schema_changed=schema_changed,
        )

    @staticmethod
    def _collection_item(
        item: ExternalItem,
        live: dict[str, CollectionField],
        slug_field_id: str | None,
        warnings: list[str],
    ) -> CollectionItem:
        field_data: dict[str, Any] = {
            field_id: coerce_field_value(value, live[field_id])
            for field_id, value in item.field_values.items()
            if field_id in live
        }

        slug = ""
        if slug_field_id is not None:
            raw = item.field_values.get(slug_field_id)
            if raw is not None:
                slug = slugify(str(raw))
        if not slug:
            if slug_field_id is not None:
                warnings.append(f"Slug is missing for item {item.id}; using its id")
            slug = slugify(item.id) or item.id

        return CollectionItem(id=item.id, slug=slug, field_data=field_data)


_TRUE_STRINGS = frozenset({"true", "yes", "1", "checked"})


def coerce_field_value(value: Any, field: CollectionField) -> Any:
    """Convert a raw source value to the shape ``field.type`` expects.

    Values that cannot be converted become ``None``, which the host
    treats as an empty field.  Types without a conversion rule pass
    through unchanged.
    """
    if value is None:
        return None

    if field.type in (HostFieldType.STRING, HostFieldType.TITLE, HostFieldType.SLUG):
        if isinstance(value, str):
            return value
        if isinstance(value, (list, tuple)):
            return ", ".join(str(v) for v in value)
        return str(value)

    if field.type == HostFieldType.NUMBER:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
            try:
                return float(value)
            except ValueError:
                return None
        return None

    if field.type == HostFieldType.BOOLEAN:
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return bool(value)

    if field.type == HostFieldType.ENUM:
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
            if value is None:
                return None
        for case in field.cases:
            if value in (case.id, case.name):
                return case.id
        return None

    return value


def is_unchanged_since_last_sync(
    last_edited_time: datetime, last_synced_time: datetime | None
) -> bool:
    """Check whether an item was last edited before the previous sync.

    Sources report edit times rounded down to the minute, so the sync
    time is rounded the same way before comparing.
    """
    if last_synced_time is None:
        return False
    synced = last_synced_time.replace(second=0, microsecond=0)
    if synced.tzinfo is None:
        synced = synced.replace(tzinfo=timezone.utc)
    if last_edited_time.tzinfo is None:
        last_edited_time = last_edited_time.replace(tzinfo=timezone.utc)
    return synced > last_edited_time
