"""Sync state persistence in the collection's plugin data.

Each piece of ``SyncState`` lives under its own key and goes through
``ChunkedStore``, so any one of them may exceed the host's per-key
size limit.  Writes across keys are not transactional; the engine only
saves state at the end of a fully successful run and never runs two
syncs at once for the same collection.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum
from typing import Any

from collection_sync.mapping.field_types import HostFieldType
from collection_sync.storage.chunked import ChunkedStore
from collection_sync.sync.models import SyncState

logger = logging.getLogger(__name__)


class PluginDataKey(StrEnum):
    """Plugin data keys holding the persisted sync state."""

    INTEGRATION_ID = "integrationId"
    SOURCE_ID = "databaseId"
    SOURCE_NAME = "databaseName"
    LAST_SYNCED_TIME = "lastSyncedTime"
    DISABLED_FIELD_IDS = "disabledFieldIds"
    SLUG_FIELD_ID = "slugFieldId"
    FIELD_TYPE_OVERRIDES = "fieldTypeOverrides"


class SyncStateRepository:
    """Loads and saves ``SyncState`` through a ``ChunkedStore``.

    Args:
        store: Chunked store wrapping the collection's plugin data.
    """

    def __init__(self, store: ChunkedStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def load(self) -> SyncState | None:
        """Load the stored state.

        Returns:
            The ``SyncState``, or ``None`` if the collection has never
            been synced (no integration or source id stored).
        """
        integration_id = await self._store.read(PluginDataKey.INTEGRATION_ID)
        source_id = await self._store.read(PluginDataKey.SOURCE_ID)
        if not integration_id or not source_id:
            return None

        return SyncState(
            integration_id=integration_id,
            source_id=source_id,
            source_name=await self._store.read(PluginDataKey.SOURCE_NAME),
            disabled_field_ids=_parse_id_set(
                await self._store.read_parsed(PluginDataKey.DISABLED_FIELD_IDS)
            ),
            slug_field_id=await self._store.read(PluginDataKey.SLUG_FIELD_ID) or None,
            field_type_overrides=_parse_overrides(
                await self._store.read_parsed(PluginDataKey.FIELD_TYPE_OVERRIDES)
            ),
            last_synced_time=_parse_time(
                await self._store.read(PluginDataKey.LAST_SYNCED_TIME)
            ),
        )

    async def save(self, state: SyncState) -> None:
        """Persist every key of ``state``, one after another."""
        await self._store.write(PluginDataKey.INTEGRATION_ID, state.integration_id)
        await self._store.write(PluginDataKey.SOURCE_ID, state.source_id)
        await self._write_optional(PluginDataKey.SOURCE_NAME, state.source_name)
        await self._store.write_json(
            PluginDataKey.DISABLED_FIELD_IDS, sorted(state.disabled_field_ids)
        )
        await self._write_optional(PluginDataKey.SLUG_FIELD_ID, state.slug_field_id)
        await self._store.write_json(
            PluginDataKey.FIELD_TYPE_OVERRIDES,
            {field_id: t.value for field_id, t in sorted(state.field_type_overrides.items())},
        )
        await self._write_optional(
            PluginDataKey.LAST_SYNCED_TIME,
            state.last_synced_time.isoformat() if state.last_synced_time else None,
        )
        logger.debug("Saved sync state for source %s", state.source_id)

    async def _write_optional(self, key: str, value: str | None) -> None:
        if value is None:
            await self._store.delete(key)
        else:
            await self._store.write(key, value)


# ------------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------------


def _parse_id_set(raw: Any) -> set[str]:
    """Accept only a JSON list of strings; anything else means no ids."""
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        if raw is not None:
            logger.warning("Ignoring malformed disabled field ids: %r", raw)
        return set()
    return set(raw)


def _parse_overrides(raw: Any) -> dict[str, HostFieldType]:
    if not isinstance(raw, dict):
        return {}
    overrides: dict[str, HostFieldType] = {}
    for field_id, value in raw.items():
        try:
            overrides[field_id] = HostFieldType.from_value(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring unknown field type override %r for %s", value, field_id)
    return overrides


def _parse_time(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        logger.warning("Ignoring malformed last synced time: %r", raw)
        return None
