"""Reconciler: applies a source snapshot to a host collection.

A run is strictly sequential because each step depends on the previous
one having committed:

1. set the live field schema,
2. upsert every incoming item,
3. remove items that are gone from the source,
4. persist the updated ``SyncState``.

State is only saved after all of that succeeded.  Any failure leaves the
previous state in place, and the next run re-derives its diff from the
live collection, so a plain re-run is always a safe retry.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from collection_sync.config import settings
from collection_sync.errors import PartialSyncFailure, SyncConflict, SyncInProgress
from collection_sync.mapping.field_types import CollectionField
from collection_sync.mapping.type_map import PropertyTypeMap
from collection_sync.sync.differ import SyncDiffer, SyncPlan
from collection_sync.sync.host import ExternalSource, HostCollection
from collection_sync.sync.models import (
    CollectionSnapshot,
    SourceSnapshot,
    SyncResult,
    SyncState,
)
from collection_sync.sync.state import SyncStateRepository

logger = logging.getLogger(__name__)


class Reconciler:
    """Keeps one host collection in sync with an external source.

    Only one run may be in flight per reconciler; a second call while a
    run is active raises ``SyncInProgress`` instead of interleaving with
    it, since the chunked state writes are not transactional.

    Args:
        collection: The host collection to write to.
        state_repository: Where ``SyncState`` is persisted.
        type_map: Property type table of the source's integration.
        batch_size: Items per ``add_items`` call. Defaults to
            ``settings.batch_size``.
    """

    def __init__(
        self,
        collection: HostCollection,
        state_repository: SyncStateRepository,
        type_map: PropertyTypeMap,
        *,
        batch_size: int | None = None,
    ) -> None:
        self._collection = collection
        self._state = state_repository
        self._type_map = type_map
        self._batch_size = batch_size or settings.batch_size
        self._differ = SyncDiffer()
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run(self, source: ExternalSource, state: SyncState) -> SyncResult:
        """Fetch both sides and sync.

        Reads the live collection first, then the full source snapshot.

        Raises:
            SyncInProgress: If another run is active.
        """
        async with self._exclusive(state.source_id):
            current = CollectionSnapshot(
                item_ids=set(await self._collection.get_item_ids()),
                fields=_parse_fields(await self._collection.get_fields()),
            )
            incoming = SourceSnapshot(
                fields=await source.list_properties(),
                items=await source.list_items(),
            )
            return await self._apply(current, incoming, state)

    async def sync(
        self,
        current: CollectionSnapshot,
        incoming: SourceSnapshot,
        state: SyncState,
    ) -> SyncResult:
        """Reconcile ``current`` against an already fetched ``incoming`` snapshot.

        Raises:
            SyncInProgress: If another run is active.
            SyncConflict: If the host rejects the field schema. No items
                are touched in that case.
            PartialSyncFailure: If any item upsert or the removal failed.
                The sync state is not advanced.
        """
        async with self._exclusive(state.source_id):
            return await self._apply(current, incoming, state)

    def _exclusive(self, source_id: str) -> asyncio.Lock:
        if self._lock.locked():
            raise SyncInProgress(source_id)
        return self._lock

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _apply(
        self,
        current: CollectionSnapshot,
        incoming: SourceSnapshot,
        state: SyncState,
    ) -> SyncResult:
        plan = self._differ.plan(current, incoming, state, self._type_map)
        logger.info(
            "Syncing source %s: %d fields, %d items (%d new), %d to remove",
            state.source_id, len(plan.live_fields), len(plan.items),
            len(plan.to_add), len(plan.to_remove),
        )

        await self._set_fields(plan, state)
        await self._upsert_items(plan, state)
        await self._remove_items(plan, state)

        synced_at = datetime.now(timezone.utc)
        await self._state.save(state.model_copy(update={"last_synced_time": synced_at}))

        logger.info(
            "Synced source %s: %d added, %d updated, %d removed",
            state.source_id, len(plan.to_add), len(plan.to_update), len(plan.to_remove),
        )
        return SyncResult(
            success=True,
            message=f"Successfully synced source {state.source_id}",
            source_id=state.source_id,
            added=plan.to_add,
            updated=plan.to_update,
            removed=plan.to_remove,
            fields=plan.fields,
            warnings=plan.warnings,
            schema_changed=plan.schema_changed,
            last_synced_time=synced_at,
        )

    async def _set_fields(self, plan: SyncPlan, state: SyncState) -> None:
        live = plan.live_fields
        try:
            await self._collection.set_fields([f.to_host() for f in live])
        except Exception as exc:
            logger.error("Host rejected field schema for source %s: %s", state.source_id, exc)
            raise SyncConflict(
                f"Could not update the collection fields: {exc}",
                source_id=state.source_id,
                field_ids=[f.id for f in live],
            ) from exc

    async def _upsert_items(self, plan: SyncPlan, state: SyncState) -> None:
        failed: list[str] = []
        errors: list[str] = []
        for start in range(0, len(plan.items), self._batch_size):
            batch = plan.items[start : start + self._batch_size]
            try:
                await self._collection.add_items([item.to_host() for item in batch])
            except Exception as exc:
                failed.extend(item.id for item in batch)
                errors.append(str(exc))
                logger.error(
                    "Upsert of %d items failed for source %s: %s",
                    len(batch), state.source_id, exc,
                )

        if failed:
            raise PartialSyncFailure(
                f"{len(failed)} of {len(plan.items)} items failed to sync: {'; '.join(errors)}",
                source_id=state.source_id,
                failed_item_ids=failed,
            )

    async def _remove_items(self, plan: SyncPlan, state: SyncState) -> None:
        if not plan.to_remove:
            return
        try:
            await self._collection.remove_items(plan.to_remove)
        except Exception as exc:
            logger.error("Removing items failed for source %s: %s", state.source_id, exc)
            raise PartialSyncFailure(
                f"Could not remove {len(plan.to_remove)} stale items: {exc}",
                source_id=state.source_id,
                failed_item_ids=plan.to_remove,
            ) from exc


def _parse_fields(raw: list[dict[str, Any]]) -> list[CollectionField]:
    """Validate the live collection fields, skipping ones we do not manage."""
    fields: list[CollectionField] = []
    for data in raw:
        try:
            fields.append(CollectionField.model_validate(data))
        except ValidationError:
            logger.warning("Ignoring unrecognised collection field: %r", data)
    return fields
