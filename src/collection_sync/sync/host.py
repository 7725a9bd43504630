"""Interfaces the sync engine consumes from the host and the external source."""

from __future__ import annotations

from typing import Any, Protocol

from collection_sync.mapping.field_types import ExternalProperty
from collection_sync.storage.chunked import PluginDataStore
from collection_sync.sync.models import ExternalItem


class HostCollection(PluginDataStore, Protocol):
    """The managed collection in the host CMS.

    ``add_items`` is an upsert: items whose id already exists are
    updated in place.
    """

    async def get_item_ids(self) -> list[str]: ...

    async def get_fields(self) -> list[dict[str, Any]]: ...

    async def set_fields(self, fields: list[dict[str, Any]]) -> None: ...

    async def add_items(self, items: list[dict[str, Any]]) -> None: ...

    async def remove_items(self, item_ids: list[str]) -> None: ...


class ExternalSource(Protocol):
    """An external database, table or sheet.

    Both methods return complete snapshots; any pagination is resolved
    inside the source before returning.
    """

    @property
    def source_id(self) -> str: ...

    async def list_properties(self) -> list[ExternalProperty]: ...

    async def list_items(self) -> list[ExternalItem]: ...
