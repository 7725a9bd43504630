"""Shared in-memory fakes for the host plugin data API and collection.

Provides:
- InMemoryPluginData: dict-backed plugin data store with optional failure injection
- FakeCollection: records every host collection call in order
- FakeSource: fixed external snapshot
"""

from __future__ import annotations

from typing import Any

import pytest

from collection_sync.mapping.field_types import ExternalProperty
from collection_sync.sync.models import ExternalItem


class InMemoryPluginData:
    """Dict-backed ``PluginDataStore``; ``None`` deletes a key."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.writes: list[tuple[str, str | None]] = []
        self.fail_on_delete = False
        self.fail_on_keys: set[str] = set()

    async def get_plugin_data(self, key: str) -> str | None:
        return self.data.get(str(key))

    async def set_plugin_data(self, key: str, value: str | None) -> None:
        self.writes.append((str(key), value))
        if str(key) in self.fail_on_keys:
            raise RuntimeError(f"write to {key} rejected")
        if value is None:
            if self.fail_on_delete:
                raise RuntimeError("delete rejected")
            self.data.pop(str(key), None)
        else:
            self.data[str(key)] = value

    async def get_plugin_data_keys(self) -> list[str]:
        return list(self.data)


class FakeCollection(InMemoryPluginData):
    """Host collection double that applies calls to an in-memory item map."""

    def __init__(self, item_ids: list[str] | None = None) -> None:
        super().__init__()
        self.items: dict[str, dict[str, Any]] = {
            item_id: {"id": item_id} for item_id in item_ids or []
        }
        self.fields: list[dict[str, Any]] = []
        self.calls: list[str] = []
        self.set_fields_calls: list[list[dict[str, Any]]] = []
        self.added: list[list[dict[str, Any]]] = []
        self.removed: list[list[str]] = []
        self.set_fields_error: Exception | None = None
        self.add_items_error: Exception | None = None
        self.remove_items_error: Exception | None = None

    async def get_item_ids(self) -> list[str]:
        return list(self.items)

    async def get_fields(self) -> list[dict[str, Any]]:
        return list(self.fields)

    async def set_fields(self, fields: list[dict[str, Any]]) -> None:
        self.calls.append("set_fields")
        if self.set_fields_error is not None:
            raise self.set_fields_error
        self.set_fields_calls.append(fields)
        self.fields = fields

    async def add_items(self, items: list[dict[str, Any]]) -> None:
        self.calls.append("add_items")
        if self.add_items_error is not None:
            raise self.add_items_error
        self.added.append(items)
        for item in items:
            self.items[item["id"]] = item

    async def remove_items(self, item_ids: list[str]) -> None:
        self.calls.append("remove_items")
        if self.remove_items_error is not None:
            raise self.remove_items_error
        self.removed.append(item_ids)
        for item_id in item_ids:
            self.items.pop(item_id, None)


class FakeSource:
    """External source returning a fixed snapshot."""

    def __init__(
        self,
        properties: list[ExternalProperty],
        items: list[ExternalItem],
        source_id: str = "db-1",
    ) -> None:
        self._properties = properties
        self._items = items
        self._source_id = source_id

    @property
    def source_id(self) -> str:
        return self._source_id

    async def list_properties(self) -> list[ExternalProperty]:
        return list(self._properties)

    async def list_items(self) -> list[ExternalItem]:
        return list(self._items)


@pytest.fixture
def plugin_data() -> InMemoryPluginData:
    return InMemoryPluginData()


@pytest.fixture
def collection() -> FakeCollection:
    return FakeCollection()
