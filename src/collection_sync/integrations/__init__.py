"""Per-integration property type tables."""

from __future__ import annotations

from enum import StrEnum

from collection_sync.integrations.airtable import AIRTABLE_TYPE_MAP
from collection_sync.integrations.google_sheets import GOOGLE_SHEETS_TYPE_MAP
from collection_sync.integrations.notion import NOTION_TYPE_MAP
from collection_sync.mapping.type_map import PropertyTypeMap


class Integration(StrEnum):
    """External sources a collection can be synced from."""

    AIRTABLE = "airtable"
    NOTION = "notion"
    GOOGLE_SHEETS = "google-sheets"


_TYPE_MAPS: dict[Integration, PropertyTypeMap] = {
    Integration.AIRTABLE: AIRTABLE_TYPE_MAP,
    Integration.NOTION: NOTION_TYPE_MAP,
    Integration.GOOGLE_SHEETS: GOOGLE_SHEETS_TYPE_MAP,
}


def get_integration(value: str) -> Integration:
    """Resolve a stored integration id.

    Raises:
        ValueError: If ``value`` is not a known integration.
    """
    try:
        return Integration(value)
    except ValueError:
        raise ValueError(f"Unknown integration: {value!r}") from None


def get_type_map(integration: Integration | str) -> PropertyTypeMap:
    return _TYPE_MAPS[get_integration(integration)]


__all__ = [
    "AIRTABLE_TYPE_MAP",
    "GOOGLE_SHEETS_TYPE_MAP",
    "Integration",
    "NOTION_TYPE_MAP",
    "get_integration",
    "get_type_map",
]
