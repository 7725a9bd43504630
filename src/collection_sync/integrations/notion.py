"""Notion database property types."""

from __future__ import annotations

from collection_sync.mapping.field_types import HostFieldType as T
from collection_sync.mapping.type_map import PropertyTypeMap

PROPERTY_TYPES: dict[str, list[T]] = {
    "checkbox": [T.BOOLEAN],
    "created_by": [T.STRING],
    "created_time": [T.DATE, T.STRING],
    "date": [T.DATE, T.STRING],
    "email": [T.STRING],
    "files": [T.STRING, T.LINK, T.IMAGE],
    "formula": [T.STRING],
    "last_edited_by": [T.STRING],
    "last_edited_time": [T.DATE, T.STRING],
    "multi_select": [T.STRING],
    "number": [T.NUMBER],
    "people": [T.STRING],
    "phone_number": [T.STRING],
    "relation": [T.STRING],
    "rich_text": [T.FORMATTED_TEXT, T.STRING],
    "rollup": [T.STRING],
    "select": [T.ENUM, T.STRING],
    "status": [T.ENUM, T.STRING],
    "title": [T.STRING],
    "unique_id": [T.STRING, T.NUMBER],
    "url": [T.LINK, T.STRING],
}

# The order in which properties are offered as a slug source.
SLUG_TYPES = ("title", "rich_text", "unique_id", "formula", "rollup")

NOTION_TYPE_MAP = PropertyTypeMap(PROPERTY_TYPES, SLUG_TYPES)
