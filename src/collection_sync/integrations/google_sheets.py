"""Google Sheets column formats.

A column's declared type is its cell ``numberFormat.type``; cells with
no explicit format are treated as ``TEXT``.
"""

from __future__ import annotations

from collection_sync.mapping.field_types import HostFieldType as T
from collection_sync.mapping.type_map import PropertyTypeMap

DEFAULT_FORMAT = "TEXT"

PROPERTY_TYPES: dict[str, list[T]] = {
    "BOOLEAN": [T.BOOLEAN],
    "TEXT": [T.STRING],
    "NUMBER": [T.NUMBER],
    "DATE": [T.DATE],
    "TIME": [T.DATE],
    "DATETIME": [T.DATE],
    "FORMULA": [T.STRING, T.NUMBER, T.BOOLEAN, T.DATE],
    "IMAGE": [T.IMAGE],
    "HYPERLINK": [T.LINK, T.STRING],
}

SLUG_TYPES = ("TEXT", "NUMBER", "FORMULA")

GOOGLE_SHEETS_TYPE_MAP = PropertyTypeMap(PROPERTY_TYPES, SLUG_TYPES)
