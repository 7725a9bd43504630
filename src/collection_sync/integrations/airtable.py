"""Airtable field types.

Link-to-record fields (``multipleRecordLinks``) are left out on purpose:
they cannot be imported, and lookup fields cover the same need.
"""

from __future__ import annotations

from collection_sync.mapping.field_types import HostFieldType as T
from collection_sync.mapping.type_map import PropertyTypeMap

PROPERTY_TYPES: dict[str, list[T]] = {
    "aiText": [T.STRING, T.FORMATTED_TEXT],
    "autoNumber": [T.NUMBER, T.STRING],
    "barcode": [T.STRING],
    "button": [T.LINK, T.STRING],
    "checkbox": [T.BOOLEAN],
    "count": [T.NUMBER],
    "createdBy": [T.STRING],
    "createdTime": [T.DATE, T.STRING],
    "currency": [T.NUMBER, T.STRING],
    "date": [T.DATE, T.STRING],
    "dateTime": [T.DATE, T.STRING],
    "duration": [T.STRING],
    "email": [T.STRING, T.LINK],
    "externalSyncSource": [T.STRING],
    "formula": [T.STRING, T.NUMBER, T.BOOLEAN, T.DATE, T.LINK, T.IMAGE],
    "lastModifiedBy": [T.STRING],
    "lastModifiedTime": [T.DATE, T.STRING],
    "multilineText": [T.STRING, T.FORMATTED_TEXT],
    "multipleAttachments": [T.IMAGE, T.FILE, T.LINK],
    "multipleCollaborators": [T.STRING],
    "multipleLookupValues": [T.STRING],
    "multipleSelects": [T.STRING, T.ENUM],
    "number": [T.NUMBER, T.STRING],
    "percent": [T.NUMBER, T.STRING],
    "phoneNumber": [T.STRING, T.LINK],
    "rating": [T.NUMBER],
    "richText": [T.FORMATTED_TEXT, T.STRING],
    "rollup": [T.STRING],
    "singleCollaborator": [T.STRING],
    "singleLineText": [T.STRING],
    "singleSelect": [T.ENUM, T.STRING],
    "url": [T.LINK, T.STRING],
}

SLUG_TYPES = ("singleLineText", "multilineText", "autoNumber", "aiText", "formula")

AIRTABLE_TYPE_MAP = PropertyTypeMap(PROPERTY_TYPES, SLUG_TYPES)
