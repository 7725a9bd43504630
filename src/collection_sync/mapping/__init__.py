"""Declared-type to host field-type mapping."""

from collection_sync.mapping.field_types import (
    CollectionField,
    EnumCase,
    ExternalProperty,
    HostFieldType,
)
from collection_sync.mapping.slug import slugify
from collection_sync.mapping.type_map import PropertyTypeMap

__all__ = [
    "CollectionField",
    "EnumCase",
    "ExternalProperty",
    "HostFieldType",
    "PropertyTypeMap",
    "slugify",
]
