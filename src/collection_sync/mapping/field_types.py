"""Host field types and the field/property models that carry them.

The string values match the host CMS field-type vocabulary exactly, so a
``HostFieldType`` can be written to the host API without translation.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class HostFieldType(StrEnum):
    """Field types understood by the host collection."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    FORMATTED_TEXT = "formattedText"
    IMAGE = "image"
    LINK = "link"
    DATE = "date"
    ENUM = "enum"
    COLOR = "color"
    FILE = "file"
    SLUG = "slug"
    TITLE = "title"

    @classmethod
    def from_value(cls, value: str) -> HostFieldType:
        """Resolve a raw string to a ``HostFieldType``.

        Raises:
            ValueError: If ``value`` is not a host field type.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown host field type: {value!r}") from None


class ExternalProperty(BaseModel):
    """One property (column) in the external source's schema."""

    id: str
    name: str
    declared_type: str
    options: list[str] = Field(default_factory=list)


class EnumCase(BaseModel):
    """A single selectable option of an ``enum`` field."""

    id: str
    name: str


class CollectionField(BaseModel):
    """A typed field persisted on the host collection.

    Disabled fields stay in the configuration so they can be re-enabled
    without re-mapping, but are never part of the live schema.
    """

    id: str
    name: str
    type: HostFieldType
    enabled: bool = True
    cases: list[EnumCase] = Field(default_factory=list)

    def to_host(self) -> dict[str, Any]:
        """Serialize to the shape expected by the host ``setFields`` call."""
        data: dict[str, Any] = {"id": self.id, "name": self.name, "type": self.type.value}
        if self.type == HostFieldType.ENUM:
            data["cases"] = [case.model_dump() for case in self.cases]
        return data
