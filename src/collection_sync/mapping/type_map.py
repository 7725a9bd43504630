"""Mapping from external property types to host field types.

Each integration declares a static table ``declared type -> ordered host
field types``.  The first entry is the default type offered for a new
field; a user's persisted override takes precedence as long as it is one
of the listed types.  Tables are validated when they are built, so a bad
entry fails at import time rather than in the middle of a sync.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from collection_sync.errors import UnsupportedPropertyType
from collection_sync.mapping.field_types import (
    CollectionField,
    EnumCase,
    ExternalProperty,
    HostFieldType,
)

logger = logging.getLogger(__name__)


class PropertyTypeMap:
    """Immutable lookup of compatible host field types per declared type.

    Args:
        table: Declared type to an ordered sequence of host field types
            (``HostFieldType`` members or their string values).
        slug_types: Declared types usable as a slug source, in order of
            preference.

    Raises:
        ValueError: If any declared type maps to no host types, to an
            unknown host type, or lists the same host type twice.
    """

    def __init__(
        self,
        table: Mapping[str, Sequence[HostFieldType | str]],
        slug_types: Sequence[str] = (),
    ) -> None:
        resolved: dict[str, tuple[HostFieldType, ...]] = {}
        for declared_type, host_types in table.items():
            if not host_types:
                raise ValueError(
                    f"Property type {declared_type!r} maps to no host field types"
                )
            types = tuple(HostFieldType.from_value(t) for t in host_types)
            if len(set(types)) != len(types):
                raise ValueError(
                    f"Property type {declared_type!r} lists a host field type twice"
                )
            resolved[declared_type] = types

        unknown_slug_types = [t for t in slug_types if t not in resolved]
        if unknown_slug_types:
            raise ValueError(f"Slug types are not in the table: {unknown_slug_types}")

        self._table = MappingProxyType(resolved)
        self._slug_types = tuple(slug_types)

    @property
    def declared_types(self) -> frozenset[str]:
        return frozenset(self._table)

    @property
    def slug_types(self) -> tuple[str, ...]:
        return self._slug_types

    def supports(self, declared_type: str) -> bool:
        return declared_type in self._table

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def map_property_type(self, declared_type: str) -> tuple[HostFieldType, ...]:
        """Return the compatible host field types, default first.

        Raises:
            UnsupportedPropertyType: If ``declared_type`` has no entry.
        """
        try:
            return self._table[declared_type]
        except KeyError:
            raise UnsupportedPropertyType(declared_type) from None

    def default_field_type(self, declared_type: str) -> HostFieldType:
        return self.map_property_type(declared_type)[0]

    def resolve_field_type(
        self,
        declared_type: str,
        override: HostFieldType | None = None,
    ) -> HostFieldType:
        """Pick the field type for a property, honouring a user override.

        An override that is not compatible with ``declared_type`` (for
        example after the source changed the column's type) is ignored
        and the default is returned instead.
        """
        compatible = self.map_property_type(declared_type)
        if override is None:
            return compatible[0]
        if override in compatible:
            return override
        logger.warning(
            "Ignoring field type override %s for property type %s (allowed: %s)",
            override, declared_type, ", ".join(compatible),
        )
        return compatible[0]

    # ------------------------------------------------------------------
    # Field helpers
    # ------------------------------------------------------------------

    def collection_field_for_property(
        self,
        prop: ExternalProperty,
        field_type: HostFieldType | None = None,
        *,
        enabled: bool = True,
    ) -> CollectionField:
        """Build the ``CollectionField`` for an external property."""
        resolved = self.resolve_field_type(prop.declared_type, field_type)
        cases: list[EnumCase] = []
        if resolved == HostFieldType.ENUM:
            cases = [EnumCase(id=option, name=option) for option in prop.options]
        return CollectionField(
            id=prop.id,
            name=prop.name,
            type=resolved,
            enabled=enabled,
            cases=cases,
        )

    def possible_slug_properties(
        self, properties: Iterable[ExternalProperty]
    ) -> list[ExternalProperty]:
        """Return properties usable as a slug, most preferred type first.

        The sort is stable, so properties of the same type keep their
        source order.
        """
        order = {declared: index for index, declared in enumerate(self._slug_types)}
        options = [p for p in properties if p.declared_type in order]
        return sorted(options, key=lambda p: order[p.declared_type])

    def has_field_configuration_changed(
        self,
        current_fields: Sequence[CollectionField],
        properties: Iterable[ExternalProperty],
        disabled_field_ids: Iterable[str] = (),
        overrides: Mapping[str, HostFieldType] | None = None,
    ) -> bool:
        """Check whether the source schema no longer matches the stored fields.

        Returns ``True`` when the number of enabled fields differs from
        what the source now suggests, or when a field kept its id but its
        resolved type changed.
        """
        disabled = set(disabled_field_ids)
        overrides = overrides or {}
        current_by_id = {f.id: f for f in current_fields if f.enabled}

        suggested = [
            self.collection_field_for_property(p, overrides.get(p.id))
            for p in properties
            if p.id not in disabled and self.supports(p.declared_type)
        ]
        if len(suggested) != len(current_by_id):
            return True

        for field in suggested:
            current = current_by_id.get(field.id)
            if current is None or current.type != field.type:
                return True
        return False
