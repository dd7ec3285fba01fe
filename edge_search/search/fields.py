"""Logical search fields and their physical CloudSearch index fields."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from edge_search.exceptions import (
    ConfigValidationError,
    DuplicateFieldError,
    UnknownFieldError,
)


class ValueType(Enum):
    """How values of a field are compared in the backend."""

    TEXT = "text"
    NUMERIC = "numeric"
    DATE = "date"


@dataclass(frozen=True)
class FieldDescriptor:
    """Physical index fields and value type behind one logical field.

    A logical field may be indexed as several physical fields (for example
    localized variants); every constraint on it then fans out over all of them.
    """

    physical_fields: tuple[str, ...]
    value_type: ValueType = ValueType.TEXT

    def __post_init__(self) -> None:
        fields = self.physical_fields
        if isinstance(fields, str):
            fields = (fields,)
        fields = tuple(fields)
        if not fields:
            raise ValueError("A field descriptor needs at least one physical field")
        object.__setattr__(self, "physical_fields", fields)


class FieldRegistry:
    """Mapping of logical field names to their descriptors.

    Populated once at setup and only read afterwards, so a single registry
    can be shared by every filter and translator.
    """

    def __init__(self) -> None:
        self._fields: dict[str, FieldDescriptor] = {}

    def register(self, name: str, descriptor: FieldDescriptor) -> FieldRegistry:
        if name in self._fields:
            raise DuplicateFieldError(name)
        self._fields[name] = descriptor
        return self

    def resolve(self, name: str) -> FieldDescriptor:
        try:
            return self._fields[name]
        except KeyError:
            raise UnknownFieldError(name) from None

    def contains(self, name: str | None) -> bool:
        return name in self._fields

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def items(self) -> Iterator[tuple[str, FieldDescriptor]]:
        return iter(self._fields.items())

    @classmethod
    def from_mapping(cls, fields: Mapping[str, Any] | list[str]) -> FieldRegistry:
        """Build a registry from configuration data.

        Args:
            fields: Either a list of names (text fields indexed under the
                same name) or a mapping of name to a table with ``fields``
                (a physical name or list of names, defaults to the logical
                name) and ``type`` (``text``, ``numeric`` or ``date``).

        Raises:
            ConfigValidationError: If a field table is malformed.
        """
        registry = cls()
        if isinstance(fields, list):
            for name in fields:
                registry.register(name, FieldDescriptor((name,)))
            return registry

        for name, table in fields.items():
            key = f"fields.{name}"
            if isinstance(table, str):
                table = {"fields": table}
            if not isinstance(table, Mapping):
                raise ConfigValidationError(key, table, "must be a table or a physical field name")

            physical = table.get("fields", name)
            if isinstance(physical, str):
                physical = [physical]
            if not isinstance(physical, list) or not physical:
                raise ConfigValidationError(
                    f"{key}.fields", physical, "must be a string or a non-empty list"
                )
            if not all(isinstance(p, str) for p in physical):
                raise ConfigValidationError(f"{key}.fields", physical, "must contain strings")

            type_name = table.get("type", ValueType.TEXT.value)
            try:
                value_type = ValueType(type_name)
            except ValueError:
                allowed = ", ".join(t.value for t in ValueType)
                raise ConfigValidationError(
                    f"{key}.type", type_name, f"must be one of: {allowed}"
                ) from None

            registry.register(name, FieldDescriptor(tuple(physical), value_type))
        return registry
