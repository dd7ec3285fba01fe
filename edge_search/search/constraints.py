"""Constraint data classes shared by the parser, filter and translator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class Comparison(str, Enum):
    """Comparison operators, valued by their query-string symbol."""

    EQUALS = ":"
    NOT_EQUALS = "!"
    LIKE = "~"
    NOT_LIKE = "!~"
    GREATER = ">"
    GREATER_OR_EQUAL = ">="
    LESS = "<"
    LESS_OR_EQUAL = "<="

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_range(self) -> bool:
        return self in _RANGE_COMPARISONS

    @property
    def is_negated(self) -> bool:
        return self in (Comparison.NOT_EQUALS, Comparison.NOT_LIKE)


_RANGE_COMPARISONS = frozenset(
    {
        Comparison.GREATER,
        Comparison.GREATER_OR_EQUAL,
        Comparison.LESS,
        Comparison.LESS_OR_EQUAL,
    }
)


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_value(cls, value: object) -> SortOrder:
        """Anything other than ``desc`` sorts ascending."""
        if value == cls.DESC.value:
            return cls.DESC
        return cls.ASC


# Constraint values: text from a query string, or whatever the caller passed
# to Filter.add_field_value (``None`` means an explicit null). ``date`` covers
# ``datetime`` as well.
ConstraintValue = str | int | float | bool | date | None


@dataclass
class FieldConstraint:
    """One value constraint on a logical field within a group."""

    value: ConstraintValue
    comparison: Comparison = Comparison.EQUALS
    is_default: bool = False
