"""Structured search filter built from a search string or API calls.

Google-style search:

- wrap a value in square brackets if it is more than one word
- wrap constraints in parentheses to OR them with the rest of the query
- all non-constraint text is gathered into the keywords
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from edge_search.exceptions import InvalidSortFieldError
from edge_search.search.constraints import (
    Comparison,
    ConstraintValue,
    FieldConstraint,
    SortOrder,
)
from edge_search.search.fields import FieldDescriptor, FieldRegistry
from edge_search.search.parser import NULL_VALUE, parse_into

PARAM_SORT = "sort"
PARAM_ORDER = "order"

# group id -> field name -> constraints, group 0 is the AND root
FieldGroups = dict[int, dict[str, list[FieldConstraint]]]


class Filter:
    """Grouped field constraints, sort and keywords for one search request.

    Args:
        registry: The allowed search fields. Constraints on fields that are
            not registered are ignored.
        query: Optional search string to parse straight away.
    """

    def __init__(self, registry: FieldRegistry, query: str | None = None) -> None:
        self.registry = registry
        self._groups: FieldGroups = {}
        self.keywords: str | None = None
        self._sort_field: str | None = None
        self._sort_order = SortOrder.DESC
        if query:
            self.set_query_string(query)

    # -- constraints ---------------------------------------------------------

    def add_field_value(
        self,
        field: str,
        value: ConstraintValue,
        comparison: Comparison | str = Comparison.EQUALS,
        is_default: bool = False,
        group: int = 0,
    ) -> Filter:
        """Add a value to the filter.

        The first explicit value for a field replaces every default value of
        that field in the same group. The reserved fields ``sort`` and
        ``order`` set the sort instead of adding a constraint; other unknown
        fields are ignored.

        Args:
            field: Logical field name.
            value: The value to compare against.
            comparison: A ``Comparison`` or its symbol.
            is_default: Whether the value is a default to be overridden.
            group: OR group to add the value to, 0 for the AND root.
        """
        if self.has_search_field(field):
            comparison = Comparison(comparison)
            if group < 0:
                raise ValueError(f"Group must be >= 0, got {group}")
            fields = self._groups.setdefault(group, {})
            constraints = fields.setdefault(field, [])
            if not is_default:
                constraints[:] = [c for c in constraints if not c.is_default]
            constraints.append(FieldConstraint(value, comparison, is_default))
            return self

        if field == PARAM_SORT:
            if self.has_search_field(value):
                self._sort_field = value
            return self

        if field == PARAM_ORDER:
            self._sort_order = SortOrder.from_value(value)

        return self

    def get_all_field_values(self) -> FieldGroups:
        """Get all constraints, keyed by group then field."""
        return self._groups

    def get_field_values(self, field: str, group: int = 0) -> list[FieldConstraint]:
        return list(self._groups.get(group, {}).get(field, []))

    def set_default_values(self, values: Mapping[str, Any]) -> Filter:
        """Seed group 0 with default values.

        Each value is either a plain value (compared with ``:``) or a mapping
        with ``value`` and an optional ``comparison``.
        """
        for field, value in values.items():
            comparison: Comparison | str = Comparison.EQUALS
            if isinstance(value, Mapping):
                comparison = value.get("comparison", Comparison.EQUALS)
                value = value.get("value")
            self.add_field_value(field, value, comparison, is_default=True)
        return self

    def clear(self) -> Filter:
        """Remove all constraints. Keywords and sort are kept."""
        self._groups = {}
        return self

    # -- query string --------------------------------------------------------

    def set_query_string(self, query: str) -> Filter:
        """Parse a search string into this filter."""
        return parse_into(self, query)

    def to_query_string(self) -> str:
        """Build a search string that parses back into this filter.

        Bracketing is only applied where a value needs it, so the result is
        not necessarily the string the filter was parsed from.
        """
        parts = []
        # Groups without constraints are written as "()" so that the groups
        # after them keep their numbers when the string is parsed again.
        for group in range(max(self._groups, default=-1) + 1):
            tokens = [
                f"{field}{constraint.comparison.symbol}{encode_value(constraint.value)}"
                for field, constraints in self._groups.get(group, {}).items()
                for constraint in constraints
            ]
            if group > 0:
                parts.append(f"({' '.join(tokens)})")
            elif tokens:
                parts.append(" ".join(tokens))

        if self._sort_field is not None:
            parts.append(
                f"{PARAM_SORT}{Comparison.EQUALS.symbol}{self._sort_field} "
                f"{PARAM_ORDER}{Comparison.EQUALS.symbol}{self._sort_order.value}"
            )
        elif self._sort_order is not SortOrder.DESC:
            parts.append(f"{PARAM_ORDER}{Comparison.EQUALS.symbol}{self._sort_order.value}")

        if self.keywords:
            parts.append(self.keywords)

        return " ".join(parts).strip()

    def __str__(self) -> str:
        return self.to_query_string()

    # -- sort ----------------------------------------------------------------

    @property
    def sort_field(self) -> str | None:
        return self._sort_field

    @property
    def sort_order(self) -> SortOrder:
        return self._sort_order

    def set_sort(self, field: str, order: SortOrder | str = SortOrder.DESC) -> Filter:
        """Sort results by a registered field.

        Raises:
            InvalidSortFieldError: If ``field`` is not a search field.
        """
        if not self.has_search_field(field):
            raise InvalidSortFieldError(field)

        self._sort_field = field
        self._sort_order = SortOrder.from_value(order)
        return self

    def clear_sort(self) -> Filter:
        self._sort_field = None
        return self

    # -- search fields -------------------------------------------------------

    def has_search_field(self, field: object) -> bool:
        return isinstance(field, str) and field in self.registry

    def get_search_field(self, field: str) -> FieldDescriptor:
        """Look up a search field; raises ``UnknownFieldError`` if absent."""
        return self.registry.resolve(field)


def encode_value(value: ConstraintValue) -> str:
    """Encode a constraint value for a search string."""
    if value is None:
        return NULL_VALUE
    if value is False:
        return "0"
    if value is True:
        return "1"
    text = str(value)
    if text == "" or text == NULL_VALUE:
        return f"[{text}]"
    if any(ch.isspace() for ch in text):
        return f"[{text}]"
    return text
