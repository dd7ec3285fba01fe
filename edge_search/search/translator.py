"""Translate a Filter into a CloudSearch (2011-02-01) boolean query."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from edge_search.exceptions import (
    InvalidValueError,
    UnknownFieldError,
    UnmappedFieldError,
    UnsupportedComparisonError,
)
from edge_search.search.constraints import Comparison, ConstraintValue, FieldConstraint, SortOrder
from edge_search.search.fields import FieldDescriptor, FieldRegistry, ValueType
from edge_search.search.filter import Filter

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10

_ESCAPED = {"\\": "\\\\", "'": "\\'", '"': '\\"', "\0": "\\0"}


@dataclass
class CloudSearchQuery:
    """Query parameters for one CloudSearch request.

    Attributes:
        bq: Boolean query, ``None`` when the filter has no constraints.
        q: Free-text query from the filter keywords.
        rank: Sort field, prefixed with ``-`` for descending order.
        size: Page size.
        start: Offset of the first result.
    """

    bq: str | None = None
    q: str | None = None
    rank: str | None = None
    size: int = DEFAULT_PAGE_SIZE
    start: int = 0

    def params(self) -> dict[str, str]:
        """Parameters in request order, leaving out unset ones."""
        params: dict[str, str] = {}
        if self.bq is not None:
            params["bq"] = self.bq
        if self.q is not None:
            params["q"] = self.q
        if self.rank is not None:
            params["rank"] = self.rank
        params["size"] = str(self.size)
        params["start"] = str(self.start)
        return params

    def to_query_string(self) -> str:
        """Join the parameters as ``key=value`` pairs, without URL encoding."""
        return "&".join(f"{key}={value}" for key, value in self.params().items())

    def __str__(self) -> str:
        return self.to_query_string()


class ComparisonTranslator:
    """Build CloudSearch boolean queries from filters.

    Args:
        registry: Field mappings used to resolve every constrained field.
            Defaults to the registry of the filter being translated.
    """

    def __init__(self, registry: FieldRegistry | None = None) -> None:
        self.registry = registry

    def translate(
        self,
        search_filter: Filter,
        offset: int = 0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> CloudSearchQuery:
        """Translate a filter plus paging into query parameters.

        Raises:
            UnmappedFieldError: If a constrained field has no mapping.
            UnsupportedComparisonError: If a range is used on a text field.
            InvalidValueError: If a date value cannot be converted.
        """
        if offset < 0:
            raise ValueError(f"Offset must be >= 0, got {offset}")
        if page_size <= 0:
            raise ValueError(f"Page size must be > 0, got {page_size}")

        query = CloudSearchQuery(
            bq=self.boolean_query(search_filter),
            size=page_size,
            start=offset,
        )

        if search_filter.keywords is not None:
            query.q = escape(search_filter.keywords)

        if search_filter.sort_field is not None:
            prefix = "-" if search_filter.sort_order is SortOrder.DESC else ""
            query.rank = f"{prefix}{search_filter.sort_field}"

        logger.debug("CloudSearch query: %s", query)
        return query

    def boolean_query(self, search_filter: Filter) -> str | None:
        """Build the ``bq`` expression: group 0 ANDed, other groups as ORs."""
        registry = self.registry if self.registry is not None else search_filter.registry
        root: list[str] = []
        ors: list[str] = []

        for group in sorted(search_filter.get_all_field_values()):
            fields = search_filter.get_all_field_values()[group]
            exprs = [
                self.expression(field, constraint, registry)
                for field, constraints in fields.items()
                for constraint in constraints
            ]
            if not exprs:
                continue
            if group == 0:
                root.extend(exprs)
            else:
                ors.append(f"(or {' '.join(exprs)})")

        if not root and not ors:
            return None
        return f"(and {' '.join(root + ors)})"

    def expression(
        self,
        field: str,
        constraint: FieldConstraint,
        registry: FieldRegistry | None = None,
    ) -> str:
        """Build the expression for one constraint on a logical field.

        A field indexed under several physical names yields one expression
        per physical field, ORed together.
        """
        descriptor = self._descriptor(field, registry)
        value = prepare_value(field, constraint.value, descriptor.value_type)
        exprs = [
            _field_expression(name, constraint.comparison, descriptor.value_type, value, field)
            for name in descriptor.physical_fields
        ]
        if len(exprs) == 1:
            return exprs[0]
        return f"(or {' '.join(exprs)})"

    def _descriptor(self, field: str, registry: FieldRegistry | None) -> FieldDescriptor:
        if registry is None:
            registry = self.registry
        if registry is None:
            raise UnmappedFieldError(field)
        try:
            return registry.resolve(field)
        except UnknownFieldError:
            raise UnmappedFieldError(field) from None


def _field_expression(
    name: str,
    comparison: Comparison,
    value_type: ValueType,
    value: str,
    field: str,
) -> str:
    """Expression for a single physical field."""
    text = value_type is ValueType.TEXT

    if comparison in (Comparison.EQUALS, Comparison.LIKE):
        if text:
            return f"(field {name} '{escape(value)}')"
        return f"{name}:{value}"

    if comparison in (Comparison.NOT_EQUALS, Comparison.NOT_LIKE):
        if text:
            return f"(not {name}:'{escape(value)}')"
        return f"(not {name}:{value})"

    if comparison.is_range and text:
        raise UnsupportedComparisonError(field, comparison.symbol, value_type.value)

    # CloudSearch ranges are always inclusive, strict bounds use the same form.
    if comparison in (Comparison.GREATER, Comparison.GREATER_OR_EQUAL):
        return f"{name}:{value}.."

    if comparison in (Comparison.LESS, Comparison.LESS_OR_EQUAL):
        return f"{name}:..{value}"

    raise UnsupportedComparisonError(field, str(comparison), value_type.value)


def prepare_value(field: str, value: ConstraintValue, value_type: ValueType) -> str:
    """Convert a constraint value to its query form.

    Dates become Unix timestamps and booleans ``1``/``0``. Missing or blank
    values become ``0``.
    """
    if value_type is ValueType.DATE:
        value = to_timestamp(field, value)

    if isinstance(value, bool):
        value = int(value)

    if value is None or str(value).strip() == "":
        return "0"
    return str(value)


def to_timestamp(field: str, value: ConstraintValue) -> int | None:
    """Convert a date value to a Unix timestamp.

    Accepts ``date``/``datetime`` objects, numeric timestamps and ISO 8601
    strings. Naive datetimes are taken as UTC.

    Raises:
        InvalidValueError: If a string is not a recognised date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return _datetime_timestamp(value)
    if isinstance(value, date):
        return _datetime_timestamp(datetime(value.year, value.month, value.day))

    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidValueError(field, value, f"'{text}' is not an ISO 8601 date") from None
    return _datetime_timestamp(parsed)


def _datetime_timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def escape(value: str) -> str:
    """Backslash-escape quotes, backslashes and NUL characters."""
    return "".join(_ESCAPED.get(ch, ch) for ch in value)
