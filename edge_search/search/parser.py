"""Tokenize Google-style search strings into field constraints and keywords.

A query is split in two passes. The first pass cuts out flat parenthesised
OR-groups; the second pass splits each part into ``field<comparator>value``
constraints and free text::

    status:active (priority>5 owner:[jane doe]) urgent

Group 0 holds ``status:active`` and the keywords ``urgent``; group 1 holds
``priority>5`` and ``owner:jane doe``.

Parsing never fails: anything the grammar does not recognise is kept as
keyword text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources
from typing import TYPE_CHECKING, Any

from lark import Lark, Token, Transformer

from edge_search.search.constraints import Comparison, ConstraintValue

if TYPE_CHECKING:
    from edge_search.search.fields import FieldRegistry
    from edge_search.search.filter import Filter

logger = logging.getLogger(__name__)

NULL_VALUE = "null"


def _load_grammar(name: str) -> str:
    """Load a Lark grammar from the package resources."""
    return resources.files("edge_search.search").joinpath(name).read_text()


_group_parser = Lark(_load_grammar("groups.lark"), parser="lalr", lexer="basic")
_term_parser = Lark(_load_grammar("terms.lark"), parser="lalr")


@dataclass
class Term:
    """A single ``field<comparator>value`` token."""

    field: str
    comparison: Comparison
    value: ConstraintValue


@dataclass
class QueryPart:
    """Constraints and leftover text of one group."""

    group: int
    terms: list[Term]
    text: str


class _TermTransformer(Transformer):
    """Turn ``constraint`` subtrees into ``Term`` objects, keep text tokens."""

    def start(self, items: list[Any]) -> list[Term | Token]:
        return items

    def constraint(self, items: list[Any]) -> Term:
        field, op, value = items
        return Term(str(field), Comparison(str(op)), decode_value(str(value)))


_term_transformer = _TermTransformer()


def split_groups(query: str) -> tuple[str, list[str]]:
    """Split a query into the ungrouped text and the inner text of each group.

    Returns:
        Tuple of (group 0 text, list of group texts in order of appearance).
    """
    root: list[str] = []
    groups: list[str] = []
    # TEXT matches any single character, so parsing never fails.
    for token in _group_parser.parse(query).children:
        if token.type == "GROUP":
            groups.append(token.value[1:-1])
        else:
            root.append(token.value)
    return "".join(root), groups


def split_terms(part: str) -> tuple[list[Term], str]:
    """Split one group's text into constraint terms and the remaining text."""
    terms: list[Term] = []
    rest: list[str] = []
    for item in _term_transformer.transform(_term_parser.parse(part)):
        if isinstance(item, Term):
            terms.append(item)
        else:
            rest.append(str(item))
    return terms, "".join(rest)


def tokenize(query: str) -> list[QueryPart]:
    """Tokenize a whole query into one ``QueryPart`` per group.

    Group 0 always comes first, followed by the parenthesised groups
    numbered from 1 in left-to-right order.
    """
    if not query:
        return []

    root, groups = split_groups(query)
    parts = []
    for index, text in enumerate([root, *groups]):
        terms, rest = split_terms(text)
        parts.append(QueryPart(group=index, terms=terms, text=rest))
    return parts


def parse_into(search_filter: Filter, query: str) -> Filter:
    """Add the constraints and keywords of ``query`` to an existing filter.

    Terms are added as explicit (non-default) values, so they replace any
    defaults already seeded for the same field and group.
    """
    for part in tokenize(query):
        for term in part.terms:
            logger.debug(
                "group %d: %s %s %r", part.group, term.field, term.comparison.name, term.value
            )
            search_filter.add_field_value(
                term.field, term.value, term.comparison, is_default=False, group=part.group
            )

        if part.group == 0:
            keywords = part.text.strip()
            if keywords:
                search_filter.keywords = keywords
    return search_filter


def parse_query(query: str, registry: FieldRegistry) -> Filter:
    """Parse a search string into a new filter over ``registry``."""
    from edge_search.search.filter import Filter

    return parse_into(Filter(registry), query)


def decode_value(raw: str) -> str | None:
    """Decode a raw token value: strip brackets, map ``null`` to ``None``."""
    if raw.startswith("[") and raw.endswith("]"):
        return raw[1:-1]
    if raw == NULL_VALUE:
        return None
    return raw
