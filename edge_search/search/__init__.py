"""Google-style search strings, filters and CloudSearch query building."""

from edge_search.search.constraints import Comparison, FieldConstraint, SortOrder
from edge_search.search.fields import FieldDescriptor, FieldRegistry, ValueType
from edge_search.search.filter import Filter
from edge_search.search.parser import parse_query
from edge_search.search.searcher import CloudSearchSearcher, SearcherOptions
from edge_search.search.translator import CloudSearchQuery, ComparisonTranslator

__all__ = [
    "CloudSearchQuery",
    "CloudSearchSearcher",
    "Comparison",
    "ComparisonTranslator",
    "FieldConstraint",
    "FieldDescriptor",
    "FieldRegistry",
    "Filter",
    "SearcherOptions",
    "SortOrder",
    "ValueType",
    "parse_query",
]
