"""Show how a search string is parsed into a filter."""

from __future__ import annotations

import json
from typing import Any

import click

from edge_search.cli import Context, pass_context
from edge_search.search.filter import Filter, encode_value
from edge_search.utils.output import console, create_table, info


def filter_to_dict(search_filter: Filter) -> dict[str, Any]:
    """Describe a filter as JSON-serialisable data."""
    groups: dict[str, Any] = {}
    for group, fields in sorted(search_filter.get_all_field_values().items()):
        groups[str(group)] = {
            field: [
                {
                    "value": constraint.value,
                    "comparison": constraint.comparison.name.lower(),
                    "symbol": constraint.comparison.symbol,
                    "default": constraint.is_default,
                }
                for constraint in constraints
            ]
            for field, constraints in fields.items()
        }
    return {
        "groups": groups,
        "keywords": search_filter.keywords,
        "sort": search_filter.sort_field,
        "order": search_filter.sort_order.value,
        "query": search_filter.to_query_string(),
    }


@click.command("parse")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--no-defaults",
    is_flag=True,
    default=False,
    help="Do not apply the configured default values",
)
@pass_context
def cli(ctx: Context, query: tuple[str, ...], output_format: str, no_defaults: bool) -> None:
    """Parse a search string and show the resulting filter.

    QUERY is a search string. Multiple arguments are joined with spaces.
    Constraints on unknown fields are dropped silently, which makes this
    command useful for checking what a search string actually means.

    \b
    Syntax:
      field:value        equals           field!value   not equals
      field~value        like             field!~value  not like
      field>value        greater than     field>=value  greater or equal
      field<value        less than        field<=value  less or equal
      field:[two words]  bracketed value  field:null    null value
      (a:1 b:2)          OR-group         sort:field order:asc|desc
    """
    query_string = " ".join(query)
    search_filter = ctx.build_filter(query_string, defaults=not no_defaults)

    if output_format == "json":
        click.echo(json.dumps(filter_to_dict(search_filter), indent=2, default=str))
        return

    table = create_table(show_header=True, header_style="bold")
    table.add_column("Group", justify="right")
    table.add_column("Field", style="field")
    table.add_column("Op", style="comparison")
    table.add_column("Value", style="value")
    table.add_column("Default")

    for group, fields in sorted(search_filter.get_all_field_values().items()):
        label = "AND" if group == 0 else f"OR {group}"
        for field, constraints in fields.items():
            for constraint in constraints:
                table.add_row(
                    label,
                    field,
                    constraint.comparison.symbol,
                    encode_value(constraint.value),
                    "yes" if constraint.is_default else "",
                )

    console.print(table)
    if search_filter.keywords is not None:
        info(f"Keywords: {search_filter.keywords}")
    if search_filter.sort_field is not None:
        info(f"Sort: {search_filter.sort_field} ({search_filter.sort_order.value})")
    info(f"Query: {search_filter.to_query_string()}")
