"""Search a CloudSearch domain with a search string."""

from __future__ import annotations

import json
from typing import Any

import click

from edge_search.cli import (
    EXIT_BACKEND_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_QUERY_ERROR,
    EXIT_SUCCESS,
    Context,
    pass_context,
)
from edge_search.exceptions import SearchBackendError, SearcherConfigError, TranslationError
from edge_search.search.searcher import (
    CloudSearchSearcher,
    HitsConverter,
    SearcherOptions,
    problem_details,
)
from edge_search.utils.output import console, create_table, error, info


@click.command("search")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "ids", "json"]),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--offset",
    "-o",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Offset of the first result",
)
@click.option(
    "--size",
    "-s",
    type=click.IntRange(min=1),
    default=None,
    help="Results per page (default: search.page_size from config)",
)
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    output_format: str,
    offset: int,
    size: int | None,
) -> None:
    """Search the configured CloudSearch domain.

    QUERY is a search string. Multiple arguments are joined with spaces.

    \b
    Output formats:
      --format table   Rich table of ids and returned fields (default)
      --format ids     One document id per line (for piping)
      --format json    JSON object with count and results; errors are
                       printed as a JSON problem document
    """
    config = ctx.config
    if config is None:
        error("Configuration not loaded")
        raise SystemExit(EXIT_CONFIG_ERROR)

    query_string = " ".join(query)
    page_size = size or config.page_size
    search_filter = ctx.build_filter(query_string)

    options = SearcherOptions.from_config(config)
    searcher = CloudSearchSearcher(search_filter, options)
    if not options.return_id_results:
        searcher.add_converter(HitsConverter())

    try:
        results = list(searcher.get_results(offset, page_size))
    except (TranslationError, SearcherConfigError, SearchBackendError) as e:
        if output_format == "json":
            click.echo(json.dumps(problem_details(e), indent=2))
        else:
            error(str(e), hint=_hint(e))
        raise SystemExit(_exit_code(e))

    count = searcher.count or 0

    if output_format == "json":
        click.echo(json.dumps({"count": count, "results": results}, indent=2, default=str))
    elif output_format == "ids":
        for record in results:
            click.echo(record["id"] if isinstance(record, dict) else record)
    else:
        _print_table(query_string, count, offset, results)

    raise SystemExit(EXIT_SUCCESS)


def _print_table(query_string: str, count: int, offset: int, results: list[Any]) -> None:
    """Print results as a Rich table."""
    if not results:
        info(f"No results for: {query_string}")
        return

    info(f"Search: {query_string} ({offset + 1}-{offset + len(results)} of {count})")

    records = [r if isinstance(r, dict) else {"id": r} for r in results]
    columns: list[str] = []
    for record in records:
        for name in record:
            if name not in columns:
                columns.append(name)

    table = create_table(show_header=True, header_style="bold")
    for name in columns:
        table.add_column(name, no_wrap=name == "id")
    for record in records:
        table.add_row(*(_cell(record.get(name)) for name in columns))
    console.print(table)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _exit_code(exc: Exception) -> int:
    if isinstance(exc, SearchBackendError):
        return EXIT_BACKEND_ERROR
    if isinstance(exc, SearcherConfigError):
        return EXIT_CONFIG_ERROR
    return EXIT_QUERY_ERROR


def _hint(exc: Exception) -> str | None:
    if isinstance(exc, SearcherConfigError):
        return "Set cloudsearch.search_endpoint in the config file"
    return None
