"""Print the CloudSearch query for a search string."""

from __future__ import annotations

from urllib.parse import urlencode

import click

from edge_search.cli import EXIT_QUERY_ERROR, Context, pass_context
from edge_search.exceptions import TranslationError
from edge_search.search.translator import ComparisonTranslator
from edge_search.utils.output import error


@click.command("translate")
@click.argument("query", nargs=-1, required=True)
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
@click.option(
    "--encode",
    is_flag=True,
    default=False,
    help="URL-encode the query string",
)
@pass_context
def cli(
    ctx: Context,
    query: tuple[str, ...],
    offset: int,
    size: int | None,
    encode: bool,
) -> None:
    """Translate a search string into CloudSearch query parameters.

    QUERY is a search string. Multiple arguments are joined with spaces.

    \b
    Example:
      $ edge-search translate "price>=18 status:active sort:price"
      bq=(and price:18.. (field status 'active'))&rank=-price&size=10&start=0
    """
    query_string = " ".join(query)
    page_size = size or (ctx.config.page_size if ctx.config else 10)

    search_filter = ctx.build_filter(query_string)
    try:
        cloudsearch_query = ComparisonTranslator(ctx.registry).translate(
            search_filter, offset, page_size
        )
    except TranslationError as e:
        error(str(e))
        raise SystemExit(EXIT_QUERY_ERROR)

    if encode:
        click.echo(urlencode(cloudsearch_query.params()))
    else:
        click.echo(cloudsearch_query.to_query_string())
