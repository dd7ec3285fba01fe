"""Command-line interface for edge-search."""

from __future__ import annotations

import os
from pathlib import Path

import click

from edge_search import __version__
from edge_search.config import Config, load_config
from edge_search.exceptions import EdgeSearchError
from edge_search.search.fields import FieldRegistry
from edge_search.search.filter import Filter
from edge_search.utils.output import (
    error,
    set_color,
    set_verbosity,
    verbose,
    warning,
)

EXIT_SUCCESS = 0
EXIT_QUERY_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_BACKEND_ERROR = 3


class Context:
    """Shared context for all commands."""

    def __init__(self) -> None:
        self.config: Config | None = None
        self.verbose: bool = False
        self.debug: bool = False
        self.quiet: bool = False
        self._registry: FieldRegistry | None = None

    @property
    def registry(self) -> FieldRegistry:
        """Search fields from the loaded configuration."""
        if self._registry is None:
            self._registry = (self.config or Config()).field_registry()
        return self._registry

    def build_filter(self, query_string: str, *, defaults: bool = True) -> Filter:
        """Create a filter seeded with the configured defaults, then parse the query."""
        search_filter = Filter(self.registry)
        if defaults and self.config is not None and self.config.defaults:
            search_filter.set_default_values(self.config.defaults)
        search_filter.set_query_string(query_string)
        verbose(f"Filter: {search_filter.to_query_string()}")
        return search_filter


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    help="Path to config file (default: ~/.config/edge-search/config.toml)",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug output (implies --verbose)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress non-error output",
)
@click.version_option(version=__version__, prog_name="edge-search")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    no_color: bool,
    verbose: bool,
    debug: bool,
    quiet: bool,
) -> None:
    """edge-search: Google-style search strings for Amazon CloudSearch.

    Search strings combine field constraints, OR-groups and free text:

    \b
        status:active name:[john doe] (priority>5 owner:jane) urgent

    Search fields and the CloudSearch endpoint are configured in
    ~/.config/edge-search/config.toml by default. Use --config to specify
    an alternative configuration file.

    Examples:

        # Show how a search string is understood
        edge-search parse "status:active (priority>5) urgent"

        # Print the CloudSearch query for a search string
        edge-search translate "price>=18 sort:price order:asc"
    """
    ctx.ensure_object(Context)
    app_ctx = ctx.obj
    app_ctx.verbose = verbose or debug
    app_ctx.debug = debug
    app_ctx.quiet = quiet

    set_verbosity(verbose=verbose, debug=debug)

    # Configure color output: disabled by --no-color, NO_COLOR env, or config
    disable_color = no_color or os.environ.get("NO_COLOR") is not None

    if disable_color:
        set_color(False)

    try:
        loaded_config, warnings = load_config(config)
        app_ctx.config = loaded_config

        if not disable_color and not loaded_config.colored_output:
            set_color(False)

        if not quiet:
            for warn in warnings:
                warning(warn)

    except EdgeSearchError as e:
        error(str(e))
        ctx.exit(EXIT_CONFIG_ERROR)


@cli.command("help")
@click.argument("command", required=False, nargs=-1)
@click.pass_context
def help_cmd(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Show help for a command."""
    group = cli
    for name in command:
        cmd = group.get_command(ctx, name)
        if cmd is None:
            error(f"Unknown command: {name}")
            ctx.exit(1)
            return
        if isinstance(cmd, click.Group):
            group = cmd
        else:
            click.echo(cmd.get_help(ctx))
            return
    click.echo(group.get_help(ctx))


def register_commands() -> None:
    """Register all commands from the commands package."""
    from edge_search.commands import discover_commands

    for command in discover_commands():
        cli.add_command(command)


# Register commands on import
register_commands()
