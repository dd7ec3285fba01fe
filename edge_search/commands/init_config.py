"""Initialize configuration file for edge-search."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import click

from edge_search.cli import Context, pass_context
from edge_search.config import get_default_config_path
from edge_search.utils.output import error, info, success


def _load_example_config() -> str:
    """Load the example configuration from package data."""
    return resources.files("edge_search").joinpath("config.example.toml").read_text()


@click.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Overwrite existing config file",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output path for config file (default: ~/.config/edge-search/config.toml)",
)
@pass_context
def cli(ctx: Context, force: bool, output: Path | None) -> None:
    """Create a new configuration file with example search fields.

    Creates a configuration file at the default location
    (~/.config/edge-search/config.toml) or at a custom path
    specified with --output.

    Examples:

    \b
      # Create config at default location
      edge-search init-config

    \b
      # Create config at custom location
      edge-search init-config --output ./my-config.toml
    """
    config_path = output if output is not None else get_default_config_path()
    config_path = config_path.expanduser().resolve()

    if config_path.exists() and not force:
        error(
            f"Config file already exists: {config_path}",
            hint="Use --force to overwrite",
        )
        raise SystemExit(1)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(_load_example_config())
    except OSError as e:
        error(f"Failed to write config file: {e}")
        raise SystemExit(1)

    success(f"Created config file: {config_path}")
    info("Set cloudsearch.search_endpoint and describe your search fields under [fields].")
