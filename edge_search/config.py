"""Configuration management for edge-search."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from edge_search.exceptions import (
    ConfigParseError,
    ConfigValidationError,
)
from edge_search.search.constraints import Comparison
from edge_search.search.fields import FieldRegistry

DEFAULT_PAGE_SIZE = 10
DEFAULT_TIMEOUT = 30.0


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".config" / "edge-search" / "config.toml"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        search_endpoint: CloudSearch search URL.
        return_id_results: Return only document ids from searches.
        timeout: HTTP timeout in seconds.
        verify_ssl: Verify the endpoint's TLS certificate.
        page_size: Default number of results per page.
        colored_output: Whether to use colored terminal output.
        fields: Search field tables, keyed by logical field name.
        defaults: Default field values applied to every search.
        config_path: Path where config was loaded from (None if defaults).
    """

    search_endpoint: str | None = None
    return_id_results: bool = False
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    page_size: int = DEFAULT_PAGE_SIZE
    colored_output: bool = True
    fields: dict[str, Any] = field(default_factory=dict)
    defaults: dict[str, Any] = field(default_factory=dict)
    config_path: Path | None = None

    def field_registry(self) -> FieldRegistry:
        """Build the search field registry from the ``[fields]`` tables."""
        return FieldRegistry.from_mapping(self.fields)

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of warning messages for non-fatal issues.

        Raises:
            ConfigValidationError: If a critical validation fails.
        """
        warnings: list[str] = []

        if self.page_size <= 0:
            raise ConfigValidationError("search.page_size", self.page_size, "must be positive")

        if self.timeout <= 0:
            raise ConfigValidationError("cloudsearch.timeout", self.timeout, "must be positive")

        registry = self.field_registry()

        if self.search_endpoint is None:
            warnings.append("No CloudSearch endpoint configured (cloudsearch.search_endpoint)")

        if not self.fields:
            warnings.append("No search fields configured; all field constraints will be ignored")

        for name, value in self.defaults.items():
            if name not in registry:
                warnings.append(f"Default value for unknown search field '{name}' is ignored")
            if isinstance(value, dict):
                comparison = value.get("comparison", Comparison.EQUALS.value)
                try:
                    Comparison(comparison)
                except ValueError:
                    raise ConfigValidationError(
                        f"defaults.{name}.comparison", comparison, "unknown comparison"
                    ) from None

        return warnings


def load_config(config_path: Path | None = None) -> tuple[Config, list[str]]:
    """Load configuration from file or use defaults.

    Args:
        config_path: Explicit config file path. If None, uses default location.

    Returns:
        Tuple of (Config object, list of warning messages).

    Raises:
        ConfigParseError: If config file exists but has invalid syntax.
        ConfigValidationError: If config values are invalid.
    """
    warnings: list[str] = []

    if config_path is None:
        config_path = get_default_config_path()

    config_path = config_path.expanduser().resolve()

    if not config_path.exists():
        config = Config()
        warnings.append(
            f"No config file found at {config_path}. Using defaults. "
            f"Create config with: edge-search init-config"
        )
        return config, warnings + config.validate()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(config_path, str(e)) from e

    config = _parse_config_dict(data, config_path)
    config_warnings = config.validate()

    return config, warnings + config_warnings


def _parse_config_dict(data: dict[str, Any], config_path: Path) -> Config:
    """Parse configuration dictionary into Config object."""
    config = Config(config_path=config_path)

    # Parse [cloudsearch] section
    cloudsearch = data.get("cloudsearch", {})
    if "search_endpoint" in cloudsearch:
        value = cloudsearch["search_endpoint"]
        if value is not None and not isinstance(value, str):
            raise ConfigValidationError(
                "cloudsearch.search_endpoint", value, "must be a URL string or null"
            )
        config.search_endpoint = value

    if "return_id_results" in cloudsearch:
        value = cloudsearch["return_id_results"]
        if not isinstance(value, bool):
            raise ConfigValidationError("cloudsearch.return_id_results", value, "must be a boolean")
        config.return_id_results = value

    if "timeout" in cloudsearch:
        value = cloudsearch["timeout"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigValidationError("cloudsearch.timeout", value, "must be a number")
        config.timeout = float(value)

    if "verify_ssl" in cloudsearch:
        value = cloudsearch["verify_ssl"]
        if not isinstance(value, bool):
            raise ConfigValidationError("cloudsearch.verify_ssl", value, "must be a boolean")
        config.verify_ssl = value

    # Parse [search] section
    search = data.get("search", {})
    if "page_size" in search:
        value = search["page_size"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigValidationError("search.page_size", value, "must be an integer")
        config.page_size = value

    # Parse [display] section
    display = data.get("display", {})
    if "colored_output" in display:
        value = display["colored_output"]
        if not isinstance(value, bool):
            raise ConfigValidationError("display.colored_output", value, "must be a boolean")
        config.colored_output = value

    # Parse [fields] tables
    fields = data.get("fields", {})
    if not isinstance(fields, dict):
        raise ConfigValidationError("fields", fields, "must be a table of field tables")
    config.fields = fields

    # Parse [defaults] section
    defaults = data.get("defaults", {})
    if not isinstance(defaults, dict):
        raise ConfigValidationError("defaults", defaults, "must be a table")
    config.defaults = defaults

    return config


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Path to save to. If None, uses config.config_path or default.
    """
    if config_path is None:
        config_path = config.config_path or get_default_config_path()

    config_path = config_path.expanduser().resolve()

    # Ensure directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Build TOML structure
    data: dict[str, Any] = {
        "cloudsearch": {
            "return_id_results": config.return_id_results,
            "timeout": config.timeout,
            "verify_ssl": config.verify_ssl,
        },
        "search": {
            "page_size": config.page_size,
        },
        "display": {
            "colored_output": config.colored_output,
        },
    }

    if config.search_endpoint is not None:
        data["cloudsearch"]["search_endpoint"] = config.search_endpoint

    if config.fields:
        data["fields"] = config.fields

    if config.defaults:
        data["defaults"] = config.defaults

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
