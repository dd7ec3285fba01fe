"""Unit tests for configuration."""

from pathlib import Path

import pytest

from edge_search.config import Config, load_config, save_config
from edge_search.exceptions import ConfigParseError, ConfigValidationError
from edge_search.search.fields import ValueType


def test_default_config() -> None:
    """Test that default config has sensible values."""
    config = Config()
    assert config.search_endpoint is None
    assert config.colored_output is True
    assert config.verify_ssl is True
    assert config.page_size == 10


def test_load_missing_config(temp_dir: Path) -> None:
    """Test loading when config file doesn't exist."""
    config_path = temp_dir / "nonexistent.toml"
    config, warnings = load_config(config_path)

    assert config is not None
    assert any("No config file found" in w for w in warnings)


def test_load_valid_config(sample_config: Path) -> None:
    """Test loading a valid config file."""
    config, warnings = load_config(sample_config)

    assert config.search_endpoint == "https://search.example.com/2011-02-01/search"
    assert config.timeout == 5.0
    assert config.page_size == 20
    assert config.colored_output is False
    assert config.defaults == {"status": "active"}
    assert config.config_path == sample_config.resolve()
    assert warnings == []


def test_field_registry(sample_config: Path) -> None:
    """Test that [fields] tables become a field registry."""
    config, _ = load_config(sample_config)
    registry = config.field_registry()

    assert list(registry) == ["status", "name", "age", "created"]
    assert registry.resolve("name").physical_fields == ("name_en", "name_de")
    assert registry.resolve("age").value_type is ValueType.NUMERIC
    assert registry.resolve("created").value_type is ValueType.DATE


def test_load_invalid_toml(temp_dir: Path) -> None:
    """Test loading invalid TOML raises error."""
    config_path = temp_dir / "invalid.toml"
    config_path.write_text("this is not valid [ toml")

    with pytest.raises(ConfigParseError):
        load_config(config_path)


@pytest.mark.parametrize(
    ("content", "key"),
    [
        ('[display]\ncolored_output = "not a boolean"\n', "display.colored_output"),
        ("[cloudsearch]\nsearch_endpoint = 5\n", "cloudsearch.search_endpoint"),
        ('[cloudsearch]\ntimeout = "soon"\n', "cloudsearch.timeout"),
        ("[search]\npage_size = 1.5\n", "search.page_size"),
        ("[search]\npage_size = 0\n", "search.page_size"),
        ('[fields.age]\ntype = "integer"\n', "fields.age.type"),
    ],
)
def test_config_validation_invalid_value(temp_dir: Path, content: str, key: str) -> None:
    """Test that invalid values raise validation error."""
    config_path = temp_dir / "bad_values.toml"
    config_path.write_text(content)

    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(config_path)
    assert exc_info.value.key == key


def test_unknown_default_field_warns(temp_dir: Path) -> None:
    """Test that defaults for unregistered fields only warn."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[cloudsearch]
search_endpoint = "https://search.example.com"

[fields.status]
fields = "status"

[defaults]
bogus = "x"
""")

    _, warnings = load_config(config_path)
    assert any("bogus" in w for w in warnings)


def test_invalid_default_comparison(temp_dir: Path) -> None:
    """Test that default comparisons must be known symbols."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[fields.age]
type = "numeric"

[defaults]
age = { value = "5", comparison = "=>" }
""")

    with pytest.raises(ConfigValidationError) as exc_info:
        load_config(config_path)
    assert exc_info.value.key == "defaults.age.comparison"


def test_save_and_reload(temp_dir: Path, sample_config: Path) -> None:
    """Test that a saved config loads back unchanged."""
    config, _ = load_config(sample_config)
    target = temp_dir / "nested" / "saved.toml"

    save_config(config, target)
    reloaded, _ = load_config(target)

    assert reloaded.search_endpoint == config.search_endpoint
    assert reloaded.timeout == config.timeout
    assert reloaded.page_size == config.page_size
    assert reloaded.fields == config.fields
    assert reloaded.defaults == config.defaults
