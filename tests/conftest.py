"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from edge_search.search.fields import FieldDescriptor, FieldRegistry, ValueType

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def registry() -> FieldRegistry:
    """Search fields covering every value type and a multi-field mapping."""
    registry = FieldRegistry()
    registry.register("status", FieldDescriptor(("status",)))
    registry.register("name", FieldDescriptor(("name",)))
    registry.register("owner.name", FieldDescriptor(("owner_name",)))
    registry.register("title", FieldDescriptor(("title_en", "title_de")))
    registry.register("age", FieldDescriptor(("age",), ValueType.NUMERIC))
    registry.register("priority", FieldDescriptor(("priority",), ValueType.NUMERIC))
    registry.register("price", FieldDescriptor(("price_net", "price_gross"), ValueType.NUMERIC))
    registry.register("created", FieldDescriptor(("created_at",), ValueType.DATE))
    return registry


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""[cloudsearch]
search_endpoint = "https://search.example.com/2011-02-01/search"
timeout = 5

[search]
page_size = 20

[display]
colored_output = false

[fields.status]
fields = "status"

[fields.name]
fields = ["name_en", "name_de"]

[fields.age]
fields = "age"
type = "numeric"

[fields.created]
fields = "created_at"
type = "date"

[defaults]
status = "active"
""")
    return config_path
