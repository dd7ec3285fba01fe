"""Exception hierarchy for edge-search."""

from pathlib import Path


class EdgeSearchError(Exception):
    """Base exception for all edge-search errors.

    All exceptions in this package inherit from this class,
    allowing callers to catch all edge-search errors with
    a single except clause.
    """

    pass


# Configuration Errors
class ConfigError(EdgeSearchError):
    """Configuration-related errors."""

    pass


class ConfigParseError(ConfigError):
    """Configuration file has invalid syntax."""

    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config at {path}: {detail}")


class ConfigValidationError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: object, reason: str) -> None:
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config value for '{key}': {reason}")


# Field Registry Errors
class FieldRegistryError(EdgeSearchError):
    """Field registration and lookup errors."""

    pass


class DuplicateFieldError(FieldRegistryError):
    """A logical field name was registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Field already registered: {name}")


class UnknownFieldError(FieldRegistryError):
    """Logical field name is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid field [{name}] specified")


# Filter Errors
class FilterError(EdgeSearchError):
    """Errors raised while configuring a filter."""

    pass


class InvalidSortFieldError(FilterError):
    """Sort field is not a registered search field."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Invalid sort field [{field}] specified")


# Translation Errors
class TranslationError(EdgeSearchError):
    """Errors raised while building a backend query from a filter."""

    pass


class UnmappedFieldError(TranslationError):
    """Filter references a field that has no registry mapping."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"No field mapping for [{field}]")


class UnsupportedComparisonError(TranslationError):
    """Comparison cannot be expressed for the field's value type."""

    def __init__(self, field: str, comparison: str, value_type: str) -> None:
        self.field = field
        self.comparison = comparison
        self.value_type = value_type
        super().__init__(
            f"Comparison '{comparison}' is not supported for {value_type} field [{field}]"
        )


class InvalidValueError(TranslationError):
    """Constraint value cannot be converted for its field type."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for [{field}]: {reason}")


# Searcher Errors
class SearcherError(EdgeSearchError):
    """Search execution errors."""

    pass


class SearcherConfigError(SearcherError):
    """Searcher options are missing or incomplete."""

    pass


class SearchBackendError(SearcherError):
    """The search endpoint did not return a usable response."""

    def __init__(self, message: str, status: int | None = None, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"{message}\n{body}" if body else message)
