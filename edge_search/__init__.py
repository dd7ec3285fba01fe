"""edge-search: Google-style search strings for Amazon CloudSearch."""

__version__ = "0.3.0"
