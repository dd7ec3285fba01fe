"""Utility modules for edge-search."""
