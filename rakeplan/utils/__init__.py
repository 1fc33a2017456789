"""Shared utilities."""

from .version import format_error_with_version, get_version_string

__all__ = ["format_error_with_version", "get_version_string"]
