"""CLI commands for directory-minifier."""

from . import minify

__all__ = ["minify"]
