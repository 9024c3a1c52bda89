"""Command line interface for directory-minifier."""
