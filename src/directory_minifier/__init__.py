"""directory-minifier - incremental, concurrency-bounded minification of a directory tree."""

__version__ = "0.1.0"
