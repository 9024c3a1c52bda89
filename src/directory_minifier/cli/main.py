"""Main CLI entry point for directory-minifier."""  # pragma: no cover

from directory_minifier.cli.app import app  # pragma: no cover

# Register commands
from directory_minifier.cli.commands import minify  # pragma: no cover

__all__ = ["app", "minify"]  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
