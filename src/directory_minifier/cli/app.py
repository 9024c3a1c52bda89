from typing import Optional

import typer


def version_callback(value: Optional[bool]) -> None:
    """Show version and exit."""
    if value:
        import directory_minifier

        typer.echo(f"directory-minifier version: {directory_minifier.__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="dirmin",
    help="Minify changed JavaScript files in a directory tree.",
    add_completion=False,
)
