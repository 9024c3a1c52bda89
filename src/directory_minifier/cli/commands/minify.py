"""Command module for directory-minifier runs."""

import asyncio
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import typer
from loguru import logger
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from directory_minifier.cli.app import app, version_callback
from directory_minifier.config import get_config
from directory_minifier.exceptions import ScanError
from directory_minifier.pipeline import DirectoryMinifier, MinifyReport
from directory_minifier.utils import setup_logging

console = Console()


def group_failures_by_directory(failed: Dict[str, str]) -> Dict[str, List[Tuple[str, str]]]:
    """Group failed files by their parent directory."""
    grouped = defaultdict(list)
    for file_path, error in failed.items():
        dir_name = Path(file_path).parent.as_posix()
        grouped[dir_name].append((file_path, error))
    return dict(grouped)


def display_minify_summary(report: MinifyReport) -> None:
    """Display a one-line summary of the run."""
    if report.total_files == 0:
        console.print("[yellow]No files to minify[/yellow]")
        return

    if not report.changed and not report.failed:
        console.print(f"[green]Everything up to date[/green] ({report.total_files} files)")
        return

    # Format as: "Checked X files (A minified, B unchanged, C failed)"
    parts = [f"[green]{len(report.transformed)} minified[/green]"]
    if report.unchanged:
        parts.append(f"{len(report.unchanged)} unchanged")
    if report.failed:
        parts.append(f"[red]{len(report.failed)} failed[/red]")

    console.print(f"Checked {report.total_files} files ({', '.join(parts)})")


def display_failures(report: MinifyReport) -> None:
    """Display failed files as a tree grouped by directory."""
    if not report.failed:
        return

    tree = Tree("[bold red]Failed files[/bold red]")
    for dir_name, failures in sorted(group_failures_by_directory(report.failed).items()):
        branch = tree.add(f"[bold blue]{dir_name}/[/bold blue] ([yellow]{len(failures)}[/yellow])")
        for file_path, error in sorted(failures):
            branch.add(
                Text.assemble(("└─ ", "dim"), (Path(file_path).name, "yellow"), ": ", (error, "red"))
            )
    console.print(tree)


async def run_minify(
    directory: str,
    checksum: Optional[str] = None,
    capacity: Optional[int] = None,
) -> MinifyReport:
    """Run a minification pass with settings from the environment."""
    config = get_config()
    if capacity is not None:
        config = config.model_copy(update={"capacity": capacity})

    minifier = DirectoryMinifier(config=config)
    return await minifier.process(directory, checksum)


@app.command()
def minify(
    directory: str = typer.Argument(..., help="Directory to minify."),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show detailed progress information.",
    ),
    checksum: Optional[str] = typer.Option(
        None,
        "--checksum",
        "-c",
        help="Path of the checksum file (default: <directory>/source-hash.json).",
    ),
    capacity: Optional[int] = typer.Option(
        None,
        "--capacity",
        min=1,
        help="Number of files processed concurrently.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Minify changed files under DIRECTORY."""
    config = get_config()
    setup_logging(level=config.log_level, log_file=config.log_file, verbose=verbose)

    try:
        report = asyncio.run(run_minify(directory, checksum, capacity))
    except ScanError as e:
        logger.error(f"Scan failed after finding {len(e.files)} files")
        typer.echo(f"Error during minify: {e}", err=True)
        raise typer.Exit(1)
    except Exception as e:
        logger.exception("Minify failed")
        typer.echo(f"Error during minify: {e}", err=True)
        raise typer.Exit(1)

    display_minify_summary(report)
    if verbose:
        display_failures(report)
