"""Test minify command functionality."""

import json
import sys
from io import StringIO
from pathlib import Path

import pytest
from loguru import logger
from rich.console import Console
from typer.testing import CliRunner

import directory_minifier
from directory_minifier.cli.commands import minify as minify_command
from directory_minifier.cli.main import app
from directory_minifier.pipeline import MinifyReport

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The command reconfigures loguru; put the default sink back afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def console(monkeypatch):
    """Replace the command console with one that captures output."""
    output = StringIO()
    monkeypatch.setattr(minify_command, "console", Console(file=output, width=200))
    return output


def test_minify_directory(project_dir: Path):
    result = runner.invoke(app, [str(project_dir)])

    assert result.exit_code == 0, result.output
    assert "Checked 3 files" in result.output
    assert (project_dir / "a.min.js").exists()
    assert len(json.loads((project_dir / "source-hash.json").read_text())) == 3

    again = runner.invoke(app, [str(project_dir)])
    assert again.exit_code == 0, again.output
    assert "Everything up to date" in again.output


def test_minify_with_checksum_option(project_dir: Path, tmp_path: Path):
    checksum_path = tmp_path / "hashes.json"

    result = runner.invoke(
        app, [str(project_dir), "--checksum", str(checksum_path), "--capacity", "1", "-v"]
    )

    assert result.exit_code == 0, result.output
    assert checksum_path.exists()
    assert not (project_dir / "source-hash.json").exists()


def test_minify_missing_directory(tmp_path: Path):
    result = runner.invoke(app, [str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "Error during minify" in result.output


def test_minify_empty_directory_argument():
    result = runner.invoke(app, [""])

    assert result.exit_code == 1
    assert "Nothing to minify" in result.output


def test_minify_invalid_capacity(project_dir: Path):
    result = runner.invoke(app, [str(project_dir), "--capacity", "0"])
    assert result.exit_code == 2


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert directory_minifier.__version__ in result.output


def test_display_summary_no_files(console, tmp_path: Path):
    report = MinifyReport(root=tmp_path, checksum_path=tmp_path / "source-hash.json")
    minify_command.display_minify_summary(report)
    assert "No files to minify" in console.getvalue()


def test_display_summary_with_failures(console, tmp_path: Path):
    report = MinifyReport(
        root=tmp_path,
        checksum_path=tmp_path / "source-hash.json",
        files=["a.js", "lib/b.js", "lib/c.js"],
        changed={"lib/b.js", "lib/c.js"},
        unchanged={"a.js"},
        failed={"lib/b.js": "boom"},
    )

    minify_command.display_minify_summary(report)
    minify_command.display_failures(report)

    output = console.getvalue()
    assert "Checked 3 files (0 minified, 1 unchanged, 1 failed)" in output
    assert "lib/" in output
    assert "b.js" in output
    assert "boom" in output


def test_group_failures_by_directory():
    grouped = minify_command.group_failures_by_directory(
        {"a.js": "x", "lib/b.js": "y", "lib/c.js": "z"}
    )
    assert grouped == {".": [("a.js", "x")], "lib": [("lib/b.js", "y"), ("lib/c.js", "z")]}
