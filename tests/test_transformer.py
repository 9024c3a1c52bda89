"""Tests for the default minifying transformer."""

import json
from pathlib import Path

import pytest

from directory_minifier.exceptions import TransformError
from directory_minifier.transformer import MinifyTransformer, derived_paths, formatted_size


def test_derived_paths():
    output_path, map_path = derived_paths(Path("/proj/sub/c.js"))
    assert output_path == Path("/proj/sub/c.min.js")
    assert map_path == Path("/proj/sub/c.min.js.map")


def test_derived_paths_custom_marker():
    output_path, map_path = derived_paths(Path("lib/app.js"), ".dist")
    assert output_path == Path("lib/app.dist.js")
    assert map_path == Path("lib/app.dist.js.map")


def test_formatted_size():
    assert formatted_size(2048) == "2.00"
    assert formatted_size(0) == "0.00"


@pytest.mark.asyncio
async def test_transform_writes_output_and_map(project_dir: Path):
    source = project_dir / "a.js"

    result = await MinifyTransformer().transform(source, project_dir)

    assert result.output_path == project_dir / "a.min.js"
    assert result.map_path == project_dir / "a.min.js.map"
    assert result.output_path.exists()
    assert result.map_path.exists()

    minified = result.output_path.read_text()
    assert "function a(){return 1;}" in minified
    assert minified.rstrip().endswith("//# sourceMappingURL=a.min.js.map")
    assert result.source_size == source.stat().st_size

    source_map = json.loads(result.map_path.read_text())
    assert source_map["version"] == 3
    assert source_map["file"] == "proj/a.min.js"
    assert source_map["sources"] == ["proj/a.js"]


@pytest.mark.asyncio
async def test_transform_strips_comments(project_dir: Path):
    result = await MinifyTransformer().transform(project_dir / "b.js", project_dir)

    minified = result.output_path.read_text()
    assert "comment" not in minified
    assert "var b=2;" in minified


@pytest.mark.asyncio
async def test_transform_missing_source(project_dir: Path):
    with pytest.raises(TransformError) as exc_info:
        await MinifyTransformer().transform(project_dir / "missing.js", project_dir)

    assert exc_info.value.path == project_dir / "missing.js"
    assert not (project_dir / "missing.min.js").exists()
