"""Common test fixtures."""

import asyncio
from pathlib import Path
from typing import List, Optional, Set

import pytest

from directory_minifier.config import MinifierConfig
from directory_minifier.exceptions import TransformError
from directory_minifier.transformer import TransformResult, derived_paths


def create_test_file(path: Path, content: str = "var a = 1;") -> Path:
    """Create a test file with given content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class RecordingTransformer:
    """Transformer double that records calls and tracks concurrency."""

    def __init__(self, fail: Optional[Set[str]] = None, delay: float = 0.0):
        self.fail = fail or set()
        self.delay = delay
        self.calls: List[Path] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    @property
    def names(self) -> List[str]:
        return sorted(path.name for path in self.calls)

    async def transform(self, path: Path, root: Path) -> TransformResult:
        self.calls.append(path)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if path.name in self.fail:
                raise TransformError(path, "boom")
            output_path, map_path = derived_paths(path)
            output_path.write_text("min")
            map_path.write_text("{}")
            return TransformResult(
                source=path,
                output_path=output_path,
                map_path=map_path,
                source_size=path.stat().st_size,
                output_size=3,
            )
        finally:
            self.in_flight -= 1


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Tree with a.js, b.js, sub/c.js and a previously produced sub/c.min.js."""
    root = tmp_path / "proj"
    create_test_file(root / "a.js", "function a() {\n    return 1;\n}\n")
    create_test_file(root / "b.js", "var b = 2; // comment\n")
    create_test_file(root / "sub" / "c.js", "var c = [1, 2, 3];\n")
    create_test_file(root / "sub" / "c.min.js", "var c=[1,2,3];")
    return root


@pytest.fixture
def config() -> MinifierConfig:
    return MinifierConfig(capacity=2)


@pytest.fixture
def transformer() -> RecordingTransformer:
    return RecordingTransformer()


@pytest.fixture
def transformer_factory():
    """Build RecordingTransformer instances with custom failures or delays."""
    return RecordingTransformer
