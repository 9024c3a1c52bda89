"""Per-file transformation: minified output plus a companion source map."""

import asyncio
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Tuple

import rjsmin
from loguru import logger

from directory_minifier.exceptions import TransformError
from directory_minifier.utils.file_utils import FileError, read_file_bytes, write_file_atomic


@dataclass
class TransformResult:
    """Artifacts produced for one source file."""

    source: Path
    output_path: Path
    map_path: Path
    source_size: int
    output_size: int


class Transformer(Protocol):
    """Turns one source file into a derived artifact next to it."""

    async def transform(self, path: Path, root: Path) -> TransformResult:
        ...  # pragma: no cover


def derived_paths(path: Path, marker: str = ".min") -> Tuple[Path, Path]:
    """
    Names of the files produced for ``path``.

    ``lib/a.js`` -> ``lib/a.min.js`` and ``lib/a.min.js.map``.
    """
    output_path = path.with_name(f"{path.stem}{marker}{path.suffix}")
    map_path = output_path.with_name(f"{output_path.name}.map")
    return output_path, map_path


def formatted_size(size: int) -> str:
    """Size in KiB with two decimals."""
    return f"{size / 1024:.2f}"


class MinifyTransformer:
    """Minify JavaScript files with rjsmin."""

    def __init__(self, marker: str = ".min", keep_bang_comments: bool = True):
        self.marker = marker
        self.keep_bang_comments = keep_bang_comments

    def source_map(self, path: Path, output_path: Path, map_path: Path, root: Path) -> str:
        """Companion map naming the source; locations relative to the root's parent."""
        base = root.parent
        return json.dumps(
            {
                "version": 3,
                "file": os.path.relpath(output_path, base),
                "sourceRoot": str(root),
                "sources": [os.path.relpath(path, base)],
                "names": [],
                "mappings": "",
            }
        )

    async def transform(self, path: Path, root: Path) -> TransformResult:
        """
        Write ``<name><marker><ext>`` and its ``.map`` next to ``path``.

        Raises:
            TransformError: If the source cannot be read, minified or written
        """
        logger.debug(f"Minifying file: {path}")
        output_path, map_path = derived_paths(path, self.marker)

        try:
            source = await read_file_bytes(path)
            minified = await asyncio.to_thread(
                rjsmin.jsmin, source, keep_bang_comments=self.keep_bang_comments
            )
            minified += f"\n//# sourceMappingURL={map_path.name}\n".encode("utf-8")

            await write_file_atomic(output_path, minified)
            logger.debug(f"Saving minified file at {output_path}")
            await write_file_atomic(map_path, self.source_map(path, output_path, map_path, root))
        except FileError as e:
            raise TransformError(path, str(e)) from e
        except (ValueError, TypeError) as e:
            raise TransformError(path, f"minification failed: {e}") from e

        result = TransformResult(
            source=path,
            output_path=output_path,
            map_path=map_path,
            source_size=len(source),
            output_size=len(minified),
        )
        logger.debug(
            f"Minified {output_path} from: {formatted_size(result.source_size)} "
            f"to: {formatted_size(result.output_size)}"
        )
        return result
