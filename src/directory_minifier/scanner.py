"""Recursive asynchronous directory scanner."""

import asyncio
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

import aiofiles.os
from loguru import logger

from directory_minifier.utils.file_utils import has_suffix

Predicate = Callable[[Path], bool]


@dataclass
class ScanResult:
    """Result of scanning a directory tree.

    When ``error`` is set, ``files`` holds everything collected before and
    alongside the failure. The caller decides whether that is usable.
    """

    files: List[Path] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def source_predicate(source_suffix: str = ".js", output_marker: str = ".min") -> Predicate:
    """
    Build the default file filter.

    Matches files ending with ``source_suffix`` that are not previously
    produced output (``output_marker + source_suffix``).
    """
    output_suffix = f"{output_marker}{source_suffix}"

    def predicate(path: Path) -> bool:
        return has_suffix(path, source_suffix) and not has_suffix(path, output_suffix)

    return predicate


async def _scan_entry(path: Path, predicate: Predicate) -> ScanResult:
    try:
        st = await aiofiles.os.stat(path)
    except OSError as e:
        logger.warning(f"Failed to stat {path}: {e}")
        return ScanResult(error=e)

    if stat.S_ISDIR(st.st_mode):
        return await scan_tree(path, predicate)

    if stat.S_ISREG(st.st_mode) and predicate(path):
        return ScanResult(files=[path])
    return ScanResult()


async def scan_tree(root: Union[str, Path], predicate: Predicate) -> ScanResult:
    """
    Recursively collect files under ``root`` accepted by ``predicate``.

    All entries of a directory are processed concurrently and the directory's
    result is produced once every entry finished. Errors from a subtree are
    reported through ``ScanResult.error`` (the first one wins) without
    dropping files found in sibling subtrees.

    Args:
        root: Directory to scan
        predicate: Filter applied to regular files

    Returns:
        ScanResult with absolute file paths
    """
    directory = Path(os.path.abspath(root))
    logger.debug(f"Scanning directory: {directory}")

    try:
        names = await aiofiles.os.listdir(directory)
    except OSError as e:
        logger.warning(f"Failed to list {directory}: {e}")
        return ScanResult(error=e)

    if not names:
        return ScanResult()

    children = await asyncio.gather(
        *(_scan_entry(directory / name, predicate) for name in names)
    )

    result = ScanResult()
    for child in children:
        result.files.extend(child.files)
        if child.error is not None and result.error is None:
            result.error = child.error

    return result
