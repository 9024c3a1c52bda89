"""Utilities for file operations."""

import hashlib
from pathlib import Path
from typing import Union

import aiofiles
import aiofiles.os
from loguru import logger


class FileError(Exception):
    """Base exception for file operations."""

    pass


class FileWriteError(FileError):
    """Raised when file operations fail."""

    pass


async def compute_checksum(content: bytes) -> str:
    """
    Compute MD5 checksum of raw file content.

    Args:
        content: Bytes to hash

    Returns:
        MD5 hex digest

    Raises:
        FileError: If checksum computation fails
    """
    try:
        return hashlib.md5(content).hexdigest()  # noqa: S324
    except Exception as e:
        logger.error(f"Failed to compute checksum: {e}")
        raise FileError(f"Failed to compute checksum: {e}")


async def read_file_bytes(path: Path) -> bytes:
    """
    Read the full content of a file.

    Raises:
        FileError: If the file cannot be read
    """
    try:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()
    except OSError as e:
        raise FileError(f"Failed to read file {path}: {e}") from e


async def write_file_atomic(path: Path, content: Union[str, bytes]) -> None:
    """
    Write file with atomic operation using temporary file.

    Args:
        path: Target file path
        content: Content to write

    Raises:
        FileWriteError: If write operation fails
    """
    temp_path = path.with_name(path.name + ".tmp")
    data = content.encode("utf-8") if isinstance(content, str) else content
    try:
        async with aiofiles.open(temp_path, "wb") as f:
            await f.write(data)
        await aiofiles.os.replace(temp_path, path)
    except Exception as e:
        temp_path.unlink(missing_ok=True)
        logger.error(f"Failed to write file: {path}: {e}")
        raise FileWriteError(f"Failed to write file {path}: {e}")


def has_suffix(path: Union[str, Path], suffix: str) -> bool:
    """Plain string suffix test, so '.min.js' is matched as a whole."""
    return str(path).endswith(suffix)
