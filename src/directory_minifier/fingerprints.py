"""Persisted content fingerprints used to detect changed files."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

import aiofiles
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from directory_minifier.exceptions import FingerprintPersistError
from directory_minifier.utils.file_utils import (
    FileWriteError,
    compute_checksum,
    write_file_atomic,
)

FingerprintMap = Dict[str, str]

_fingerprint_map = TypeAdapter(FingerprintMap)


@dataclass
class FingerprintCheck:
    """Outcome of comparing a file's content against its stored fingerprint."""

    relative_path: str
    checksum: str
    previous: Optional[str]
    changed: bool


class FingerprintStore:
    """
    Mapping of relative path -> content checksum for one run.

    Loaded once at the start of a run, updated as files are checked and
    written back once at the end. Mutations happen in single synchronous
    steps on the event loop, so concurrent checks need no lock.
    """

    def __init__(self, fingerprints: Optional[FingerprintMap] = None):
        self._fingerprints: FingerprintMap = dict(fingerprints or {})

    @classmethod
    async def load(cls, path: Union[str, Path]) -> "FingerprintStore":
        """
        Load a persisted store.

        A missing, unreadable or malformed file yields an empty store; it
        only means nothing was processed before.
        """
        path = Path(path)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except FileNotFoundError:
            logger.debug(f"Checksum file does not exist: {path}")
            return cls()
        except OSError as e:
            logger.warning(f"Cannot read checksum file {path}, starting with a new one: {e}")
            return cls()

        # Same codec as persist(); keys may hold escaped surrogates
        try:
            fingerprints = _fingerprint_map.validate_python(json.loads(data))
        except ValidationError as e:
            logger.warning(
                f"Checksum file {path} is invalid, starting with a new one: "
                f"{e.error_count()} error(s)"
            )
            return cls()
        except ValueError as e:
            logger.warning(f"Checksum file {path} is invalid, starting with a new one: {e}")
            return cls()

        logger.debug(f"Loaded {len(fingerprints)} checksums from {path}")
        return cls(fingerprints)

    @property
    def fingerprints(self) -> FingerprintMap:
        return dict(self._fingerprints)

    def get(self, relative_path: str) -> Optional[str]:
        return self._fingerprints.get(relative_path)

    def __len__(self) -> int:
        return len(self._fingerprints)

    def __contains__(self, relative_path: object) -> bool:
        return relative_path in self._fingerprints

    async def check(self, relative_path: str, content: bytes) -> FingerprintCheck:
        """
        Compare ``content`` with the stored checksum of ``relative_path``.

        The stored checksum is replaced by the new one whether or not it
        changed, and regardless of what later happens to the file.

        Args:
            relative_path: Key of the file, relative to the scanned root
            content: Current bytes of the file

        Returns:
            FingerprintCheck with ``changed`` set when the checksum is new or differs
        """
        checksum = await compute_checksum(content)
        previous = self._fingerprints.get(relative_path)
        self._fingerprints[relative_path] = checksum

        changed = previous != checksum
        if changed:
            logger.debug(f"Checksum changed for {relative_path}: {previous} -> {checksum}")
        return FingerprintCheck(
            relative_path=relative_path,
            checksum=checksum,
            previous=previous,
            changed=changed,
        )

    async def persist(self, path: Union[str, Path]) -> None:
        """
        Write the whole map to ``path``, replacing any prior content.

        Raises:
            FingerprintPersistError: If the file cannot be written
        """
        path = Path(path)
        data = json.dumps(self._fingerprints, sort_keys=True)
        try:
            await write_file_atomic(path, data)
        except FileWriteError as e:
            raise FingerprintPersistError(path, str(e)) from e
        logger.debug(f"Saved {len(self._fingerprints)} checksums to {path}")
