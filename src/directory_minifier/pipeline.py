"""Incremental minification of a directory tree."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Awaitable, Dict, List, Optional, Set, Union

from loguru import logger

from directory_minifier.config import MinifierConfig
from directory_minifier.exceptions import (
    ConfigurationError,
    FingerprintPersistError,
    ScanError,
)
from directory_minifier.fingerprints import FingerprintStore
from directory_minifier.scanner import scan_tree, source_predicate
from directory_minifier.scheduler import BoundedScheduler
from directory_minifier.transformer import MinifyTransformer, Transformer, TransformResult
from directory_minifier.utils.file_utils import read_file_bytes


class PipelineState(str, Enum):
    """Lifecycle of a run."""

    INIT = "init"
    LOADING_STORE = "loading_store"
    SCANNING = "scanning"
    PROCESSING = "processing"
    PERSISTING = "persisting"
    DONE = "done"
    ERROR = "error"


@dataclass
class MinifyReport:
    """Summary of one run.

    Attributes:
        files: Relative paths of every source file found
        changed: Files whose checksum was new or different
        unchanged: Files skipped because their checksum matched
        transformed: Artifacts written during the run
        failed: Relative path -> error message for files that failed
    """

    root: Path
    checksum_path: Path
    files: List[str] = field(default_factory=list)
    changed: Set[str] = field(default_factory=set)
    unchanged: Set[str] = field(default_factory=set)
    transformed: List[TransformResult] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    fingerprint_count: int = 0

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_changes(self) -> int:
        return len(self.changed)


def normalize_root(root: Union[str, Path]) -> str:
    """Return ``root`` as a string that always ends with a path separator."""
    root = str(root)
    if not root.endswith(os.sep):
        root += os.sep
    return root


class DirectoryMinifier:
    """
    Minify every changed source file under a directory.

    Flow of a run: load the checksum file, scan the tree, check and
    transform files through a bounded scheduler, then save the checksum
    file once every file finished.
    """

    def __init__(
        self,
        transformer: Optional[Transformer] = None,
        config: Optional[MinifierConfig] = None,
    ):
        self.config = config or MinifierConfig()
        self.transformer = transformer or MinifyTransformer(marker=self.config.output_marker)
        self.state = PipelineState.INIT

    def _set_state(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def process(
        self,
        root: Union[str, Path, None],
        checksum_path: Union[str, Path, None] = None,
    ) -> Awaitable[MinifyReport]:
        """
        Validate arguments and return the run coroutine.

        Validation happens immediately, before anything is awaited.

        Args:
            root: Directory to process
            checksum_path: Checksum file, defaults to ``<root>/source-hash.json``

        Raises:
            ConfigurationError: If ``root`` is empty (``Path("")`` included)
        """
        self.state = PipelineState.INIT
        if root is None or root == "" or root == Path(""):
            self._set_state(PipelineState.ERROR)
            raise ConfigurationError("Nothing to minify: no directory given")

        directory = normalize_root(root)
        if checksum_path is None or str(checksum_path) == "":
            checksum_path = directory + self.config.checksum_filename

        return self._run(Path(directory), Path(checksum_path))

    async def _run(self, root: Path, checksum_path: Path) -> MinifyReport:
        logger.info(f"Minifying {root} ...")
        report = MinifyReport(root=root, checksum_path=checksum_path)

        self._set_state(PipelineState.LOADING_STORE)
        store = await FingerprintStore.load(checksum_path)

        self._set_state(PipelineState.SCANNING)
        predicate = source_predicate(self.config.source_suffix, self.config.output_marker)
        scan = await scan_tree(root, predicate)
        if not scan.ok:
            self._set_state(PipelineState.ERROR)
            logger.error(f"Failed to scan {root}: {scan.error}")
            if scan.files:
                logger.warning(f"{len(scan.files)} files were found before the failure:")
                for path in scan.files:
                    logger.warning(f"  {path}")
            raise ScanError(scan.error, scan.files)

        resolved_root = Path(os.path.abspath(root))
        report.files = [self._relative(resolved_root, path) for path in scan.files]

        self._set_state(PipelineState.PROCESSING)
        logger.info(f"Minifying {len(scan.files)} files...")

        async def process_file(path: Path) -> Optional[TransformResult]:
            relative_path = self._relative(resolved_root, path)
            try:
                content = await read_file_bytes(path)
                check = await store.check(relative_path, content)
                if not check.changed:
                    report.unchanged.add(relative_path)
                    return None

                report.changed.add(relative_path)
                result = await self.transformer.transform(path, resolved_root)
                report.transformed.append(result)
                return result
            except Exception as e:
                report.failed[relative_path] = str(e)
                raise

        scheduler = BoundedScheduler(self.config.capacity)
        await scheduler.run(
            scan.files,
            process_file,
            on_done=lambda: self._set_state(PipelineState.PERSISTING),
        )

        report.fingerprint_count = len(store)
        try:
            await store.persist(checksum_path)
        except FingerprintPersistError as e:
            self._set_state(PipelineState.ERROR)
            logger.error(f"Error saving checksum file {checksum_path}: {e}")
            e.report = report
            raise

        logger.info(f"Final checksum saved at {checksum_path}")
        self._set_state(PipelineState.DONE)
        return report

    @staticmethod
    def _relative(root: Path, path: Path) -> str:
        return path.relative_to(root).as_posix()


async def minify_directory(
    root: Union[str, Path],
    checksum_path: Union[str, Path, None] = None,
    transformer: Optional[Transformer] = None,
    config: Optional[MinifierConfig] = None,
) -> MinifyReport:
    """Run a single minification pass over ``root``."""
    return await DirectoryMinifier(transformer=transformer, config=config).process(
        root, checksum_path
    )
