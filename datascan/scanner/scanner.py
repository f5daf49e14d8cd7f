"""Main scanner implementation."""

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Self

from datascan.cache import ResultCache
from datascan.config import Config
from datascan.errors import InvalidOutputDirectoryError
from datascan.integrity import DirectoryIntegrityRunner, FileIntegrityChecker
from datascan.processors import ProcessorFactory, get_processor

from .abort import AbortMonitor
from .orchestrator import DatasetOrchestrator
from .progress import ProcessResult, ProgressReporter, RunStats, ScanErrorCode, StatusFileWriter
from .walker import DirectoryWalker, has_wildcard

logger = logging.getLogger(__name__)


class DatasetScanner:
    """Scans datasets and records their metadata in the result cache.

    Use as a context manager, or call close(), so that cached results are
    written out when the scan ends.
    """

    def __init__(
        self,
        config: Config,
        processor_factory: ProcessorFactory = get_processor,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        assert config.abort_file_path is not None
        self.config = config
        self.cache = ResultCache(config.cache, clock)
        self.status = StatusFileWriter(
            config.scanner.status_file_path,
            config.scanner.status_interval_seconds,
            clock,
        )
        self.abort = AbortMonitor(config.abort_file_path, config.scanner.abort_poll_seconds, clock)
        self.stats = RunStats()
        self.progress = ProgressReporter(interval=config.scanner.progress_interval)
        self.orchestrator = DatasetOrchestrator(
            config,
            self.cache,
            self.status,
            processor_factory=processor_factory,
            sleep=sleep,
        )

        self.integrity: DirectoryIntegrityRunner | None = None
        if config.integrity.enabled:
            checker = FileIntegrityChecker(config.integrity)
            self.integrity = DirectoryIntegrityRunner(config.integrity, self.cache, checker)

        self.walker = DirectoryWalker(
            config,
            self.orchestrator,
            self.abort,
            integrity=self.integrity,
            stats=self.stats,
            progress=self.progress,
            sleep=sleep,
        )
        self.save_failed = False

    @property
    def error_code(self) -> ScanErrorCode:
        if self.walker.error_code != ScanErrorCode.NO_ERROR:
            return self.walker.error_code
        return self.orchestrator.error_code

    def process_path(self, path: Path, output_dir: Path | None = None) -> ProcessResult:
        """Process a single file or dataset directory."""
        result = self.orchestrator.process(path, output_dir)
        self.stats.record(result)
        return result

    def scan(
        self,
        input_path: Path,
        output_dir: Path | None = None,
        recurse: bool = False,
        max_levels: int = 0,
    ) -> bool:
        """Scan a path, a wildcard, or a directory tree.

        Returns False only for conditions that should fail the whole run.
        Raises InvalidOutputDirectoryError if output_dir is an existing file.
        """
        if output_dir is not None and output_dir.exists() and not output_dir.is_dir():
            self.walker.error_code = ScanErrorCode.INVALID_OUTPUT_DIRECTORY_PATH
            raise InvalidOutputDirectoryError(f"Output path is not a directory: {output_dir}")

        logger.info("Starting scan of %s", input_path)

        if recurse:
            success = self.walker.process_and_recurse(input_path, output_dir, max_levels)
        elif has_wildcard(input_path.name):
            success = self.walker.process_wildcard(input_path, output_dir)
        elif not input_path.exists():
            logger.error("Input path not found: %s", input_path)
            self.walker.error_code = ScanErrorCode.INVALID_INPUT_FILE_PATH
            success = False
        else:
            success = self.process_path(input_path, output_dir).success

        if self.abort.aborted:
            self.progress.report_abort(self.stats)
        else:
            self.progress.report_completion(self.stats)
        return success

    def save(self) -> bool:
        if not self.config.cache.enabled:
            return True
        saved = self.cache.save(clear=False)
        if not saved:
            self.save_failed = True
        return saved

    def close(self) -> None:
        self.save()

    def __enter__(self) -> Self:
        if self.config.cache.enabled:
            self.cache.load()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
