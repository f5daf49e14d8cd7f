"""Recursive discovery of datasets below a root directory."""

import errno
import fnmatch
import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from datascan.classifier import is_zipped_s_folder
from datascan.classifier.rules import BRUKER_ONE_FOLDER_NAME
from datascan.config import Config
from datascan.integrity import DirectoryIntegrityRunner

from .abort import AbortMonitor
from .orchestrator import DatasetOrchestrator
from .progress import ProcessResult, ProgressReporter, RunStats, ScanErrorCode

logger = logging.getLogger(__name__)

# Errors seen on network shares that usually clear up after a short wait
TRANSIENT_ERRNOS = {
    errno.EAGAIN,
    errno.EBUSY,
    errno.EINTR,
    errno.ETIMEDOUT,
    errno.ESTALE,
    errno.ENETDOWN,
    errno.ENETUNREACH,
    errno.ENETRESET,
    errno.ECONNABORTED,
    errno.ECONNRESET,
    errno.EHOSTDOWN,
    errno.EHOSTUNREACH,
}

WILDCARD_CHARACTERS = ("*", "?", "[")

# Deepest level walked; must stay well below sys.getrecursionlimit()
MAX_DIRECTORY_DEPTH = 200


def is_transient_error(error: OSError) -> bool:
    return error.errno in TRANSIENT_ERRNOS


def has_wildcard(name: str) -> bool:
    return any(character in name for character in WILDCARD_CHARACTERS)


def resolve_input(input_path: Path) -> tuple[Path, str]:
    """Split an input path into the directory to search and a name pattern."""
    if has_wildcard(input_path.name):
        return input_path.parent, input_path.name
    if input_path.is_dir():
        return input_path, "*"
    return input_path.parent, input_path.name


def normalize_extension(extension: str) -> str:
    extension = extension.strip().lower()
    if not extension.startswith("."):
        extension = "." + extension
    return extension


@dataclass
class DirectoryListing:
    files: list[Path]
    directories: list[Path]


def list_directory(directory: Path, pattern: str = "*") -> DirectoryListing:
    """List files and subdirectories whose names match pattern, case-insensitively.

    Raises OSError if the directory cannot be read.
    """
    pattern = pattern.lower()
    files: list[Path] = []
    directories: list[Path] = []
    with os.scandir(directory) as entries:
        for entry in entries:
            if not fnmatch.fnmatchcase(entry.name.lower(), pattern):
                continue
            if entry.is_dir(follow_symlinks=False):
                directories.append(Path(entry.path))
            elif entry.is_file(follow_symlinks=False):
                files.append(Path(entry.path))
    return DirectoryListing(files=sorted(files), directories=sorted(directories))


class DirectoryWalker:
    """Finds datasets below a directory and hands each one to the orchestrator.

    Directories named 1 or carrying a known dataset extension are processed
    as leaf datasets and never descended into. Recursion stops at
    max_levels (<= 0 means unlimited) and as soon as an abort is requested.
    A branch nested deeper than MAX_DIRECTORY_DEPTH fails.
    """

    def __init__(
        self,
        config: Config,
        orchestrator: DatasetOrchestrator,
        abort: AbortMonitor,
        integrity: DirectoryIntegrityRunner | None = None,
        stats: RunStats | None = None,
        progress: ProgressReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.orchestrator = orchestrator
        self.abort = abort
        self.integrity = integrity
        self.stats = stats or RunStats()
        self.progress = progress
        self._sleep = sleep
        self.error_code = ScanErrorCode.NO_ERROR

        scanner_config = config.scanner
        self.file_extensions = [normalize_extension(ext) for ext in scanner_config.file_extensions]
        self.directory_extensions = [
            normalize_extension(ext) for ext in scanner_config.directory_extensions
        ]
        self.process_all_extensions = scanner_config.process_all_extensions or ".*" in self.file_extensions

    @property
    def aborted(self) -> bool:
        return self.abort.check()

    def process_and_recurse(
        self,
        input_path: Path,
        output_dir: Path | None = None,
        max_levels: int = 0,
    ) -> bool:
        """Process every dataset found below input_path.

        Returns False when the input directory is invalid or when a branch
        fails while recursion errors are configured as fatal.
        """
        directory, pattern = resolve_input(input_path)
        if not directory.is_dir():
            logger.error("Input directory not found: %s", directory)
            self.error_code = ScanErrorCode.INVALID_INPUT_FILE_PATH
            return False

        if self.config.cache.enabled:
            self.orchestrator.cache.load()

        logger.info("Examining %s for files matching %s", directory, pattern)
        return self._recurse(directory, pattern, output_dir, 1, max_levels)

    def _recurse(
        self,
        directory: Path,
        pattern: str,
        output_dir: Path | None,
        level: int,
        max_levels: int,
    ) -> bool:
        if self.aborted:
            return True

        if level > MAX_DIRECTORY_DEPTH:
            logger.error("Directory nesting exceeds %d levels: %s", MAX_DIRECTORY_DEPTH, directory)
            return False

        listing = self._list_with_retry(directory, pattern)
        if listing is None:
            return False
        self.stats.directories_scanned += 1

        processed_files = self._process_files(directory, listing.files, output_dir)
        if processed_files is None:
            return True

        if self.integrity is not None and not self.aborted:
            self._check_integrity(directory, processed_files)

        consumed = self._process_leaf_directories(listing.directories, output_dir)
        if consumed is None:
            return True

        if max_levels > 0 and level > max_levels:
            return True

        subdirectories = self._list_with_retry(directory, "*")
        if subdirectories is None:
            return False

        for subdirectory in subdirectories.directories:
            if subdirectory.name in consumed:
                continue

            if not self._recurse(subdirectory, pattern, output_dir, level + 1, max_levels):
                self.stats.directories_failed += 1
                if self.config.scanner.recursion_errors_fatal:
                    return False
                logger.warning("Continuing after error in %s", subdirectory)

            if self.aborted:
                break

        return True

    def _process_files(
        self, directory: Path, files: list[Path], output_dir: Path | None
    ) -> list[str] | None:
        """Process dataset files; returns the processed names, or None on abort."""
        processed: list[str] = []
        processed_zipped_s_folder = False
        has_bruker_one_folder = (directory / BRUKER_ONE_FOLDER_NAME).is_dir()

        for file_path in files:
            if self.aborted:
                return None

            if self._matches_file_extension(file_path):
                self._process(file_path, output_dir)
                processed.append(file_path.name)
            elif (
                not processed_zipped_s_folder
                and not has_bruker_one_folder
                and is_zipped_s_folder(file_path.name)
            ):
                self._process(file_path, output_dir)
                processed.append(file_path.name)
                processed_zipped_s_folder = True

        if self.aborted:
            return None
        return processed

    def _process_leaf_directories(
        self, directories: list[Path], output_dir: Path | None
    ) -> set[str] | None:
        """Process dataset directories; returns their names, or None on abort."""
        consumed: set[str] = set()

        for subdirectory in directories:
            if self.aborted:
                return None

            if subdirectory.name == BRUKER_ONE_FOLDER_NAME or self._matches_directory_extension(
                subdirectory
            ):
                self._process(subdirectory, output_dir)
                consumed.add(subdirectory.name)

        if self.aborted:
            return None
        return consumed

    def process_wildcard(self, input_path: Path, output_dir: Path | None = None) -> bool:
        """Process the files, then the directories, matching a wildcard path."""
        directory, pattern = resolve_input(input_path)
        if not directory.is_dir():
            logger.error("Input directory not found: %s", directory)
            self.error_code = ScanErrorCode.INVALID_INPUT_FILE_PATH
            return False

        listing = self._list_with_retry(directory, pattern)
        if listing is None:
            return False
        self.stats.directories_scanned += 1

        processed: list[str] = []
        for path in [*listing.files, *listing.directories]:
            if self.aborted:
                return True
            self._process(path, output_dir)
            processed.append(path.name)

        if not processed:
            logger.warning("No match was found for the input path: %s", input_path)

        if self.integrity is not None and not self.aborted:
            self._check_integrity(directory, processed)
        return True

    def _check_integrity(self, directory: Path, processed_files: list[str]) -> None:
        assert self.integrity is not None
        if not self.integrity.check(directory, processed_files):
            self.error_code = ScanErrorCode.FILE_INTEGRITY_CHECK_ERROR

    def _process(self, path: Path, output_dir: Path | None) -> ProcessResult:
        result = self.orchestrator.process(path, output_dir)
        self.stats.record(result)
        if self.progress is not None:
            self.progress.report_if_needed(self.stats, path.parent)
        return result

    def _matches_file_extension(self, path: Path) -> bool:
        if self.process_all_extensions:
            return True
        return path.suffix.lower() in self.file_extensions

    def _matches_directory_extension(self, path: Path) -> bool:
        return path.suffix.lower() in self.directory_extensions

    def _list_with_retry(self, directory: Path, pattern: str) -> DirectoryListing | None:
        max_attempts = self.config.retry.max_enumeration_attempts
        attempts = 0

        while True:
            try:
                return list_directory(directory, pattern)
            except PermissionError:
                logger.warning("Permission denied listing directory: %s", directory)
                return None
            except OSError as e:
                attempts += 1
                if not is_transient_error(e) or attempts >= max_attempts:
                    logger.error("Error listing directory %s: %s", directory, e)
                    return None
                logger.warning("Error listing directory %s: %s; retrying", directory, e)
                self._sleep(self.config.retry.enumeration_retry_delay_seconds)
