"""Processing state, error codes, status file and progress reporting."""

import logging
import sys
import time
import xml.etree.ElementTree as ET
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from datascan.cache.tables import format_timestamp

logger = logging.getLogger(__name__)


class ProcessingState(Enum):
    """Outcome of processing one path during a run."""

    NOT_PROCESSED = "not_processed"
    PROCESSED_SUCCESSFULLY = "processed_successfully"
    FAILED_PROCESSING = "failed_processing"
    SKIPPED_SINCE_FOUND_IN_CACHE = "skipped_since_found_in_cache"


class ScanErrorCode(Enum):
    NO_ERROR = "No error"
    INVALID_INPUT_FILE_PATH = "Invalid input file path"
    INVALID_OUTPUT_DIRECTORY_PATH = "Invalid output directory path"
    FILE_PATH_ERROR = "General file path error"
    UNKNOWN_FILE_EXTENSION = "Unknown file extension"
    INPUT_FILE_READ_ERROR = "Input file read error"
    INPUT_FILE_ACCESS_ERROR = "Input file access error"
    OUTPUT_FILE_WRITE_ERROR = "Error writing output file"
    FILE_INTEGRITY_CHECK_ERROR = "Error checking file integrity"
    DATASET_HAS_NO_SPECTRA = "Dataset has no spectra"
    UNSPECIFIED_ERROR = "Unspecified error"

    @property
    def message(self) -> str:
        return self.value


@dataclass
class ProcessResult:
    success: bool
    state: ProcessingState
    dataset_name: str = ""
    file_size_bytes: int = 0


@dataclass
class RunStats:
    """Counts for one scan run."""

    files_processed: int = 0
    files_failed: int = 0
    files_skipped: int = 0
    files_unknown: int = 0
    directories_scanned: int = 0
    directories_failed: int = 0
    total_bytes: int = 0
    start_time: float = field(default_factory=time.time)

    @property
    def elapsed_seconds(self) -> float:
        return time.time() - self.start_time

    @property
    def datasets_seen(self) -> int:
        return self.files_processed + self.files_failed + self.files_skipped

    def record(self, result: ProcessResult) -> None:
        if result.state == ProcessingState.PROCESSED_SUCCESSFULLY:
            self.files_processed += 1
            self.total_bytes += result.file_size_bytes
        elif result.state == ProcessingState.FAILED_PROCESSING:
            self.files_failed += 1
        elif result.state == ProcessingState.SKIPPED_SINCE_FOUND_IN_CACHE:
            self.files_skipped += 1
        else:
            self.files_unknown += 1


class StatusFileWriter:
    """Writes the processing status XML file, at most once per interval unless forced."""

    def __init__(
        self,
        path: Path | None,
        interval_seconds: float = 15.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.path = path
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._last_write: float | None = None

    def write(
        self,
        progress: float,
        message: str,
        error_code: ScanErrorCode = ScanErrorCode.NO_ERROR,
        error_message: str = "",
        force: bool = False,
    ) -> bool:
        if self.path is None:
            return False

        now = self._clock()
        if not force and self._last_write is not None:
            if now - self._last_write < self.interval_seconds:
                return False

        root = ET.Element("Root")
        general = ET.SubElement(root, "General")
        ET.SubElement(general, "LastUpdate").text = format_timestamp(datetime.now())
        ET.SubElement(general, "Progress").text = f"{progress:.2f}"
        ET.SubElement(general, "ProgressMessage").text = message
        ET.SubElement(general, "ErrorCode").text = error_code.name
        ET.SubElement(general, "ErrorMessage").text = error_message or (
            "" if error_code == ScanErrorCode.NO_ERROR else error_code.message
        )
        ET.indent(root)

        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(ET.tostring(root, encoding="unicode") + "\n", encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.warning("Error writing status file %s: %s", self.path, e)
            return False

        self._last_write = now
        return True


class ProgressReporter:
    """Reports scan progress to the user."""

    def __init__(self, interval: int = 25):
        self.interval = interval
        self._last_report_count = 0

    def report_if_needed(self, stats: RunStats, current_directory: Path) -> None:
        if stats.datasets_seen - self._last_report_count >= self.interval:
            self._print_progress(stats, current_directory)
            self._last_report_count = stats.datasets_seen

    def report_completion(self, stats: RunStats) -> None:
        duration = _format_duration(stats.elapsed_seconds)
        print(
            f"\nScan complete: {stats.files_processed:,} datasets processed, "
            f"{stats.files_skipped:,} skipped (cached), {stats.files_failed:,} failed "
            f"in {stats.directories_scanned:,} directories ({duration})"
        )
        print(f"Total size: {format_bytes(stats.total_bytes)}")
        if stats.files_unknown:
            print(f"Unrecognized paths: {stats.files_unknown:,}")
        if stats.directories_failed:
            print(f"Directories with errors: {stats.directories_failed:,}")

    def report_abort(self, stats: RunStats) -> None:
        print(
            f"\nScan aborted. Cached results saved.\n"
            f"Processed: {stats.files_processed:,} datasets in "
            f"{stats.directories_scanned:,} directories"
        )

    def _print_progress(self, stats: RunStats, current_directory: Path) -> None:
        print(f"[{stats.datasets_seen:,} datasets] Scanning: {current_directory}/", file=sys.stderr)


def _format_duration(seconds: float) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_bytes(size: int) -> str:
    size_f = float(size)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_f < 1024:
            return f"{size_f:.2f} {unit}"
        size_f /= 1024
    return f"{size_f:.2f} PB"
