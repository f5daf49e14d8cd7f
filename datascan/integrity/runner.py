"""Per-directory integrity checking backed by the result cache."""

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from datascan.cache import ResultCache
from datascan.cache.tables import format_timestamp
from datascan.config import IntegrityConfig

from .checker import FileStats, IntegrityChecker, count_files

logger = logging.getLogger(__name__)

DETAILS_COLUMNS = (
    "FolderID",
    "FileName",
    "FileSizeBytes",
    "FileModificationDate",
    "FailedIntegrityCheck",
    "Sha1Hash",
    "InfoLastModified",
)

ERRORS_COLUMNS = ("File_Path", "Error_Message", "InfoLastModified")


class IntegrityReportWriter:
    """Appends to the file integrity details and errors reports."""

    def __init__(self, details_path: Path, errors_path: Path):
        self.details_path = details_path
        self.errors_path = errors_path

    def write_details(self, directory_id: int, file_stats: list[FileStats]) -> None:
        now = format_timestamp(datetime.now())
        lines = [
            "\t".join(
                (
                    str(directory_id),
                    stats.file_name,
                    str(stats.size_bytes),
                    format_timestamp(stats.modification_date),
                    str(stats.fail_integrity),
                    stats.file_hash,
                    now,
                )
            )
            for stats in file_stats
        ]
        _append_lines(self.details_path, DETAILS_COLUMNS, lines)

    def write_errors(self, directory: Path, file_stats: list[FileStats]) -> None:
        now = format_timestamp(datetime.now())
        lines = [
            "\t".join((str(directory / stats.file_name), stats.error_message, now))
            for stats in file_stats
            if stats.fail_integrity
        ]
        _append_lines(self.errors_path, ERRORS_COLUMNS, lines)


def _append_lines(path: Path, columns: tuple[str, ...], lines: list[str]) -> None:
    if not lines:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    write_header = not path.exists()
    with path.open("a", encoding="utf-8") as handle:
        if write_header:
            handle.write("\t".join(columns) + "\n")
        for line in lines:
            handle.write(line + "\n")


class DirectoryIntegrityRunner:
    """Checks a directory unless the cache shows it was already checked cleanly."""

    def __init__(
        self,
        config: IntegrityConfig,
        cache: ResultCache,
        checker: IntegrityChecker,
        reports: IntegrityReportWriter | None = None,
    ):
        assert config.details_path is not None
        assert config.errors_path is not None
        self.config = config
        self.cache = cache
        self.checker = checker
        self.reports = reports or IntegrityReportWriter(config.details_path, config.errors_path)

    def needs_check(self, directory: Path, processed_files: Iterable[str] = ()) -> bool:
        if self.config.force_recheck:
            return True
        self.cache.load()
        row = self.cache.find_directory(directory)
        if row is None:
            return True
        current_count = count_files(directory, processed_files)
        return row.file_count != current_count or row.file_count_fail_integrity > 0

    def check(self, directory: Path, processed_files: Iterable[str] = ()) -> bool:
        """Check the files in directory; returns False if any file failed."""
        processed_files = list(processed_files)
        if not self.needs_check(directory, processed_files):
            logger.debug("Skipping integrity check of %s; cached results are current", directory)
            return True

        dir_stats, file_stats = self.checker.check_directory(directory, processed_files)
        directory_id = self.cache.upsert_directory(
            directory,
            dir_stats.file_count,
            dir_stats.file_count_fail_integrity,
        )

        try:
            self.reports.write_details(directory_id, file_stats)
            self.reports.write_errors(directory, file_stats)
        except OSError as e:
            logger.error("Error writing integrity reports for %s: %s", directory, e)

        if dir_stats.file_count_fail_integrity:
            logger.warning(
                "%d of %d files failed the integrity check in %s",
                dir_stats.file_count_fail_integrity,
                dir_stats.file_count,
                directory,
            )
            return False
        return True
