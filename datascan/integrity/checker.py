"""Per-file integrity checks for files in a directory."""

import csv
import logging
import os
import xml.etree.ElementTree as ET
import zipfile
import zlib
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from datascan.config import IntegrityConfig
from datascan.hashing import compute_sha1, modification_time

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".log", ".tsv", ".ini", ".par", ".method"}


@dataclass
class DirectoryStats:
    directory_path: Path
    file_count: int = 0
    file_count_fail_integrity: int = 0


@dataclass
class FileStats:
    file_name: str
    size_bytes: int
    modification_date: datetime
    fail_integrity: bool = False
    file_hash: str = ""
    error_message: str = field(default="", compare=False)


class IntegrityChecker(Protocol):
    """Checks the files of one directory."""

    def check_directory(
        self, directory: Path, files_to_ignore: Iterable[str] = ()
    ) -> tuple[DirectoryStats, list[FileStats]]:
        """Return directory totals and per-file results, skipping ignored file names."""


class FileIntegrityChecker:
    """Lightweight structural checks for text, CSV, XML and zip files.

    Files of other types are counted and optionally hashed but never fail.
    """

    def __init__(self, config: IntegrityConfig):
        self.config = config

    def check_directory(
        self, directory: Path, files_to_ignore: Iterable[str] = ()
    ) -> tuple[DirectoryStats, list[FileStats]]:
        ignored = {Path(name).name.lower() for name in files_to_ignore}
        stats = DirectoryStats(directory_path=directory)
        results: list[FileStats] = []

        for path in _list_files(directory):
            if path.name.lower() in ignored:
                continue
            file_stats = self.check_file(path)
            if file_stats is None:
                continue
            stats.file_count += 1
            if file_stats.fail_integrity:
                stats.file_count_fail_integrity += 1
            results.append(file_stats)

        return stats, results

    def check_file(self, path: Path) -> FileStats | None:
        try:
            stat_result = path.stat()
        except OSError as e:
            logger.warning("Cannot stat %s: %s", path, e)
            return None

        file_stats = FileStats(
            file_name=path.name,
            size_bytes=stat_result.st_size,
            modification_date=modification_time(stat_result),
        )

        try:
            error = self._check_contents(path)
            if self.config.compute_file_hashes:
                file_stats.file_hash = compute_sha1(path)
        except OSError as e:
            error = f"Error reading file: {e}"

        if error:
            logger.warning("Integrity check failed for %s: %s", path, error)
            file_stats.fail_integrity = True
            file_stats.error_message = error
        return file_stats

    def _check_contents(self, path: Path) -> str | None:
        suffix = path.suffix.lower()
        if suffix in TEXT_EXTENSIONS:
            return self._check_text_file(path)
        if suffix == ".csv":
            return self._check_csv_file(path)
        if suffix == ".xml":
            return _check_xml_file(path)
        if suffix == ".zip":
            return self._check_zip_file(path)
        return None

    def _check_text_file(self, path: Path) -> str | None:
        try:
            with path.open(encoding="utf-8") as handle:
                for line_number, _ in enumerate(handle, start=1):
                    if line_number >= self.config.max_text_lines_to_check:
                        break
        except UnicodeDecodeError as e:
            return f"Not a valid text file: {e}"
        return None

    def _check_csv_file(self, path: Path) -> str | None:
        """All rows read must have the same number of columns as the header."""
        try:
            with path.open(encoding="utf-8", newline="") as handle:
                reader = csv.reader(handle)
                expected: int | None = None
                for row in reader:
                    if reader.line_num > self.config.max_text_lines_to_check:
                        break
                    if not row:
                        continue
                    if expected is None:
                        expected = len(row)
                    elif len(row) != expected:
                        return f"Line {reader.line_num} has {len(row)} columns; expected {expected}"
        except (UnicodeDecodeError, csv.Error) as e:
            return f"Not a valid CSV file: {e}"
        return None

    def _check_zip_file(self, path: Path) -> str | None:
        if not zipfile.is_zipfile(path):
            return "Not a valid zip file"
        try:
            with zipfile.ZipFile(path) as archive:
                if self.config.zip_check_all_data:
                    bad_member = archive.testzip()
                    if bad_member is not None:
                        return f"Corrupt zip member: {bad_member}"
                else:
                    archive.infolist()
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            return f"Corrupt zip file: {e}"
        return None


def _check_xml_file(path: Path) -> str | None:
    try:
        for _ in ET.iterparse(path):
            pass
    except ET.ParseError as e:
        return f"Not a valid XML file: {e}"
    return None


def _list_files(directory: Path) -> list[Path]:
    files: list[Path] = []
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_file(follow_symlinks=False):
                    files.append(Path(entry.path))
    except PermissionError:
        logger.warning("Permission denied listing directory: %s", directory)
    except OSError as e:
        logger.error("Error listing directory %s: %s", directory, e)
    return sorted(files)


def count_files(directory: Path, files_to_ignore: Iterable[str] = ()) -> int:
    ignored = {Path(name).name.lower() for name in files_to_ignore}
    return sum(1 for path in _list_files(directory) if path.name.lower() not in ignored)
