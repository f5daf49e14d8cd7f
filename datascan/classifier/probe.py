"""Cheap filesystem probes used by the classification rules."""

import fnmatch
import logging
import os
from functools import cached_property
from pathlib import Path

logger = logging.getLogger(__name__)


class PathProbe:
    """Existence and listing checks for one candidate path.

    Name comparisons are case-insensitive because instrument data is usually
    written from Windows acquisition machines. Directory listings are read
    once per probe and never parsed.
    """

    def __init__(self, path: Path):
        self.path = path

    @cached_property
    def is_directory(self) -> bool:
        return self.path.is_dir()

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def lower_name(self) -> str:
        return self.path.name.lower()

    @property
    def suffix(self) -> str:
        return self.path.suffix.lower()

    @property
    def parent_suffix(self) -> str:
        return self.path.parent.suffix.lower()

    @cached_property
    def _entries(self) -> tuple[set[str], set[str]]:
        return _list_entries(self.path)

    @cached_property
    def _sibling_entries(self) -> tuple[set[str], set[str]]:
        return _list_entries(self.path.parent)

    def contains_file(self, name: str) -> bool:
        files, _ = self._entries
        return name.lower() in files

    def contains_any_file(self, names: tuple[str, ...]) -> bool:
        return any(self.contains_file(name) for name in names)

    def contains_directory(self, name: str) -> bool:
        _, directories = self._entries
        return name.lower() in directories

    def contains_file_matching(self, pattern: str) -> bool:
        files, _ = self._entries
        pattern = pattern.lower()
        return any(fnmatch.fnmatchcase(name, pattern) for name in files)

    def sibling_file_exists(self, name: str) -> bool:
        files, _ = self._sibling_entries
        return name.lower() in files


def _list_entries(directory: Path) -> tuple[set[str], set[str]]:
    files: set[str] = set()
    directories: set[str] = set()
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir():
                    directories.add(entry.name.lower())
                else:
                    files.add(entry.name.lower())
    except (FileNotFoundError, NotADirectoryError):
        return set(), set()
    except PermissionError:
        logger.warning("Permission denied probing directory: %s", directory)
    except OSError as e:
        logger.error("Error probing directory %s: %s", directory, e)
    return files, directories
