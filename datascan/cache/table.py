"""A keyed in-memory table persisted to a tab-delimited file."""

import logging
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Generic

from .models import CacheState
from .tables import RowT, TableLayout

logger = logging.getLogger(__name__)


class CacheTable(Generic[RowT]):
    """Rows keyed by primary key, with load/save and dirty tracking.

    The backing file is only read by load() and only written by save(); the
    table never persists itself implicitly.
    """

    def __init__(
        self,
        layout: TableLayout[RowT],
        path: Path,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.layout = layout
        self.path = path
        self.state = CacheState.NOT_INITIALIZED
        self.load_failed = False
        self._rows: dict[str, RowT] = {}
        self._clock = clock
        self._last_save = clock()

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, key: str) -> bool:
        return key in self._rows

    def __iter__(self) -> Iterator[RowT]:
        return iter(self._rows.values())

    def get(self, key: str) -> RowT | None:
        return self._rows.get(key)

    def upsert(self, row: RowT) -> RowT:
        self._rows[self.layout.key(row)] = row
        self.state = CacheState.MODIFIED
        return row

    def clear(self) -> None:
        self._rows.clear()
        self.state = CacheState.NOT_INITIALIZED

    def load(self, force_reload: bool = False) -> bool:
        """Read the backing file into memory.

        Lines that are not valid UTF-8, short lines, lines whose ID column is
        not numeric (including the header) and duplicate keys are skipped.
        Returns False only when the file exists but could not be read; the
        table then refuses to save so that the unread rows are not overwritten.
        """
        if self.state != CacheState.NOT_INITIALIZED and not force_reload:
            return True

        self._rows.clear()
        self.load_failed = False
        self.state = CacheState.INITIALIZED_BUT_UNMODIFIED

        if not self.path.exists():
            logger.debug("No %s cache file at %s", self.layout.name, self.path)
            return True

        skipped = 0
        try:
            with self.path.open("rb") as handle:
                for raw_line in handle:
                    if not self._load_line(raw_line):
                        skipped += 1
        except OSError as e:
            logger.error("Error reading %s cache %s: %s", self.layout.name, self.path, e)
            self.load_failed = True
            return False

        logger.debug(
            "Loaded %d %s rows from %s (%d lines skipped)",
            len(self._rows),
            self.layout.name,
            self.path,
            skipped,
        )
        return True

    def _load_line(self, raw_line: bytes) -> bool:
        try:
            line = raw_line.decode("utf-8")
        except UnicodeDecodeError:
            return False

        fields = line.rstrip("\r\n").split("\t")
        if len(fields) < self.layout.min_columns:
            return False

        try:
            row = self.layout.parse(fields)
        except (ValueError, OverflowError):
            return False

        key = self.layout.key(row)
        if key in self._rows:
            return False

        self._rows[key] = row
        return True

    def save(self, clear: bool = True) -> bool:
        """Write all rows to the backing file if the table is modified.

        The file is written to a temporary sibling and then moved into place.
        On failure the in-memory rows are kept and False is returned.
        """
        if self.state != CacheState.MODIFIED or not self._rows:
            return True
        if self.load_failed:
            logger.error(
                "Not saving %s cache since %s could not be read", self.layout.name, self.path
            )
            return False

        lines = [self.layout.header]
        lines.extend("\t".join(self.layout.format(row)) for row in self._rows.values())
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error("Error saving %s cache to %s: %s", self.layout.name, self.path, e)
            return False

        logger.debug("Saved %d %s rows to %s", len(self._rows), self.layout.name, self.path)
        self._last_save = self._clock()

        if clear:
            self.clear()
        else:
            self.state = CacheState.INITIALIZED_BUT_UNMODIFIED
        return True

    def autosave(self, interval_seconds: float) -> bool:
        """Save without clearing when modified and the interval has elapsed."""
        if interval_seconds <= 0 or self.state != CacheState.MODIFIED:
            return False
        if self._clock() - self._last_save < interval_seconds:
            return False
        return self.save(clear=False)
