"""Persistent cache of dataset metadata and directory integrity results."""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Self

from datascan.config import CacheConfig

from .models import CacheState, DatasetFileInfo, DatasetRow, DirectoryIntegrityRow
from .table import CacheTable
from .tables import DATASET_LAYOUT, DIRECTORY_LAYOUT

logger = logging.getLogger(__name__)


class ResultCache:
    """Dataset and directory-integrity tables with context manager support.

    Both tables are saved on close(); nothing is flushed implicitly when the
    object is garbage collected.
    """

    def __init__(self, config: CacheConfig, clock: Callable[[], float] = time.monotonic):
        assert config.dataset_info_path is not None
        assert config.directory_integrity_path is not None
        self.config = config
        self.datasets: CacheTable[DatasetRow] = CacheTable(
            DATASET_LAYOUT, config.dataset_info_path, clock
        )
        self.directories: CacheTable[DirectoryIntegrityRow] = CacheTable(
            DIRECTORY_LAYOUT, config.directory_integrity_path, clock
        )
        self.max_directory_id = 0

    @property
    def autosave_interval_seconds(self) -> float:
        return self.config.autosave_interval_minutes * 60

    @property
    def dataset_state(self) -> CacheState:
        return self.datasets.state

    @property
    def directory_state(self) -> CacheState:
        return self.directories.state

    def load(self, force_reload: bool = False) -> bool:
        datasets_ok = self.datasets.load(force_reload)
        directories_ok = self._load_directories(force_reload)
        return datasets_ok and directories_ok

    def _load_directories(self, force_reload: bool = False) -> bool:
        if self.directories.state != CacheState.NOT_INITIALIZED and not force_reload:
            return True
        loaded = self.directories.load(force_reload=True)
        self.max_directory_id = max((row.directory_id for row in self.directories), default=0)
        return loaded

    def find_dataset(self, dataset_name: str) -> DatasetRow | None:
        return self.datasets.get(dataset_name)

    def find_directory(self, directory_path: Path | str) -> DirectoryIntegrityRow | None:
        return self.directories.get(str(directory_path))

    def upsert_dataset(self, info: DatasetFileInfo) -> DatasetRow:
        if self.datasets.state == CacheState.NOT_INITIALIZED:
            self.datasets.load()
        row = DatasetRow.from_dataset_info(info, datetime.now())
        return self.datasets.upsert(row)

    def upsert_directory(
        self,
        directory_path: Path | str,
        file_count: int,
        file_count_fail_integrity: int,
    ) -> int:
        """Insert or update a directory row and return its directory ID.

        New paths get the next ID after the largest one ever loaded or
        assigned, so IDs are never reused.
        """
        if self.directories.state == CacheState.NOT_INITIALIZED:
            self._load_directories()

        key = str(directory_path)
        existing = self.directories.get(key)
        if existing is not None:
            directory_id = existing.directory_id
        else:
            self.max_directory_id += 1
            directory_id = self.max_directory_id

        self.directories.upsert(
            DirectoryIntegrityRow(
                directory_id=directory_id,
                directory_path=key,
                file_count=file_count,
                file_count_fail_integrity=file_count_fail_integrity,
                info_last_modified=datetime.now().replace(microsecond=0),
            )
        )
        return directory_id

    def save(self, clear: bool = True) -> bool:
        datasets_ok = self.datasets.save(clear)
        directories_ok = self.directories.save(clear)
        if clear and self.directories.state == CacheState.NOT_INITIALIZED:
            self.max_directory_id = 0
        return datasets_ok and directories_ok

    def autosave(self) -> bool:
        interval = self.autosave_interval_seconds
        saved_datasets = self.datasets.autosave(interval)
        saved_directories = self.directories.autosave(interval)
        if saved_datasets or saved_directories:
            logger.info("Autosaved cached results")
        return saved_datasets or saved_directories

    def close(self) -> bool:
        return self.save(clear=False)

    def __enter__(self) -> Self:
        self.load()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
