"""Data models for dataset metadata and the result cache."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from datascan.errors import DuplicateInstrumentFileError


class CacheState(Enum):
    """Load/dirty state of one cache table."""

    NOT_INITIALIZED = "not_initialized"
    INITIALIZED_BUT_UNMODIFIED = "initialized_but_unmodified"
    MODIFIED = "modified"


class HashType(Enum):
    UNDEFINED = "undefined"
    SHA1 = "sha1"


@dataclass
class InstrumentFileInfo:
    """A constituent file of a dataset, used for change detection."""

    relative_path: str
    length: int
    hash: str = ""
    hash_type: HashType = HashType.UNDEFINED


@dataclass
class DatasetFileInfo:
    """Metadata for one logical dataset (a single file or a whole directory)."""

    dataset_id: int = 0
    dataset_name: str = ""
    file_extension: str = ""
    acq_time_start: datetime = datetime.min
    acq_time_end: datetime = datetime.min
    scan_count: int = 0
    file_size_bytes: int = 0
    file_system_creation_time: datetime = datetime.min
    file_system_modification_time: datetime = datetime.min
    overall_quality_score: float = 0.0
    instrument_files: dict[str, InstrumentFileInfo] = field(default_factory=dict)

    def add_instrument_file(
        self,
        relative_path: str,
        length: int,
        file_hash: str = "",
        hash_type: HashType = HashType.UNDEFINED,
    ) -> InstrumentFileInfo:
        if relative_path in self.instrument_files:
            raise DuplicateInstrumentFileError(
                f"Instrument file already registered for {self.dataset_name}: {relative_path}"
            )
        info = InstrumentFileInfo(relative_path, length, file_hash, hash_type)
        self.instrument_files[relative_path] = info
        return info

    def clear(self) -> None:
        """Reset all fields so the record can be refilled by another attempt."""
        self.dataset_id = 0
        self.dataset_name = ""
        self.file_extension = ""
        self.acq_time_start = datetime.min
        self.acq_time_end = datetime.min
        self.scan_count = 0
        self.file_size_bytes = 0
        self.file_system_creation_time = datetime.min
        self.file_system_modification_time = datetime.min
        self.overall_quality_score = 0.0
        self.instrument_files.clear()


@dataclass
class DatasetRow:
    """Cached form of a DatasetFileInfo, one line of the dataset info file."""

    dataset_id: int
    dataset_name: str
    file_extension: str
    acq_time_start: datetime
    acq_time_end: datetime
    scan_count: int
    file_size_bytes: int
    info_last_modified: datetime
    file_modification_date: datetime

    @classmethod
    def from_dataset_info(cls, info: DatasetFileInfo, now: datetime) -> "DatasetRow":
        return cls(
            dataset_id=info.dataset_id,
            dataset_name=info.dataset_name,
            file_extension=info.file_extension,
            acq_time_start=_to_seconds(info.acq_time_start),
            acq_time_end=_to_seconds(info.acq_time_end),
            scan_count=info.scan_count,
            file_size_bytes=info.file_size_bytes,
            info_last_modified=_to_seconds(now),
            file_modification_date=_to_seconds(info.file_system_modification_time),
        )


@dataclass
class DirectoryIntegrityRow:
    """One line of the directory integrity file."""

    directory_id: int
    directory_path: str
    file_count: int
    file_count_fail_integrity: int
    info_last_modified: datetime


def _to_seconds(value: datetime) -> datetime:
    return value.replace(microsecond=0)
