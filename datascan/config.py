"""Configuration module for datascan."""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATASET_INFO_FILE = "DatasetTimeFile.txt"
DEFAULT_DIRECTORY_INTEGRITY_FILE = "DirectoryIntegrityInfo.txt"
DEFAULT_INTEGRITY_DETAILS_FILE = "FileIntegrityDetails.txt"
DEFAULT_INTEGRITY_ERRORS_FILE = "FileIntegrityErrors.txt"
DEFAULT_DATASET_STATS_FILE = "MSFileInfo_DatasetStats.txt"
ABORT_FILE_NAME = "AbortProcessing.txt"


def _get_base_directory() -> Path:
    return Path.cwd()


@dataclass
class CacheConfig:
    enabled: bool = True
    dataset_info_path: Path | None = None
    directory_integrity_path: Path | None = None
    autosave_interval_minutes: float = 5.0


@dataclass
class RetryConfig:
    max_file_read_attempts: int = 2
    modification_window_minutes: float = 60.0
    retry_delay_seconds: float = 10.0
    max_enumeration_attempts: int = 2
    enumeration_retry_delay_seconds: float = 1.0


@dataclass
class IntegrityConfig:
    enabled: bool = False
    compute_file_hashes: bool = False
    max_text_lines_to_check: int = 500
    zip_check_all_data: bool = False
    force_recheck: bool = False
    details_path: Path | None = None
    errors_path: Path | None = None


@dataclass
class ScannerConfig:
    reprocess_existing: bool = False
    reprocess_if_cached_size_zero: bool = False
    skip_files_in_error: bool = True
    recursion_errors_fatal: bool = False
    process_all_extensions: bool = False
    file_extensions: list[str] = field(
        default_factory=lambda: [".raw", ".wiff", ".baf", ".mcf", ".mcf_idx", ".uimf", ".csv"]
    )
    directory_extensions: list[str] = field(default_factory=lambda: [".d", ".raw"])
    create_dataset_info_file: bool = False
    update_dataset_stats_file: bool = False
    dataset_stats_file_name: str = DEFAULT_DATASET_STATS_FILE
    compute_instrument_hashes: bool = True
    dataset_id: int = 0
    abort_poll_seconds: float = 15.0
    status_file_path: Path | None = None
    status_interval_seconds: float = 15.0
    progress_interval: int = 25


@dataclass
class Config:
    base_directory: Path = field(default_factory=_get_base_directory)
    cache: CacheConfig = field(default_factory=CacheConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    integrity: IntegrityConfig = field(default_factory=IntegrityConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    abort_file_path: Path | None = None

    def __post_init__(self) -> None:
        base = self.base_directory
        if self.cache.dataset_info_path is None:
            self.cache.dataset_info_path = base / DEFAULT_DATASET_INFO_FILE
        if self.cache.directory_integrity_path is None:
            self.cache.directory_integrity_path = base / DEFAULT_DIRECTORY_INTEGRITY_FILE
        if self.integrity.details_path is None:
            self.integrity.details_path = base / DEFAULT_INTEGRITY_DETAILS_FILE
        if self.integrity.errors_path is None:
            self.integrity.errors_path = base / DEFAULT_INTEGRITY_ERRORS_FILE
        if self.abort_file_path is None:
            self.abort_file_path = base / ABORT_FILE_NAME

    @classmethod
    def for_directory(cls, base_directory: Path) -> "Config":
        """Build a default configuration rooted at the given directory."""
        return cls(base_directory=base_directory)
