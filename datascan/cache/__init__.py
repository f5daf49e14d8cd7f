"""Result cache module for datascan."""

from .models import (
    CacheState,
    DatasetFileInfo,
    DatasetRow,
    DirectoryIntegrityRow,
    HashType,
    InstrumentFileInfo,
)
from .result_cache import ResultCache
from .table import CacheTable
from .tables import DATASET_LAYOUT, DIRECTORY_LAYOUT, format_timestamp, parse_timestamp

__all__ = [
    "ResultCache",
    "CacheTable",
    "CacheState",
    "DatasetFileInfo",
    "DatasetRow",
    "DirectoryIntegrityRow",
    "HashType",
    "InstrumentFileInfo",
    "DATASET_LAYOUT",
    "DIRECTORY_LAYOUT",
    "format_timestamp",
    "parse_timestamp",
]
