"""File integrity checking module for datascan."""

from .checker import DirectoryStats, FileIntegrityChecker, FileStats, IntegrityChecker
from .runner import DirectoryIntegrityRunner, IntegrityReportWriter

__all__ = [
    "IntegrityChecker",
    "FileIntegrityChecker",
    "DirectoryStats",
    "FileStats",
    "DirectoryIntegrityRunner",
    "IntegrityReportWriter",
]
