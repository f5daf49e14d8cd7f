"""Scanner module for dataset discovery and processing."""

from .abort import AbortMonitor
from .orchestrator import DatasetOrchestrator
from .progress import (
    ProcessingState,
    ProcessResult,
    ProgressReporter,
    RunStats,
    ScanErrorCode,
    StatusFileWriter,
)
from .scanner import DatasetScanner
from .walker import DirectoryWalker, is_transient_error, list_directory, resolve_input

__all__ = [
    "DatasetScanner",
    "DatasetOrchestrator",
    "DirectoryWalker",
    "AbortMonitor",
    "ProcessingState",
    "ProcessResult",
    "ProgressReporter",
    "RunStats",
    "ScanErrorCode",
    "StatusFileWriter",
    "is_transient_error",
    "list_directory",
    "resolve_input",
]
