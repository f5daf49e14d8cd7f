"""Dataset processor protocol."""

from pathlib import Path
from typing import Protocol

from datascan.cache.models import DatasetFileInfo


class DatasetProcessor(Protocol):
    """Reads one dataset and produces its DatasetFileInfo.

    process_data_file returns False (or raises) when the dataset could not be
    read; the orchestrator decides whether to retry.
    """

    is_generic: bool

    def get_dataset_name(self, path: Path) -> str:
        """Return the dataset name derived from the path."""

    def process_data_file(self, path: Path, info: DatasetFileInfo) -> bool:
        """Fill info from the dataset at path."""

    def create_output_files(self, path: Path, output_dir: Path) -> bool:
        """Write any sidecar files for the most recently processed dataset."""

    def get_dataset_info_xml(self) -> str:
        """Return the dataset info document for the most recently processed dataset."""
