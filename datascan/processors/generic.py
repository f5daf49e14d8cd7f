"""Generic processor recording filesystem-level metadata for any dataset kind."""

import logging
import os
from pathlib import Path

from datascan.cache.models import DatasetFileInfo, HashType
from datascan.classifier.kinds import ProcessorKind
from datascan.config import ScannerConfig
from datascan.hashing import compute_sha1, creation_time, modification_time

from .naming import dataset_name_for
from .output import append_dataset_stats, build_dataset_info_xml, write_dataset_info_file

logger = logging.getLogger(__name__)

# Kinds whose dataset is the enclosing directory even when a member file is given
_DIRECTORY_DATASET_KINDS = {
    ProcessorKind.BRUKER_XMASS_FOLDER,
    ProcessorKind.ZIPPED_IMAGING_FILES,
}


class GenericProcessor:
    """Records size, timestamps and instrument file hashes without parsing spectra.

    Acquisition start and end are both set to the last modification time and
    the scan count is left at zero. Vendor readers registered for a kind
    replace this processor.
    """

    is_generic = True

    def __init__(self, kind: ProcessorKind, config: ScannerConfig):
        self.kind = kind
        self.config = config
        self._info: DatasetFileInfo | None = None

    def get_dataset_name(self, path: Path) -> str:
        return dataset_name_for(self.kind, path)

    def dataset_root(self, path: Path) -> Path:
        if self.kind in _DIRECTORY_DATASET_KINDS and path.is_file():
            return path.parent
        return path

    def process_data_file(self, path: Path, info: DatasetFileInfo) -> bool:
        root = self.dataset_root(path)
        try:
            stat_result = root.stat()
        except OSError as e:
            logger.error("Cannot read %s: %s", root, e)
            return False

        info.dataset_id = self.config.dataset_id
        info.dataset_name = self.get_dataset_name(path)
        info.file_extension = root.suffix
        info.file_system_creation_time = creation_time(stat_result)
        info.scan_count = 0

        if root.is_dir():
            self._process_directory(root, info)
        else:
            info.file_size_bytes = stat_result.st_size
            info.file_system_modification_time = modification_time(stat_result)
            self._add_instrument_file(root, root.name, stat_result.st_size, info)

        info.acq_time_start = info.file_system_modification_time
        info.acq_time_end = info.file_system_modification_time
        self._info = info
        return True

    def _process_directory(self, directory: Path, info: DatasetFileInfo) -> None:
        latest = modification_time(directory.stat())
        total_size = 0

        for current, _, filenames in os.walk(directory):
            for filename in sorted(filenames):
                file_path = Path(current) / filename
                try:
                    stat_result = file_path.stat()
                except OSError as e:
                    logger.warning("Cannot stat %s: %s", file_path, e)
                    continue

                total_size += stat_result.st_size
                latest = max(latest, modification_time(stat_result))
                if file_path.parent == directory:
                    self._add_instrument_file(file_path, filename, stat_result.st_size, info)

        info.file_size_bytes = total_size
        info.file_system_modification_time = latest

    def _add_instrument_file(
        self, path: Path, relative_path: str, size: int, info: DatasetFileInfo
    ) -> None:
        if not self.config.compute_instrument_hashes:
            info.add_instrument_file(relative_path, size)
            return
        info.add_instrument_file(relative_path, size, compute_sha1(path), HashType.SHA1)

    def create_output_files(self, path: Path, output_dir: Path) -> bool:
        if self._info is None:
            logger.error("No dataset has been processed; cannot create output files for %s", path)
            return False

        try:
            if self.config.create_dataset_info_file:
                output_path = write_dataset_info_file(self._info, output_dir)
                logger.debug("Wrote %s", output_path)
            if self.config.update_dataset_stats_file:
                append_dataset_stats(self._info, output_dir / self.config.dataset_stats_file_name)
        except OSError as e:
            logger.error("Error writing output files for %s to %s: %s", path, output_dir, e)
            return False
        return True

    def get_dataset_info_xml(self) -> str:
        if self._info is None:
            return ""
        return build_dataset_info_xml(self._info)
