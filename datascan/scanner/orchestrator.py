"""Processing of a single dataset path."""

import logging
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from datascan.cache import DatasetFileInfo, ResultCache
from datascan.classifier import Classification, classify
from datascan.config import Config
from datascan.hashing import creation_time, modification_time
from datascan.processors import DatasetProcessor, ProcessorFactory, get_processor

from .progress import ProcessingState, ProcessResult, ScanErrorCode, StatusFileWriter

logger = logging.getLogger(__name__)


class DatasetOrchestrator:
    """Classifies a path, consults the cache and runs the matching processor.

    Processor failures never propagate: they are logged, turned into
    FAILED_PROCESSING, and reported as success when skip_files_in_error is
    set so that a walk can continue with the next dataset.
    """

    def __init__(
        self,
        config: Config,
        cache: ResultCache,
        status: StatusFileWriter | None = None,
        classifier: Callable[[Path], Classification | None] = classify,
        processor_factory: ProcessorFactory = get_processor,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.cache = cache
        self.status = status
        self._classify = classifier
        self._processor_factory = processor_factory
        self._sleep = sleep
        self.error_code = ScanErrorCode.NO_ERROR
        self.dataset_info_xml = ""

    def process(self, path: Path, output_dir: Path | None = None) -> ProcessResult:
        self.error_code = ScanErrorCode.NO_ERROR
        self.dataset_info_xml = ""
        result = ProcessResult(success=False, state=ProcessingState.NOT_PROCESSED)
        try:
            result = self._process(path, output_dir or path.parent)
        finally:
            self._write_status(path, result)
        return result

    def _process(self, path: Path, output_dir: Path) -> ProcessResult:
        scanner_config = self.config.scanner

        if not path.exists():
            logger.error("File or directory not found: %s", path)
            self.error_code = ScanErrorCode.FILE_PATH_ERROR
            return ProcessResult(scanner_config.skip_files_in_error, ProcessingState.FAILED_PROCESSING)

        classification = self._classify(path)
        if classification is None:
            logger.error("Unknown file type: %s", path)
            self.error_code = ScanErrorCode.UNKNOWN_FILE_EXTENSION
            return ProcessResult(False, ProcessingState.NOT_PROCESSED)

        processor = self._processor_factory(classification.kind, scanner_config)
        dataset_name = processor.get_dataset_name(path)
        logger.debug("Classified %s as %s (dataset %s)", path, classification.kind.value, dataset_name)

        if self._found_in_cache(dataset_name):
            logger.info("Skipping %s since already in cache", dataset_name)
            return ProcessResult(True, ProcessingState.SKIPPED_SINCE_FOUND_IN_CACHE, dataset_name)

        info = self._process_with_retry(processor, path, dataset_name)
        if info is None:
            if self.error_code == ScanErrorCode.NO_ERROR:
                self.error_code = ScanErrorCode.INPUT_FILE_READ_ERROR
            return ProcessResult(
                scanner_config.skip_files_in_error,
                ProcessingState.FAILED_PROCESSING,
                dataset_name,
            )

        self._finish_dataset(processor, path, output_dir, info)
        return ProcessResult(
            True,
            ProcessingState.PROCESSED_SUCCESSFULLY,
            info.dataset_name,
            info.file_size_bytes,
        )

    def _found_in_cache(self, dataset_name: str) -> bool:
        scanner_config = self.config.scanner
        if not self.config.cache.enabled or scanner_config.reprocess_existing:
            return False

        self.cache.load()
        row = self.cache.find_dataset(dataset_name)
        if row is None:
            return False
        return row.file_size_bytes > 0 or not scanner_config.reprocess_if_cached_size_zero

    def _process_with_retry(
        self, processor: DatasetProcessor, path: Path, dataset_name: str
    ) -> DatasetFileInfo | None:
        """Run the processor, retrying files that look like they are still being written.

        Each attempt starts from a record already named after the path. When
        the retries run out and the processor reported failure without
        raising, that named record is returned anyway so the dataset is still
        cached. Returns None when the processor raised or no name is known.
        """
        retry = self.config.retry
        attempts = 0

        while True:
            info = DatasetFileInfo(dataset_name=dataset_name)
            try:
                if processor.process_data_file(path, info):
                    return info
                raised = False
            except OSError as e:
                logger.error("Error accessing %s: %s", path, e)
                self.error_code = ScanErrorCode.INPUT_FILE_ACCESS_ERROR
                raised = True
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Error processing %s", path)
                self.error_code = ScanErrorCode.INPUT_FILE_READ_ERROR
                raised = True

            attempts += 1
            if attempts >= retry.max_file_read_attempts or not self._recently_modified(path):
                break

            logger.warning(
                "Error reading %s; retrying in %s seconds (attempt %d of %d)",
                path,
                retry.retry_delay_seconds,
                attempts + 1,
                retry.max_file_read_attempts,
            )
            self._sleep(retry.retry_delay_seconds)

        if not raised and info.dataset_name:
            logger.warning(
                "Could not fully read %s; recording dataset %s anyway (probably corrupt)",
                path,
                info.dataset_name,
            )
            return info
        return None

    def _recently_modified(self, path: Path) -> bool:
        window_seconds = self.config.retry.modification_window_minutes * 60
        try:
            stat_result = path.stat()
        except OSError:
            return False
        now = datetime.now()
        return (
            (now - creation_time(stat_result)).total_seconds() < window_seconds
            or (now - modification_time(stat_result)).total_seconds() < window_seconds
        )

    def _finish_dataset(
        self,
        processor: DatasetProcessor,
        path: Path,
        output_dir: Path,
        info: DatasetFileInfo,
    ) -> None:
        if not processor.create_output_files(path, output_dir):
            self.error_code = ScanErrorCode.OUTPUT_FILE_WRITE_ERROR

        self.dataset_info_xml = processor.get_dataset_info_xml()

        if self.config.cache.enabled:
            self.cache.upsert_dataset(info)
            self.cache.autosave()

        if info.scan_count == 0 and self.error_code == ScanErrorCode.NO_ERROR:
            if processor.is_generic:
                logger.info(
                    "Spectra data and acquisition details were not loaded since the "
                    "dataset was processed with the generic processor: %s",
                    path,
                )
            else:
                logger.warning("Dataset has no spectra: %s", path)
                self.error_code = ScanErrorCode.DATASET_HAS_NO_SPECTRA

    def _write_status(self, path: Path, result: ProcessResult) -> None:
        if self.status is None:
            return
        self.status.write(
            progress=100.0,
            message=f"{result.state.value}: {path}",
            error_code=self.error_code,
            force=True,
        )
