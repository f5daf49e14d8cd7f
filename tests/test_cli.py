"""Tests for the command line interface."""

# pylint: disable=redefined-outer-name

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from datascan.cli import _truncate, cli
from datascan.config import ABORT_FILE_NAME, DEFAULT_DATASET_INFO_FILE


@pytest.fixture(autouse=True)
def restore_logging():
    root_logger = logging.getLogger()
    saved_handlers = list(root_logger.handlers)
    saved_level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in saved_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(saved_level)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "base"
    directory.mkdir()
    return directory


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "data"
    (directory / "sub").mkdir(parents=True)
    (directory / "QC_01.raw").write_bytes(b"x" * 100)
    (directory / "notes.txt").write_text("notes")
    (directory / "sub" / "QC_02.raw").write_bytes(b"x" * 50)
    return directory


def _invoke(runner: CliRunner, base_dir: Path, *args: str):
    return runner.invoke(cli, ["--base-dir", str(base_dir), *args])


class TestScanCommand:
    """Tests for the scan command."""

    def test_single_file(self, runner, base_dir, data_dir):
        result = _invoke(runner, base_dir, "scan", str(data_dir / "QC_01.raw"))

        assert result.exit_code == 0, result.output
        assert "Scan complete: 1 datasets processed" in result.output
        cache_text = (base_dir / DEFAULT_DATASET_INFO_FILE).read_text()
        assert "\tQC_01\t.raw\t" in cache_text

    def test_unknown_file(self, runner, base_dir, data_dir):
        result = _invoke(runner, base_dir, "scan", str(data_dir / "notes.txt"))

        assert result.exit_code == 1
        assert "Unknown file extension" in result.output

    def test_missing_path(self, runner, base_dir, tmp_path):
        result = _invoke(runner, base_dir, "scan", str(tmp_path / "missing.raw"))

        assert result.exit_code == 1
        assert "Invalid input file path" in result.output

    def test_recurse(self, runner, base_dir, data_dir):
        result = _invoke(runner, base_dir, "scan", "--recurse", str(data_dir))

        assert result.exit_code == 0, result.output
        assert "2 datasets processed" in result.output

    def test_recurse_without_datasets(self, runner, base_dir, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = _invoke(runner, base_dir, "scan", "-r", str(empty))

        assert result.exit_code == 1
        assert "no datasets were recognized" in result.output

    def test_max_levels(self, runner, base_dir, data_dir):
        (data_dir / "sub" / "deeper").mkdir()
        (data_dir / "sub" / "deeper" / "QC_03.raw").write_bytes(b"x")

        result = _invoke(runner, base_dir, "scan", "-r", "--max-levels", "1", str(data_dir))

        assert "2 datasets processed" in result.output

    def test_second_run_skips(self, runner, base_dir, data_dir):
        _invoke(runner, base_dir, "scan", "-r", str(data_dir))

        result = _invoke(runner, base_dir, "scan", "-r", str(data_dir))

        assert result.exit_code == 0, result.output
        assert "0 datasets processed, 2 skipped (cached)" in result.output

    def test_reprocess(self, runner, base_dir, data_dir):
        _invoke(runner, base_dir, "scan", "-r", str(data_dir))

        result = _invoke(runner, base_dir, "scan", "-r", "--reprocess", str(data_dir))

        assert "2 datasets processed" in result.output

    def test_no_cache(self, runner, base_dir, data_dir):
        result = _invoke(runner, base_dir, "scan", "--no-cache", str(data_dir / "QC_01.raw"))

        assert result.exit_code == 0, result.output
        assert not (base_dir / DEFAULT_DATASET_INFO_FILE).exists()

    def test_dataset_info_output(self, runner, base_dir, data_dir, tmp_path):
        output_dir = tmp_path / "out"

        result = _invoke(
            runner,
            base_dir,
            "scan",
            "--dataset-info",
            "--stats-file",
            "--dataset-id",
            "77",
            "-o",
            str(output_dir),
            str(data_dir / "QC_01.raw"),
        )

        assert result.exit_code == 0, result.output
        xml_text = (output_dir / "QC_01_DatasetInfo.xml").read_text()
        assert 'DatasetID="77"' in xml_text
        assert (output_dir / "MSFileInfo_DatasetStats.txt").exists()

    def test_status_and_log_files(self, runner, base_dir, data_dir, tmp_path):
        status_file = tmp_path / "status.xml"
        log_file = tmp_path / "logs" / "scan.log"

        result = _invoke(
            runner,
            base_dir,
            "scan",
            "--status-file",
            str(status_file),
            "--log-file",
            str(log_file),
            str(data_dir / "QC_01.raw"),
        )

        assert result.exit_code == 0, result.output
        assert "<ErrorCode>NO_ERROR</ErrorCode>" in status_file.read_text()
        assert "Starting scan of" in log_file.read_text()

    def test_check_integrity(self, runner, base_dir, data_dir):
        result = _invoke(runner, base_dir, "scan", "-r", "--check-integrity", str(data_dir))

        assert result.exit_code == 0, result.output
        assert (base_dir / "DirectoryIntegrityInfo.txt").exists()
        assert (base_dir / "FileIntegrityDetails.txt").exists()

    def test_abort_file(self, runner, base_dir, data_dir):
        (base_dir / ABORT_FILE_NAME).touch()

        result = _invoke(runner, base_dir, "scan", "-r", str(data_dir))

        assert result.exit_code == 0, result.output
        assert "Scan aborted" in result.output
        assert (base_dir / f"{ABORT_FILE_NAME}.done").exists()


class TestCacheCommand:
    """Tests for the cache command."""

    def test_empty_cache(self, runner, base_dir):
        result = _invoke(runner, base_dir, "cache")

        assert result.exit_code == 0
        assert "No cached datasets found" in result.output

    def test_lists_datasets(self, runner, base_dir, data_dir):
        _invoke(runner, base_dir, "scan", "-r", str(data_dir))

        result = _invoke(runner, base_dir, "cache")

        assert result.exit_code == 0
        assert "QC_01" in result.output
        assert "QC_02" in result.output
        assert "100.00 B" in result.output

    def test_lists_directories(self, runner, base_dir, data_dir):
        _invoke(runner, base_dir, "scan", "-r", "--check-integrity", str(data_dir))

        result = _invoke(runner, base_dir, "cache", "--directories")

        assert result.exit_code == 0
        assert "Directory Integrity:" in result.output
        assert "sub" in result.output


class TestAbortCommand:
    """Tests for the abort command."""

    def test_creates_abort_file(self, runner, base_dir):
        result = _invoke(runner, base_dir, "abort")

        assert result.exit_code == 0
        assert (base_dir / ABORT_FILE_NAME).exists()
        assert "Created" in result.output


class TestHelpers:
    """Tests for CLI formatting helpers."""

    def test_truncate(self):
        assert _truncate("short", 10) == "short"
        assert _truncate("a" * 20, 10) == "..." + "a" * 7
