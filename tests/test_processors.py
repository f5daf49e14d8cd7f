"""Tests for dataset processors and naming rules."""

import hashlib
import os
from datetime import datetime
from pathlib import Path

import pytest

from datascan.cache import DatasetFileInfo, HashType
from datascan.classifier import ProcessorKind
from datascan.config import ScannerConfig
from datascan.errors import DuplicateInstrumentFileError, UnknownProcessorKindError
from datascan.processors import (
    GenericProcessor,
    dataset_name_for,
    get_processor,
    register_processor,
)
from datascan.processors import registry


class TestDatasetNames:
    """Tests for per-kind dataset naming rules."""

    def test_file_stem(self):
        assert dataset_name_for(ProcessorKind.THERMO_RAW_FILE, Path("/data/QC_01.raw")) == "QC_01"

    def test_directory_stem(self):
        path = Path("/data/Run_5.d")
        assert dataset_name_for(ProcessorKind.AGILENT_ION_TRAP_D_FOLDER, path) == "Run_5"

    def test_isos_file(self):
        path = Path("/data/Sample_ISOS.csv")
        assert dataset_name_for(ProcessorKind.DECONTOOLS_ISOS_FILE, path) == "Sample"

    def test_bruker_one_folder_uses_parent(self):
        path = Path("/data/Dataset7/1")
        assert dataset_name_for(ProcessorKind.BRUKER_ONE_FOLDER, path) == "Dataset7"

    def test_zipped_s_folder_uses_parent(self):
        path = Path("/data/Dataset7/s001.zip")
        assert dataset_name_for(ProcessorKind.BRUKER_ONE_FOLDER, path) == "Dataset7"

    def test_bruker_file_uses_dataset_directory(self, tmp_path: Path):
        directory = tmp_path / "Bruker_A.d"
        directory.mkdir()
        marker = directory / "analysis.baf"
        marker.write_bytes(b"x")

        assert dataset_name_for(ProcessorKind.BRUKER_XMASS_FOLDER, marker) == "Bruker_A"
        assert dataset_name_for(ProcessorKind.BRUKER_XMASS_FOLDER, directory) == "Bruker_A"

    def test_every_kind_has_a_naming_rule(self):
        for kind in ProcessorKind:
            assert dataset_name_for(kind, Path("/data/x/y.raw"))


class TestDatasetFileInfo:
    """Tests for DatasetFileInfo."""

    def test_duplicate_instrument_file_raises(self):
        info = DatasetFileInfo(dataset_name="X")
        info.add_instrument_file("X.raw", 10)

        with pytest.raises(DuplicateInstrumentFileError):
            info.add_instrument_file("X.raw", 10)

    def test_clear(self):
        info = DatasetFileInfo(dataset_name="X", scan_count=5)
        info.add_instrument_file("X.raw", 10)

        info.clear()

        assert info == DatasetFileInfo()


class TestGenericProcessor:
    """Tests for the generic processor."""

    def test_file_dataset(self, tmp_path: Path):
        path = tmp_path / "QC_01.raw"
        path.write_bytes(b"spectra" * 10)
        mtime = datetime(2023, 5, 6, 7, 8, 9).timestamp()
        os.utime(path, (mtime, mtime))
        processor = GenericProcessor(ProcessorKind.THERMO_RAW_FILE, ScannerConfig(dataset_id=42))
        info = DatasetFileInfo()

        assert processor.process_data_file(path, info)

        assert info.dataset_id == 42
        assert info.dataset_name == "QC_01"
        assert info.file_extension == ".raw"
        assert info.file_size_bytes == 70
        assert info.scan_count == 0
        assert info.acq_time_start == datetime(2023, 5, 6, 7, 8, 9)
        assert info.acq_time_end == info.acq_time_start
        instrument_file = info.instrument_files["QC_01.raw"]
        assert instrument_file.length == 70
        assert instrument_file.hash == hashlib.sha1(b"spectra" * 10).hexdigest()
        assert instrument_file.hash_type == HashType.SHA1

    def test_hashing_can_be_disabled(self, tmp_path: Path):
        path = tmp_path / "QC_01.raw"
        path.write_bytes(b"abc")
        config = ScannerConfig(compute_instrument_hashes=False)
        info = DatasetFileInfo()

        GenericProcessor(ProcessorKind.THERMO_RAW_FILE, config).process_data_file(path, info)

        assert info.instrument_files["QC_01.raw"].hash == ""
        assert info.instrument_files["QC_01.raw"].hash_type == HashType.UNDEFINED

    def test_directory_dataset(self, tmp_path: Path):
        directory = tmp_path / "Run.d"
        (directory / "AcqData").mkdir(parents=True)
        (directory / "top.bin").write_bytes(b"12345")
        (directory / "AcqData" / "nested.bin").write_bytes(b"1234567890")
        info = DatasetFileInfo()

        processor = GenericProcessor(ProcessorKind.AGILENT_MASSHUNTER_D_FOLDER, ScannerConfig())
        assert processor.process_data_file(directory, info)

        assert info.dataset_name == "Run"
        assert info.file_extension == ".d"
        assert info.file_size_bytes == 15
        assert list(info.instrument_files) == ["top.bin"]

    def test_bruker_member_file_processes_directory(self, tmp_path: Path):
        directory = tmp_path / "Bruker_A.d"
        directory.mkdir()
        (directory / "analysis.baf").write_bytes(b"1234")
        (directory / "analysis.baf_idx").write_bytes(b"12")
        info = DatasetFileInfo()

        processor = GenericProcessor(ProcessorKind.BRUKER_XMASS_FOLDER, ScannerConfig())
        processor.process_data_file(directory / "analysis.baf", info)

        assert info.dataset_name == "Bruker_A"
        assert info.file_size_bytes == 6
        assert set(info.instrument_files) == {"analysis.baf", "analysis.baf_idx"}

    def test_missing_path_fails(self, tmp_path: Path):
        processor = GenericProcessor(ProcessorKind.THERMO_RAW_FILE, ScannerConfig())
        info = DatasetFileInfo()

        assert not processor.process_data_file(tmp_path / "gone.raw", info)
        assert info.dataset_name == ""

    def test_output_files(self, tmp_path: Path):
        path = tmp_path / "QC_01.raw"
        path.write_bytes(b"abc")
        output_dir = tmp_path / "out"
        config = ScannerConfig(create_dataset_info_file=True, update_dataset_stats_file=True)
        processor = GenericProcessor(ProcessorKind.THERMO_RAW_FILE, config)
        processor.process_data_file(path, DatasetFileInfo())

        assert processor.create_output_files(path, output_dir)

        xml_text = (output_dir / "QC_01_DatasetInfo.xml").read_text(encoding="utf-8")
        assert "<Dataset DatasetID=\"0\">QC_01</Dataset>" in xml_text
        assert "<FileSizeBytes>3</FileSizeBytes>" in xml_text
        stats_lines = (output_dir / "MSFileInfo_DatasetStats.txt").read_text().splitlines()
        assert stats_lines[0].startswith("DatasetID\tDataset\tScanCount")
        assert stats_lines[1].startswith("0\tQC_01\t0\t")

    def test_stats_file_appends(self, tmp_path: Path):
        config = ScannerConfig(update_dataset_stats_file=True)
        processor = GenericProcessor(ProcessorKind.THERMO_RAW_FILE, config)
        for name in ("A.raw", "B.raw"):
            path = tmp_path / name
            path.write_bytes(b"abc")
            processor.process_data_file(path, DatasetFileInfo())
            processor.create_output_files(path, tmp_path / "out")

        lines = (tmp_path / "out" / "MSFileInfo_DatasetStats.txt").read_text().splitlines()
        assert len(lines) == 3

    def test_output_files_before_processing_fail(self, tmp_path: Path):
        processor = GenericProcessor(ProcessorKind.THERMO_RAW_FILE, ScannerConfig())
        assert not processor.create_output_files(tmp_path / "x.raw", tmp_path)
        assert processor.get_dataset_info_xml() == ""

    def test_dataset_info_xml(self, tmp_path: Path):
        path = tmp_path / "QC_01.raw"
        path.write_bytes(b"abc")
        processor = GenericProcessor(ProcessorKind.THERMO_RAW_FILE, ScannerConfig())
        processor.process_data_file(path, DatasetFileInfo())

        xml_text = processor.get_dataset_info_xml()

        assert xml_text.startswith("<DatasetInfo>")
        assert 'HashType="sha1"' in xml_text


class TestRegistry:
    """Tests for the processor registry."""

    def test_default_is_generic(self):
        processor = get_processor(ProcessorKind.MZML_FILE, ScannerConfig())
        assert isinstance(processor, GenericProcessor)
        assert processor.kind == ProcessorKind.MZML_FILE

    def test_register_processor(self, monkeypatch):
        monkeypatch.setattr(registry, "_FACTORIES", dict(registry._FACTORIES))
        sentinel = object()
        register_processor(ProcessorKind.UIMF_FILE, lambda kind, config: sentinel)

        assert get_processor(ProcessorKind.UIMF_FILE, ScannerConfig()) is sentinel

    def test_unknown_kind(self, monkeypatch):
        monkeypatch.setattr(registry, "_FACTORIES", {})

        with pytest.raises(UnknownProcessorKindError):
            get_processor(ProcessorKind.UIMF_FILE, ScannerConfig())
