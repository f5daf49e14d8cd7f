"""Dataset info XML and the dataset stats text file."""

import xml.etree.ElementTree as ET
from pathlib import Path

from datascan.cache.models import DatasetFileInfo
from datascan.cache.tables import format_timestamp

DATASET_STATS_COLUMNS = (
    "DatasetID",
    "Dataset",
    "ScanCount",
    "AcqTimeMinutes",
    "StartTime",
    "EndTime",
    "FileSizeBytes",
)


def acquisition_minutes(info: DatasetFileInfo) -> float:
    if info.acq_time_end < info.acq_time_start:
        return 0.0
    return round((info.acq_time_end - info.acq_time_start).total_seconds() / 60, 2)


def build_dataset_info_xml(info: DatasetFileInfo) -> str:
    root = ET.Element("DatasetInfo")
    ET.SubElement(root, "Dataset", DatasetID=str(info.dataset_id)).text = info.dataset_name

    acquisition = ET.SubElement(root, "AcquisitionInfo")
    ET.SubElement(acquisition, "ScanCount").text = str(info.scan_count)
    ET.SubElement(acquisition, "AcqTimeMinutes").text = f"{acquisition_minutes(info):.2f}"
    ET.SubElement(acquisition, "StartTime").text = format_timestamp(info.acq_time_start)
    ET.SubElement(acquisition, "EndTime").text = format_timestamp(info.acq_time_end)
    ET.SubElement(acquisition, "FileSizeBytes").text = str(info.file_size_bytes)
    ET.SubElement(acquisition, "FileExtension").text = info.file_extension

    if info.instrument_files:
        files = ET.SubElement(acquisition, "InstrumentFiles")
        for relative_path, file_info in sorted(info.instrument_files.items()):
            ET.SubElement(
                files,
                "InstrumentFile",
                Hash=file_info.hash,
                HashType=file_info.hash_type.value,
                Size=str(file_info.length),
            ).text = relative_path

    ET.indent(root)
    return ET.tostring(root, encoding="unicode")


def write_dataset_info_file(info: DatasetFileInfo, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{info.dataset_name}_DatasetInfo.xml"
    output_path.write_text(build_dataset_info_xml(info) + "\n", encoding="utf-8")
    return output_path


def append_dataset_stats(info: DatasetFileInfo, stats_path: Path) -> None:
    """Append one line for the dataset, writing the header if the file is new."""
    stats_path.parent.mkdir(parents=True, exist_ok=True)
    write_header = not stats_path.exists()
    values = (
        str(info.dataset_id),
        info.dataset_name,
        str(info.scan_count),
        f"{acquisition_minutes(info):.2f}",
        format_timestamp(info.acq_time_start),
        format_timestamp(info.acq_time_end),
        str(info.file_size_bytes),
    )
    with stats_path.open("a", encoding="utf-8") as handle:
        if write_header:
            handle.write("\t".join(DATASET_STATS_COLUMNS) + "\n")
        handle.write("\t".join(values) + "\n")
