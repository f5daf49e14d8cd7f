"""Column layouts and line codecs for the cache files."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from .models import DatasetRow, DirectoryIntegrityRow

RowT = TypeVar("RowT")

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Older cache files were written with culture-specific timestamps
_FALLBACK_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %H:%M:%S",
    "%Y-%m-%d",
)

# Characters that would break the line or column structure of a cache file
_FIELD_ESCAPES = {"%": "%25", "\t": "%09", "\n": "%0A", "\r": "%0D"}
_ESCAPE_RE = re.compile("[%\t\n\r]")
_UNESCAPE_RE = re.compile("%(25|09|0A|0D)", re.IGNORECASE)


@dataclass(frozen=True)
class TableLayout(Generic[RowT]):
    """Column order and conversions for one delimited cache table."""

    name: str
    columns: tuple[str, ...]
    min_columns: int
    key: Callable[[RowT], str]
    parse: Callable[[list[str]], RowT]
    format: Callable[[RowT], list[str]]

    @property
    def header(self) -> str:
        return "\t".join(self.columns)


def format_timestamp(value: datetime) -> str:
    # strftime does not zero-pad years before 1000
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


def escape_field(text: str) -> str:
    return _ESCAPE_RE.sub(lambda match: _FIELD_ESCAPES[match.group()], text)


def unescape_field(text: str) -> str:
    return _UNESCAPE_RE.sub(lambda match: chr(int(match.group(1), 16)), text)


def parse_timestamp(text: str) -> datetime:
    """Parse a cache timestamp, returning datetime.min when unparsable."""
    text = text.strip()
    for date_format in (DATE_FORMAT, *_FALLBACK_DATE_FORMATS):
        try:
            return datetime.strptime(text, date_format)
        except ValueError:
            continue
    return datetime.min


def parse_number(text: str) -> int:
    """Parse an integer column, accepting values written as decimals.

    Raises ValueError when the text is not numeric.
    """
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        return int(float(text))


def _parse_dataset_row(fields: list[str]) -> DatasetRow:
    modification_date = parse_timestamp(fields[8]) if len(fields) > 8 else datetime.min
    return DatasetRow(
        dataset_id=parse_number(fields[0]),
        dataset_name=unescape_field(fields[1]),
        file_extension=unescape_field(fields[2]),
        acq_time_start=parse_timestamp(fields[3]),
        acq_time_end=parse_timestamp(fields[4]),
        scan_count=parse_number(fields[5]),
        file_size_bytes=parse_number(fields[6]),
        info_last_modified=parse_timestamp(fields[7]),
        file_modification_date=modification_date,
    )


def _format_dataset_row(row: DatasetRow) -> list[str]:
    return [
        str(row.dataset_id),
        escape_field(row.dataset_name),
        escape_field(row.file_extension),
        format_timestamp(row.acq_time_start),
        format_timestamp(row.acq_time_end),
        str(row.scan_count),
        str(row.file_size_bytes),
        format_timestamp(row.info_last_modified),
        format_timestamp(row.file_modification_date),
    ]


def _parse_directory_row(fields: list[str]) -> DirectoryIntegrityRow:
    return DirectoryIntegrityRow(
        directory_id=parse_number(fields[0]),
        directory_path=unescape_field(fields[1]),
        file_count=parse_number(fields[2]),
        file_count_fail_integrity=parse_number(fields[3]),
        info_last_modified=parse_timestamp(fields[4]),
    )


def _format_directory_row(row: DirectoryIntegrityRow) -> list[str]:
    return [
        str(row.directory_id),
        escape_field(row.directory_path),
        str(row.file_count),
        str(row.file_count_fail_integrity),
        format_timestamp(row.info_last_modified),
    ]


DATASET_LAYOUT: TableLayout[DatasetRow] = TableLayout(
    name="dataset info",
    columns=(
        "DatasetID",
        "DatasetName",
        "FileExtension",
        "AcqTimeStart",
        "AcqTimeEnd",
        "ScanCount",
        "FileSizeBytes",
        "InfoLastModified",
        "FileModificationDate",
    ),
    min_columns=8,
    key=lambda row: row.dataset_name,
    parse=_parse_dataset_row,
    format=_format_dataset_row,
)

DIRECTORY_LAYOUT: TableLayout[DirectoryIntegrityRow] = TableLayout(
    name="directory integrity",
    columns=("FolderID", "FolderPath", "FileCount", "FileCountFailedIntegrity", "InfoLastModified"),
    min_columns=5,
    key=lambda row: row.directory_path,
    parse=_parse_directory_row,
    format=_format_directory_row,
)
