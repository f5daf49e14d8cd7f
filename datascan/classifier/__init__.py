"""Format classifier module for datascan."""

from .kinds import Classification, ProcessorKind
from .probe import PathProbe
from .rules import (
    DIRECTORY_RULES,
    FILE_RULES,
    ClassificationRule,
    classify,
    classify_probe,
    is_zipped_imaging_file,
    is_zipped_s_folder,
)

__all__ = [
    "classify",
    "classify_probe",
    "Classification",
    "ClassificationRule",
    "ProcessorKind",
    "PathProbe",
    "DIRECTORY_RULES",
    "FILE_RULES",
    "is_zipped_s_folder",
    "is_zipped_imaging_file",
]
