"""Dataset processor module for datascan."""

from .base import DatasetProcessor
from .generic import GenericProcessor
from .naming import NAMING_RULES, dataset_name_for
from .output import append_dataset_stats, build_dataset_info_xml, write_dataset_info_file
from .registry import ProcessorFactory, get_processor, register_processor

__all__ = [
    "DatasetProcessor",
    "GenericProcessor",
    "ProcessorFactory",
    "get_processor",
    "register_processor",
    "dataset_name_for",
    "NAMING_RULES",
    "build_dataset_info_xml",
    "write_dataset_info_file",
    "append_dataset_stats",
]
