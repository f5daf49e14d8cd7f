"""Datascan - Metadata scanner for scientific instrument datasets."""

__version__ = "0.1.0"

from datascan.cache import ResultCache
from datascan.config import Config
from datascan.scanner import DatasetScanner

__all__ = ["Config", "DatasetScanner", "ResultCache"]
