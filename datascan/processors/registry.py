"""Registry mapping processor kinds to processor factories."""

from collections.abc import Callable

from datascan.classifier.kinds import ProcessorKind
from datascan.config import ScannerConfig
from datascan.errors import UnknownProcessorKindError

from .base import DatasetProcessor
from .generic import GenericProcessor

ProcessorFactory = Callable[[ProcessorKind, ScannerConfig], DatasetProcessor]

_FACTORIES: dict[ProcessorKind, ProcessorFactory] = {kind: GenericProcessor for kind in ProcessorKind}


def register_processor(kind: ProcessorKind, factory: ProcessorFactory) -> None:
    """Use factory to build processors for kind, replacing the current one."""
    _FACTORIES[kind] = factory


def get_processor(kind: ProcessorKind, config: ScannerConfig) -> DatasetProcessor:
    """Get a processor for the given kind."""
    if kind not in _FACTORIES:
        raise UnknownProcessorKindError(
            f"Unknown processor kind: {kind}. Available: {[k.value for k in _FACTORIES]}"
        )
    return _FACTORIES[kind](kind, config)
