"""Exceptions raised by datascan."""


class DatascanError(Exception):
    """Base class for datascan errors."""


class InvalidOutputDirectoryError(DatascanError):
    """Raised when the output path exists but is not a directory."""


class DuplicateInstrumentFileError(DatascanError):
    """Raised when an instrument file is added twice to the same dataset."""


class UnknownProcessorKindError(DatascanError):
    """Raised when no processor is registered for a processor kind."""
