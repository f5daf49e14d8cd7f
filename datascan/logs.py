"""Logging setup for the datascan command line."""

import logging
from pathlib import Path


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    root_logger = logging.getLogger()

    level_value = logging.getLevelNamesMapping().get(level.upper())
    if level_value is None:
        raise ValueError(f"Invalid logging level: {level}")

    root_logger.setLevel(level_value)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level_value)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file is None:
        return

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level_value)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError:
        root_logger.error("Log file handler failed to initialize path=%s", log_file, exc_info=True)
