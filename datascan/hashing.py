"""File hashing and timestamp helpers shared by processors and the integrity checker."""

import hashlib
import os
from datetime import datetime
from pathlib import Path

CHUNK_SIZE = 1024 * 1024


def compute_sha1(path: Path) -> str:
    digest = hashlib.sha1()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def creation_time(stat_result: os.stat_result) -> datetime:
    """Birth time where the platform records one, otherwise the inode change time."""
    try:
        return datetime.fromtimestamp(stat_result.st_birthtime)
    except AttributeError:
        return datetime.fromtimestamp(stat_result.st_ctime)


def modification_time(stat_result: os.stat_result) -> datetime:
    return datetime.fromtimestamp(stat_result.st_mtime)
