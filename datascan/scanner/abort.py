"""Cooperative abort signalled by a sentinel file."""

import logging
import time
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

DONE_SUFFIX = ".done"


class AbortMonitor:
    """Polls for the abort sentinel file at most once per poll interval.

    When the sentinel is found it is renamed to <name>.done so that the next
    run does not abort immediately. Once aborted, check() keeps returning
    True without touching the filesystem.
    """

    def __init__(
        self,
        sentinel_path: Path,
        poll_seconds: float = 15.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.sentinel_path = sentinel_path
        self.poll_seconds = poll_seconds
        self._clock = clock
        self._last_check: float | None = None
        self.aborted = False

    @property
    def done_path(self) -> Path:
        return self.sentinel_path.with_name(self.sentinel_path.name + DONE_SUFFIX)

    def request_abort(self) -> None:
        self.aborted = True

    def check(self) -> bool:
        if self.aborted:
            return True

        now = self._clock()
        if self._last_check is not None and now - self._last_check < self.poll_seconds:
            return False
        self._last_check = now

        if not self.sentinel_path.exists():
            return False

        logger.warning("Found abort file %s; aborting processing", self.sentinel_path)
        self.aborted = True
        self._consume_sentinel()
        return True

    def _consume_sentinel(self) -> None:
        try:
            self.done_path.unlink(missing_ok=True)
            self.sentinel_path.rename(self.done_path)
        except OSError as e:
            logger.debug("Could not rename abort file %s: %s", self.sentinel_path, e)
