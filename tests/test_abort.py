"""Tests for the abort file monitor."""

from pathlib import Path

from datascan.scanner import AbortMonitor


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestAbortMonitor:
    """Tests for AbortMonitor."""

    def test_no_sentinel(self, tmp_path: Path):
        monitor = AbortMonitor(tmp_path / "AbortProcessing.txt")
        assert not monitor.check()
        assert not monitor.aborted

    def test_sentinel_is_detected_and_renamed(self, tmp_path: Path):
        sentinel = tmp_path / "AbortProcessing.txt"
        sentinel.touch()
        monitor = AbortMonitor(sentinel)

        assert monitor.check()

        assert monitor.aborted
        assert not sentinel.exists()
        assert (tmp_path / "AbortProcessing.txt.done").exists()

    def test_stale_done_file_is_replaced(self, tmp_path: Path):
        sentinel = tmp_path / "AbortProcessing.txt"
        sentinel.write_text("new")
        monitor = AbortMonitor(sentinel)
        monitor.done_path.write_text("old")

        assert monitor.check()

        assert monitor.done_path.read_text() == "new"

    def test_checks_are_rate_limited(self, tmp_path: Path):
        sentinel = tmp_path / "AbortProcessing.txt"
        clock = FakeClock()
        monitor = AbortMonitor(sentinel, poll_seconds=15, clock=clock)

        assert not monitor.check()
        sentinel.touch()
        clock.advance(10)
        assert not monitor.check()

        clock.advance(5)
        assert monitor.check()

    def test_abort_is_sticky(self, tmp_path: Path):
        sentinel = tmp_path / "AbortProcessing.txt"
        sentinel.touch()
        monitor = AbortMonitor(sentinel)
        monitor.check()

        assert monitor.check()
        assert not sentinel.exists()

    def test_request_abort(self, tmp_path: Path):
        monitor = AbortMonitor(tmp_path / "AbortProcessing.txt")
        monitor.request_abort()
        assert monitor.check()
