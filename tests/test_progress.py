"""
Tests for progress and duration helpers.
"""
import pytest

from wikigraph.progress import ProgressCounter, elapsed_since, readable_time


@pytest.mark.parametrize("seconds,expected", [
    (0, "0ms"),
    (0.0004, "0ms"),
    (0.25, "250ms"),
    (60, "1m"),
    (3723.45, "1h, 2m, 3s, 450ms"),
    (90061, "1d, 1h, 1m, 1s"),
    (365 * 24 * 3600 + 5, "1y, 5s"),
])
def test_readable_time(seconds, expected):
    assert readable_time(seconds) == expected


def test_elapsed_since():
    assert elapsed_since(100.0, now=161.5) == "1m, 1s, 500ms"


def test_progress_counter_counts_when_disabled():
    with ProgressCounter("Testing", unit="pages", show_progress=False) as counter:
        counter.increment()
        counter.increment(4)
    assert counter.count == 5
