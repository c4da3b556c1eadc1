"""
Progress reporting for the long streaming passes of an import.
"""
import time
from typing import Optional

from tqdm import tqdm


class ProgressCounter:
    """
    Counts processed items and shows a tqdm counter while doing so.

    There is no known total for a dump, so the bar only reports the count
    and the rate. The count is kept separately so it stays available when
    the bar is disabled.
    """

    def __init__(self, desc: str, unit: str = "items", show_progress: bool = True):
        self.desc = desc
        self.count = 0
        self._bar = tqdm(
            desc=desc,
            unit=f" {unit}",
            disable=not show_progress,
            bar_format="{desc}: {n_fmt}{unit} [{elapsed}, {rate_fmt}]",
        )

    def increment(self, n: int = 1) -> None:
        self.count += n
        self._bar.update(n)

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> "ProgressCounter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self):
        return f"ProgressCounter(desc={self.desc!r}, count={self.count})"


_UNITS = (
    ("y", 365 * 24 * 3600),
    ("d", 24 * 3600),
    ("h", 3600),
    ("m", 60),
    ("s", 1),
)


def readable_time(seconds: float) -> str:
    """
    Render a duration as e.g. "1h, 2m, 3s, 450ms".

    Zero components are skipped; a duration under one millisecond is "0ms".
    """
    millis = int(round(seconds * 1000))
    parts = []
    remaining_seconds, milliseconds = divmod(millis, 1000)
    for unit, size in _UNITS:
        value, remaining_seconds = divmod(remaining_seconds, size)
        if value:
            parts.append(f"{value}{unit}")
    if milliseconds or not parts:
        parts.append(f"{milliseconds}ms")
    return ", ".join(parts)


def elapsed_since(start: float, now: Optional[float] = None) -> str:
    """readable_time() of the time elapsed since a time.monotonic() stamp."""
    return readable_time((now if now is not None else time.monotonic()) - start)
