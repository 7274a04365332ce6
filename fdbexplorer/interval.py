"""Cycling refresh interval."""

from datetime import timedelta

_DURATIONS = (
    timedelta(seconds=5),
    timedelta(seconds=3),
    timedelta(seconds=1),
    timedelta(seconds=10),
)


class IntervalControl:
    """Selects one of a fixed set of refresh intervals."""

    def __init__(self):
        self._index = 0

    def next(self):
        """Move to the next interval, wrapping around."""
        self._index = (self._index + 1) % len(_DURATIONS)

    def duration(self):
        """The current interval as a timedelta."""
        return _DURATIONS[self._index]