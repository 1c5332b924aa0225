"""Progress reporting for long-running jobs."""

from typing import Callable, Optional

ProgressCallback = Callable[[float], None]


class ProgressReporter:
    """Wraps an optional callback so jobs can report freely.

    Values are clamped to [0, 1] and never go backwards; ``finish`` always
    emits exactly 1.0.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self.callback = callback
        self.value = 0.0

    def __call__(self, value: float) -> None:
        value = min(1.0, max(0.0, float(value)))
        if value < self.value:
            return
        self.value = value
        if self.callback is not None:
            self.callback(value)

    def scaled(self, start: float, end: float) -> ProgressCallback:
        """Callback mapping a sub-job's [0, 1] onto [start, end] of this one."""

        def report(value: float) -> None:
            self(start + (end - start) * min(1.0, max(0.0, value)))

        return report

    def finish(self) -> None:
        self.value = 1.0
        if self.callback is not None:
            self.callback(1.0)
