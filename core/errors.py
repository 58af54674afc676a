from __future__ import annotations


class IflError(Exception):
    """Base class for failures raised by the input-flow core."""


class InvalidEvent(IflError, ValueError):
    """An edit event carries an impossible value (e.g. negative deletion)."""


class InvalidEventOrder(InvalidEvent):
    """Event timestamps go backwards inside one sequence."""

    def __init__(self, index: int, prev_t: float, t: float):
        self.index = index
        self.prev_t = prev_t
        self.t = t
        super().__init__(
            f"event #{index} at t={t:.6f} precedes previous event at t={prev_t:.6f}"
        )


class InvalidConfiguration(IflError, ValueError):
    """Threshold configuration is non-positive or internally inconsistent."""
