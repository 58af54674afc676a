from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Tuple
import math
import time

from core.errors import InvalidEvent, InvalidEventOrder

# --- timing helpers ---
def mono_ts() -> float:
    # Monotonic high-res timestamp (immune to system clock changes)
    return time.perf_counter()

# --- edit event ---
@dataclass(frozen=True)
class EditEvent:
    """One atomic edit on an input field: text inserted and/or characters deleted."""
    t_mono: float = field(default_factory=mono_ts)
    inserted_text: str = ""
    deleted_length: int = 0

    def __post_init__(self):
        t = self.t_mono
        if isinstance(t, bool) or not isinstance(t, (int, float)) or not math.isfinite(t):
            raise InvalidEvent(f"t_mono must be a finite number, got {t!r}")
        if isinstance(self.deleted_length, bool) or not isinstance(self.deleted_length, int):
            raise InvalidEvent(f"deleted_length must be an int, got {type(self.deleted_length).__name__}")
        if self.deleted_length < 0:
            raise InvalidEvent(f"deleted_length must be >= 0, got {self.deleted_length}")
        if not isinstance(self.inserted_text, str):
            raise InvalidEvent("inserted_text must be a string")

    @property
    def inserted_length(self) -> int:
        return len(self.inserted_text)

    def to_record(self) -> Dict[str, Any]:
        return {
            "t_mono": self.t_mono,
            "inserted_text": self.inserted_text,
            "inserted_length": self.inserted_length,
            "deleted_length": self.deleted_length,
        }

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> "EditEvent":
        if not isinstance(rec, Mapping):
            raise InvalidEvent(f"event record must be an object, got {type(rec).__name__}")
        if "t_mono" not in rec:
            raise InvalidEvent("event record is missing 't_mono'")
        t = rec["t_mono"]
        if isinstance(t, bool) or not isinstance(t, (int, float)):
            raise InvalidEvent(f"t_mono must be a number, got {t!r}")
        return cls(
            t_mono=float(t),
            inserted_text=rec.get("inserted_text", ""),
            deleted_length=rec.get("deleted_length", 0),
        )


def validate_events(events: Iterable[EditEvent]) -> Tuple[EditEvent, ...]:
    """
    Freeze an event sequence and check it is in temporal order.
    Equal timestamps are allowed; a step backwards raises InvalidEventOrder.
    The sequence is never reordered.
    """
    seq = tuple(events)
    for i in range(1, len(seq)):
        prev_t, t = seq[i - 1].t_mono, seq[i].t_mono
        if t < prev_t:
            raise InvalidEventOrder(i, prev_t, t)
    return seq


def assemble_text(events: Iterable[EditEvent]) -> str:
    """
    Rebuild the final text from an event sequence, assuming the caret stays at
    the end: each event first deletes `deleted_length` chars, then appends.
    """
    buf: list[str] = []
    for ev in events:
        if ev.deleted_length:
            del buf[max(0, len(buf) - ev.deleted_length):]
        buf.extend(ev.inserted_text)
    return "".join(buf)
