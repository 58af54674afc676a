from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Iterable, Optional

import numpy as np

from core.config import BehaviorConfig
from core.errors import InvalidConfiguration
from core.events import EditEvent, validate_events


class InputMode(Enum):
    TYPED = "typed"
    PASTED = "pasted"
    MIXED = "mixed"


class FirstAction(Enum):
    """How the session opened: with a paste, with typing, or with a non-inserting edit."""
    PASTE = "paste"
    TYPED = "typed"
    OTHER = "other"


@dataclass(frozen=True)
class BehaviorProfile:
    avg_chars_per_second: float = 0.0
    burst_count: int = 0
    pause_count: int = 0
    paste_likelihood: float = 0.0
    classified_mode: InputMode = InputMode.TYPED

    # supporting counters
    event_count: int = 0
    inserted_chars: int = 0
    deleted_chars: int = 0
    paste_event_count: int = 0
    elapsed_s: float = 0.0
    gap_uniformity_cv: Optional[float] = None
    backspace_burst_count: int = 0
    first_action: Optional[FirstAction] = None

    def to_record(self) -> Dict[str, Any]:
        rec = asdict(self)
        rec["classified_mode"] = self.classified_mode.value
        rec["first_action"] = self.first_action.value if self.first_action else None
        return rec


def profile_from_hint(hint: str) -> BehaviorProfile:
    """Stand-in profile when the caller only knows how the text arrived."""
    h = (hint or "").strip().lower()
    if h in ("paste", "pasted"):
        return BehaviorProfile(paste_likelihood=1.0, classified_mode=InputMode.PASTED, first_action=FirstAction.PASTE)
    if h == "typed":
        return BehaviorProfile(paste_likelihood=0.0, classified_mode=InputMode.TYPED, first_action=FirstAction.TYPED)
    raise InvalidConfiguration(f"unknown mode hint {hint!r} (expected 'typed' or 'paste')")


def gap_uniformity_cv(gaps: np.ndarray) -> Optional[float]:
    """
    Coefficient of variation (std/mean) of the positive inter-event gaps,
    or None with fewer than two samples. Low values mean machine-like rhythm.
    """
    dts = gaps[gaps > 0]
    if dts.size < 2:
        return None
    mean = float(dts.mean())
    if mean <= 0:
        return None
    return float(dts.std(ddof=1)) / mean


def count_deletion_runs(inserted: np.ndarray, deleted: np.ndarray) -> int:
    """Runs of consecutive delete-only events; holding backspace counts once."""
    del_only = (deleted > 0) & (inserted == 0)
    if del_only.size == 0:
        return 0
    starts = del_only[1:] & ~del_only[:-1]
    return int(del_only[0]) + int(starts.sum())


class BehaviorAnalyzer:
    """
    Turns a timestamped edit sequence into a BehaviorProfile:
      - bursts: quick (< burst threshold), keystroke-sized inserts
      - pauses: gaps longer than the pause threshold
      - paste candidates: single inserts larger than paste_delta_min,
        weighted by length to form paste_likelihood
      - backspace bursts: runs of delete-only events
    Pure: no clock reads, no shared state.
    """
    def __init__(self, config: Optional[BehaviorConfig] = None):
        self.cfg = config or BehaviorConfig()

    def analyze(self, events: Iterable[EditEvent]) -> BehaviorProfile:
        seq = validate_events(events)
        if not seq:
            return BehaviorProfile()

        n = len(seq)
        ts = np.fromiter((e.t_mono for e in seq), dtype=float, count=n)
        lengths = np.fromiter((e.inserted_length for e in seq), dtype=np.int64, count=n)
        dels = np.fromiter((e.deleted_length for e in seq), dtype=np.int64, count=n)
        deleted = int(dels.sum())

        gaps = np.diff(ts)
        burst_mask = (gaps < self.cfg.burst_threshold_s) & (lengths[1:] <= self.cfg.small_delta_max)
        pause_mask = gaps > self.cfg.pause_threshold_s
        paste_mask = lengths > self.cfg.paste_delta_min

        total_inserted = int(lengths.sum())
        pasted_chars = int(lengths[paste_mask].sum())
        likelihood = pasted_chars / total_inserted if total_inserted > 0 else 0.0
        likelihood = min(1.0, max(0.0, likelihood))

        elapsed = float(ts[-1] - ts[0])
        span = elapsed if elapsed > 0 else self.cfg.minimum_duration_s
        cps = total_inserted / span

        return BehaviorProfile(
            avg_chars_per_second=cps,
            burst_count=int(burst_mask.sum()),
            pause_count=int(pause_mask.sum()),
            paste_likelihood=likelihood,
            classified_mode=self._classify(likelihood, cps),
            event_count=n,
            inserted_chars=total_inserted,
            deleted_chars=deleted,
            paste_event_count=int(paste_mask.sum()),
            elapsed_s=elapsed,
            gap_uniformity_cv=gap_uniformity_cv(gaps),
            backspace_burst_count=count_deletion_runs(lengths, dels),
            first_action=self._first_action(lengths),
        )

    def _first_action(self, lengths: np.ndarray) -> FirstAction:
        inserts = np.flatnonzero(lengths > 0)
        if inserts.size == 0:
            return FirstAction.OTHER
        if lengths[inserts[0]] > self.cfg.paste_delta_min:
            return FirstAction.PASTE
        return FirstAction.TYPED

    def _classify(self, likelihood: float, cps: float) -> InputMode:
        if likelihood >= self.cfg.paste_threshold:
            return InputMode.PASTED
        # below the typed bound AND at a pace a person can keep up
        if likelihood < self.cfg.typed_max_likelihood and cps <= self.cfg.max_typing_cps:
            return InputMode.TYPED
        return InputMode.MIXED
