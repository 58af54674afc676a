from __future__ import annotations
import math
from typing import List

from core.errors import InvalidConfiguration
from core.events import EditEvent


def char_delay_s(wpm: float) -> float:
    # 5 chars = 1 word
    if isinstance(wpm, bool) or not isinstance(wpm, (int, float)) or not math.isfinite(wpm) or wpm <= 0:
        raise InvalidConfiguration(f"wpm must be > 0, got {wpm}")
    return 60.0 / (wpm * 5.0)


def simulate_typing(text: str, wpm: float = 60.0, start: float = 1.0) -> List[EditEvent]:
    """One single-character insert per char, evenly spaced at the given speed."""
    step = char_delay_s(wpm)
    return [EditEvent(t_mono=start + i * step, inserted_text=ch) for i, ch in enumerate(text)]


def simulate_paste(text: str, start: float = 1.0) -> List[EditEvent]:
    if not text:
        return []
    return [EditEvent(t_mono=start, inserted_text=text)]


def simulate_mixed(text: str, wpm: float = 60.0, start: float = 1.0) -> List[EditEvent]:
    """Type the first half, then paste the remainder in one shot."""
    split = len(text) // 2
    typed = simulate_typing(text[:split], wpm=wpm, start=start)
    t = typed[-1].t_mono + char_delay_s(wpm) if typed else start
    return typed + simulate_paste(text[split:], start=t)
