# tests/test_simulate.py
# How to run:
#   From repo root: pytest -q
#
# What this covers:
#   - Synthesized typing / paste / mixed timelines and how they classify

import pytest

from core.behavior import BehaviorAnalyzer, InputMode
from core.errors import InvalidConfiguration
from core.events import assemble_text
from core.simulate import char_delay_s, simulate_mixed, simulate_paste, simulate_typing


def test_typing_spacing_follows_wpm():
    events = simulate_typing("abcd", wpm=60, start=2.0)
    assert [e.inserted_text for e in events] == ["a", "b", "c", "d"]
    assert events[0].t_mono == 2.0
    assert events[1].t_mono - events[0].t_mono == pytest.approx(0.2)
    assert char_delay_s(120) == pytest.approx(0.1)


def test_simulated_timelines_rebuild_text():
    text = "The quick brown fox jumps over the lazy dog"
    for events in (simulate_typing(text), simulate_paste(text), simulate_mixed(text)):
        assert assemble_text(events) == text


def test_simulated_modes_classify():
    text = "The quick brown fox jumps over the lazy dog. " * 3
    analyzer = BehaviorAnalyzer()
    assert analyzer.analyze(simulate_typing(text)).classified_mode == InputMode.TYPED
    assert analyzer.analyze(simulate_paste(text)).classified_mode == InputMode.PASTED
    mixed = analyzer.analyze(simulate_mixed(text))
    assert mixed.paste_likelihood == pytest.approx(0.5, abs=0.01)
    assert mixed.classified_mode == InputMode.MIXED


def test_empty_text_simulates_nothing():
    assert simulate_typing("") == []
    assert simulate_paste("") == []
    assert simulate_mixed("") == []


@pytest.mark.parametrize("wpm", [0, -30, float("nan"), float("inf"), True])
def test_bad_wpm_rejected(wpm):
    with pytest.raises(InvalidConfiguration):
        simulate_typing("abc", wpm=wpm)
    with pytest.raises(ValueError):
        char_delay_s(wpm)
