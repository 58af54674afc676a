# tests/test_config.py
# How to run:
#   From repo root: pytest -q
#
# What this covers:
#   - Defaults construct cleanly
#   - Inconsistent, non-positive or non-finite thresholds fail at construction time
#   - Nested overrides via AnalysisConfig.from_mapping

import pytest

from core.config import AnalysisConfig, BehaviorConfig, RuleConfig, StructureConfig
from core.errors import InvalidConfiguration


def test_defaults_are_valid():
    cfg = AnalysisConfig()
    assert cfg.behavior.pause_threshold_s > cfg.behavior.burst_threshold_s
    assert cfg.structure.short_max < cfg.structure.long_min


@pytest.mark.parametrize("kwargs", [
    {"burst_threshold_s": 0},
    {"pause_threshold_s": -1.0},
    {"burst_threshold_s": 2.0, "pause_threshold_s": 1.0},
    {"burst_threshold_s": 1.0, "pause_threshold_s": 1.0},
    {"paste_delta_min": 2, "small_delta_max": 4},
    {"paste_threshold": 1.5},
    {"typed_max_likelihood": 0.7, "paste_threshold": 0.6},
    {"minimum_duration_s": 0},
    {"max_typing_cps": True},
])
def test_bad_behavior_config_rejected(kwargs):
    with pytest.raises(InvalidConfiguration):
        BehaviorConfig(**kwargs)


def test_bad_structure_config_rejected():
    with pytest.raises(InvalidConfiguration):
        StructureConfig(short_max=400, long_min=400)
    with pytest.raises(InvalidConfiguration):
        StructureConfig(short_max=0)


def test_bad_rule_config_rejected():
    with pytest.raises(InvalidConfiguration):
        RuleConfig(japanese_dominant_threshold=1.2)
    with pytest.raises(InvalidConfiguration):
        RuleConfig(refine_pause_ratio=0)
    with pytest.raises(InvalidConfiguration):
        RuleConfig(source_language="")


def test_from_mapping_applies_overrides():
    cfg = AnalysisConfig.from_mapping({
        "behavior": {"paste_threshold": 0.7},
        "structure": {"long_min": 300},
    })
    assert cfg.behavior.paste_threshold == 0.7
    assert cfg.behavior.burst_threshold_s == BehaviorConfig().burst_threshold_s
    assert cfg.structure.long_min == 300
    assert cfg.rules == RuleConfig()


def test_from_mapping_empty_is_default():
    assert AnalysisConfig.from_mapping({}) == AnalysisConfig()


@pytest.mark.parametrize("data", [
    {"timing": {}},
    {"behavior": {"paste_treshold": 0.7}},
    {"behavior": [1, 2]},
    {"structure": {"short_max": 500}},
    ["behavior"],
])
def test_from_mapping_rejects_bad_input(data):
    with pytest.raises(InvalidConfiguration):
        AnalysisConfig.from_mapping(data)


@pytest.mark.parametrize("kwargs", [
    {"source_language": 5},
    {"source_language": None},
    {"source_language": "   "},
    {"japanese_dominant_threshold": float("nan")},
    {"refine_delete_ratio": float("inf")},
    {"deep_japanese_chars": 0},
])
def test_rule_config_rejects_wrong_types_and_non_finite(kwargs):
    with pytest.raises(InvalidConfiguration):
        RuleConfig(**kwargs)


@pytest.mark.parametrize("kwargs", [
    {"paste_threshold": float("nan")},
    {"max_typing_cps": float("inf")},
    {"pause_threshold_s": float("inf")},
    {"typed_max_likelihood": float("nan")},
    {"small_delta_max": "4"},
])
def test_behavior_config_rejects_non_finite(kwargs):
    with pytest.raises(InvalidConfiguration):
        BehaviorConfig(**kwargs)


def test_from_mapping_rejects_nan_override():
    with pytest.raises(InvalidConfiguration):
        AnalysisConfig.from_mapping({"behavior": {"paste_threshold": float("nan")}})
    with pytest.raises(InvalidConfiguration):
        AnalysisConfig.from_mapping({"rules": {"source_language": 5}})
