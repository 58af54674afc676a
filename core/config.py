from __future__ import annotations
import math
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from core.errors import InvalidConfiguration


def _is_number(val: Any) -> bool:
    return not isinstance(val, bool) and isinstance(val, (int, float)) and math.isfinite(val)


def _require_positive(owner: object, *names: str) -> None:
    for name in names:
        val = getattr(owner, name)
        if not _is_number(val) or val <= 0:
            raise InvalidConfiguration(f"{type(owner).__name__}.{name} must be > 0, got {val!r}")


def _require_unit(owner: object, *names: str) -> None:
    for name in names:
        val = getattr(owner, name)
        if not _is_number(val) or not 0.0 <= val <= 1.0:
            raise InvalidConfiguration(f"{type(owner).__name__}.{name} must be in [0, 1], got {val!r}")


@dataclass(frozen=True)
class BehaviorConfig:
    # gap windows (seconds)
    burst_threshold_s: float = 0.05
    pause_threshold_s: float = 1.0
    minimum_duration_s: float = 0.1  # floor for elapsed time of a single event

    # delta sizes (characters)
    small_delta_max: int = 4   # typed-scale keystroke (IME commits included)
    paste_delta_min: int = 8   # strictly larger inserts are paste candidates

    # mode decision
    paste_threshold: float = 0.6
    typed_max_likelihood: float = 0.2
    max_typing_cps: float = 25.0

    def __post_init__(self):
        _require_positive(
            self, "burst_threshold_s", "pause_threshold_s", "minimum_duration_s",
            "small_delta_max", "paste_delta_min", "paste_threshold", "max_typing_cps",
        )
        _require_unit(self, "paste_threshold", "typed_max_likelihood")
        if self.pause_threshold_s <= self.burst_threshold_s:
            raise InvalidConfiguration(
                f"pause_threshold_s ({self.pause_threshold_s}) must exceed burst_threshold_s ({self.burst_threshold_s})"
            )
        if self.paste_delta_min < self.small_delta_max:
            raise InvalidConfiguration(
                f"paste_delta_min ({self.paste_delta_min}) must be >= small_delta_max ({self.small_delta_max})"
            )
        if self.typed_max_likelihood > self.paste_threshold:
            raise InvalidConfiguration(
                f"typed_max_likelihood ({self.typed_max_likelihood}) must not exceed paste_threshold ({self.paste_threshold})"
            )


@dataclass(frozen=True)
class StructureConfig:
    short_max: int = 40    # fewer chars -> SHORT
    long_min: int = 400    # more chars -> LONG
    bullet_min_lines: int = 2
    indent_min_lines: int = 2

    def __post_init__(self):
        _require_positive(self, "short_max", "long_min", "bullet_min_lines", "indent_min_lines")
        if self.short_max >= self.long_min:
            raise InvalidConfiguration(
                f"short_max ({self.short_max}) must be below long_min ({self.long_min})"
            )


@dataclass(frozen=True)
class RuleConfig:
    japanese_dominant_threshold: float = 0.5
    refine_pause_ratio: float = 0.1     # pauses per burst that read as hesitation
    refine_delete_ratio: float = 0.3    # deleted / inserted chars that read as heavy revision
    structure_min_lines: int = 5
    refine_backspace_bursts: int = 3    # separate runs of deletions while typing
    broad_paste_min_lines: int = 3
    narrow_bullet_min: int = 3
    deep_japanese_chars: int = 500
    source_language: str = "ja"         # language implied by a Japanese-dominant text

    def __post_init__(self):
        _require_positive(
            self, "refine_pause_ratio", "refine_delete_ratio", "structure_min_lines",
            "refine_backspace_bursts", "broad_paste_min_lines", "narrow_bullet_min", "deep_japanese_chars",
        )
        _require_unit(self, "japanese_dominant_threshold")
        if not isinstance(self.source_language, str) or not self.source_language.strip():
            raise InvalidConfiguration(f"RuleConfig.source_language must be a non-empty string, got {self.source_language!r}")


_SECTIONS = {
    "behavior": BehaviorConfig,
    "structure": StructureConfig,
    "rules": RuleConfig,
}


@dataclass(frozen=True)
class AnalysisConfig:
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    structure: StructureConfig = field(default_factory=StructureConfig)
    rules: RuleConfig = field(default_factory=RuleConfig)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AnalysisConfig":
        """
        Build a config from nested overrides, e.g.
        {"behavior": {"paste_threshold": 0.7}, "structure": {"long_min": 300}}.
        Unknown sections or keys are rejected.
        """
        if not isinstance(data, Mapping):
            raise InvalidConfiguration("configuration must be a mapping of sections")
        unknown = set(data) - set(_SECTIONS)
        if unknown:
            raise InvalidConfiguration(f"unknown configuration section(s): {sorted(unknown)}")

        built = {}
        for section, klass in _SECTIONS.items():
            overrides = data.get(section) or {}
            if not isinstance(overrides, Mapping):
                raise InvalidConfiguration(f"section '{section}' must be a mapping")
            known = {f.name for f in fields(klass)}
            bad = set(overrides) - known
            if bad:
                raise InvalidConfiguration(f"unknown key(s) in '{section}': {sorted(bad)}")
            built[section] = klass(**overrides)
        return cls(**built)
