from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from core.behavior import BehaviorProfile, InputMode
from core.config import RuleConfig
from core.rules import is_heavily_edited, is_hesitant, is_japanese_dominant, is_short_query
from core.structure import StructureProfile


class ScopeHint(Enum):
    NARROW = "narrow"
    MEDIUM = "medium"
    BROAD = "broad"


class ToneHint(Enum):
    DIRECT = "direct"
    GENTLE = "gentle"
    NEUTRAL = "neutral"


class DepthHint(Enum):
    SHALLOW = "shallow"
    NORMAL = "normal"
    DEEP = "deep"


@dataclass(frozen=True)
class AnswerHints:
    """How wide, how blunt and how deep an answer should be; kept apart from the tags."""
    scope: ScopeHint = ScopeHint.MEDIUM
    tone: ToneHint = ToneHint.NEUTRAL
    depth: DepthHint = DepthHint.NORMAL

    def to_record(self) -> Dict[str, Any]:
        return {"scope": self.scope.value, "tone": self.tone.value, "depth": self.depth.value}


HintPredicate = Callable[[BehaviorProfile, StructureProfile], bool]


@dataclass(frozen=True)
class HintRule:
    name: str
    predicate: HintPredicate
    scope: Optional[ScopeHint] = None
    tone: Optional[ToneHint] = None
    depth: Optional[DepthHint] = None

    def apply(self, hints: AnswerHints) -> AnswerHints:
        changes = {k: v for k, v in (("scope", self.scope), ("tone", self.tone), ("depth", self.depth)) if v is not None}
        return replace(hints, **changes)


def default_hint_rules(config: Optional[RuleConfig] = None) -> Tuple[HintRule, ...]:
    """Applied top to bottom; a later match overwrites the axis it sets."""
    cfg = config or RuleConfig()

    def pasted(b: BehaviorProfile) -> bool:
        return b.classified_mode == InputMode.PASTED

    def typed(b: BehaviorProfile) -> bool:
        return b.classified_mode == InputMode.TYPED

    return (
        HintRule("broad_multiline_paste",
                 lambda b, s: pasted(b) and s.line_count >= cfg.broad_paste_min_lines,
                 scope=ScopeHint.BROAD),
        HintRule("deep_after_hesitation",
                 lambda b, s: typed(b) and (is_hesitant(b, cfg) or is_heavily_edited(b, cfg)),
                 depth=DepthHint.DEEP),
        HintRule("broad_short_query", lambda b, s: is_short_query(s), scope=ScopeHint.BROAD),
        HintRule("narrow_bullets", lambda b, s: s.bullet_lines >= cfg.narrow_bullet_min, scope=ScopeHint.NARROW),
        HintRule("direct_command", lambda b, s: s.command_like, tone=ToneHint.DIRECT),
        HintRule("deep_long_japanese",
                 lambda b, s: is_japanese_dominant(s, cfg) and s.char_count > cfg.deep_japanese_chars,
                 depth=DepthHint.DEEP),
        HintRule("gentle_polite_japanese",
                 lambda b, s: is_japanese_dominant(s, cfg) and s.is_polite,
                 tone=ToneHint.GENTLE),
        HintRule("direct_plain_japanese",
                 lambda b, s: is_japanese_dominant(s, cfg) and s.is_direct and not s.is_polite,
                 tone=ToneHint.DIRECT),
        HintRule("broad_summary_request", lambda b, s: s.request_summary, scope=ScopeHint.BROAD),
        HintRule("direct_implementation", lambda b, s: s.request_implementation, tone=ToneHint.DIRECT),
    )


def derive_hints(
    behavior: BehaviorProfile,
    structure: StructureProfile,
    config: Optional[RuleConfig] = None,
    rules: Optional[Iterable[HintRule]] = None,
) -> AnswerHints:
    table = tuple(rules) if rules is not None else default_hint_rules(config)
    hints = AnswerHints()
    for rule in table:
        if rule.predicate(behavior, structure):
            hints = rule.apply(hints)
    return hints
