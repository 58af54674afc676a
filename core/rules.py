from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from core.behavior import BehaviorProfile, InputMode
from core.config import RuleConfig
from core.structure import LengthClass, StructureProfile


class Tag(Enum):
    """Answer modes a downstream responder can pick from."""
    SUMMARIZE = "summarize"
    STRUCTURE = "structure"
    REFINE = "refine"
    EXPLAIN = "explain"
    TRANSLATE = "translate"
    CLARIFY_QUESTION = "clarify_question"
    COMPLETE = "complete"
    EXPLORE = "explore"


@dataclass(frozen=True)
class RuleContext:
    """Signals supplied by the host rather than derived from the input."""
    target_language: Optional[str] = None  # language the answer is wanted in, e.g. "en"


Predicate = Callable[[BehaviorProfile, StructureProfile, RuleContext], bool]


@dataclass(frozen=True)
class Rule:
    name: str
    predicate: Predicate
    tag: Tag
    priority: int = 0

    def matches(self, behavior: BehaviorProfile, structure: StructureProfile, context: RuleContext) -> bool:
        return bool(self.predicate(behavior, structure, context))


def is_hesitant(b: BehaviorProfile, cfg: RuleConfig) -> bool:
    return b.pause_count >= 1 and b.pause_count / max(b.burst_count, 1) >= cfg.refine_pause_ratio


def is_heavily_edited(b: BehaviorProfile, cfg: RuleConfig) -> bool:
    return b.deleted_chars > 0 and b.deleted_chars / max(b.inserted_chars, 1) >= cfg.refine_delete_ratio


def is_short_query(s: StructureProfile) -> bool:
    # a bare one- or two-line prompt with nothing to structure or explain
    return (
        s.char_count > 0
        and s.length_class == LengthClass.SHORT
        and s.line_count <= 2
        and not (s.has_code_block or s.has_bullet_list)
    )


def is_japanese_dominant(s: StructureProfile, cfg: RuleConfig) -> bool:
    return s.japanese_ratio >= cfg.japanese_dominant_threshold


def default_rules(config: Optional[RuleConfig] = None) -> Tuple[Rule, ...]:
    cfg = config or RuleConfig()

    def long_paste(b: BehaviorProfile, s: StructureProfile, _c: RuleContext) -> bool:
        return b.classified_mode == InputMode.PASTED and s.length_class == LengthClass.LONG

    def language_mismatch(s: StructureProfile, c: RuleContext) -> bool:
        if not is_japanese_dominant(s, cfg) or not c.target_language:
            return False
        return c.target_language.strip().lower() != cfg.source_language.lower()

    typed = InputMode.TYPED
    return (
        Rule("explain_code", lambda b, s, c: s.has_code_block, Tag.EXPLAIN, 100),
        Rule("summarize_long_paste", long_paste, Tag.SUMMARIZE, 90),
        Rule("summarize_request", lambda b, s, c: s.request_summary, Tag.SUMMARIZE, 90),
        Rule("complete_implementation", lambda b, s, c: s.request_implementation, Tag.COMPLETE, 85),
        Rule("structure_bullets", lambda b, s, c: s.has_bullet_list, Tag.STRUCTURE, 80),
        Rule("structure_long_paste",
             lambda b, s, c: long_paste(b, s, c) and s.line_count >= cfg.structure_min_lines,
             Tag.STRUCTURE, 70),
        Rule("structure_implementation", lambda b, s, c: s.request_implementation, Tag.STRUCTURE, 70),
        Rule("translate_japanese", lambda b, s, c: language_mismatch(s, c), Tag.TRANSLATE, 60),
        Rule("refine_hesitant",
             lambda b, s, c: b.classified_mode == typed and is_hesitant(b, cfg), Tag.REFINE, 50),
        Rule("refine_heavy_edits",
             lambda b, s, c: b.classified_mode == typed and is_heavily_edited(b, cfg), Tag.REFINE, 50),
        Rule("refine_backspace_bursts",
             lambda b, s, c: b.classified_mode == typed and b.backspace_burst_count >= cfg.refine_backspace_bursts,
             Tag.REFINE, 50),
        Rule("clarify_question",
             lambda b, s, c: s.question_like and s.length_class != LengthClass.LONG,
             Tag.CLARIFY_QUESTION, 40),
        Rule("explore_short_query", lambda b, s, c: is_short_query(s), Tag.EXPLORE, 30),
    )


class RuleEngine:
    """
    Evaluates an ordered rule table against a behavior/structure profile pair.
    - Scan order: priority high->low, ties in declaration order.
    - Every matching rule may contribute, but each Tag is emitted once.
    - No match -> empty tuple (no fallback tag).
    """
    def __init__(self, rules: Optional[Iterable[Rule]] = None, config: Optional[RuleConfig] = None):
        table = tuple(rules) if rules is not None else default_rules(config)
        # sorted() is stable, so equal priorities keep declaration order
        self.rules: Tuple[Rule, ...] = tuple(sorted(table, key=lambda r: -r.priority))

    def fired(
        self,
        behavior: BehaviorProfile,
        structure: StructureProfile,
        context: Optional[RuleContext] = None,
    ) -> List[Rule]:
        ctx = context or RuleContext()
        return [r for r in self.rules if r.matches(behavior, structure, ctx)]

    @staticmethod
    def tags_of(rules: Iterable[Rule]) -> Tuple[Tag, ...]:
        """First occurrence of each tag, in rule order."""
        out: List[Tag] = []
        for rule in rules:
            if rule.tag not in out:
                out.append(rule.tag)
        return tuple(out)

    def evaluate(
        self,
        behavior: BehaviorProfile,
        structure: StructureProfile,
        context: Optional[RuleContext] = None,
    ) -> Tuple[Tag, ...]:
        return self.tags_of(self.fired(behavior, structure, context))

    def explain(
        self,
        behavior: BehaviorProfile,
        structure: StructureProfile,
        context: Optional[RuleContext] = None,
    ) -> List[str]:
        """Names of the rules that matched, in scan order."""
        return [r.name for r in self.fired(behavior, structure, context)]
