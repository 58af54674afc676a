from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple
import structlog
from blake3 import blake3

from core.behavior import BehaviorAnalyzer, BehaviorProfile, profile_from_hint
from core.config import AnalysisConfig
from core.events import EditEvent
from core.hints import AnswerHints, derive_hints
from core.rules import RuleContext, RuleEngine, Tag
from core.structure import StructureAnalyzer, StructureProfile

log = structlog.get_logger()

def text_digest(text: str) -> str:
    return blake3(text.encode(errors="ignore")).hexdigest()

@dataclass(frozen=True)
class AnalysisReport:
    behavior: BehaviorProfile
    structure: StructureProfile
    tags: Tuple[Tag, ...]
    fired_rules: Tuple[str, ...] = ()
    behavior_source: str = "events"   # "events" | "hint"
    text_length: int = 0
    text_digest: str = ""
    hints: AnswerHints = AnswerHints()

    def tag_names(self) -> List[str]:
        return [t.value for t in self.tags]

    def to_record(self) -> Dict[str, Any]:
        # no plaintext, only length + digest
        return {
            "tags": self.tag_names(),
            "hints": self.hints.to_record(),
            "fired_rules": list(self.fired_rules),
            "behavior_source": self.behavior_source,
            "behavior": self.behavior.to_record(),
            "structure": self.structure.to_record(),
            "text_length": self.text_length,
            "text_digest": self.text_digest,
        }

class InputPipeline:
    """Wires the two analyzers into the rule engine for one text + optional timeline."""
    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.cfg = config or AnalysisConfig()
        self.behavior = BehaviorAnalyzer(self.cfg.behavior)
        self.structure = StructureAnalyzer(self.cfg.structure)
        self.engine = RuleEngine(config=self.cfg.rules)

    def analyze(
        self,
        text: str,
        events: Optional[Iterable[EditEvent]] = None,
        mode_hint: Optional[str] = None,
        context: Optional[RuleContext] = None,
    ) -> AnalysisReport:
        if events is None and mode_hint:
            bp = profile_from_hint(mode_hint)
            source = "hint"
        else:
            if mode_hint:
                log.debug("pipeline.hint_ignored", hint=mode_hint)
            bp = self.behavior.analyze(events or ())
            source = "events"

        sp = self.structure.analyze(text)
        fired = self.engine.fired(bp, sp, context)
        tags = self.engine.tags_of(fired)

        report = AnalysisReport(
            behavior=bp,
            structure=sp,
            tags=tags,
            fired_rules=tuple(r.name for r in fired),
            behavior_source=source,
            text_length=len(text),
            text_digest=text_digest(text),
            hints=derive_hints(bp, sp, self.cfg.rules),
        )
        log.debug(
            "pipeline.analyze",
            source=source,
            mode=bp.classified_mode.value,
            paste_likelihood=round(bp.paste_likelihood, 3),
            length_class=sp.length_class.value,
            text_len=report.text_length,
            digest=report.text_digest[:16],
            tags=report.tag_names(),
            hints=report.hints.to_record(),
        )
        return report
