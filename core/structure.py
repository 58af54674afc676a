from __future__ import annotations
import re
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from core.config import StructureConfig


class LengthClass(Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


@dataclass(frozen=True)
class StructureProfile:
    has_code_block: bool = False
    has_bullet_list: bool = False
    japanese_ratio: float = 0.0
    length_class: LengthClass = LengthClass.SHORT

    char_count: int = 0
    line_count: int = 0
    bullet_lines: int = 0
    question_like: bool = False
    request_summary: bool = False
    request_implementation: bool = False
    command_like: bool = False
    is_polite: bool = False
    is_direct: bool = False

    def to_record(self) -> Dict[str, Any]:
        rec = asdict(self)
        rec["length_class"] = self.length_class.value
        return rec


# Hiragana, katakana (incl. phonetic ext. and half-width), kanji (CJK unified,
# ext. A, compatibility, iteration mark), plus Japanese punctuation and
# full-width punctuation so that "。" / "？" count toward the script.
_JAPANESE_CHAR = re.compile(
    "[\u3001-\u303f"   # CJK symbols & punctuation (ideographic space excluded)
    "\u3040-\u309f"    # hiragana
    "\u30a0-\u30ff"    # katakana
    "\u31f0-\u31ff"    # katakana phonetic extensions
    "\u3400-\u4dbf"    # CJK ext. A
    "\u4e00-\u9fff"    # CJK unified ideographs
    "\uf900-\ufaff"    # CJK compatibility ideographs
    "\uff01-\uff0f"    # full-width punctuation
    "\uff1a-\uff20"
    "\uff3b-\uff40"
    "\uff5b-\uff64"    # full-width brackets, half-width CJK punctuation
    "\uff65-\uff9f]"   # half-width katakana
)
_FENCE = re.compile(r"^\s*(```|~~~)")
_BULLET = re.compile(r"^\s*(?:[-*+]\s+|\d+[.)]\s+|・\s*)\S")
_INDENTED = re.compile(r"^(?: {4}|\t)\s*\S")
_SUMMARY_REQUEST = re.compile(r"\b(?:summari[sz]e|summary|tl;?dr)\b|要約|まとめ", re.IGNORECASE)
_QUESTION_TAIL = ("か", "か。", "か？", "の？")
_IMPLEMENTATION_REQUEST = re.compile(
    r"\bimplement\w*\b|\bwrite (?:a |an |the |some )?(?:code|function|script|class|program|test)s?\b"
    r"|実装|コードを書|作って|作成して",
    re.IGNORECASE,
)
_COMMAND_OPENER = re.compile(r"^(?:please|write|create)\b", re.IGNORECASE)
# Japanese register: polite forms vs. plain/imperative sentence endings
_POLITE = re.compile(r"です|ます|ください|下さい|お願い")
_DIRECT_ENDING = re.compile(r"(?:だ|しろ|やれ|せよ|くれ|である)[。！!]?\s*$", re.MULTILINE)


def japanese_ratio(text: str) -> float:
    """Japanese-script characters over non-whitespace characters; 0 when none."""
    visible = [ch for ch in text if not ch.isspace()]
    if not visible:
        return 0.0
    hits = sum(1 for ch in visible if _JAPANESE_CHAR.match(ch))
    return hits / len(visible)


def _trim_blank_edges(lines: List[str]) -> List[str]:
    # drop blank lines at either end but keep the indentation of the rest
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def has_fenced_block(lines: List[str]) -> bool:
    """True when at least one ``` / ~~~ fence is opened and closed by the same marker."""
    open_marker: Optional[str] = None
    for line in lines:
        m = _FENCE.match(line)
        if not m:
            continue
        if open_marker is None:
            open_marker = m.group(1)
        elif m.group(1) == open_marker:
            return True
    return False


def longest_indented_run(lines: List[str]) -> int:
    # nested bullet items are indented too; they do not count as code
    best = run = 0
    for line in lines:
        if _INDENTED.match(line) and not _BULLET.match(line):
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


class StructureAnalyzer:
    """Static features of the final text: code, bullets, Japanese density, length."""
    def __init__(self, config: Optional[StructureConfig] = None):
        self.cfg = config or StructureConfig()

    def analyze(self, text: str) -> StructureProfile:
        body = (text or "").strip()
        if not body:
            return StructureProfile()

        lines = _trim_blank_edges(text.splitlines())
        bullet_lines = sum(1 for l in lines if _BULLET.match(l))
        has_code = has_fenced_block(lines) or longest_indented_run(lines) >= self.cfg.indent_min_lines

        return StructureProfile(
            has_code_block=has_code,
            has_bullet_list=bullet_lines >= self.cfg.bullet_min_lines,
            japanese_ratio=japanese_ratio(body),
            length_class=self._length_class(len(body)),
            char_count=len(body),
            line_count=len(lines),
            bullet_lines=bullet_lines,
            question_like="?" in body or "？" in body or body.endswith(_QUESTION_TAIL),
            request_summary=bool(_SUMMARY_REQUEST.search(body)),
            request_implementation=bool(_IMPLEMENTATION_REQUEST.search(body)),
            command_like=bool(_COMMAND_OPENER.match(body)),
            is_polite=bool(_POLITE.search(body)),
            is_direct=bool(_DIRECT_ENDING.search(body)),
        )

    def _length_class(self, n: int) -> LengthClass:
        if n < self.cfg.short_max:
            return LengthClass.SHORT
        if n > self.cfg.long_min:
            return LengthClass.LONG
        return LengthClass.MEDIUM
