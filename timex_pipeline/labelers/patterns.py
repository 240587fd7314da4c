"""
Rule-based temporal expression labeler.

Matches a lexicon of regular expressions against the sentence tokens joined by
single spaces. The built-in lexicon covers common English DATE, TIME, DURATION
and SET expressions; a JSON file with the same shape can be passed as model.
"""

import json
import logging
import re
from pathlib import Path
from typing import List, Optional, Pattern, Sequence, Tuple

from timex_pipeline.errors import ModelLoadError
from timex_pipeline.labelers.adaptive import AdaptiveData
from timex_pipeline.labelers.alignment import TokenAlignment
from timex_pipeline.registry import labelers
from timex_pipeline.types import Span

logger = logging.getLogger(__name__)

BUILTIN_MODEL = "builtin"

_MONTH = (
    r"(?:January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan\.?|Feb\.?|Mar\.?|Apr\.?|Jun\.?|Jul\.?|Aug\.?|Sep\.?|Sept\.?|Oct\.?|Nov\.?|Dec\.?)"
)
_WEEKDAY = r"(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)"
_ORDINAL = r"\d{1,2}(?:\s?(?:st|nd|rd|th))?"
_NUMBER = r"(?:\d+|a|an|one|two|three|four|five|six|seven|eight|nine|ten|several|few|a\sfew)"
_UNIT = r"(?:seconds?|minutes?|hours?|days?|weeks?|months?|years?|decades?|centuries)"
_MERIDIEM = r"(?:a\.m\.|p\.m\.|am|pm)"

# (label, pattern, score)
DEFAULT_PATTERNS: List[Tuple[str, str, float]] = [
    # Numeric dates
    ("DATE", r"\b\d{4}-\d{2}-\d{2}\b", 1.0),
    ("DATE", r"\b\d{4}/\d{2}/\d{2}\b", 1.0),
    ("DATE", r"\b\d{1,2}/\d{1,2}/\d{2,4}\b", 0.9),
    ("DATE", r"\b\d{1,2}-\d{1,2}-\d{4}\b", 0.9),
    # Written dates
    ("DATE", rf"\b{_MONTH}\s{_ORDINAL}(?:\s?,)?\s\d{{4}}\b", 1.0),
    ("DATE", rf"\b(?:the\s)?{_ORDINAL}\s(?:of\s)?{_MONTH}(?:(?:\s?,)?\s\d{{4}})?(?!\w)", 0.9),
    ("DATE", rf"\b{_MONTH}\s{_ORDINAL}\b", 0.8),
    ("DATE", rf"\b{_MONTH}\s\d{{4}}\b", 0.9),
    ("DATE", rf"\b{_WEEKDAY}s?\b", 0.8),
    # Relative dates
    ("DATE", r"\b(?:today|tomorrow|yesterday)\b", 1.0),
    ("DATE", r"\bthe\sday\s(?:before|after)\s(?:yesterday|tomorrow)\b", 1.0),
    (
        "DATE",
        rf"\b(?:this|last|next|previous|coming)\s(?:week|weekend|month|year|quarter|century"
        rf"|spring|summer|autumn|fall|winter|{_WEEKDAY}|{_MONTH})\b",
        1.0,
    ),
    ("DATE", rf"\b{_NUMBER}\s{_UNIT}\s(?:ago|earlier|later|from\snow)\b", 1.0),
    # Periods
    ("DATE", r"\b(?:the\s)?\d{4}\s?'?s\b", 0.9),
    ("DATE", r"\b(?:the\s)?\d{1,2}(?:st|nd|rd|th)\scentury\b", 0.9),
    ("DATE", r"\bQ[1-4]\s\d{4}\b", 0.9),
    ("DATE", r"\b(?:1[5-9]|20)\d{2}\b", 0.6),
    # Times
    ("TIME", rf"\b\d{{1,2}}:\d{{2}}(?::\d{{2}})?(?:\s?{_MERIDIEM})?(?!\w)", 1.0),
    ("TIME", rf"\b\d{{1,2}}\s?{_MERIDIEM}(?!\w)", 1.0),
    ("TIME", r"\b(?:noon|midnight|tonight)\b", 0.9),
    (
        "TIME",
        r"\b(?:this|tomorrow|yesterday|last|in\sthe)\s(?:morning|afternoon|evening|night)\b",
        1.0,
    ),
    # Durations
    ("DURATION", rf"\b{_NUMBER}\s{_UNIT}\b", 0.8),
    ("DURATION", rf"\b(?:the\s)?(?:past|last|next)\s\d+\s{_UNIT}\b", 0.9),
    # Sets
    ("SET", rf"\b(?:every|each)\s(?:day|week|month|year|morning|afternoon|evening|night|{_WEEKDAY})\b", 1.0),
    ("SET", r"\b(?:daily|weekly|monthly|yearly|annually|hourly)\b", 0.9),
]


def _compile(entries) -> List[Tuple[str, Pattern, float]]:
    compiled = []
    for label, pattern, score in entries:
        try:
            compiled.append((label, re.compile(pattern, re.IGNORECASE), float(score)))
        except re.error as exc:
            raise ModelLoadError(f"Invalid pattern for {label}: {pattern!r} ({exc})") from exc
    return compiled


def load_patterns(model: str) -> List[Tuple[str, Pattern, float]]:
    """Load and compile a pattern lexicon by name or JSON path."""
    if model == BUILTIN_MODEL:
        return _compile(DEFAULT_PATTERNS)

    path = Path(model)
    if not path.is_file():
        raise ModelLoadError(f"Pattern model not found: {model}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        entries = [(item["label"], item["pattern"], item.get("score", 1.0)) for item in data]
    except (OSError, ValueError, TypeError, KeyError) as exc:
        raise ModelLoadError(f"Corrupt pattern model {model}: {exc}") from exc
    return _compile(entries)


@labelers.register("pattern")
class PatternLabeler:
    """Regex lexicon labeler; needs no model download."""

    def __init__(self, model: Optional[str] = None, adaptive: bool = True) -> None:
        self.model = model or BUILTIN_MODEL
        self.patterns = load_patterns(self.model)
        self.adaptive = AdaptiveData() if adaptive else None
        logger.info(f"Loaded {len(self.patterns)} temporal patterns from {self.model}")

    def label_spans(self, tokens: Sequence[str]) -> List[Span]:
        if not tokens:
            return []
        alignment = TokenAlignment(tokens)
        spans: List[Span] = []
        for label, pattern, score in self.patterns:
            for match in pattern.finditer(alignment.text):
                token_range = alignment.to_tokens(match.start(), match.end())
                if token_range is None:
                    continue
                spans.append(Span(token_range[0], token_range[1], label, score))

        if self.adaptive is not None:
            spans.extend(self.adaptive.recall(tokens))
            self.adaptive.update(tokens, spans)
        return spans

    def clear_adaptive_data(self) -> None:
        if self.adaptive is not None:
            self.adaptive.clear()
