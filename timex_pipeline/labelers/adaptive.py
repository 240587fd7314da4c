"""
Adaptive data shared by the labelers.

Remembers the token sequences labelled so far and proposes them again when
they reappear later in the same document, the way a previous-outcome feature
carries decisions across sentences. The memory lives until it is cleared and
holds at most ``max_entries`` sequences; the least recently labelled ones are
forgotten first.
"""

from collections import OrderedDict
from typing import Dict, List, Sequence, Set, Tuple

from timex_pipeline.types import Span

RECALL_SCORE = 0.5
DEFAULT_MAX_ENTRIES = 10000

Key = Tuple[str, ...]


class AdaptiveData:
    """Token-sequence memory carried across sentence boundaries."""

    def __init__(self, max_length: int = 8, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self.max_length = max_length
        self.max_entries = max_entries
        self._seen: "OrderedDict[Key, str]" = OrderedDict()
        # first token -> remembered sequences starting with it
        self._by_first: Dict[str, Set[Key]] = {}

    def __len__(self) -> int:
        return len(self._seen)

    def update(self, tokens: Sequence[str], spans: Sequence[Span]) -> None:
        for span in spans:
            if 0 <= span.start < span.end <= len(tokens) and len(span) <= self.max_length:
                key = tuple(t.lower() for t in tokens[span.start:span.end])
                self._remember(key, span.label)

    def _remember(self, key: Key, label: str) -> None:
        if key in self._seen:
            self._seen.move_to_end(key)
        else:
            self._by_first.setdefault(key[0], set()).add(key)
        self._seen[key] = label
        while len(self._seen) > self.max_entries:
            oldest, _ = self._seen.popitem(last=False)
            keys = self._by_first[oldest[0]]
            keys.discard(oldest)
            if not keys:
                del self._by_first[oldest[0]]

    def recall(self, tokens: Sequence[str]) -> List[Span]:
        if not self._seen:
            return []
        lowered = [t.lower() for t in tokens]
        spans = []
        for start, token in enumerate(lowered):
            for key in sorted(self._by_first.get(token, ())):
                end = start + len(key)
                if end <= len(lowered) and tuple(lowered[start:end]) == key:
                    spans.append(Span(start, end, self._seen[key], RECALL_SCORE))
        return spans

    def clear(self) -> None:
        self._seen.clear()
        self._by_first.clear()
