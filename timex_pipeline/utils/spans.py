"""
Span selection utilities for sequence labelers.
"""

from typing import Collection, Iterable, List, Sequence, Set

from timex_pipeline.types import Span


def _rank(item):
    index, span = item
    score = span.score if span.score is not None else float("-inf")
    return (-(span.end - span.start), -score, span.start, index)


def resolve_spans(spans: Sequence[Span], n_tokens: int) -> List[Span]:
    """
    Select a non-overlapping subset of predicted spans.

    Malformed spans (negative start, empty or inverted range, or ending past
    the sentence) are dropped. Among conflicting spans the longest wins; ties
    go to the higher score (a missing score ranks lowest), then to the
    earlier start, then to the earlier position in the input.

    Args:
        spans: Raw predictions for one sentence
        n_tokens: Number of tokens in the sentence

    Returns:
        The retained input spans, sorted by start position
    """
    valid = [
        (i, span)
        for i, span in enumerate(spans)
        if 0 <= span.start < span.end <= n_tokens
    ]
    if not valid:
        return []

    result = []
    seen_tokens: Set[int] = set()

    for _, span in sorted(valid, key=_rank):
        span_tokens = set(range(span.start, span.end))
        if not span_tokens & seen_tokens:
            result.append(span)
            seen_tokens.update(span_tokens)

    return sorted(result, key=lambda s: s.start)


def is_fully_referenced(candidate_ids: Iterable[str], known_ids: Collection[str]) -> bool:
    """True iff every candidate id is present in the known id set."""
    return all(token_id in known_ids for token_id in candidate_ids)
