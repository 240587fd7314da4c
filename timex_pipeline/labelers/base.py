from typing import List, Protocol, Sequence

from timex_pipeline.types import Span


class Labeler(Protocol):
    """Predicts typed token spans for one sentence."""

    def label_spans(self, tokens: Sequence[str]) -> List[Span]:
        ...

    def clear_adaptive_data(self) -> None:
        ...
