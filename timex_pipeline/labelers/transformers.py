import logging
from typing import Iterable, List, Optional, Sequence

from timex_pipeline.errors import ModelLoadError
from timex_pipeline.labelers.adaptive import AdaptiveData
from timex_pipeline.labelers.alignment import TokenAlignment
from timex_pipeline.registry import labelers
from timex_pipeline.types import Span

logger = logging.getLogger(__name__)


@labelers.register("transformers")
class TransformersLabeler:
    """
    HuggingFace token-classification labeler.

    Predictions are made on the tokens joined by spaces and mapped back to
    token indices, expanding partial-token matches to whole tokens.
    """

    def __init__(
        self,
        model: str = "dslim/bert-base-NER",
        labels: Optional[Iterable[str]] = None,
        aggregation_strategy: str = "simple",
        adaptive: bool = True,
    ) -> None:
        self.model = model
        self.labels = set(labels) if labels is not None else None
        try:
            from transformers import pipeline
        except ImportError:
            raise ImportError(
                "transformers package required. Install with: pip install transformers"
            )
        try:
            self.token_classifier = pipeline(
                "ner", model=model, aggregation_strategy=aggregation_strategy
            )
        except OSError as exc:
            raise ModelLoadError(f"Transformers model '{model}' could not be loaded: {exc}") from exc
        self.adaptive = AdaptiveData() if adaptive else None
        logger.info(f"Loaded Transformers NER model: {model}")

    def label_spans(self, tokens: Sequence[str]) -> List[Span]:
        if not tokens:
            return []
        alignment = TokenAlignment(tokens)
        spans: List[Span] = []
        for pred in self.token_classifier(alignment.text):
            label = pred.get("entity_group", pred.get("entity", "ENT"))
            if label.startswith(("B-", "I-")):
                label = label[2:]
            if self.labels is not None and label not in self.labels:
                continue
            token_range = alignment.to_tokens(int(pred["start"]), int(pred["end"]), expand=True)
            if token_range is None:
                continue
            spans.append(Span(token_range[0], token_range[1], label, float(pred.get("score", 0.0))))

        if self.adaptive is not None:
            spans.extend(self.adaptive.recall(tokens))
            self.adaptive.update(tokens, spans)
        return spans

    def clear_adaptive_data(self) -> None:
        if self.adaptive is not None:
            self.adaptive.clear()
