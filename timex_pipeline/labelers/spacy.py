import logging
from typing import Iterable, List, Optional, Sequence

import spacy
from spacy.tokens import Doc

from timex_pipeline.errors import ModelLoadError
from timex_pipeline.labelers.adaptive import AdaptiveData
from timex_pipeline.registry import labelers
from timex_pipeline.types import Span

logger = logging.getLogger(__name__)

TEMPORAL_LABELS = ("DATE", "TIME", "DURATION", "SET", "TIMEX", "TIMEX3")


@labelers.register("spacy")
class SpacyLabeler:
    """spaCy pipeline labeler (e.g. en_core_web_sm or a TEI2GO model)."""

    def __init__(
        self,
        model: str = "en_core_web_sm",
        labels: Optional[Iterable[str]] = None,
        adaptive: bool = True,
    ) -> None:
        self.model = model
        self.labels = set(labels) if labels is not None else set(TEMPORAL_LABELS)
        try:
            self.nlp = spacy.load(model)
        except OSError as exc:
            raise ModelLoadError(f"spaCy model '{model}' could not be loaded: {exc}") from exc
        self.adaptive = AdaptiveData() if adaptive else None
        logger.info(f"Loaded spaCy model: {model} (labels: {sorted(self.labels)})")

    def label_spans(self, tokens: Sequence[str]) -> List[Span]:
        if not tokens:
            return []
        doc = Doc(self.nlp.vocab, words=list(tokens))
        for _, proc in self.nlp.pipeline:
            doc = proc(doc)
        spans = [
            Span(ent.start, ent.end, ent.label_, 1.0)
            for ent in doc.ents
            if ent.label_ in self.labels
        ]
        if self.adaptive is not None:
            spans.extend(self.adaptive.recall(tokens))
            self.adaptive.update(tokens, spans)
        return spans

    def clear_adaptive_data(self) -> None:
        if self.adaptive is not None:
            self.adaptive.clear()
