"""
Temporal annotation of NAF documents.

The annotator walks a document sentence by sentence, asks the labeler for
token spans, keeps a non-overlapping subset and commits each kept span to the
document through an annotation target. Between sentences it clears the
labeler's adaptive data according to the configured policy:

- ``no``: never clear
- ``yes``: clear after every sentence and once more after the document
- ``docstart``: clear before a sentence whose first token is a -DOCSTART- mark
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Protocol, Union

from timex_pipeline.errors import ConfigError
from timex_pipeline.labelers.base import Labeler
from timex_pipeline.registry import annotation_targets
from timex_pipeline.types import Document, Entity, Span, Timex3, WordForm
from timex_pipeline.utils import is_fully_referenced, resolve_spans

logger = logging.getLogger(__name__)

CLEAR_NO = "no"
CLEAR_YES = "yes"
CLEAR_DOCSTART = "docstart"
CLEAR_FEATURES_CHOICES = (CLEAR_NO, CLEAR_YES, CLEAR_DOCSTART)

DOCSTART = "-DOCSTART-"


def normalize_clear_features(value: Optional[str]) -> str:
    policy = (value or CLEAR_NO).lower()
    if policy not in CLEAR_FEATURES_CHOICES:
        raise ConfigError(
            f"Unknown clear features policy '{value}'; choose one of {', '.join(CLEAR_FEATURES_CHOICES)}"
        )
    return policy


class AnnotationTarget(Protocol):
    """Turns a resolved span into a document annotation."""

    layer: str

    def commit(
        self, doc: Document, sentence: List[WordForm], segment: Span
    ) -> Optional[Union[Timex3, Entity]]:
        ...


@annotation_targets.register("timex")
class TimexTarget:
    """Time expressions over word forms."""

    layer = "timeExpressions"

    def commit(self, doc: Document, sentence: List[WordForm], segment: Span) -> Timex3:
        words = sentence[segment.start:segment.end]
        return doc.new_timex3(segment.label, [wf.id for wf in words])


@annotation_targets.register("entity")
class EntityTarget:
    """Entities over the term layer; spans the term layer does not fully cover are dropped."""

    layer = "entities"

    def commit(self, doc: Document, sentence: List[WordForm], segment: Span) -> Optional[Entity]:
        token_ids = [wf.id for wf in sentence[segment.start:segment.end]]
        if not is_fully_referenced(token_ids, doc.term_token_ids()):
            logger.debug(
                f"Dropping {segment.label} entity over {token_ids}: not covered by the term layer"
            )
            return None
        terms = doc.terms_for_tokens(token_ids)
        return doc.new_entity(segment.label, [term.id for term in terms])


class TemporalAnnotator:
    """
    Applies a labeler to every sentence of a document.

    The labeler's adaptive data is shared by every document this annotator
    sees, so documents must not interleave: ``annotate`` holds the
    annotator's lock for the whole document and ``exclusive()`` lets a caller
    extend that window over reading and encoding.
    """

    def __init__(
        self,
        labeler: Labeler,
        clear_features: str = CLEAR_NO,
        target: Union[str, AnnotationTarget] = "timex",
    ) -> None:
        self.labeler = labeler
        self.clear_features = normalize_clear_features(clear_features)
        if isinstance(target, str):
            target = annotation_targets.create(target)
        self.target = target
        self._lock = threading.RLock()

    @property
    def layer(self) -> str:
        return self.target.layer

    @contextmanager
    def exclusive(self) -> Iterator["TemporalAnnotator"]:
        with self._lock:
            yield self

    def annotate(self, doc: Document) -> List[Union[Timex3, Entity]]:
        """Annotate every sentence of ``doc`` in place and return the new annotations."""
        created: List[Union[Timex3, Entity]] = []
        with self._lock:
            for sentence in doc.sentences():
                created.extend(self.annotate_sentence(doc, sentence))
            if self.clear_features == CLEAR_YES:
                self.labeler.clear_adaptive_data()
        logger.debug(f"Added {len(created)} {self.layer} annotations")
        return created

    def annotate_sentence(
        self, doc: Document, sentence: List[WordForm]
    ) -> List[Union[Timex3, Entity]]:
        if not sentence:
            logger.debug("Skipping empty sentence")
            return []

        tokens = [wf.form for wf in sentence]
        if self.clear_features == CLEAR_DOCSTART and tokens[0].startswith(DOCSTART):
            logger.debug("Document boundary found; clearing adaptive data")
            self.labeler.clear_adaptive_data()

        spans = self.labeler.label_spans(tokens)
        created = []
        for segment in resolve_spans(spans, len(tokens)):
            annotation = self.target.commit(doc, sentence, segment)
            if annotation is not None:
                created.append(annotation)

        if self.clear_features == CLEAR_YES:
            self.labeler.clear_adaptive_data()
        return created
