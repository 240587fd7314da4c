import logging
from pathlib import Path
from typing import Optional

# Ensure component registration by importing modules with registry decorators.
from timex_pipeline import labelers as _labelers_pkg  # noqa: F401
from timex_pipeline import loaders as _loaders_pkg  # noqa: F401
from timex_pipeline import encoders as _encoders_mod  # noqa: F401
from timex_pipeline import __version__

from .annotator import TemporalAnnotator
from .config import ComponentConfig, TaggerConfig
from .labelers.base import Labeler
from .registry import encoders, labelers, loaders
from .types import Document

logger = logging.getLogger(__name__)

TOOL_NAME = "timex-pipeline"
LANGUAGE_AWARE_READERS = ("text", "auto")


def _build(registry, component: ComponentConfig, **defaults):
    return registry.create(component.name, **{**defaults, **component.params})


class TimexPipeline:
    """Reads a document, tags its temporal expressions and encodes the result."""

    def __init__(self, config: TaggerConfig, labeler: Optional[Labeler] = None) -> None:
        self.config = config

        if labeler is None:
            labeler = _build(labelers, config.labeler)
        self.labeler = labeler

        reader_defaults = {}
        if config.reader.name in LANGUAGE_AWARE_READERS:
            reader_defaults["lang"] = config.language or "en"
        self.reader = _build(loaders, config.reader, **reader_defaults)

        self.annotator = TemporalAnnotator(
            self.labeler,
            clear_features=config.clear_features,
            target=config.target,
        )
        self.encoder = encoders.create(config.output_format)

    @property
    def processor_name(self) -> str:
        model = self.config.model or self.config.labeler.name
        return f"{TOOL_NAME}-{Path(model).stem}"

    def read(self, text: str) -> Document:
        return self.reader.read(text)

    def process_document(self, doc: Document) -> Document:
        """Annotate ``doc`` in place, recording the run in its NAF header."""
        language = self.config.language
        if language and doc.lang and doc.lang.lower() != language.lower():
            logger.warning(
                f"Language parameter in document ({doc.lang}) and configuration ({language}) do not match"
            )
        lp = doc.add_linguistic_processor(self.annotator.layer, self.processor_name, __version__)
        lp.set_begin_timestamp()
        self.annotator.annotate(doc)
        lp.set_end_timestamp()
        return doc

    def encode(self, doc: Document) -> str:
        return self.encoder.encode(doc)

    def annotate_text(self, text: str) -> str:
        """Full round for one input document, inside the annotator's exclusive window."""
        with self.annotator.exclusive():
            doc = self.read(text)
            self.process_document(doc)
            return self.encode(doc)

    def empty_response(self) -> str:
        """Encoding of an empty document, the answer to input that cannot be read."""
        with self.annotator.exclusive():
            doc = Document(lang=self.config.language or "en")
            self.process_document(doc)
            return self.encode(doc)
