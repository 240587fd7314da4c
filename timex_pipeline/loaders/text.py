"""
Raw text reader.

Tokenises and sentence-splits plain text with spaCy and builds the NAF text
and term layers from it (one term per token). A blank pipeline only gives
forms; a trained pipeline also fills lemmas, POS and tags.
"""

import logging
from typing import Optional

import spacy
from spacy.language import Language
from spacy.symbols import ORTH
from spacy.tokens import Doc

from timex_pipeline.annotator import DOCSTART
from timex_pipeline.errors import ConfigError
from timex_pipeline.registry import loaders
from timex_pipeline.types import Document, Term, WordForm

logger = logging.getLogger(__name__)


@Language.component("timex_docstart_boundaries")
def docstart_boundaries(doc: Doc) -> Doc:
    """Open a new sentence at every -DOCSTART- mark and right after it."""
    after_mark = False
    for token in doc:
        if token.is_space:
            continue
        if token.text.startswith(DOCSTART) or after_mark:
            if token.i > 0:
                token.is_sent_start = True
        after_mark = token.text.startswith(DOCSTART)
    return doc


def load_tokenizer(lang: str, model: Optional[str] = None) -> Language:
    """Blank spaCy pipeline for ``lang`` (or the named model) with sentence splitting."""
    try:
        nlp = spacy.load(model) if model else spacy.blank(lang)
    except (ImportError, OSError) as exc:
        raise ConfigError(f"Cannot build a tokenizer for '{model or lang}': {exc}") from exc

    nlp.tokenizer.add_special_case(DOCSTART, [{ORTH: DOCSTART}])
    first = nlp.pipe_names[0] if nlp.pipe_names else None
    if first is not None:
        nlp.add_pipe("timex_docstart_boundaries", before=first)
    else:
        nlp.add_pipe("timex_docstart_boundaries")
    if "sentencizer" not in nlp.pipe_names and "parser" not in nlp.pipe_names and "senter" not in nlp.pipe_names:
        nlp.add_pipe("sentencizer")
        logger.info(f"Added sentencizer to {model or lang} pipeline")

    return nlp


@loaders.register("text")
class TextReader:
    """Reads plain text into a NAF document."""

    def __init__(self, lang: str = "en", model: Optional[str] = None) -> None:
        self.lang = lang
        self.nlp = load_tokenizer(lang, model)

    def read(self, text: str) -> Document:
        doc = Document(lang=self.lang, raw=text)
        if not text.strip():
            return doc
        parsed = self.nlp(text)
        count = 0
        sent_number = 0
        for sent in parsed.sents:
            words = [token for token in sent if not token.is_space]
            if not words:
                continue
            sent_number += 1
            for token in words:
                count += 1
                wf = doc.add_token(
                    WordForm(
                        id=f"w{count}",
                        form=token.text,
                        sent=str(sent_number),
                        offset=token.idx,
                        length=len(token.text),
                    )
                )
                doc.add_term(
                    Term(
                        id=f"t{count}",
                        lemma=token.lemma_ or token.text,
                        targets=[wf.id],
                        pos=token.pos_,
                        morphofeat=token.tag_,
                    )
                )
        return doc
