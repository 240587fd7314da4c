"""
Output encoders.

- ``naf``: the document's own NAF serialization, annotations included
- ``conll02``: one term per line, ``form lemma morphofeat BIO-tag`` separated
  by tabs, a blank line after each sentence
"""

from typing import Dict, List, Tuple

from timex_pipeline.registry import encoders
from timex_pipeline.types import Document, Term

BEGIN = "B-"
IN = "I-"
OUT = "O"
EMPTY_FIELD = "-"

CONLL_SHORT_TYPES = ("PERSON", "ORGANIZATION", "LOCATION")


def to_conll_type(label: str) -> str:
    """PER/ORG/LOC style codes for the classic types and 3-letter types; others unchanged."""
    if label.upper() in CONLL_SHORT_TYPES or len(label) == 3:
        return label[:3]
    return label


@encoders.register("naf")
class NAFEncoder:
    """Pass-through of the document's NAF serialization."""

    def encode(self, doc: Document) -> str:
        return doc.to_naf()


@encoders.register("conll02")
class CoNLL02Encoder:
    """Flattened BIO export in CoNLL 2002 style."""

    def span_map(self, doc: Document) -> Dict[str, Tuple[int, str]]:
        """First term id of each annotation -> (number of terms, type)."""
        spans: Dict[str, Tuple[int, str]] = {}
        for entity in doc.entities:
            if entity.targets:
                spans.setdefault(entity.targets[0], (len(entity.targets), entity.type))
        for timex in doc.timexes:
            terms = doc.terms_for_tokens(timex.targets)
            if terms:
                spans.setdefault(terms[0].id, (len(terms), timex.type))
        return spans

    def encode(self, doc: Document) -> str:
        spans = self.span_map(doc)
        lines: List[str] = []
        for sentence in doc.sentence_terms():
            i = 0
            while i < len(sentence):
                term = sentence[i]
                if term.id in spans:
                    size, label = spans[term.id]
                    size = min(size, len(sentence) - i)
                    conll_type = to_conll_type(label)
                    for j in range(size):
                        prefix = BEGIN if j == 0 else IN
                        lines.append(self._line(doc, sentence[i + j], prefix + conll_type))
                    i += size
                else:
                    lines.append(self._line(doc, term, OUT))
                    i += 1
            lines.append("")
        return "".join(line + "\n" for line in lines)

    @staticmethod
    def _line(doc: Document, term: Term, tag: str) -> str:
        return "\t".join(
            [
                doc.term_form(term),
                term.lemma or EMPTY_FIELD,
                term.morphofeat or EMPTY_FIELD,
                tag,
            ]
        )
