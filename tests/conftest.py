"""Shared fixtures for timex pipeline tests."""

import json
import os
import tempfile
from typing import Callable, Dict, Iterator, List, Optional, Sequence

import pytest

from timex_pipeline.config import ComponentConfig, TaggerConfig
from timex_pipeline.types import Document, Span, Term, WordForm


# ---------------------------------------------------------------------------
# Document builders
# ---------------------------------------------------------------------------


def make_document(sentences: Sequence[Sequence[str]], lang: str = "en", with_terms: bool = True) -> Document:
    """Document with one word form (and one term) per given token."""
    doc = Document(lang=lang)
    count = 0
    offset = 0
    for sent_number, sentence in enumerate(sentences, start=1):
        for form in sentence:
            count += 1
            wf = doc.add_token(
                WordForm(
                    id=f"w{count}",
                    form=form,
                    sent=str(sent_number),
                    offset=offset,
                    length=len(form),
                )
            )
            offset += len(form) + 1
            if with_terms:
                doc.add_term(Term(id=f"t{count}", lemma=form.lower(), targets=[wf.id], morphofeat="NN"))
    doc.raw = " ".join(" ".join(s) for s in sentences)
    return doc


# NAF produced by upstream tools, with layers and attributes the tagger does not model.
UPSTREAM_NAF = """<?xml version="1.0" encoding="UTF-8"?>
<NAF xml:lang="en" version="v3">
  <nafHeader>
    <fileDesc title="Minutes" creationtime="2020-01-01T00:00:00+0000"/>
    <public publicId="doc-42" uri="http://example.org/doc-42"/>
    <linguisticProcessors layer="terms">
      <lp name="upstream-pos" version="2.1" timestamp="2020-01-01T00:00:00+0000"/>
    </linguisticProcessors>
  </nafHeader>
  <raw><![CDATA[The 2020 plan ends tomorrow.]]></raw>
  <text>
    <wf id="w1" sent="1" offset="0" length="3">The</wf>
    <wf id="w2" sent="1" offset="4" length="4">2020</wf>
    <wf id="w3" sent="1" offset="9" length="4">plan</wf>
    <wf id="w4" sent="1" offset="14" length="4">ends</wf>
    <wf id="w5" sent="1" offset="19" length="8">tomorrow</wf>
  </text>
  <terms>
    <term id="t1" type="close" lemma="the" pos="DT"><span><target id="w1"/></span></term>
    <term id="t2" type="open" lemma="2020" pos="CD"><span><target id="w2"/></span></term>
    <term id="t3" type="open" lemma="plan" pos="NN"><span><target id="w3"/></span></term>
    <term id="t4" type="open" lemma="end" pos="VBZ"><span><target id="w4"/></span></term>
    <term id="t5" type="open" lemma="tomorrow" pos="NN"><span><target id="w5"/></span></term>
  </terms>
  <deps>
    <dep from="t3" to="t1" rfunc="det"/>
  </deps>
  <timeExpressions>
    <timex3 id="tmx2" type="DATE" value="2020"><span><target id="w2"/></span></timex3>
  </timeExpressions>
</NAF>
"""


# ---------------------------------------------------------------------------
# Mock classes
# ---------------------------------------------------------------------------


class MockLabeler:
    """Labeler returning predefined spans and recording every call."""

    def __init__(self, predict: Optional[Callable[[Sequence[str]], List[Span]]] = None):
        self._predict = predict or (lambda tokens: [])
        self.events: List[tuple] = []

    def label_spans(self, tokens: Sequence[str]) -> List[Span]:
        self.events.append(("label", tuple(tokens)))
        return list(self._predict(tokens))

    def clear_adaptive_data(self) -> None:
        self.events.append(("clear",))

    @property
    def clear_calls(self) -> int:
        return sum(1 for event in self.events if event[0] == "clear")

    @property
    def labelled(self) -> List[tuple]:
        return [event[1] for event in self.events if event[0] == "label"]


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_text() -> str:
    return "John flew to Paris yesterday."


@pytest.fixture
def mock_labeler() -> MockLabeler:
    return MockLabeler()


@pytest.fixture
def two_sentence_document() -> Document:
    return make_document(
        [
            ["The", "meeting", "was", "on", "Monday", "."],
            ["It", "ended", "at", "noon", "."],
        ]
    )


@pytest.fixture
def pattern_config() -> TaggerConfig:
    return TaggerConfig(labeler=ComponentConfig(name="pattern"))


# ---------------------------------------------------------------------------
# Temporary file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def temp_pattern_model() -> Iterator[str]:
    """Small pattern lexicon as a JSON model file."""
    patterns = [
        {"label": "DATE", "pattern": r"\bharvest\b", "score": 1.0},
        {"label": "TIME", "pattern": r"\bdusk\b"},
    ]
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(patterns, f)
        path = f.name
    yield path
    os.unlink(path)


@pytest.fixture
def temp_config_file() -> Iterator[str]:
    """Tagger config JSON for CLI tests."""
    data: Dict = {
        "labeler": {"name": "pattern", "params": {"model": "builtin"}},
        "output_format": "conll02",
    }
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(data, f)
        path = f.name
    yield path
    os.unlink(path)
