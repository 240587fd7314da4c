"""Unit tests for the NAF and CoNLL 2002 encoders."""

import pytest

from timex_pipeline.encoders import CoNLL02Encoder, NAFEncoder, to_conll_type
from timex_pipeline.types import Document, Term, WordForm
from tests.conftest import make_document


def _lines(output: str):
    return output.split("\n")


class TestConllType:
    """Tests for to_conll_type."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("PERSON", "PER"),
            ("ORGANIZATION", "ORG"),
            ("LOCATION", "LOC"),
            ("MISC", "MISC"),
            ("DATE", "DATE"),
            ("SET", "SET"),
            ("GPE", "GPE"),
            ("DURATION", "DURATION"),
        ],
    )
    def test_conversion(self, label, expected):
        assert to_conll_type(label) == expected


class TestCoNLL02Encoder:
    """Tests for CoNLL02Encoder."""

    @pytest.fixture
    def encoder(self) -> CoNLL02Encoder:
        return CoNLL02Encoder()

    def test_untagged_sentence(self, encoder):
        doc = make_document([["It", "rained", "."]])
        assert encoder.encode(doc) == "It\tit\tNN\tO\nrained\trained\tNN\tO\n.\t.\tNN\tO\n\n"

    def test_multi_term_entity(self, encoder):
        doc = make_document([["on", "June", "5", ",", "2020", "."]])
        doc.new_entity("DATE", ["t2", "t3", "t4", "t5"])
        rows = [line.split("\t") for line in _lines(encoder.encode(doc)) if line]
        assert [row[3] for row in rows] == ["O", "B-DATE", "I-DATE", "I-DATE", "I-DATE", "O"]

    def test_single_term_entity_and_short_type(self, encoder):
        doc = make_document([["Mary", "left", "Paris"]])
        doc.new_entity("PERSON", ["t1"])
        doc.new_entity("LOCATION", ["t3"])
        rows = [line.split("\t") for line in _lines(encoder.encode(doc)) if line]
        assert [row[3] for row in rows] == ["B-PER", "O", "B-LOC"]

    def test_timexes_are_encoded(self, encoder):
        doc = make_document([["See", "you", "next", "week", "."]])
        doc.new_timex3("DATE", ["w3", "w4"])
        rows = [line.split("\t") for line in _lines(encoder.encode(doc)) if line]
        assert [row[3] for row in rows] == ["O", "O", "B-DATE", "I-DATE", "O"]

    def test_one_line_per_term(self, encoder):
        sentences = [["a", "b", "c", "d"], ["e", "f"], ["g", "h", "i"]]
        doc = make_document(sentences)
        doc.new_entity("DATE", ["t1", "t2", "t3"])
        doc.new_entity("TIME", ["t6"])
        blocks = encoder.encode(doc).split("\n\n")
        counts = [len(block.split("\n")) for block in blocks if block]
        assert counts == [len(s) for s in sentences]

    def test_b_then_size_minus_one_i(self, encoder):
        doc = make_document([["w"] * 7])
        doc.new_entity("SET", ["t2", "t3", "t4"])
        doc.new_entity("DATE", ["t6", "t7"])
        tags = [line.split("\t")[3] for line in _lines(encoder.encode(doc)) if line]
        assert tags == ["O", "B-SET", "I-SET", "I-SET", "O", "B-DATE", "I-DATE"]

    def test_sentences_separated_by_blank_line(self, encoder):
        doc = make_document([["a"], ["b"]])
        assert encoder.encode(doc) == "a\ta\tNN\tO\n\nb\tb\tNN\tO\n\n"

    def test_forms_lemmas_and_tags(self, encoder):
        doc = Document()
        doc.add_token(WordForm(id="w1", form="Tomorrow", sent="1"))
        doc.add_token(WordForm(id="w2", form="New", sent="1"))
        doc.add_token(WordForm(id="w3", form="York", sent="1"))
        doc.add_term(Term(id="t1", lemma="tomorrow", targets=["w1"], morphofeat="NN"))
        doc.add_term(Term(id="t2", lemma="", targets=["w2", "w3"]))
        assert _lines(encoder.encode(doc))[:2] == [
            "Tomorrow\ttomorrow\tNN\tO",
            "New York\t-\t-\tO",
        ]

    def test_span_map_built_from_first_terms(self, encoder):
        doc = make_document([["a", "b", "c"]])
        doc.new_entity("DATE", ["t2", "t3"])
        assert encoder.span_map(doc) == {"t2": (2, "DATE")}

    def test_empty_document(self, encoder):
        assert encoder.encode(Document()) == ""


class TestNAFEncoder:
    """Tests for NAFEncoder."""

    def test_returns_document_serialization(self):
        doc = make_document([["today", "."]])
        doc.new_timex3("DATE", ["w1"])
        assert NAFEncoder().encode(doc) == doc.to_naf()
