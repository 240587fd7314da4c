from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set


def naf_timestamp() -> str:
    """Current local time in the format used by NAF headers."""
    return datetime.now().astimezone().strftime("%Y-%m-%dT%H:%M:%S%z")


def next_id(prefix: str, taken: Sequence[str]) -> str:
    """``prefix`` plus one more than the highest numeric suffix already taken."""
    highest = 0
    for item_id in taken:
        suffix = item_id[len(prefix):] if item_id.startswith(prefix) else ""
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1}"


@dataclass(frozen=True)
class Span:
    """Half-open token range [start, end) predicted by a labeler."""

    start: int
    end: int
    label: str
    score: Optional[float] = None

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class WordForm:
    """Token of the NAF text layer."""

    id: str
    form: str
    sent: str
    offset: int = 0
    length: int = 0
    para: Optional[str] = None


@dataclass(frozen=True)
class Term:
    """Term of the NAF term layer, spanning one or more word forms."""

    id: str
    lemma: str
    targets: List[str]
    pos: str = ""
    morphofeat: str = ""


@dataclass(frozen=True)
class Entity:
    """Entity annotation referencing terms."""

    id: str
    type: str
    targets: List[str]


@dataclass(frozen=True)
class Timex3:
    """Temporal expression annotation referencing word forms."""

    id: str
    type: str
    targets: List[str]


@dataclass
class LinguisticProcessor:
    """Header record of a tool that added a layer to the document."""

    layer: str
    name: str
    version: str = ""
    begin_timestamp: Optional[str] = None
    end_timestamp: Optional[str] = None

    def set_begin_timestamp(self) -> None:
        self.begin_timestamp = naf_timestamp()

    def set_end_timestamp(self) -> None:
        self.end_timestamp = naf_timestamp()


@dataclass
class Document:
    """NAF document: text and term layers plus the annotations added to them."""

    lang: str = "en"
    raw: str = ""
    tokens: List[WordForm] = field(default_factory=list)
    terms: List[Term] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    timexes: List[Timex3] = field(default_factory=list)
    processors: List[LinguisticProcessor] = field(default_factory=list)
    # Parsed NAF tree this document was read from; None for text input.
    source: Optional[Any] = field(default=None, repr=False, compare=False)
    _token_index: Optional[Dict[str, WordForm]] = field(
        default=None, init=False, repr=False, compare=False
    )
    _term_index: Optional[Dict[str, List[Term]]] = field(
        default=None, init=False, repr=False, compare=False
    )

    # ------------------------------------------------------------------
    # Layer construction
    # ------------------------------------------------------------------

    def add_token(self, token: WordForm) -> WordForm:
        self.tokens.append(token)
        self._token_index = None
        return token

    def add_term(self, term: Term) -> Term:
        self.terms.append(term)
        self._term_index = None
        return term

    def new_entity(self, type: str, term_ids: Iterable[str]) -> Entity:
        entity_id = next_id("e", [e.id for e in self.entities])
        entity = Entity(id=entity_id, type=type, targets=list(term_ids))
        self.entities.append(entity)
        return entity

    def new_timex3(self, type: str, token_ids: Iterable[str]) -> Timex3:
        timex_id = next_id("tmx", [t.id for t in self.timexes])
        timex = Timex3(id=timex_id, type=type, targets=list(token_ids))
        self.timexes.append(timex)
        return timex

    def add_linguistic_processor(
        self, layer: str, name: str, version: str = ""
    ) -> LinguisticProcessor:
        lp = LinguisticProcessor(layer=layer, name=name, version=version)
        self.processors.append(lp)
        return lp

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def sentences(self) -> List[List[WordForm]]:
        """Word forms grouped by sentence, in document order."""
        grouped: Dict[str, List[WordForm]] = {}
        for token in self.tokens:
            grouped.setdefault(token.sent, []).append(token)
        return list(grouped.values())

    def sentence_terms(self) -> List[List[Term]]:
        """Terms grouped by the sentence of their first word form."""
        index = self.token_index()
        grouped: Dict[str, List[Term]] = {}
        for token in self.tokens:
            grouped.setdefault(token.sent, [])
        for term in self.terms:
            if not term.targets or term.targets[0] not in index:
                continue
            grouped[index[term.targets[0]].sent].append(term)
        return [terms for terms in grouped.values() if terms]

    def token_index(self) -> Dict[str, WordForm]:
        if self._token_index is None:
            self._token_index = {token.id: token for token in self.tokens}
        return self._token_index

    def term_form(self, term: Term) -> str:
        index = self.token_index()
        return " ".join(index[wid].form for wid in term.targets if wid in index)

    def term_token_ids(self) -> Set[str]:
        """Ids of every word form referenced by the term layer."""
        return set(self._terms_by_token())

    def terms_for_tokens(self, token_ids: Iterable[str]) -> List[Term]:
        """Terms covering any of the given word forms, in term order, without repeats."""
        by_token = self._terms_by_token()
        seen: Set[str] = set()
        result: List[Term] = []
        for wid in token_ids:
            for term in by_token.get(wid, []):
                if term.id not in seen:
                    seen.add(term.id)
                    result.append(term)
        return result

    def _terms_by_token(self) -> Dict[str, List[Term]]:
        if self._term_index is None:
            index: Dict[str, List[Term]] = {}
            for term in self.terms:
                for wid in term.targets:
                    index.setdefault(wid, []).append(term)
            self._term_index = index
        return self._term_index

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_naf(self) -> str:
        from timex_pipeline.naf import dump_naf

        return dump_naf(self)

    @classmethod
    def from_naf(cls, text: str) -> "Document":
        from timex_pipeline.naf import load_naf

        return load_naf(text)
