from typing import Optional

from timex_pipeline.loaders.naf import NAFReader
from timex_pipeline.loaders.text import TextReader
from timex_pipeline.registry import loaders
from timex_pipeline.types import Document


def looks_like_naf(text: str) -> bool:
    head = text.lstrip()[:512]
    return head.startswith("<?xml") or head.startswith("<NAF")


@loaders.register("auto")
class AutoReader:
    """Reads NAF when the input looks like XML, plain text otherwise."""

    def __init__(self, lang: str = "en", model: Optional[str] = None) -> None:
        self.naf_reader = NAFReader()
        self.text_reader = TextReader(lang=lang, model=model)

    def read(self, text: str) -> Document:
        if looks_like_naf(text):
            return self.naf_reader.read(text)
        return self.text_reader.read(text)
