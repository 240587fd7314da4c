from typing import Protocol

from timex_pipeline.types import Document


class DocumentReader(Protocol):
    """Builds a document from input text."""

    def read(self, text: str) -> Document:
        ...
