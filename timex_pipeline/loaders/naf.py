from timex_pipeline.naf import load_naf
from timex_pipeline.registry import loaders
from timex_pipeline.types import Document


@loaders.register("naf")
class NAFReader:
    """Reads NAF XML documents."""

    def read(self, text: str) -> Document:
        return load_naf(text)
