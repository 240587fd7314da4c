"""
Temporal expression tagging pipeline.

Tags time expressions in NAF or plain-text documents with a pluggable
sequence labeler, either as a batch call or as a TCP annotation service
that keeps the model loaded between documents.
"""

__all__ = [
    "TaggerConfig",
    "TemporalAnnotator",
    "TimexPipeline",
]

__version__ = "0.1.0"

from .config import TaggerConfig  # noqa: E402
from .annotator import TemporalAnnotator  # noqa: E402
from .pipeline import TimexPipeline  # noqa: E402
