"""Document readers."""

from .text import TextReader  # noqa: F401
from .naf import NAFReader  # noqa: F401
from .auto import AutoReader  # noqa: F401
