"""Sequence labelers."""

from .patterns import PatternLabeler  # noqa: F401
from .spacy import SpacyLabeler  # noqa: F401
from .transformers import TransformersLabeler  # noqa: F401
