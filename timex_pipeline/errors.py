"""
Exceptions shared across the timex pipeline.

- ConfigError         : invalid configuration values (policy, format, port...)
- ModelLoadError      : a labeler model resource is missing or corrupt
- DocumentFormatError : input text cannot be read as a document
- ClientError         : the annotation client could not complete a round trip
"""


class TimexPipelineError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(TimexPipelineError, ValueError):
    """Invalid configuration value."""


class ModelLoadError(TimexPipelineError, RuntimeError):
    """Labeler model resource missing or unreadable."""


class DocumentFormatError(TimexPipelineError, ValueError):
    """Input document could not be parsed."""


class ClientError(TimexPipelineError, RuntimeError):
    """Connection, host or transfer failure in the annotation client."""
