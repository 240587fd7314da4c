from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from timex_pipeline.annotator import normalize_clear_features
from timex_pipeline.errors import ConfigError

OUTPUT_FORMATS = ("naf", "conll02")
TARGETS = ("timex", "entity")
ISOLATION_MODES = ("shared", "connection")

DEFAULT_HOST = "localhost"
DEFAULT_SERVER_HOST = "0.0.0.0"


def parse_port(value: Any) -> int:
    """Port number from an int or numeric string, rejecting values outside 0-65535."""
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Port number not correct: {value!r}") from exc
    if not 0 <= port <= 65535:
        raise ConfigError(f"Port number not correct: {value!r}")
    return port


@dataclass
class ComponentConfig:
    """Generic component configuration."""

    name: str
    params: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(entry: Any) -> "ComponentConfig":
        if isinstance(entry, str):
            return ComponentConfig(name=entry)
        return ComponentConfig(name=entry["name"], params=dict(entry.get("params", {})))


@dataclass
class TaggerConfig:
    """Everything needed to annotate and encode one document."""

    labeler: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="pattern"))
    reader: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="auto"))
    language: Optional[str] = None
    clear_features: str = "no"
    output_format: str = "naf"
    target: str = "timex"

    def __post_init__(self) -> None:
        self.clear_features = normalize_clear_features(self.clear_features)
        if self.output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Unknown output format '{self.output_format}'; choose one of {', '.join(OUTPUT_FORMATS)}"
            )
        if self.target not in TARGETS:
            raise ConfigError(f"Unknown target '{self.target}'; choose one of {', '.join(TARGETS)}")

    @property
    def model(self) -> Optional[str]:
        return self.labeler.params.get("model")

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "TaggerConfig":
        labeler = data.get("labeler") or {"name": "pattern"}
        reader = data.get("reader") or {"name": "auto"}
        return TaggerConfig(
            labeler=ComponentConfig.from_dict(labeler),
            reader=ComponentConfig.from_dict(reader),
            language=data.get("language"),
            clear_features=data.get("clear_features", "no"),
            output_format=data.get("output_format", "naf"),
            target=data.get("target", "timex"),
        )


@dataclass
class ServerConfig:
    """TCP annotation server configuration."""

    tagger: TaggerConfig
    port: int
    host: str = DEFAULT_SERVER_HOST
    isolation: str = "shared"

    def __post_init__(self) -> None:
        self.port = parse_port(self.port)
        if self.isolation not in ISOLATION_MODES:
            raise ConfigError(
                f"Unknown isolation mode '{self.isolation}'; choose one of {', '.join(ISOLATION_MODES)}"
            )

    @staticmethod
    def from_dict(data: Dict[str, Any], tagger: Optional[TaggerConfig] = None) -> "ServerConfig":
        """Server settings from ``data``; tagger settings sit under "tagger" or at top level."""
        if "port" not in data:
            raise ConfigError("Server configuration requires a port")
        return ServerConfig(
            tagger=tagger or TaggerConfig.from_dict(data.get("tagger", data)),
            port=data["port"],
            host=data.get("host", DEFAULT_SERVER_HOST),
            isolation=data.get("isolation", "shared"),
        )


@dataclass
class ClientConfig:
    """Annotation client configuration."""

    port: int
    host: str = DEFAULT_HOST
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        self.port = parse_port(self.port)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ClientConfig":
        if "port" not in data:
            raise ConfigError("Client configuration requires a port")
        return ClientConfig(
            port=data["port"],
            host=data.get("host", DEFAULT_HOST),
            timeout=data.get("timeout"),
        )

