"""
Component registry for the timex pipeline.

Readers, sequence labelers, annotation targets and output encoders register
under a short name so configs and CLI flags can select them.
"""

from typing import Any, Callable, Dict, List, TypeVar

from timex_pipeline.errors import ConfigError

T = TypeVar("T")


class ComponentRegistry:
    """Named factories for one kind of pipeline component."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._registry: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            if name in self._registry:
                raise ValueError(f"{self.kind.capitalize()} '{name}' already registered.")
            self._registry[name] = factory
            return factory

        return decorator

    def get(self, name: str) -> Callable[..., Any]:
        try:
            return self._registry[name]
        except KeyError as exc:
            raise KeyError(f"{self.kind.capitalize()} '{name}' not found.") from exc

    def create(self, name: str, **params: Any) -> Any:
        """Instantiate ``name``; unknown names are configuration errors."""
        if name not in self._registry:
            raise ConfigError(
                f"Unknown {self.kind} '{name}'; available: {', '.join(self.names())}"
            )
        return self._registry[name](**params)

    def names(self) -> List[str]:
        return sorted(self._registry)

    def available(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._registry)


loaders = ComponentRegistry("reader")
labelers = ComponentRegistry("labeler")
annotation_targets = ComponentRegistry("annotation target")
encoders = ComponentRegistry("output format")
