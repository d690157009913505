"""Protocols for the collaborators the mindmap session consumes."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class GeneratorProtocol(Protocol):
    """Protocol for generative content sources."""

    def generate(self, topic: str) -> dict[str, Any]:
        """Return a Node-shaped document for a free-text topic."""
        ...


@runtime_checkable
class ContainerProtocol(Protocol):
    """Protocol for the surface the diagram is drawn into."""

    def size(self) -> tuple[float, float]:
        """Return the current (width, height) in screen pixels."""
        ...
