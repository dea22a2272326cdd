"""Protocols for dependency injection in the change watcher."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ObserverProtocol(Protocol):
    """Protocol for filesystem observers (watchdog's Observer)."""

    def schedule(self, event_handler: Any, path: str, *, recursive: bool = False) -> Any:
        """Start delivering events for path to event_handler."""
        ...

    def start(self) -> None:
        """Start the observer thread."""
        ...

    def stop(self) -> None:
        """Ask the observer thread to stop."""
        ...

    def join(self, timeout: float | None = None) -> None:
        """Wait for the observer thread to finish."""
        ...

    def is_alive(self) -> bool:
        """Whether the observer thread is still running."""
        ...
