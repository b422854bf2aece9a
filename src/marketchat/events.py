"""Event channels.

Hides how one component tells others that something happened. A channel is
owned by whoever creates it (usually the CLI command that starts the app)
and handed to the components that publish or listen; there is no global
registry.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class EventChannel(Generic[T]):
    """Synchronous publish/subscribe channel for one event type.

    Usage:
        fatal_errors: EventChannel[FatalError] = EventChannel("fatal")
        unsubscribe = fatal_errors.subscribe(show_error)
        fatal_errors.publish(FatalError(error=exc, context="agent"))
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener[T]] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener[T]) -> Callable[[], None]:
        """Register a listener.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Listener[T]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event: T) -> int:
        """Deliver an event to every listener in subscription order.

        Returns:
            Number of listeners notified
        """
        listeners = list(self._listeners)
        logger.debug("Publishing on %s to %d listener(s)", self.name, len(listeners))
        for listener in listeners:
            listener(event)
        return len(listeners)


@dataclass(frozen=True)
class FatalError:
    """An error the console cannot recover from."""

    error: BaseException
    context: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


@dataclass(frozen=True)
class ActionEvent:
    """Progress of an agent action."""

    action: str
    action_id: str
    phase: str  # "started" or "completed"
    status: str = ""

    @property
    def started(self) -> bool:
        return self.phase == "started"
