"""
Reinitialize Signal Channel.

This module implements the fire-and-forget signal an installer sends to the
host after a plugin lands in the plugin directory.

All subscribers:
- Execute in priority order (higher priority = earlier execution)
- Are isolated from each other: a failing subscriber never stops the rest
- Are not awaited beyond their own call; reloading is the host's business
"""

import threading
import warnings
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ReinitializeEnvironment:
    """
    Payload delivered to reinitialize subscribers.

    Attributes:
        reason: Why the environment is being reinitialized
        artifact: Slot file that triggered the signal, if any
    """

    reason: str = "restart"
    artifact: Path | None = None


@dataclass
class Handler:
    """
    Represents a registered subscriber.

    Attributes:
        callback: The handler function
        priority: Higher priority executes first
        registration_order: Tie-breaker for same priority (lower = earlier)
    """

    callback: Callable[[ReinitializeEnvironment], None]
    priority: int
    registration_order: int

    def __call__(self, event: ReinitializeEnvironment) -> None:
        self.callback(event)


class ReinitializeChannel:
    """
    Explicit channel for reinitialize requests.

    The installation orchestrator holds one of these from construction; the
    host subscribes whatever reload mechanism it has.
    """

    def __init__(self):
        self._handlers: list[Handler] = []
        self._registration_counter = 0
        self._lock = threading.Lock()

    def subscribe(
        self, callback: Callable[[ReinitializeEnvironment], None], priority: int = 0
    ) -> Callable[[ReinitializeEnvironment], None]:
        """
        Register a subscriber.

        Returns the callback unchanged so this can be used as a decorator.
        """
        with self._lock:
            handler = Handler(
                callback=callback,
                priority=priority,
                registration_order=self._registration_counter,
            )
            self._registration_counter += 1
            self._handlers.append(handler)
        return callback

    def unsubscribe(self, callback: Callable[[ReinitializeEnvironment], None]) -> None:
        with self._lock:
            self._handlers = [h for h in self._handlers if h.callback != callback]

    def fire(self, event: ReinitializeEnvironment | None = None) -> list[Exception]:
        """
        Deliver a reinitialize request to every subscriber.

        Args:
            event: Payload; a plain restart request when omitted

        Returns:
            Exceptions raised by subscribers, in delivery order
        """
        event = event or ReinitializeEnvironment()

        with self._lock:
            handlers = sorted(
                self._handlers, key=lambda h: (-h.priority, h.registration_order)
            )

        errors: list[Exception] = []
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                warnings.warn(
                    f"Reinitialize subscriber {handler.callback!r} failed: {e}",
                    RuntimeWarning,
                    stacklevel=2,
                )
                errors.append(e)

        return errors

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)
