"""
Synchronous publish/subscribe event bus.

One bus is constructed per application session and handed to every
component that needs it. The bus routes payloads and holds no business
state.
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional
import logging
import threading

from .errors import ConfigurationError
from .events import Events

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


def _event_key(event_name) -> str:
    if isinstance(event_name, Events):
        return event_name.value
    return str(event_name)


class EventBus:
    """
    Routing table from event name to an ordered list of handlers.

    Handlers run synchronously in subscription order. A handler may publish
    further events; those are delivered before the outer `publish` returns.
    A failing handler is logged and does not stop the remaining handlers of
    the same publish. `ConfigurationError` is re-raised once every handler
    has had its turn.

    Callbacks registered with `call_when_idle` run after the outermost
    publish has reached all of its handlers, in registration order.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Handler]] = {}
        self._lock = threading.RLock()
        self._depth = 0
        self._idle_callbacks: List[Callable[[], None]] = []

    def subscribe(self, event_name, handler: Handler) -> None:
        """Register `handler` for `event_name`."""
        key = _event_key(event_name)
        with self._lock:
            if key not in self._listeners:
                self._listeners[key] = []
            self._listeners[key].append(handler)

    def unsubscribe(self, event_name, handler: Handler) -> None:
        """Remove a previously registered handler. Unknown handlers are ignored."""
        key = _event_key(event_name)
        with self._lock:
            if key in self._listeners:
                try:
                    self._listeners[key].remove(handler)
                except ValueError:
                    pass

    def subscribers(self, event_name) -> List[Handler]:
        """Snapshot of the handlers registered for `event_name`."""
        with self._lock:
            return list(self._listeners.get(_event_key(event_name), []))

    @property
    def depth(self) -> int:
        """Current publish nesting level (0 when idle)."""
        return self._depth

    @contextmanager
    def exclusive(self) -> Iterator["EventBus"]:
        """Hold the bus lock so no other thread can publish meanwhile."""
        with self._lock:
            yield self

    def call_when_idle(self, callback: Callable[[], None]) -> None:
        """Run `callback` once no publish is in flight (immediately when idle)."""
        with self._lock:
            if self._depth == 0:
                callback()
                return
            self._idle_callbacks.append(callback)

    def _run_idle_callbacks(self) -> None:
        while self._idle_callbacks:
            callback = self._idle_callbacks.pop(0)
            callback()

    def publish(self, event_name, payload: Optional[Any] = None) -> None:
        """Deliver `payload` to every handler of `event_name`."""
        key = _event_key(event_name)
        with self._lock:
            handlers = list(self._listeners.get(key, []))
            if not handlers:
                logger.debug("No subscribers for %s", key)
                return

            config_error: Optional[ConfigurationError] = None
            self._depth += 1
            try:
                logger.debug("Publishing %s to %d handler(s) at depth %d", key, len(handlers), self._depth)
                for handler in handlers:
                    try:
                        handler(payload)
                    except ConfigurationError as e:
                        logger.error("Configuration error in handler for %s: %s", key, e)
                        if config_error is None:
                            config_error = e
                    except Exception:
                        logger.exception("Error in handler for %s", key)
            finally:
                self._depth -= 1

            if self._depth == 0:
                self._run_idle_callbacks()
            if config_error is not None:
                raise config_error
