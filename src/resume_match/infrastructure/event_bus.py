"""Event bus and event log for workflow domain events.

Every simulation publishes from inside scheduler callbacks, so the bus is
synchronous: by the time ``publish`` returns, each subscriber has seen the
event.  Subscribers may call back into the orchestrator (for example a
presenter removing a file); the bus releases its lock before dispatching so
such re-entrant publishes are safe.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Iterator, Sequence

from resume_match.domain.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class EventBus:
    """Pub-sub for domain events, shared by one or more workflows.

    Handlers subscribed to every event run before typed handlers, each group
    in subscription order.  A handler that raises is logged and skipped, so a
    broken presenter never interrupts an upload tick or a reveal.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Call *handler* for every event of exactly *event_type*."""
        with self._lock:
            self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        with self._lock:
            self._global_handlers.append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> bool:
        """Remove *handler*.  Returns ``False`` if it was not subscribed."""
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler not in handlers:
                return False
            handlers.remove(handler)
            return True

    def unsubscribe_all(self, handler: EventHandler) -> bool:
        with self._lock:
            if handler not in self._global_handlers:
                return False
            self._global_handlers.remove(handler)
            return True

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            handlers = list(self._global_handlers)
            handlers.extend(self._handlers.get(type(event), []))

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on %s from workflow %s",
                    handler, type(event).__name__, event.source_id,
                )


class EventStore:
    """Append-only log of published events, in publication order.

    Wire it with ``bus.subscribe_all(store.append)``.  The CLI uses it to
    write a per-run event log; tests use it to assert on what a workflow
    emitted.
    """

    def __init__(self) -> None:
        self._events: list[DomainEvent] = []
        self._lock = threading.Lock()

    def append(self, event: DomainEvent) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        event_type: type[DomainEvent] | None = None,
        source_id: str | None = None,
        limit: int = 0,
    ) -> Sequence[DomainEvent]:
        """Events matching the filters, oldest first.

        *limit* keeps only the most recent matches; ``0`` means all.
        """
        with self._lock:
            result = list(self._events)
        if event_type is not None:
            result = [e for e in result if isinstance(e, event_type)]
        if source_id is not None:
            result = [e for e in result if e.source_id == source_id]
        if limit > 0:
            result = result[-limit:]
        return result

    def __iter__(self) -> Iterator[DomainEvent]:
        return iter(self.query())

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
