"""In-memory event bus implementation."""

import logging
from collections import defaultdict
from collections.abc import Callable

from hilal.domain.events import DomainEvent
from hilal.services.ports import EventBusPort

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class InMemoryEventBus(EventBusPort):
    """Synchronous in-process event bus.

    Handlers subscribed to a base class also receive its subclasses. A
    failing handler is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[Handler]] = defaultdict(list)

    def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to every matching handler."""
        handlers = [
            handler
            for event_type in type(event).__mro__
            for handler in self._handlers.get(event_type, [])
        ]
        logger.debug(f"Event published: {type(event).__name__} ({len(handlers)} handlers)")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler {getattr(handler, '__name__', handler)} failed: {e}")

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed to {event_type.__name__}")

    def unsubscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def clear_all(self) -> None:
        self._handlers.clear()
