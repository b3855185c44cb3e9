"""
Message Bus

Routes domain events from the contexts that record them (bookings,
finances, users) to the handlers that react to them (notifications).
Publishers never import subscribers.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    In-process event bus

    Multiple handlers per event type (1:N). A failing handler is logged
    and skipped so the remaining handlers still run.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """
        Register an event handler

        Registering the same handler twice for one event type is a no-op,
        AppConfig.ready() may run more than once in tests.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Registered {_name(handler)} for {event_type.__name__}")

    def unregister_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        handlers = self._event_handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._event_handlers.get(event_type, []))

    def publish_events(self, events: List[DomainEvent]):
        for event in events:
            self.publish(event)

    def publish(self, event: DomainEvent):
        event_type = type(event)
        handlers = self.handlers_for(event_type)

        if not handlers:
            logger.debug(f"No handlers registered for event {event_type.__name__}")
            return

        logger.info(f"Publishing event: {event_type.__name__} (ID: {event.event_id})")

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Error in event handler {_name(handler)} "
                    f"for event {event_type.__name__}: {e}",
                    exc_info=True
                )


def _name(handler) -> str:
    return getattr(handler, '__name__', handler.__class__.__name__)


# Global message bus instance
message_bus = MessageBus()
