from __future__ import annotations

"""Base class for the event handlers of the quick quote screen.

Handlers receive the state store and the event bus through their
constructor. They read snapshots, dispatch actions and then explicitly
announce `STATE_CHANGED`; the store itself never publishes.
"""

import logging
from typing import Tuple

from ..errors import UserFacingError
from ..events import Events
from .state_manager import QuoteItem, StateManager

logger = logging.getLogger(__name__)


class BaseHandler:
    """Shared plumbing for engines and services.

    Attributes:
        state_manager: The session's state store
        event_bus: The session's event bus
    """

    def __init__(self, state_manager: StateManager, event_bus):
        self.state_manager = state_manager
        self.event_bus = event_bus

    def _items(self) -> Tuple[QuoteItem, ...]:
        return self.state_manager.get_state().quote_data.current().items

    def _publish_state_change(self) -> None:
        self.event_bus.publish(Events.STATE_CHANGED, self.state_manager.get_state())

    def _notify(self, message: str, notification_type: str = "info") -> None:
        self.event_bus.publish(Events.SHOW_NOTIFICATION, {"message": message, "type": notification_type})

    def _reject(self, error: UserFacingError) -> None:
        """Surface a user-facing error as a notification; state is left untouched."""
        logger.info("%s rejected: %s", type(self).__name__, error.message)
        self.event_bus.publish(Events.SHOW_NOTIFICATION, error.to_notification())
