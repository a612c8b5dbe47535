"""
Cross-cutting reactions to user intent and state change.

- Focus requests (`FOCUS_CELL`), including the delayed start-up focus
- Right-panel tab switches
- File round-trips: the core only publishes requests for the file
  collaborator and consumes its `FILE_LOADED` completion event
"""

from typing import Any, Mapping, Optional
import logging

from ..events import COLUMN_WIDTH, Events
from . import actions
from .base_handler import BaseHandler
from .scheduler import ScheduledTask
from .state_manager import QuoteData

logger = logging.getLogger(__name__)


class WorkflowService(BaseHandler):
    """Focus, tab and file workflow handlers."""

    def __init__(self, state_manager, event_bus, config_manager, scheduler):
        """Initialize the service.

        Args:
            state_manager: State store
            event_bus: Session event bus
            config_manager: Provides the start-up focus delay
            scheduler: Object with `schedule(delay, callback) -> ScheduledTask`
        """
        super().__init__(state_manager, event_bus)
        self.config_manager = config_manager
        self.scheduler = scheduler
        self._pending_focus: Optional[ScheduledTask] = None

    @property
    def pending_focus(self) -> Optional[ScheduledTask]:
        if self._pending_focus is not None and self._pending_focus.pending:
            return self._pending_focus
        return None

    def _cancel_pending_focus(self) -> None:
        if self._pending_focus is not None:
            self._pending_focus.cancel()
            self._pending_focus = None

    def schedule_focus(self, row_index: int, column: str, delay: float) -> ScheduledTask:
        """Request `FOCUS_CELL` after `delay` seconds, superseding any pending request."""
        self._cancel_pending_focus()
        payload = {"row_index": row_index, "column": column}
        self._pending_focus = self.scheduler.schedule(
            delay, lambda: self.event_bus.publish(Events.FOCUS_CELL, payload)
        )
        logger.debug("Focus on row %d, %s scheduled in %.3fs", row_index, column, delay)
        return self._pending_focus

    def handle_app_ready(self) -> None:
        self.schedule_focus(0, COLUMN_WIDTH, self.config_manager.get_focus_delay())

    def handle_focus_cell(self, payload: Mapping[str, Any]) -> None:
        if self.pending_focus is not None:
            self._cancel_pending_focus()

        row_index, column = payload["row_index"], payload["column"]
        active = self.state_manager.get_state().ui.active_cell
        if active is not None and active.row_index == row_index and active.column == column:
            return

        self.state_manager.dispatch(actions.set_active_cell(row_index, column))
        self.state_manager.dispatch(actions.clear_input_value())
        self._publish_state_change()

    def handle_right_panel_tab_change(self, payload: Mapping[str, Any]) -> None:
        self.state_manager.dispatch(actions.set_active_tab(payload["tab_id"]))
        self._publish_state_change()

    def handle_save_then_load(self) -> None:
        self.event_bus.publish(Events.SAVE_TO_FILE_CLICKED)
        self.event_bus.publish(Events.TRIGGER_FILE_LOAD)

    def handle_file_loaded(self, payload: Mapping[str, Any]) -> None:
        quote_data = payload.get("quote_data")
        file_name = payload.get("file_name") or "file"
        if not isinstance(quote_data, QuoteData):
            logger.warning("FILE_LOADED without quote data from %s", file_name)
            self._notify(f"Could not load quote from {file_name}.", "error")
            return

        self.state_manager.dispatch(actions.set_quote_data(quote_data))
        self.state_manager.dispatch(actions.reset_ui())
        self.state_manager.dispatch(actions.set_sum_outdated(True))
        self._publish_state_change()
        self._notify(f"Successfully loaded data from {file_name}")

    def shutdown(self) -> None:
        self._cancel_pending_focus()
