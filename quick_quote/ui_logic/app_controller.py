"""
Central application controller.

Assembles one explicit table mapping each known event to exactly one
core handler, checks it at construction time, and subscribes it to the
session's event bus. External collaborators (renderer, notification and
dialog views, file service) subscribe to the bus on their own.

Start-up sequence, always in this order:
1. clear any multi-select selection
2. publish `STATE_CHANGED` for the first render
3. publish `APP_READY`, which schedules focus on row 0 / width once the
   configured delay has elapsed

The sequence runs while holding the bus lock. Scheduled callbacks publish
through the bus, so with a `TimerScheduler` they wait for it to finish.
"""

from typing import Any, Callable, List, Tuple
import logging

from ..errors import ConfigurationError
from ..events import Events
from . import actions

logger = logging.getLogger(__name__)


class AppController:
    """Wires engine handlers to the event bus."""

    def __init__(
        self,
        event_bus,
        state_manager,
        selection_controller,
        editing_engine,
        fabric_type_assigner,
        fee_calculator,
        workflow_service,
        dialog_broker,
    ):
        self.event_bus = event_bus
        self.state_manager = state_manager
        self.selection_controller = selection_controller
        self.editing_engine = editing_engine
        self.fabric_type_assigner = fabric_type_assigner
        self.fee_calculator = fee_calculator
        self.workflow_service = workflow_service
        self.dialog_broker = dialog_broker

        self.dispatch_table = self._build_dispatch_table()
        self._check_dispatch_table(self.dispatch_table)
        for event, handler in self.dispatch_table:
            self.event_bus.subscribe(event, handler)
        logger.info("AppController initialized with %d event handlers", len(self.dispatch_table))

    def _build_dispatch_table(self) -> List[Tuple[Events, Callable[[Any], None]]]:
        sel = self.selection_controller
        edit = self.editing_engine
        fabric = self.fabric_type_assigner
        fees = self.fee_calculator
        flow = self.workflow_service
        return [
            (Events.APP_READY, lambda _: flow.handle_app_ready()),
            (Events.FOCUS_CELL, flow.handle_focus_cell),
            (Events.STATE_CHANGED, fees.handle_state_changed),
            (Events.RIGHT_PANEL_TAB_CHANGED, flow.handle_right_panel_tab_change),
            (Events.SAVE_THEN_LOAD_CLICKED, lambda _: flow.handle_save_then_load()),
            (Events.FILE_LOADED, flow.handle_file_loaded),
            (Events.NUMERIC_KEY_PRESSED, sel.handle_numeric_key_press),
            (Events.TABLE_CELL_CLICKED, sel.handle_table_cell_click),
            (Events.SEQUENCE_CELL_CLICKED, sel.handle_sequence_cell_click),
            (Events.MOVE_ACTIVE_CELL, sel.handle_move_active_cell),
            (Events.INSERT_ROW_CLICKED, lambda _: edit.handle_insert_row()),
            (Events.DELETE_ROW_CLICKED, lambda _: edit.handle_delete_row()),
            (Events.CLEAR_ROW_CLICKED, lambda _: edit.handle_clear_row()),
            (Events.RESET_CLICKED, lambda _: edit.handle_reset()),
            (Events.CALCULATE_SUM_CLICKED, lambda _: edit.handle_calculate_and_sum()),
            (Events.TYPE_CELL_CLICKED, lambda _: edit.handle_cycle_type()),
            (Events.TYPE_CELL_LONG_PRESS, fabric.handle_type_cell_long_press),
            (Events.TYPE_BUTTON_LONG_PRESS, lambda _: fabric.handle_type_button_long_press()),
            (Events.USER_REQUESTED_MULTI_TYPE_SET, lambda _: fabric.handle_multi_type_set()),
            (Events.F2_CHECKBOX_CLICKED, fees.handle_fee_exclusion_toggled),
            (Events.DIALOG_CHOICE_SELECTED, self.dialog_broker.handle_choice_selected),
        ]

    @staticmethod
    def _check_dispatch_table(table) -> None:
        seen = set()
        for event, handler in table:
            if not isinstance(event, Events):
                raise ConfigurationError(f"Unknown event {event!r} in dispatch table")
            if event in seen:
                raise ConfigurationError(f"Event {event.value} registered twice")
            if not callable(handler):
                raise ConfigurationError(f"Handler for {event.value} is not callable")
            seen.add(event)

    def handled_events(self) -> List[Events]:
        return [event for event, _ in self.dispatch_table]

    def run(self) -> None:
        with self.event_bus.exclusive():
            self.state_manager.dispatch(actions.clear_multi_select_selection())
            self.event_bus.publish(Events.STATE_CHANGED, self.state_manager.get_state())
            self.event_bus.publish(Events.APP_READY)
        logger.info("Application running")

    def shutdown(self) -> None:
        self.workflow_service.shutdown()
        logger.info("Application shut down")
