"""
Row lifecycle for the quick quote table.

Insert, delete and clear all act on exactly one row picked through the
sequence indicator. Preconditions are checked before anything is
dispatched, so a rejected command never leaves a partial mutation behind;
rejections become `SHOW_NOTIFICATION` events.

Clear-row does not act immediately: it offers a three-way prompt (clear
fields, delete row, cancel) through the dialog broker. The prompt answer
reuses the same clear/delete paths as the direct commands.

The engine also owns the "calculate and sum" button and the full reset.
"""

from typing import Any, Mapping
import logging

from ..errors import SelectionPreconditionError, StructuralError, UserFacingError
from ..events import COLUMN_WIDTH, Events
from . import actions
from .base_handler import BaseHandler
from .dialogs import button, cancel_button

logger = logging.getLogger(__name__)

DIALOG_OWNER = "quote_editing"

CHOICE_CLEAR_FIELDS = "clear_fields"
CHOICE_DELETE_ROW = "delete_row"
CHOICE_RESET = "reset"


class QuoteEditingEngine(BaseHandler):
    """Insert/delete/clear rows, cycle types, calculate totals and reset."""

    def __init__(
        self,
        state_manager,
        event_bus,
        focus_service,
        product_factory,
        calculation_service,
        config_manager,
        dialog_broker,
    ):
        super().__init__(state_manager, event_bus)
        self.focus_service = focus_service
        self.product_factory = product_factory
        self.calculation_service = calculation_service
        self.config_manager = config_manager
        self.dialog_broker = dialog_broker
        dialog_broker.register_owner(DIALOG_OWNER, self.handle_dialog_choice)

    # --------------------
    # Preconditions
    # --------------------

    def _single_selection(self, none_message: str, many_message: str, none_type: str = "info") -> int:
        """Return the one selected row index.

        Raises:
            SelectionPreconditionError: zero or several rows are selected
        """
        selected = self.state_manager.get_state().ui.multi_select_selected_indexes
        if len(selected) > 1:
            raise SelectionPreconditionError(many_message, "error")
        if not selected:
            raise SelectionPreconditionError(none_message, none_type)
        return next(iter(selected))

    def _check_insert_position(self, selected_index: int) -> None:
        items = self._items()
        if selected_index >= len(items) - 1:
            raise StructuralError("Cannot insert after the last row.")
        if items[selected_index + 1].is_empty():
            raise StructuralError("Cannot insert before an empty row.")

    def _row_still_exists(self, row_index: int) -> bool:
        return 0 <= row_index < len(self._items())

    # --------------------
    # Row commands
    # --------------------

    def handle_insert_row(self) -> None:
        try:
            selected_index = self._single_selection(
                "Please select a position to insert the new item.",
                "A new item can only be inserted below a single selection.",
            )
            self._check_insert_position(selected_index)
        except UserFacingError as e:
            self._reject(e)
            return

        self.state_manager.dispatch(actions.insert_row(selected_index))
        self.state_manager.dispatch(actions.set_active_cell(selected_index + 1, COLUMN_WIDTH))
        self.state_manager.dispatch(actions.clear_input_value())
        self.state_manager.dispatch(actions.clear_multi_select_selection())
        logger.info("Inserted row below #%d", selected_index + 1)
        self._finish_row_operation()

    def handle_delete_row(self) -> None:
        try:
            selected_index = self._single_selection(
                "Please select an item to delete.",
                "Only one item can be deleted at a time.",
            )
        except UserFacingError as e:
            self._reject(e)
            return
        self._apply_delete(selected_index)

    def handle_clear_row(self) -> None:
        try:
            selected_index = self._single_selection(
                "Please select a single item to use this function.",
                "Please select a single item to use this function.",
                none_type="error",
            )
        except UserFacingError as e:
            self._reject(e)
            return

        layout = [[
            button("Clear Fields (W,H,Type)", CHOICE_CLEAR_FIELDS),
            button("Delete Row", CHOICE_DELETE_ROW),
            cancel_button(),
        ]]
        self.dialog_broker.offer(
            DIALOG_OWNER,
            f"Row #{selected_index + 1}: What would you like to do?",
            layout,
            context={"row_index": selected_index},
        )

    def handle_reset(self) -> None:
        self.dialog_broker.offer(
            DIALOG_OWNER,
            "This will clear all data. Are you sure?",
            [[button("Reset", CHOICE_RESET), cancel_button()]],
        )

    def handle_dialog_choice(self, choice_id: str, context: Mapping[str, Any]) -> None:
        if choice_id == CHOICE_RESET:
            self._apply_reset()
            return

        row_index = context["row_index"]
        if not self._row_still_exists(row_index):
            logger.warning("Row #%d no longer exists; dialog choice %s ignored", row_index + 1, choice_id)
            return
        if choice_id == CHOICE_CLEAR_FIELDS:
            self._apply_clear(row_index)
        elif choice_id == CHOICE_DELETE_ROW:
            self._apply_delete(row_index)

    def _apply_delete(self, row_index: int) -> None:
        self.state_manager.dispatch(actions.delete_row(row_index))
        self.state_manager.dispatch(actions.clear_multi_select_selection())
        self.state_manager.dispatch(actions.set_sum_outdated(True))
        self.focus_service.focus_after_delete()
        logger.info("Deleted row #%d", row_index + 1)
        self._finish_row_operation()

    def _apply_clear(self, row_index: int) -> None:
        self.state_manager.dispatch(actions.clear_row(row_index))
        self.state_manager.dispatch(actions.clear_multi_select_selection())
        self.state_manager.dispatch(actions.set_sum_outdated(True))
        self.focus_service.focus_after_clear()
        logger.info("Cleared row #%d", row_index + 1)
        self._finish_row_operation()

    def _apply_reset(self) -> None:
        self.state_manager.dispatch(actions.reset_quote_data())
        self.state_manager.dispatch(actions.reset_ui())
        self._publish_state_change()
        self._notify("Quote has been reset.")

    def _finish_row_operation(self) -> None:
        self._publish_state_change()
        self.event_bus.publish(Events.OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL)

    # --------------------
    # Type button and totals
    # --------------------

    def handle_cycle_type(self) -> None:
        """Rotate the fabric type of every fully sized row; no-op when there is none."""
        if not any(item.has_full_size() for item in self._items()):
            return
        sequence = self.config_manager.get_fabric_type_sequence()
        self.state_manager.dispatch(actions.batch_update_fabric_type(None, sequence))
        self.state_manager.dispatch(actions.set_sum_outdated(True))
        self._publish_state_change()

    def handle_calculate_and_sum(self) -> None:
        quote_data = self.state_manager.get_state().quote_data
        strategy = self.product_factory.get_product_strategy(quote_data.current_product)
        result = self.calculation_service.calculate_and_sum(quote_data, strategy)

        self.state_manager.dispatch(actions.set_quote_data(result.updated_quote_data))

        error = result.first_error
        if error is not None:
            self.state_manager.dispatch(actions.set_sum_outdated(True))
            self._reject(error)
            self.state_manager.dispatch(actions.set_active_cell(error.row_index, error.column))
            self.state_manager.dispatch(actions.clear_input_value())
        else:
            self.state_manager.dispatch(actions.set_sum_outdated(False))
        self._publish_state_change()
