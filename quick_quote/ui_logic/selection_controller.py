"""
Active-cell focus and multi-row selection.

Two independent axes of state are handled here:
- the single active cell accepting keypad input (`ui.active_cell`)
- the multi-select set toggled from the row sequence indicator

Row commands treat them as mutually exclusive inputs: a direct click on a
width, height or type cell clears the multi-select set.

Keypad input is buffered in `ui.input_value` and committed on `ENT`
after validation against the current product's column rule.
"""

from typing import Any, Mapping, Optional
import logging

from ..errors import ValidationError
from ..events import COLUMN_HEIGHT, COLUMN_TYPE, COLUMN_WIDTH
from . import actions
from .base_handler import BaseHandler

logger = logging.getLogger(__name__)

NUMERIC_COLUMNS = (COLUMN_WIDTH, COLUMN_HEIGHT)
DIGIT_KEYS = frozenset("0123456789")


class SelectionController(BaseHandler):
    """Handles cell clicks, sequence clicks and keypad input."""

    def __init__(self, state_manager, event_bus, focus_service, product_factory, config_manager):
        """Initialize the controller.

        Args:
            state_manager: State store
            event_bus: Session event bus
            focus_service: Collaborator implementing the focus policy
            product_factory: Source of per-product validation rules
            config_manager: Source of the fabric type sequence
        """
        super().__init__(state_manager, event_bus)
        self.focus_service = focus_service
        self.product_factory = product_factory
        self.config_manager = config_manager

    def handle_table_cell_click(self, payload: Mapping[str, Any]) -> None:
        row_index, column = payload["row_index"], payload["column"]
        items = self._items()
        if not 0 <= row_index < len(items):
            return

        self.state_manager.dispatch(actions.clear_multi_select_selection())

        if column in NUMERIC_COLUMNS:
            self.state_manager.dispatch(actions.set_active_cell(row_index, column))
            self.state_manager.dispatch(actions.set_input_value(getattr(items[row_index], column)))
        elif column == COLUMN_TYPE:
            self.state_manager.dispatch(actions.set_active_cell(row_index, column))
            self.state_manager.dispatch(
                actions.cycle_item_type(row_index, self.config_manager.get_fabric_type_sequence())
            )
            self.state_manager.dispatch(actions.set_sum_outdated(True))
        self._publish_state_change()

    def handle_sequence_cell_click(self, payload: Mapping[str, Any]) -> None:
        row_index = payload["row_index"]
        items = self._items()
        if not 0 <= row_index < len(items):
            return
        item = items[row_index]
        if row_index == len(items) - 1 and not item.has_any_size():
            self._notify("Cannot select the final empty row.", "error")
            return

        self.state_manager.dispatch(actions.toggle_multi_select_selection(row_index))
        self._publish_state_change()

    def handle_numeric_key_press(self, payload: Mapping[str, Any]) -> None:
        key = str(payload["key"])
        active = self.state_manager.get_state().ui.active_cell

        if key in ("W", "H"):
            self.focus_service.focus_first_empty_cell(COLUMN_WIDTH if key == "W" else COLUMN_HEIGHT)
        elif active is None:
            logger.debug("Ignoring key %r with no active cell", key)
            return
        elif key in DIGIT_KEYS:
            self.state_manager.dispatch(actions.append_input_value(key))
        elif key == "DEL":
            self.state_manager.dispatch(actions.delete_last_input_char())
        elif key == "ENT":
            self.commit_value()
            return
        else:
            logger.debug("Ignoring unknown key %r", key)
            return
        self._publish_state_change()

    def handle_move_active_cell(self, payload: Mapping[str, Any]) -> None:
        self.focus_service.move_active_cell(payload["direction"])
        self._publish_state_change()

    def _parse_input(self, raw: str, row_index: int, column: str, strategy) -> Optional[int]:
        """Convert the buffer to a value; empty means unset.

        Raises:
            ValidationError: non-numeric or outside the column rule
        """
        if raw == "":
            return None
        rule = strategy.get_validation_rules().get(column)
        if not (raw.isascii() and raw.isdigit()):
            if rule is None:
                raise ValidationError(row_index, column, f"{column} must be a whole number.")
            raise ValidationError(
                row_index, column,
                f"{rule.name} must be between {rule.min:g} and {rule.max:g}.",
                min=rule.min, max=rule.max,
            )
        value = int(raw)
        error = strategy.validate_value(row_index, column, value)
        if error is not None:
            raise error
        return value

    def commit_value(self) -> None:
        """Write the buffered value to the active cell, or reject it and keep focus."""
        state = self.state_manager.get_state()
        active = state.ui.active_cell
        if active is None or active.column not in NUMERIC_COLUMNS:
            return

        strategy = self.product_factory.get_product_strategy(state.quote_data.current_product)
        try:
            value = self._parse_input(state.ui.input_value.strip(), active.row_index, active.column, strategy)
        except ValidationError as e:
            self._reject(e)
            self.state_manager.dispatch(actions.clear_input_value())
            self._publish_state_change()
            return

        self.state_manager.dispatch(actions.update_item_value(active.row_index, active.column, value))
        self.state_manager.dispatch(actions.set_sum_outdated(True))
        self.focus_service.focus_after_commit()
        self._publish_state_change()
