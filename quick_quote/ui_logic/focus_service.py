"""
Default active-cell focus policy.

The engines only call these entry points; they do not depend on the
policy itself. Every method dispatches `set_active_cell` and clears the
input buffer, and none of them publishes: the caller announces the state
change once its own work is done.
"""

from typing import Optional
import logging

from ..events import COLUMN_HEIGHT, COLUMN_TYPE, COLUMN_WIDTH
from . import actions
from .state_manager import StateManager

logger = logging.getLogger(__name__)

NAVIGABLE_COLUMNS = (COLUMN_WIDTH, COLUMN_HEIGHT, COLUMN_TYPE)
_ITEM_FIELDS = {COLUMN_WIDTH: "width", COLUMN_HEIGHT: "height", COLUMN_TYPE: "fabric_type"}


class FocusService:
    """Moves the active cell after edits and on keypad navigation."""

    def __init__(self, state_manager: StateManager):
        self.state_manager = state_manager

    def _row_count(self) -> int:
        return len(self.state_manager.get_state().quote_data.current().items)

    def _focus(self, row_index: int, column: str) -> None:
        row_index = max(0, min(row_index, self._row_count() - 1))
        self.state_manager.dispatch(actions.set_active_cell(row_index, column))
        self.state_manager.dispatch(actions.clear_input_value())
        logger.debug("Focus -> row %d, %s", row_index, column)

    def focus_after_commit(self) -> None:
        """Width advances right to height; height advances down to the next row's width."""
        active = self.state_manager.get_state().ui.active_cell
        if active is None:
            return
        if active.column == COLUMN_WIDTH:
            self._focus(active.row_index, COLUMN_HEIGHT)
        else:
            self._focus(active.row_index + 1, COLUMN_WIDTH)

    def focus_after_delete(self) -> None:
        self.focus_first_empty_cell(COLUMN_WIDTH)

    def focus_after_clear(self) -> None:
        self.focus_first_empty_cell(COLUMN_WIDTH)

    def focus_first_empty_cell(self, column: str) -> None:
        """Focus the first row whose `column` is unset (the last row if none is)."""
        items = self.state_manager.get_state().quote_data.current().items
        field_name = _ITEM_FIELDS[column]
        target: Optional[int] = next(
            (i for i, item in enumerate(items) if getattr(item, field_name) is None),
            None,
        )
        self._focus(len(items) - 1 if target is None else target, column)

    def move_active_cell(self, direction: str) -> None:
        """Move one step `up`, `down`, `left` or `right`, clamped to the grid."""
        active = self.state_manager.get_state().ui.active_cell
        if active is None:
            return
        row, column = active.row_index, active.column
        col_idx = NAVIGABLE_COLUMNS.index(column) if column in NAVIGABLE_COLUMNS else 0
        if direction == "up":
            row -= 1
        elif direction == "down":
            row += 1
        elif direction == "left":
            col_idx = max(0, col_idx - 1)
        elif direction == "right":
            col_idx = min(len(NAVIGABLE_COLUMNS) - 1, col_idx + 1)
        else:
            logger.warning("Unknown move direction %r", direction)
            return
        self._focus(row, NAVIGABLE_COLUMNS[col_idx])
