"""
Batch fabric-type assignment through a choice prompt.

Entry points and their preconditions:
- long-press on one row's type cell: the row must have a width or height
- long-press on the type button: at least one fully sized row must exist
- "set type for selection": more than one row must be multi-selected

The prompt lists the configured fabric types in order, one button per
type code next to the matrix display name, followed by a cancel row. The
target rows are captured in the request context when the prompt is
offered, so later selection changes do not redirect the answer.
"""

from typing import Any, Dict, List, Mapping, Optional
import logging

from ..errors import SelectionPreconditionError
from ..events import Events
from . import actions
from .base_handler import BaseHandler
from .dialogs import button, cancel_button, label

logger = logging.getLogger(__name__)

DIALOG_OWNER = "fabric_type"
DIALOG_POSITION = "bottomThird"

MODE_ROW = "row"
MODE_ALL = "all"
MODE_SELECTION = "selection"


class FabricTypeAssigner(BaseHandler):
    """Sets fabric types on one row, on all sized rows, or on the selection."""

    def __init__(self, state_manager, event_bus, config_manager, dialog_broker):
        super().__init__(state_manager, event_bus)
        self.config_manager = config_manager
        self.dialog_broker = dialog_broker
        dialog_broker.register_owner(DIALOG_OWNER, self.handle_dialog_choice)

    def build_layout(self) -> List[List[Dict[str, Any]]]:
        """One row per configured type plus a trailing cancel row."""
        layout = []
        for code in self.config_manager.get_fabric_type_sequence():
            matrix = self.config_manager.get_price_matrix(code)
            name = matrix.name if matrix else "Unknown"
            layout.append([button(code, code, colspan=1), label(name, colspan=2)])
        layout.append([label("", colspan=2), cancel_button(colspan=1)])
        return layout

    def _offer(self, title: str, context: Mapping[str, Any]) -> Optional[int]:
        if not self.config_manager.get_fabric_type_sequence():
            logger.warning("No fabric types configured; prompt not shown")
            return None
        return self.dialog_broker.offer(DIALOG_OWNER, title, self.build_layout(), DIALOG_POSITION, context)

    def handle_type_cell_long_press(self, payload: Mapping[str, Any]) -> None:
        row_index = payload["row_index"]
        items = self._items()
        if not 0 <= row_index < len(items) or not items[row_index].has_any_size():
            self._notify("Cannot set type for an empty row.", "error")
            return
        self._offer(f"Set fabric type for Row #{row_index + 1}:", {"mode": MODE_ROW, "row_index": row_index})

    def handle_type_button_long_press(self) -> None:
        if not any(item.has_full_size() for item in self._items()):
            self._notify("There are no rows with both width and height to update.", "error")
            return
        self._offer("Set fabric type for ALL rows:", {"mode": MODE_ALL})

    def handle_multi_type_set(self) -> None:
        selected = self.state_manager.get_state().ui.multi_select_selected_indexes
        if len(selected) <= 1:
            self._reject(SelectionPreconditionError("Please select multiple items first."))
            return
        self._offer(
            f"Set fabric type for {len(selected)} selected rows:",
            {"mode": MODE_SELECTION, "indexes": sorted(selected)},
        )

    def handle_dialog_choice(self, choice_id: str, context: Mapping[str, Any]) -> None:
        """Apply the chosen type code to the rows captured in `context`."""
        mode = context["mode"]
        row_count = len(self._items())

        if mode == MODE_ROW:
            if context["row_index"] >= row_count:
                logger.warning("Row #%d no longer exists; type %s not applied", context["row_index"] + 1, choice_id)
                return
            self.state_manager.dispatch(actions.set_item_type(context["row_index"], choice_id))
        elif mode == MODE_ALL:
            self.state_manager.dispatch(actions.batch_update_fabric_type(choice_id))
        elif mode == MODE_SELECTION:
            indexes = [i for i in context["indexes"] if i < row_count]
            self.state_manager.dispatch(actions.batch_update_fabric_type_for_selection(indexes, choice_id))
            self.state_manager.dispatch(actions.clear_multi_select_selection())
        else:
            logger.warning("Unknown fabric type prompt mode %r", mode)
            return

        self.state_manager.dispatch(actions.set_sum_outdated(True))
        logger.info("Fabric type %s applied (%s)", choice_id, mode)
        self._publish_state_change()
        self.event_bus.publish(Events.OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL)
