from __future__ import annotations

"""Action vocabulary for the state store.

An `Action` is a type tag plus a structured payload and is the only
permitted way to change state. The creators below keep tags and payload
shapes in one place; reducers for each tag live in `reducers.py`.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence


@dataclass(frozen=True)
class Action:
    type: str
    payload: Mapping[str, Any] = field(default_factory=dict)


# --------------------
# UI action types
# --------------------

SET_ACTIVE_CELL = "ui/set_active_cell"
CLEAR_ACTIVE_CELL = "ui/clear_active_cell"
SET_INPUT_VALUE = "ui/set_input_value"
APPEND_INPUT_VALUE = "ui/append_input_value"
DELETE_LAST_INPUT_CHAR = "ui/delete_last_input_char"
CLEAR_INPUT_VALUE = "ui/clear_input_value"
TOGGLE_MULTI_SELECT_SELECTION = "ui/toggle_multi_select_selection"
CLEAR_MULTI_SELECT_SELECTION = "ui/clear_multi_select_selection"
SET_SUM_OUTDATED = "ui/set_sum_outdated"
SET_ACTIVE_TAB = "ui/set_active_tab"
SET_F2_VALUE = "ui/set_f2_value"
TOGGLE_F2_FEE_EXCLUSION = "ui/toggle_f2_fee_exclusion"
RESET_UI = "ui/reset_ui"

# --------------------
# Quote action types
# --------------------

INSERT_ROW = "quote/insert_row"
DELETE_ROW = "quote/delete_row"
CLEAR_ROW = "quote/clear_row"
UPDATE_ITEM_VALUE = "quote/update_item_value"
CYCLE_ITEM_TYPE = "quote/cycle_item_type"
SET_ITEM_TYPE = "quote/set_item_type"
BATCH_UPDATE_FABRIC_TYPE = "quote/batch_update_fabric_type"
BATCH_UPDATE_FABRIC_TYPE_FOR_SELECTION = "quote/batch_update_fabric_type_for_selection"
SET_ACCESSORY = "quote/set_accessory"
SET_QUOTE_DATA = "quote/set_quote_data"
RESET_QUOTE_DATA = "quote/reset_quote_data"


def set_active_cell(row_index: int, column: str) -> Action:
    return Action(SET_ACTIVE_CELL, {"row_index": row_index, "column": column})


def clear_active_cell() -> Action:
    return Action(CLEAR_ACTIVE_CELL)


def set_input_value(value: Any) -> Action:
    return Action(SET_INPUT_VALUE, {"value": value})


def append_input_value(key: str) -> Action:
    return Action(APPEND_INPUT_VALUE, {"key": key})


def delete_last_input_char() -> Action:
    return Action(DELETE_LAST_INPUT_CHAR)


def clear_input_value() -> Action:
    return Action(CLEAR_INPUT_VALUE)


def toggle_multi_select_selection(row_index: int) -> Action:
    return Action(TOGGLE_MULTI_SELECT_SELECTION, {"row_index": row_index})


def clear_multi_select_selection() -> Action:
    return Action(CLEAR_MULTI_SELECT_SELECTION)


def set_sum_outdated(is_outdated: bool) -> Action:
    return Action(SET_SUM_OUTDATED, {"is_outdated": bool(is_outdated)})


def set_active_tab(tab_id: str) -> Action:
    return Action(SET_ACTIVE_TAB, {"tab_id": tab_id})


def set_f2_value(key: str, value: Any) -> Action:
    return Action(SET_F2_VALUE, {"key": key, "value": value})


def toggle_f2_fee_exclusion(fee_type: str) -> Action:
    return Action(TOGGLE_F2_FEE_EXCLUSION, {"fee_type": fee_type})


def reset_ui() -> Action:
    return Action(RESET_UI)


def insert_row(selected_index: int) -> Action:
    """Insert a blank item directly below `selected_index`."""
    return Action(INSERT_ROW, {"selected_index": selected_index})


def delete_row(selected_index: int) -> Action:
    return Action(DELETE_ROW, {"selected_index": selected_index})


def clear_row(selected_index: int) -> Action:
    return Action(CLEAR_ROW, {"selected_index": selected_index})


def update_item_value(row_index: int, column: str, value: Optional[int]) -> Action:
    return Action(UPDATE_ITEM_VALUE, {"row_index": row_index, "column": column, "value": value})


def cycle_item_type(row_index: int, type_sequence: Sequence[str]) -> Action:
    return Action(CYCLE_ITEM_TYPE, {"row_index": row_index, "type_sequence": tuple(type_sequence)})


def set_item_type(row_index: int, new_type: str) -> Action:
    return Action(SET_ITEM_TYPE, {"row_index": row_index, "new_type": new_type})


def batch_update_fabric_type(new_type: Optional[str] = None, type_sequence: Sequence[str] = ()) -> Action:
    """Set every fully sized row to `new_type`, or rotate them when it is None."""
    return Action(BATCH_UPDATE_FABRIC_TYPE, {"new_type": new_type, "type_sequence": tuple(type_sequence)})


def batch_update_fabric_type_for_selection(indexes: Iterable[int], new_type: str) -> Action:
    return Action(
        BATCH_UPDATE_FABRIC_TYPE_FOR_SELECTION,
        {"indexes": frozenset(indexes), "new_type": new_type},
    )


def set_accessory(name: str, amount: float) -> Action:
    return Action(SET_ACCESSORY, {"name": name, "amount": amount})


def set_quote_data(new_quote_data) -> Action:
    return Action(SET_QUOTE_DATA, {"new_quote_data": new_quote_data})


def reset_quote_data(product_key: Optional[str] = None) -> Action:
    return Action(RESET_QUOTE_DATA, {"product_key": product_key})
