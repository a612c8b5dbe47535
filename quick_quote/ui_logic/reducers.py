from __future__ import annotations

"""Pure reducers for every action type.

Each reducer takes the current `AppState` and an action payload and
returns a brand-new `AppState`. Reducers never talk to the event bus and
never mutate their inputs.

Quote reducers keep one invariant on the current product's items: the
sequence always ends with exactly one blank placeholder row.
"""

from dataclasses import replace
from typing import Dict, Mapping, Optional, Sequence, Tuple

from ..errors import ConfigurationError
from ..events import COLUMN_HEIGHT, COLUMN_TYPE, COLUMN_WIDTH
from . import actions
from .state_manager import (
    F2_DERIVED_FIELDS,
    F2_EXCLUSION_FLAGS,
    ActiveCell,
    AppState,
    QuoteData,
    QuoteItem,
    Reducer,
    UIState,
    initial_quote_data,
)

_ITEM_FIELDS = {
    COLUMN_WIDTH: "width",
    COLUMN_HEIGHT: "height",
    COLUMN_TYPE: "fabric_type",
}


def next_fabric_type(current: Optional[str], type_sequence: Sequence[str]) -> Optional[str]:
    """Return the type following `current` in `type_sequence`, wrapping around.

    An unset or unknown current type starts the sequence from its first entry.
    """
    if not type_sequence:
        return current
    if current in type_sequence:
        idx = list(type_sequence).index(current)
        return type_sequence[(idx + 1) % len(type_sequence)]
    return type_sequence[0]


# --------------------
# Helpers
# --------------------

def _items(state: AppState) -> Tuple[QuoteItem, ...]:
    return state.quote_data.current().items


def _ensure_trailing_blank(items: Tuple[QuoteItem, ...]) -> Tuple[QuoteItem, ...]:
    """Collapse a run of trailing blank rows to one, or append one if missing."""
    end = len(items)
    while end > 1 and items[end - 1].is_empty() and items[end - 2].is_empty():
        end -= 1
    items = items[:end]
    if not items or not items[-1].is_empty():
        return items + (QuoteItem(),)
    return items


def _with_items(state: AppState, items) -> AppState:
    product = state.quote_data.current()
    new_items = _ensure_trailing_blank(tuple(items))
    new_product = replace(product, items=new_items)
    selected = frozenset(i for i in state.ui.multi_select_selected_indexes if i < len(new_items))
    ui = state.ui
    if selected != ui.multi_select_selected_indexes:
        ui = replace(ui, multi_select_selected_indexes=selected)
    return replace(state, quote_data=state.quote_data.with_current(new_product), ui=ui)


def _check_row(items: Tuple[QuoteItem, ...], row_index: int) -> None:
    if not isinstance(row_index, int) or not 0 <= row_index < len(items):
        raise ConfigurationError(f"Row index {row_index!r} outside 0..{len(items) - 1}")


def _replace_item(state: AppState, row_index: int, **changes) -> AppState:
    items = list(_items(state))
    _check_row(tuple(items), row_index)
    items[row_index] = replace(items[row_index], line_price=None, **changes)
    return _with_items(state, items)


def _with_ui(state: AppState, **changes) -> AppState:
    return replace(state, ui=replace(state.ui, **changes))


# --------------------
# UI reducers
# --------------------

def _set_active_cell(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(
        state,
        active_cell=ActiveCell(payload["row_index"], payload["column"]),
        input_mode=payload["column"],
    )


def _clear_active_cell(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(state, active_cell=None, input_value="", input_mode="")


def _set_input_value(state: AppState, payload: Mapping) -> AppState:
    value = payload.get("value")
    return _with_ui(state, input_value="" if value is None else str(value))


def _append_input_value(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(state, input_value=state.ui.input_value + str(payload["key"]))


def _delete_last_input_char(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(state, input_value=state.ui.input_value[:-1])


def _clear_input_value(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(state, input_value="")


def _toggle_multi_select_selection(state: AppState, payload: Mapping) -> AppState:
    row_index = payload["row_index"]
    if not 0 <= row_index < len(_items(state)):
        return state
    selected = state.ui.multi_select_selected_indexes ^ frozenset([row_index])
    return _with_ui(state, multi_select_selected_indexes=selected)


def _clear_multi_select_selection(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(state, multi_select_selected_indexes=frozenset())


def _set_sum_outdated(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(state, sum_outdated=bool(payload["is_outdated"]))


def _set_active_tab(state: AppState, payload: Mapping) -> AppState:
    return _with_ui(state, active_tab_id=payload["tab_id"])


def _set_f2_value(state: AppState, payload: Mapping) -> AppState:
    key = payload["key"]
    if key not in F2_DERIVED_FIELDS:
        raise ConfigurationError(f"Unknown fee summary field '{key}'")
    return _with_ui(state, f2=replace(state.ui.f2, **{key: payload["value"]}))


def _toggle_f2_fee_exclusion(state: AppState, payload: Mapping) -> AppState:
    flag = F2_EXCLUSION_FLAGS.get(payload["fee_type"])
    if flag is None:
        raise ConfigurationError(f"Unknown fee type '{payload['fee_type']}'")
    f2 = state.ui.f2
    return _with_ui(state, f2=replace(f2, **{flag: not getattr(f2, flag)}))


def _reset_ui(state: AppState, payload: Mapping) -> AppState:
    return replace(state, ui=UIState())


# --------------------
# Quote reducers
# --------------------

def _insert_row(state: AppState, payload: Mapping) -> AppState:
    items = _items(state)
    selected_index = payload["selected_index"]
    _check_row(items, selected_index)
    position = selected_index + 1
    return _with_items(state, items[:position] + (QuoteItem(),) + items[position:])


def _delete_row(state: AppState, payload: Mapping) -> AppState:
    items = _items(state)
    selected_index = payload["selected_index"]
    _check_row(items, selected_index)
    return _with_items(state, items[:selected_index] + items[selected_index + 1:])


def _clear_row(state: AppState, payload: Mapping) -> AppState:
    return _replace_item(state, payload["selected_index"], width=None, height=None, fabric_type=None)


def _update_item_value(state: AppState, payload: Mapping) -> AppState:
    field_name = _ITEM_FIELDS.get(payload["column"])
    if field_name is None:
        raise ConfigurationError(f"Unknown item column '{payload['column']}'")
    return _replace_item(state, payload["row_index"], **{field_name: payload["value"]})


def _cycle_item_type(state: AppState, payload: Mapping) -> AppState:
    items = _items(state)
    row_index = payload["row_index"]
    _check_row(items, row_index)
    new_type = next_fabric_type(items[row_index].fabric_type, payload["type_sequence"])
    return _replace_item(state, row_index, fabric_type=new_type)


def _set_item_type(state: AppState, payload: Mapping) -> AppState:
    return _replace_item(state, payload["row_index"], fabric_type=payload["new_type"])


def _batch_update_fabric_type(state: AppState, payload: Mapping) -> AppState:
    items = _items(state)
    eligible = [i for i, item in enumerate(items) if item.has_full_size()]
    if not eligible:
        return state
    new_type = payload.get("new_type")
    if new_type is None:
        # Rotation follows the first eligible row so all rows end up uniform
        new_type = next_fabric_type(items[eligible[0]].fabric_type, payload.get("type_sequence", ()))
    updated = list(items)
    for i in eligible:
        updated[i] = replace(items[i], fabric_type=new_type, line_price=None)
    return _with_items(state, updated)


def _batch_update_fabric_type_for_selection(state: AppState, payload: Mapping) -> AppState:
    items = _items(state)
    updated = list(items)
    for i in payload["indexes"]:
        _check_row(items, i)
        updated[i] = replace(items[i], fabric_type=payload["new_type"], line_price=None)
    return _with_items(state, updated)


def _set_accessory(state: AppState, payload: Mapping) -> AppState:
    product = state.quote_data.current()
    accessories = dict(product.summary.accessories)
    accessories[payload["name"]] = payload["amount"]
    summary = replace(product.summary, accessories=accessories)
    return replace(state, quote_data=state.quote_data.with_current(replace(product, summary=summary)))


def _set_quote_data(state: AppState, payload: Mapping) -> AppState:
    new_quote_data = payload["new_quote_data"]
    if not isinstance(new_quote_data, QuoteData):
        raise ConfigurationError(f"Expected QuoteData, got {type(new_quote_data).__name__}")
    return replace(state, quote_data=new_quote_data)


def _reset_quote_data(state: AppState, payload: Mapping) -> AppState:
    product_key = payload.get("product_key") or state.quote_data.current_product
    return replace(state, quote_data=initial_quote_data(product_key))


UI_REDUCERS: Dict[str, Reducer] = {
    actions.SET_ACTIVE_CELL: _set_active_cell,
    actions.CLEAR_ACTIVE_CELL: _clear_active_cell,
    actions.SET_INPUT_VALUE: _set_input_value,
    actions.APPEND_INPUT_VALUE: _append_input_value,
    actions.DELETE_LAST_INPUT_CHAR: _delete_last_input_char,
    actions.CLEAR_INPUT_VALUE: _clear_input_value,
    actions.TOGGLE_MULTI_SELECT_SELECTION: _toggle_multi_select_selection,
    actions.CLEAR_MULTI_SELECT_SELECTION: _clear_multi_select_selection,
    actions.SET_SUM_OUTDATED: _set_sum_outdated,
    actions.SET_ACTIVE_TAB: _set_active_tab,
    actions.SET_F2_VALUE: _set_f2_value,
    actions.TOGGLE_F2_FEE_EXCLUSION: _toggle_f2_fee_exclusion,
    actions.RESET_UI: _reset_ui,
}

QUOTE_REDUCERS: Dict[str, Reducer] = {
    actions.INSERT_ROW: _insert_row,
    actions.DELETE_ROW: _delete_row,
    actions.CLEAR_ROW: _clear_row,
    actions.UPDATE_ITEM_VALUE: _update_item_value,
    actions.CYCLE_ITEM_TYPE: _cycle_item_type,
    actions.SET_ITEM_TYPE: _set_item_type,
    actions.BATCH_UPDATE_FABRIC_TYPE: _batch_update_fabric_type,
    actions.BATCH_UPDATE_FABRIC_TYPE_FOR_SELECTION: _batch_update_fabric_type_for_selection,
    actions.SET_ACCESSORY: _set_accessory,
    actions.SET_QUOTE_DATA: _set_quote_data,
    actions.RESET_QUOTE_DATA: _reset_quote_data,
}

REDUCERS: Dict[str, Reducer] = {**UI_REDUCERS, **QUOTE_REDUCERS}
