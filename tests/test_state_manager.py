"""
Tests for the action store and reducers.

This suite verifies that every transition produces a new state value,
that the trailing blank row invariant holds, and that unknown actions
are treated as configuration faults.
"""

from dataclasses import FrozenInstanceError

import pytest

from quick_quote.errors import ConfigurationError
from quick_quote.ui_logic import actions
from quick_quote.ui_logic.actions import Action
from quick_quote.ui_logic.reducers import next_fabric_type
from quick_quote.ui_logic.state_manager import (
    ActiveCell,
    AppState,
    Product,
    QuoteItem,
    StateManager,
    UIState,
)


def _store_with(rows):
    items = tuple(QuoteItem(width=w, height=h, fabric_type=t) for (w, h, t) in rows)
    state = AppState()
    state = AppState(quote_data=state.quote_data.with_current(Product(items=items)))
    return StateManager(initial_state=state)


def _items(store):
    return store.get_state().quote_data.current().items


class TestStateManager:
    """Store behaviour."""

    def test_initialization(self):
        store = StateManager()
        state = store.get_state()

        assert isinstance(state, AppState)
        assert isinstance(state.ui, UIState)
        assert _items(store) == (QuoteItem(),)
        assert state.ui.multi_select_selected_indexes == frozenset()
        assert state.ui.sum_outdated is False

    def test_dispatch_replaces_snapshot(self):
        store = StateManager()
        before = store.get_state()

        store.dispatch(actions.set_active_cell(0, "width"))

        after = store.get_state()
        assert after is not before
        assert before.ui.active_cell is None
        assert after.ui.active_cell == ActiveCell(0, "width")
        assert after.ui.input_mode == "width"
        assert store.dispatch_count == 1

    def test_snapshots_are_frozen(self):
        state = StateManager().get_state()
        with pytest.raises(FrozenInstanceError):
            state.ui.sum_outdated = True

    def test_unknown_action_type_is_a_configuration_error(self):
        store = StateManager()
        before = store.get_state()

        with pytest.raises(ConfigurationError):
            store.dispatch(Action("ui/does_not_exist", {}))
        assert store.get_state() is before

    def test_custom_reducer_table(self):
        store = StateManager(reducers={"noop": lambda state, payload: state})
        store.dispatch(Action("noop"))
        with pytest.raises(ConfigurationError):
            store.dispatch(actions.clear_input_value())


class TestUiReducers:

    def test_input_buffer(self):
        store = StateManager()
        store.dispatch(actions.append_input_value("1"))
        store.dispatch(actions.append_input_value("2"))
        store.dispatch(actions.append_input_value("3"))
        store.dispatch(actions.delete_last_input_char())
        assert store.get_state().ui.input_value == "12"

        store.dispatch(actions.set_input_value(None))
        assert store.get_state().ui.input_value == ""
        store.dispatch(actions.set_input_value(900))
        assert store.get_state().ui.input_value == "900"

    def test_toggle_twice_restores_selection(self):
        store = _store_with([(100, 100, None), (200, 200, None), (None, None, None)])
        store.dispatch(actions.toggle_multi_select_selection(0))
        original = store.get_state().ui.multi_select_selected_indexes

        store.dispatch(actions.toggle_multi_select_selection(1))
        store.dispatch(actions.toggle_multi_select_selection(1))

        assert store.get_state().ui.multi_select_selected_indexes == original == frozenset({0})

    def test_toggle_out_of_range_is_ignored(self):
        store = _store_with([(100, 100, None), (None, None, None)])
        store.dispatch(actions.toggle_multi_select_selection(5))
        assert store.get_state().ui.multi_select_selected_indexes == frozenset()

    def test_f2_value_only_accepts_derived_fields(self):
        store = StateManager()
        store.dispatch(actions.set_f2_value("tax", 12.5))
        assert store.get_state().ui.f2.tax == 12.5
        with pytest.raises(ConfigurationError):
            store.dispatch(actions.set_f2_value("management_fee_excluded", True))

    def test_toggle_fee_exclusion(self):
        store = StateManager()
        store.dispatch(actions.toggle_f2_fee_exclusion("design_fee"))
        assert store.get_state().ui.f2.design_fee_excluded is True
        store.dispatch(actions.toggle_f2_fee_exclusion("design_fee"))
        assert store.get_state().ui.f2.design_fee_excluded is False
        with pytest.raises(ConfigurationError):
            store.dispatch(actions.toggle_f2_fee_exclusion("delivery"))

    def test_clear_active_cell(self):
        store = StateManager()
        store.dispatch(actions.set_active_cell(0, "width"))
        store.dispatch(actions.append_input_value("9"))
        store.dispatch(actions.clear_active_cell())
        ui = store.get_state().ui
        assert (ui.active_cell, ui.input_value, ui.input_mode) == (None, "", "")

    def test_reset_ui(self):
        store = StateManager()
        store.dispatch(actions.set_active_cell(0, "height"))
        store.dispatch(actions.set_sum_outdated(True))
        store.dispatch(actions.reset_ui())
        assert store.get_state().ui == UIState()


class TestQuoteReducers:

    def test_insert_row_below_selection(self):
        store = _store_with([(100, 100, "BO"), (200, 200, "BO"), (None, None, None)])
        store.dispatch(actions.insert_row(0))
        items = _items(store)
        assert len(items) == 4
        assert items[1] == QuoteItem()
        assert items[2].width == 200

    def test_delete_row_keeps_trailing_blank(self):
        store = _store_with([(100, 100, "BO"), (None, None, None)])
        store.dispatch(actions.delete_row(0))
        assert _items(store) == (QuoteItem(),)

        store.dispatch(actions.delete_row(0))
        assert _items(store) == (QuoteItem(),)

    def test_delete_row_prunes_selection_out_of_range(self):
        store = _store_with([(100, 100, "BO"), (200, 200, "BO"), (300, 300, "BO"), (None, None, None)])
        store.dispatch(actions.toggle_multi_select_selection(3))
        store.dispatch(actions.delete_row(0))
        assert store.get_state().ui.multi_select_selected_indexes == frozenset()

    def test_filling_last_row_appends_blank_row(self):
        store = StateManager()
        store.dispatch(actions.update_item_value(0, "width", 1200))
        items = _items(store)
        assert len(items) == 2
        assert items[0].width == 1200
        assert items[1].is_empty()

    def test_update_item_value_resets_line_price(self):
        items = (QuoteItem(1000, 1000, "BO", line_price=100.0), QuoteItem())
        store = StateManager(initial_state=AppState(
            quote_data=AppState().quote_data.with_current(Product(items=items))
        ))
        store.dispatch(actions.update_item_value(0, "height", 1500))
        assert _items(store)[0].line_price is None

    def test_update_item_value_rejects_unknown_column(self):
        store = StateManager()
        with pytest.raises(ConfigurationError):
            store.dispatch(actions.update_item_value(0, "depth", 10))

    def test_clear_row(self):
        store = _store_with([(100, 100, "BO"), (200, 200, "SN"), (None, None, None)])
        store.dispatch(actions.clear_row(0))
        items = _items(store)
        assert items[0].is_empty()
        assert items[1].fabric_type == "SN"

    def test_clearing_last_sized_row_leaves_one_blank_row(self):
        store = _store_with([(100, 100, "BO"), (200, 200, "SN"), (None, None, None)])
        store.dispatch(actions.toggle_multi_select_selection(2))
        store.dispatch(actions.clear_row(1))
        items = _items(store)
        assert len(items) == 2
        assert items[0].width == 100
        assert items[1].is_empty()
        assert store.get_state().ui.multi_select_selected_indexes == frozenset()

    def test_unsetting_last_sized_row_leaves_one_blank_row(self):
        store = _store_with([(100, None, None), (None, None, None)])
        store.dispatch(actions.update_item_value(0, "width", None))
        assert _items(store) == (QuoteItem(),)

    def test_blank_rows_inside_the_sequence_are_kept(self):
        store = _store_with([(100, 100, "BO"), (None, None, None), (200, 200, "BO"), (None, None, None)])
        store.dispatch(actions.clear_row(0))
        assert [item.width for item in _items(store)] == [None, None, 200, None]

    def test_cycle_item_type_wraps(self):
        store = _store_with([(100, 100, "SH"), (None, None, None)])
        store.dispatch(actions.cycle_item_type(0, ["BO", "SN", "SH"]))
        assert _items(store)[0].fabric_type == "BO"

    def test_batch_update_rotates_sized_rows_uniformly(self):
        store = _store_with([(100, 100, "BO"), (200, None, None), (300, 300, "SH"), (None, None, None)])
        store.dispatch(actions.batch_update_fabric_type(None, ["BO", "SN", "SH"]))
        items = _items(store)
        assert [i.fabric_type for i in items] == ["SN", None, "SN", None]

    def test_batch_update_for_selection(self):
        store = _store_with([(100, 100, None)] * 5 + [(None, None, None)])
        store.dispatch(actions.batch_update_fabric_type_for_selection([0, 2, 4], "SH"))
        assert [i.fabric_type for i in _items(store)] == ["SH", None, "SH", None, "SH", None]

    def test_set_accessory_does_not_touch_previous_state(self):
        store = StateManager()
        before = store.get_state()
        store.dispatch(actions.set_accessory("motor", 120))
        assert store.get_state().quote_data.current().summary.accessories == {"motor": 120}
        assert before.quote_data.current().summary.accessories == {}

    def test_set_quote_data_requires_quote_data(self):
        store = StateManager()
        with pytest.raises(ConfigurationError):
            store.dispatch(actions.set_quote_data({"items": []}))

    def test_reset_quote_data(self):
        store = _store_with([(100, 100, "BO"), (None, None, None)])
        store.dispatch(actions.reset_quote_data())
        assert _items(store) == (QuoteItem(),)


@pytest.mark.parametrize(
    "current,expected",
    [(None, "BO"), ("BO", "SN"), ("SN", "SH"), ("SH", "BO"), ("XX", "BO")],
)
def test_next_fabric_type(current, expected):
    assert next_fabric_type(current, ["BO", "SN", "SH"]) == expected


def test_next_fabric_type_without_sequence_keeps_current():
    assert next_fabric_type("BO", []) == "BO"
