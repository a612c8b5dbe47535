"""
Tests for the row lifecycle: insert, delete, clear (through a prompt),
the type button and the full reset.
"""

from quick_quote.events import Events
from quick_quote.ui_logic.state_manager import ActiveCell, QuoteItem


def _items(app):
    return app.get_state().quote_data.current().items


def _answer(app, recorder, choice_id):
    request = recorder[Events.SHOW_CONFIRMATION_DIALOG][-1]
    app.publish(Events.DIALOG_CHOICE_SELECTED, {"request_id": request["request_id"], "choice_id": choice_id})


SIZED = [(1000, 1000, "BO"), (1200, 1500, "SN"), (None, None, None)]


class TestInsertRow:
    """Insert below a single selected row."""

    def test_insert_below_selection(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[0])

        app.publish(Events.INSERT_ROW_CLICKED)

        state = app.get_state()
        items = _items(app)
        assert len(items) == 4
        assert items[1] == QuoteItem()
        assert items[2].width == 1200
        assert state.ui.active_cell == ActiveCell(1, "width")
        assert state.ui.multi_select_selected_indexes == frozenset()
        assert len(recorder[Events.STATE_CHANGED]) == 1
        assert len(recorder[Events.OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL]) == 1

    def test_no_selection_only_notifies(self, app, recorder, seed_items):
        before = seed_items(SIZED)

        app.publish(Events.INSERT_ROW_CLICKED)

        assert app.get_state().quote_data is before.quote_data
        assert recorder[Events.SHOW_NOTIFICATION] == [
            {"message": "Please select a position to insert the new item.", "type": "info"}
        ]
        assert recorder[Events.STATE_CHANGED] == []

    def test_several_selected_rows_is_an_error(self, app, recorder, seed_items):
        before = seed_items(SIZED, selected=[0, 1])

        app.publish(Events.INSERT_ROW_CLICKED)

        assert app.get_state().quote_data is before.quote_data
        assert recorder[Events.SHOW_NOTIFICATION] == [
            {"message": "A new item can only be inserted below a single selection.", "type": "error"}
        ]

    def test_cannot_insert_after_last_row(self, app, recorder, seed_items):
        before = seed_items(SIZED, selected=[2])

        app.publish(Events.INSERT_ROW_CLICKED)

        assert _items(app) == before.quote_data.current().items
        assert recorder[Events.SHOW_NOTIFICATION][-1]["message"] == "Cannot insert after the last row."

    def test_cannot_insert_before_empty_row(self, app, recorder, seed_items):
        before = seed_items([(1000, 1000, "BO"), (None, None, None), (1200, 1200, "BO"), (None, None, None)],
                            selected=[0])

        app.publish(Events.INSERT_ROW_CLICKED)

        assert _items(app) == before.quote_data.current().items
        assert recorder[Events.SHOW_NOTIFICATION][-1] == {
            "message": "Cannot insert before an empty row.",
            "type": "error",
        }


class TestDeleteRow:

    def test_delete_selected_row(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[0])

        app.publish(Events.DELETE_ROW_CLICKED)

        state = app.get_state()
        assert [item.width for item in _items(app)] == [1200, None]
        assert state.ui.multi_select_selected_indexes == frozenset()
        assert state.ui.sum_outdated is True
        assert state.ui.active_cell == ActiveCell(1, "width")
        assert len(recorder[Events.OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL]) == 1

    def test_delete_requires_a_selection(self, app, recorder, seed_items):
        seed_items(SIZED)
        app.publish(Events.DELETE_ROW_CLICKED)
        assert len(_items(app)) == 3
        assert recorder[Events.SHOW_NOTIFICATION] == [{"message": "Please select an item to delete.", "type": "info"}]

    def test_delete_only_one_at_a_time(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[0, 1])
        app.publish(Events.DELETE_ROW_CLICKED)
        assert len(_items(app)) == 3
        assert recorder[Events.SHOW_NOTIFICATION][-1]["type"] == "error"


class TestClearRow:
    """Clear offers a prompt; the answer decides what happens."""

    def test_prompt_is_offered_without_mutation(self, app, recorder, seed_items):
        before = seed_items(SIZED, selected=[1])

        app.publish(Events.CLEAR_ROW_CLICKED)

        assert app.get_state() is before
        dialog = recorder[Events.SHOW_CONFIRMATION_DIALOG][-1]
        assert dialog["message"] == "Row #2: What would you like to do?"
        choice_ids = [cell["choice_id"] for row in dialog["layout"] for cell in row]
        assert choice_ids == ["clear_fields", "delete_row", "cancel"]

    def test_clear_fields_choice(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[1])
        app.publish(Events.CLEAR_ROW_CLICKED)

        _answer(app, recorder, "clear_fields")

        items = _items(app)
        assert len(items) == 2
        assert items[1].is_empty()
        assert items[0].width == 1000
        assert app.get_state().ui.sum_outdated is True
        assert app.get_state().ui.multi_select_selected_indexes == frozenset()
        assert app.get_state().ui.active_cell == ActiveCell(1, "width")

    def test_clearing_last_sized_row_keeps_table_usable(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[1])
        app.publish(Events.CLEAR_ROW_CLICKED)
        _answer(app, recorder, "clear_fields")

        # the placeholder is still the only row that cannot be selected
        app.publish(Events.SEQUENCE_CELL_CLICKED, {"row_index": 1})
        assert app.get_state().ui.multi_select_selected_indexes == frozenset()
        assert recorder[Events.SHOW_NOTIFICATION][-1]["message"] == "Cannot select the final empty row."

        app.publish(Events.SEQUENCE_CELL_CLICKED, {"row_index": 0})
        app.publish(Events.INSERT_ROW_CLICKED)
        assert recorder[Events.SHOW_NOTIFICATION][-1]["message"] == "Cannot insert after the last row."
        assert len(_items(app)) == 2

    def test_delete_row_choice(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[1])
        app.publish(Events.CLEAR_ROW_CLICKED)

        _answer(app, recorder, "delete_row")

        assert [item.width for item in _items(app)] == [1000, None]
        assert len(recorder[Events.OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL]) == 1

    def test_cancel_is_a_silent_no_op(self, app, recorder, seed_items):
        before = seed_items(SIZED, selected=[1])
        app.publish(Events.CLEAR_ROW_CLICKED)

        _answer(app, recorder, "cancel")

        assert app.get_state() is before
        assert recorder[Events.SHOW_NOTIFICATION] == []
        assert app.dialog_broker.pending_requests() == []

    def test_answer_uses_row_captured_when_prompt_was_offered(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[0])
        app.publish(Events.CLEAR_ROW_CLICKED)
        # selection changes while the prompt is open
        app.publish(Events.SEQUENCE_CELL_CLICKED, {"row_index": 1})

        _answer(app, recorder, "clear_fields")

        items = _items(app)
        assert items[0].is_empty()
        assert items[1].width == 1200

    def test_clear_needs_exactly_one_selection(self, app, recorder, seed_items):
        seed_items(SIZED)
        app.publish(Events.CLEAR_ROW_CLICKED)
        assert recorder[Events.SHOW_CONFIRMATION_DIALOG] == []
        assert recorder[Events.SHOW_NOTIFICATION] == [
            {"message": "Please select a single item to use this function.", "type": "error"}
        ]


class TestReset:

    def test_reset_after_confirmation(self, app, recorder, seed_items):
        seed_items(SIZED, selected=[0])

        app.publish(Events.RESET_CLICKED)
        assert len(_items(app)) == 3

        _answer(app, recorder, "reset")

        state = app.get_state()
        assert _items(app) == (QuoteItem(),)
        assert state.ui.active_cell is None
        assert state.ui.multi_select_selected_indexes == frozenset()
        assert recorder[Events.SHOW_NOTIFICATION][-1] == {"message": "Quote has been reset.", "type": "info"}

    def test_reset_cancelled(self, app, recorder, seed_items):
        before = seed_items(SIZED)
        app.publish(Events.RESET_CLICKED)
        _answer(app, recorder, "cancel")
        assert app.get_state() is before


class TestTypeButton:

    def test_click_rotates_all_sized_rows(self, app, seed_items):
        seed_items([(1000, 1000, "BO"), (1200, None, None), (1500, 1500, "SH"), (None, None, None)])

        app.publish(Events.TYPE_CELL_CLICKED)

        assert [item.fabric_type for item in _items(app)] == ["SN", None, "SN", None]
        assert app.get_state().ui.sum_outdated is True

    def test_click_without_sized_rows_is_a_no_op(self, app, recorder, seed_items):
        before = seed_items([(1000, None, None), (None, None, None)])
        app.publish(Events.TYPE_CELL_CLICKED)
        assert app.get_state() is before
        assert recorder[Events.STATE_CHANGED] == []
