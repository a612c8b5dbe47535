"""
Tests for assigning fabric types through the choice prompt.
"""

import pytest

from quick_quote.events import Events


def _types(app):
    return [item.fabric_type for item in app.get_state().quote_data.current().items]


def _answer(app, recorder, choice_id):
    request = recorder[Events.SHOW_CONFIRMATION_DIALOG][-1]
    app.publish(Events.DIALOG_CHOICE_SELECTED, {"request_id": request["request_id"], "choice_id": choice_id})


class TestPromptLayout:

    def test_one_row_per_type_and_cancel_row(self, app):
        layout = app.fabric_type_assigner.build_layout()

        assert len(layout) == 4
        assert layout[0] == [
            {"type": "button", "text": "BO", "choice_id": "BO", "colspan": 1},
            {"type": "text", "text": "Blockout", "colspan": 2},
        ]
        assert layout[2][1]["text"] == "Light Filter"
        assert layout[-1][0] == {"type": "text", "text": "", "colspan": 2}
        assert layout[-1][1]["choice_id"] == "cancel"


class TestSingleRow:

    def test_long_press_sets_one_row(self, app, recorder, seed_items):
        seed_items([(1000, 1000, "BO"), (1200, None, None), (None, None, None)])

        app.publish(Events.TYPE_CELL_LONG_PRESS, {"row_index": 1})
        dialog = recorder[Events.SHOW_CONFIRMATION_DIALOG][-1]
        assert dialog["message"] == "Set fabric type for Row #2:"
        assert dialog["position"] == "bottomThird"

        _answer(app, recorder, "SH")

        assert _types(app) == ["BO", "SH", None]
        assert app.get_state().ui.sum_outdated is True
        assert len(recorder[Events.OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL]) == 1

    def test_long_press_on_empty_row_is_rejected(self, app, recorder, seed_items):
        seed_items([(1000, 1000, "BO"), (None, None, None)])

        app.publish(Events.TYPE_CELL_LONG_PRESS, {"row_index": 1})

        assert recorder[Events.SHOW_CONFIRMATION_DIALOG] == []
        assert recorder[Events.SHOW_NOTIFICATION] == [
            {"message": "Cannot set type for an empty row.", "type": "error"}
        ]


class TestAllRows:

    def test_button_long_press_sets_every_sized_row(self, app, recorder, seed_items):
        seed_items([(1000, 1000, "BO"), (1200, None, None), (1500, 1500, None), (None, None, None)])

        app.publish(Events.TYPE_BUTTON_LONG_PRESS)
        assert recorder[Events.SHOW_CONFIRMATION_DIALOG][-1]["message"] == "Set fabric type for ALL rows:"

        _answer(app, recorder, "SN")

        assert _types(app) == ["SN", None, "SN", None]

    def test_rejected_without_fully_sized_rows(self, app, recorder, seed_items):
        seed_items([(1000, None, None), (None, None, None)])

        app.publish(Events.TYPE_BUTTON_LONG_PRESS)

        assert recorder[Events.SHOW_CONFIRMATION_DIALOG] == []
        assert recorder[Events.SHOW_NOTIFICATION][-1]["message"] == (
            "There are no rows with both width and height to update."
        )


class TestSelection:

    def test_selected_rows_only(self, app, recorder, seed_items):
        seed_items([(1000, 1000, "BO")] * 5 + [(None, None, None)], selected=[0, 2, 4])

        app.publish(Events.USER_REQUESTED_MULTI_TYPE_SET)
        assert recorder[Events.SHOW_CONFIRMATION_DIALOG][-1]["message"] == "Set fabric type for 3 selected rows:"

        _answer(app, recorder, "SH")

        state = app.get_state()
        assert _types(app) == ["SH", "BO", "SH", "BO", "SH", None]
        assert state.ui.multi_select_selected_indexes == frozenset()
        assert state.ui.sum_outdated is True

    @pytest.mark.parametrize("selected", [(), (1,)])
    def test_needs_more_than_one_selected_row(self, app, recorder, seed_items, selected):
        before = seed_items([(1000, 1000, "BO"), (1000, 1000, "BO"), (None, None, None)], selected=selected)

        app.publish(Events.USER_REQUESTED_MULTI_TYPE_SET)

        assert app.get_state() is before
        assert recorder[Events.SHOW_NOTIFICATION] == [
            {"message": "Please select multiple items first.", "type": "error"}
        ]

    def test_cancel_leaves_types_and_selection(self, app, recorder, seed_items):
        before = seed_items([(1000, 1000, "BO"), (1000, 1000, "BO"), (None, None, None)], selected=[0, 1])

        app.publish(Events.USER_REQUESTED_MULTI_TYPE_SET)
        _answer(app, recorder, "cancel")

        assert app.get_state() is before

    def test_unknown_choice_is_dropped(self, app, recorder, seed_items):
        before = seed_items([(1000, 1000, "BO"), (1000, 1000, "BO"), (None, None, None)], selected=[0, 1])

        app.publish(Events.USER_REQUESTED_MULTI_TYPE_SET)
        _answer(app, recorder, "XX")

        assert app.get_state() is before
        assert app.dialog_broker.pending_requests() == []
