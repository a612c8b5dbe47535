from __future__ import annotations

"""Event names exchanged over the event bus.

Every event the core publishes or consumes is listed here so that the
controller's dispatch table can be checked against a closed set at
start-up.
"""

from enum import Enum


class Events(str, Enum):
    """Enumeration of event tags."""

    # Application lifecycle
    APP_READY = "APP_READY"
    STATE_CHANGED = "STATE_CHANGED"
    FOCUS_CELL = "FOCUS_CELL"

    # Quick quote table and keypad
    NUMERIC_KEY_PRESSED = "NUMERIC_KEY_PRESSED"
    TABLE_CELL_CLICKED = "TABLE_CELL_CLICKED"
    SEQUENCE_CELL_CLICKED = "SEQUENCE_CELL_CLICKED"
    MOVE_ACTIVE_CELL = "MOVE_ACTIVE_CELL"
    INSERT_ROW_CLICKED = "INSERT_ROW_CLICKED"
    DELETE_ROW_CLICKED = "DELETE_ROW_CLICKED"
    CLEAR_ROW_CLICKED = "CLEAR_ROW_CLICKED"
    RESET_CLICKED = "RESET_CLICKED"
    CALCULATE_SUM_CLICKED = "CALCULATE_SUM_CLICKED"

    # Fabric type
    TYPE_CELL_CLICKED = "TYPE_CELL_CLICKED"
    TYPE_CELL_LONG_PRESS = "TYPE_CELL_LONG_PRESS"
    TYPE_BUTTON_LONG_PRESS = "TYPE_BUTTON_LONG_PRESS"
    USER_REQUESTED_MULTI_TYPE_SET = "USER_REQUESTED_MULTI_TYPE_SET"

    # Fee summary panel
    RIGHT_PANEL_TAB_CHANGED = "RIGHT_PANEL_TAB_CHANGED"
    F2_CHECKBOX_CLICKED = "F2_CHECKBOX_CLICKED"

    # Collaborator requests and responses
    SHOW_NOTIFICATION = "SHOW_NOTIFICATION"
    SHOW_CONFIRMATION_DIALOG = "SHOW_CONFIRMATION_DIALOG"
    DIALOG_CHOICE_SELECTED = "DIALOG_CHOICE_SELECTED"
    OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL = "OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL"
    SAVE_TO_FILE_CLICKED = "SAVE_TO_FILE_CLICKED"
    SAVE_THEN_LOAD_CLICKED = "SAVE_THEN_LOAD_CLICKED"
    TRIGGER_FILE_LOAD = "TRIGGER_FILE_LOAD"
    FILE_LOADED = "FILE_LOADED"


# Tab identifier of the fee summary panel
F2_SUMMARY_TAB_ID = "f2-summary-tab"
DEFAULT_TAB_ID = "k1-tab"

COLUMN_WIDTH = "width"
COLUMN_HEIGHT = "height"
COLUMN_TYPE = "TYPE"
