"""Quick quote core package.

Exports the session builder and the pieces most callers need: the event
names, the error taxonomy and the configuration loader. The engines live
in the `ui_logic` subpackage.
"""

from .events import Events, F2_SUMMARY_TAB_ID, COLUMN_WIDTH, COLUMN_HEIGHT, COLUMN_TYPE
from .errors import (
    QuoteError,
    ValidationError,
    SelectionPreconditionError,
    StructuralError,
    DialogCancelled,
    ConfigurationError,
)
from .config_manager import ConfigManager
from .event_bus import EventBus

__all__ = [
    "Events",
    "F2_SUMMARY_TAB_ID",
    "COLUMN_WIDTH",
    "COLUMN_HEIGHT",
    "COLUMN_TYPE",
    "QuoteError",
    "ValidationError",
    "SelectionPreconditionError",
    "StructuralError",
    "DialogCancelled",
    "ConfigurationError",
    "ConfigManager",
    "EventBus",
]

from .app_context import QuoteApplication, build_application  # noqa: E402

__all__ += [
    "QuoteApplication",
    "build_application",
]
