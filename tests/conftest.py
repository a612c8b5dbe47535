"""
Pytest configuration for ensuring the project root is on sys.path.

This allows test modules to import the in-repo package layout like:
    from quick_quote.ui_logic import StateManager

Shared fixtures build a configuration and a fully wired session with a
manual scheduler so that delayed callbacks run only when a test says so.
"""

import os
import sys

import pytest

# Insert the repository root (one directory up from tests/) at the
# beginning of sys.path to prioritize local modules over site-packages.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from quick_quote.app_context import build_application  # noqa: E402
from quick_quote.config_manager import ConfigManager  # noqa: E402
from quick_quote.events import Events  # noqa: E402
from quick_quote.ui_logic.scheduler import ManualScheduler  # noqa: E402


def make_config_dict():
    """Small configuration whose numbers match the fee examples used in tests."""
    return {
        "f2": {
            "management_fee_rate": 5,
            "management_fee_min": 20,
            "design_fee_rate": 3,
            "design_fee_min": 15,
            "tax_rate": 10,
        },
        "focus_delay_seconds": 0.1,
        "fabric_type_sequence": ["BO", "SN", "SH"],
        "price_matrices": {
            "BO": {"name": "Blockout", "widths": [1000, 2000], "drops": [1000, 2000], "prices": [[100, 150], [130, 190]]},
            "SN": {"name": "Screen", "widths": [1000, 2000], "drops": [1000, 2000], "prices": [[90, 140], [120, 170]]},
            "SH": {"name": "Light Filter", "widths": [1000, 2000], "drops": [1000, 2000], "prices": [[80, 120], [110, 160]]},
        },
        "products": {
            "roller_blind": {
                "validation_rules": {
                    "width": {"name": "Width", "min": 250, "max": 3300},
                    "height": {"name": "Height", "min": 300, "max": 3300},
                }
            }
        },
    }


@pytest.fixture
def config():
    return ConfigManager.from_dict(make_config_dict())


@pytest.fixture
def scheduler():
    return ManualScheduler()


class Recorder:
    """Collects payloads published for selected events."""

    def __init__(self, event_bus, *events):
        self.events = {}
        for event in events:
            self.events[event] = []
            event_bus.subscribe(event, self.events[event].append)

    def __getitem__(self, event):
        return self.events[event]


@pytest.fixture
def app(config, scheduler):
    application = build_application(config, scheduler=scheduler)
    yield application
    application.shutdown()


@pytest.fixture
def recorder(app):
    return Recorder(
        app.event_bus,
        Events.SHOW_NOTIFICATION,
        Events.SHOW_CONFIRMATION_DIALOG,
        Events.STATE_CHANGED,
        Events.OPERATION_SUCCESSFUL_AUTO_HIDE_PANEL,
    )


@pytest.fixture
def seed_items(app):
    """Replace the current product's items; tuples are (width, height, fabric_type)."""
    from quick_quote.ui_logic import actions
    from quick_quote.ui_logic.state_manager import Product, QuoteItem

    def _seed(rows, selected=()):
        items = tuple(QuoteItem(width=w, height=h, fabric_type=t) for (w, h, t) in rows)
        quote_data = app.get_state().quote_data.with_current(Product(items=items))
        app.state_manager.dispatch(actions.set_quote_data(quote_data))
        app.state_manager.dispatch(actions.clear_multi_select_selection())
        for index in selected:
            app.state_manager.dispatch(actions.toggle_multi_select_selection(index))
        return app.get_state()

    return _seed
