"""
Framework-agnostic logic for the quick quote screen.

Everything here is independent of any rendering technology: components
talk to each other only through dispatched actions and published events,
and the store is the single owner of mutable state.

Core principles:
- Immutable state snapshots, pure reducers
- One event bus and one store per session, passed in explicitly
- User-facing errors become notifications at the point of detection
"""

from .state_manager import StateManager
from .selection_controller import SelectionController
from .quote_editing_engine import QuoteEditingEngine
from .fabric_type_assigner import FabricTypeAssigner
from .fee_cascade import FeeCascadeCalculator
from .workflow_service import WorkflowService
from .app_controller import AppController

__all__ = [
    "StateManager",
    "SelectionController",
    "QuoteEditingEngine",
    "FabricTypeAssigner",
    "FeeCascadeCalculator",
    "WorkflowService",
    "AppController",
]
