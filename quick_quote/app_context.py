"""
Session wiring.

`build_application` constructs the event bus, the store and every engine
exactly once and passes them to each other explicitly. Nothing in the
core reaches for a module-level singleton.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from .calculation import CalculationService
from .config_manager import ConfigManager
from .event_bus import EventBus
from .products import ProductFactory
from .ui_logic.app_controller import AppController
from .ui_logic.dialogs import DialogBroker
from .ui_logic.fabric_type_assigner import FabricTypeAssigner
from .ui_logic.fee_cascade import FeeCascadeCalculator
from .ui_logic.focus_service import FocusService
from .ui_logic.quote_editing_engine import QuoteEditingEngine
from .ui_logic.scheduler import TimerScheduler
from .ui_logic.selection_controller import SelectionController
from .ui_logic.state_manager import AppState, QuoteData, StateManager, initial_quote_data
from .ui_logic.workflow_service import WorkflowService

logger = logging.getLogger(__name__)


@dataclass
class QuoteApplication:
    """Every component of one quoting session."""
    config_manager: ConfigManager
    event_bus: EventBus
    state_manager: StateManager
    scheduler: object
    focus_service: object
    product_factory: ProductFactory
    calculation_service: CalculationService
    dialog_broker: DialogBroker
    selection_controller: SelectionController
    editing_engine: QuoteEditingEngine
    fabric_type_assigner: FabricTypeAssigner
    fee_calculator: FeeCascadeCalculator
    workflow_service: WorkflowService
    controller: AppController

    def get_state(self) -> AppState:
        return self.state_manager.get_state()

    def publish(self, event, payload=None) -> None:
        self.event_bus.publish(event, payload)

    def run(self) -> None:
        self.controller.run()

    def shutdown(self) -> None:
        self.controller.shutdown()


def build_application(
    config_manager: Optional[ConfigManager] = None,
    scheduler=None,
    focus_service=None,
    product_key: Optional[str] = None,
    event_bus: Optional[EventBus] = None,
) -> QuoteApplication:
    """Construct a fully wired session.

    Args:
        config_manager: Configuration; defaults to the packaged YAML file
        scheduler: Delayed-callback scheduler; defaults to `TimerScheduler`
        focus_service: Focus policy collaborator; defaults to `FocusService`
        product_key: Product to start with; defaults to the first configured one
        event_bus: Bus to wire into; defaults to a new one. Handlers already
            subscribed to it run before the core handlers
    """
    config_manager = config_manager or ConfigManager.from_file()
    scheduler = scheduler or TimerScheduler()

    keys = config_manager.product_keys()
    product_key = product_key or (keys[0] if keys else None)
    quote_data = initial_quote_data(product_key) if product_key else QuoteData()

    event_bus = event_bus or EventBus()
    state_manager = StateManager(initial_state=AppState(quote_data=quote_data))
    focus_service = focus_service or FocusService(state_manager)
    product_factory = ProductFactory(config_manager)
    calculation_service = CalculationService()
    dialog_broker = DialogBroker(event_bus)

    selection_controller = SelectionController(
        state_manager, event_bus, focus_service, product_factory, config_manager
    )
    editing_engine = QuoteEditingEngine(
        state_manager,
        event_bus,
        focus_service,
        product_factory,
        calculation_service,
        config_manager,
        dialog_broker,
    )
    fabric_type_assigner = FabricTypeAssigner(state_manager, event_bus, config_manager, dialog_broker)
    fee_calculator = FeeCascadeCalculator(state_manager, event_bus, config_manager)
    workflow_service = WorkflowService(state_manager, event_bus, config_manager, scheduler)

    controller = AppController(
        event_bus,
        state_manager,
        selection_controller,
        editing_engine,
        fabric_type_assigner,
        fee_calculator,
        workflow_service,
        dialog_broker,
    )
    logger.info("Application built for product '%s'", quote_data.current_product)

    return QuoteApplication(
        config_manager=config_manager,
        event_bus=event_bus,
        state_manager=state_manager,
        scheduler=scheduler,
        focus_service=focus_service,
        product_factory=product_factory,
        calculation_service=calculation_service,
        dialog_broker=dialog_broker,
        selection_controller=selection_controller,
        editing_engine=editing_engine,
        fabric_type_assigner=fabric_type_assigner,
        fee_calculator=fee_calculator,
        workflow_service=workflow_service,
        controller=controller,
    )
