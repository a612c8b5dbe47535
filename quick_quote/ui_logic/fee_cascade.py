"""
Fee summary cascade.

Whenever `STATE_CHANGED` fires while the fee summary tab is active, the
derived fee fields are recomputed from the current product's summary:

    accessory_fee       = winder + motor + remote + charger + cord
    subtotal            = total_price + accessory_fee
    management_fee      = 0 if excluded else max(subtotal * rate / 100, min)
    design_fee          = 0 if excluded else max(subtotal * rate / 100, min)
    subtotal_after_fees = subtotal + management_fee + design_fee
    tax                 = 0 if excluded else subtotal_after_fees * rate / 100
    total               = subtotal_after_fees + tax

Each field is written with its own `set_f2_value` dispatch. When a derived
value actually changed, the handler republishes `STATE_CHANGED` once, after
the publish that triggered it has reached every subscriber, so the last
snapshot anyone receives carries the fee values. The republish runs with
the reentrancy flag set and never starts a second cascade.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping
import logging

from ..events import F2_SUMMARY_TAB_ID
from . import actions
from .base_handler import BaseHandler
from .state_manager import F2_DERIVED_FIELDS, AppState, F2State, ProductSummary

logger = logging.getLogger(__name__)

ACCESSORY_KEYS = ("winder", "motor", "remote", "charger", "cord")


@dataclass(frozen=True)
class FeeBreakdown:
    total_price: float
    total_count: int
    accessory_fee: float
    subtotal: float
    management_fee: float
    design_fee: float
    subtotal_after_fees: float
    tax: float
    total: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def calculate_fee(base: float, rate: float, minimum: float, excluded: bool) -> float:
    """Percentage fee with a floor; zero when the fee is excluded."""
    if excluded:
        return 0
    return max(base * rate / 100, minimum)


def compute_fee_cascade(summary: ProductSummary, f2_config, f2_state: F2State) -> FeeBreakdown:
    """Run the ordered fee pipeline for one product summary."""
    accessories = summary.accessories or {}
    accessory_fee = sum(accessories.get(key) or 0 for key in ACCESSORY_KEYS)
    subtotal = summary.total_price + accessory_fee

    management_fee = calculate_fee(
        subtotal, f2_config.management_fee_rate, f2_config.management_fee_min, f2_state.management_fee_excluded
    )
    design_fee = calculate_fee(
        subtotal, f2_config.design_fee_rate, f2_config.design_fee_min, f2_state.design_fee_excluded
    )
    subtotal_after_fees = subtotal + management_fee + design_fee
    tax = 0 if f2_state.tax_excluded else subtotal_after_fees * f2_config.tax_rate / 100

    return FeeBreakdown(
        total_price=summary.total_price,
        total_count=summary.total_count,
        accessory_fee=accessory_fee,
        subtotal=subtotal,
        management_fee=management_fee,
        design_fee=design_fee,
        subtotal_after_fees=subtotal_after_fees,
        tax=tax,
        total=subtotal_after_fees + tax,
    )


class FeeCascadeCalculator(BaseHandler):
    """Keeps `ui.f2` in step with the current product's summary."""

    def __init__(self, state_manager, event_bus, config_manager):
        super().__init__(state_manager, event_bus)
        self.config_manager = config_manager
        self._recalculating = False
        self._republish_pending = False
        self.passes = 0

    def handle_state_changed(self, state: AppState) -> None:
        if self._recalculating:
            return
        if self.state_manager.get_state().ui.active_tab_id != F2_SUMMARY_TAB_ID:
            return
        self._recalculating = True
        try:
            changed = self.recalculate()
        finally:
            self._recalculating = False
        if changed and not self._republish_pending:
            self._republish_pending = True
            self.event_bus.call_when_idle(self._republish)

    def _republish(self) -> None:
        self._republish_pending = False
        self._recalculating = True
        try:
            self._publish_state_change()
        finally:
            self._recalculating = False

    def recalculate(self) -> bool:
        """Dispatch every derived field; return True if any value changed."""
        state = self.state_manager.get_state()
        before = state.ui.f2.derived_values()
        breakdown = compute_fee_cascade(
            state.quote_data.current().summary,
            self.config_manager.get_f2_config(),
            state.ui.f2,
        )
        values = breakdown.as_dict()
        for key in F2_DERIVED_FIELDS:
            self.state_manager.dispatch(actions.set_f2_value(key, values[key]))
        self.passes += 1

        changed = before != self.state_manager.get_state().ui.f2.derived_values()
        logger.debug("Fee cascade pass %d: total %.2f (changed=%s)", self.passes, breakdown.total, changed)
        return changed

    def handle_fee_exclusion_toggled(self, payload: Mapping[str, Any]) -> None:
        self.state_manager.dispatch(actions.toggle_f2_fee_exclusion(payload["fee_type"]))
        self._publish_state_change()
