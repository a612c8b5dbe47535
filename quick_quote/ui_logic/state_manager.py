"""
Framework-agnostic state management for the quick quote screen.

This module holds the single authoritative state tree and the store that
applies action-based transitions to it. Every dataclass is frozen: a
transition always builds a new value and never writes a field in place.
The store never publishes events; whoever dispatches is responsible for
announcing `STATE_CHANGED` on the event bus.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, FrozenSet, Mapping, Optional, Tuple
import logging
import threading

from ..errors import ConfigurationError
from ..events import DEFAULT_TAB_ID

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_KEY = "roller_blind"


@dataclass(frozen=True)
class QuoteItem:
    """One priced line. Its identity is its position in the product's items."""
    width: Optional[int] = None
    height: Optional[int] = None
    fabric_type: Optional[str] = None
    line_price: Optional[float] = None

    def is_empty(self) -> bool:
        """True when width, height and fabric type are all unset."""
        return self.width is None and self.height is None and self.fabric_type is None

    def has_any_size(self) -> bool:
        return self.width is not None or self.height is not None

    def has_full_size(self) -> bool:
        return self.width is not None and self.height is not None


@dataclass(frozen=True)
class ProductSummary:
    """Totals produced by the last calculation plus accessory amounts."""
    total_price: float = 0.0
    total_count: int = 0
    accessories: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Product:
    items: Tuple[QuoteItem, ...] = (QuoteItem(),)
    summary: ProductSummary = field(default_factory=ProductSummary)


@dataclass(frozen=True)
class QuoteData:
    """All products of the quote; exactly one of them is current."""
    current_product: str = DEFAULT_PRODUCT_KEY
    products: Mapping[str, Product] = field(default_factory=lambda: {DEFAULT_PRODUCT_KEY: Product()})

    def current(self) -> Product:
        return self.products.get(self.current_product, Product(items=()))

    def with_current(self, product: Product) -> "QuoteData":
        """Return a copy where the current product is replaced by `product`."""
        products = dict(self.products)
        products[self.current_product] = product
        return replace(self, products=products)


@dataclass(frozen=True)
class ActiveCell:
    row_index: int
    column: str


# Fee fields that are always derived by the fee cascade
F2_DERIVED_FIELDS: Tuple[str, ...] = (
    "total_price",
    "total_count",
    "accessory_fee",
    "subtotal",
    "management_fee",
    "design_fee",
    "subtotal_after_fees",
    "tax",
    "total",
)

# fee type -> exclusion flag attribute on F2State
F2_EXCLUSION_FLAGS: Dict[str, str] = {
    "management_fee": "management_fee_excluded",
    "design_fee": "design_fee_excluded",
    "tax": "tax_excluded",
}


@dataclass(frozen=True)
class F2State:
    """Fee summary panel values.

    - Derived fields are written only by the fee cascade
    - Exclusion flags are the user-writable part
    """
    total_price: Optional[float] = None
    total_count: Optional[int] = None
    accessory_fee: Optional[float] = None
    subtotal: Optional[float] = None
    management_fee: Optional[float] = None
    design_fee: Optional[float] = None
    subtotal_after_fees: Optional[float] = None
    tax: Optional[float] = None
    total: Optional[float] = None
    management_fee_excluded: bool = False
    design_fee_excluded: bool = False
    tax_excluded: bool = False

    def derived_values(self) -> Dict[str, Optional[float]]:
        return {name: getattr(self, name) for name in F2_DERIVED_FIELDS}


@dataclass(frozen=True)
class UIState:
    """Transient editing state of the quick quote screen."""
    active_cell: Optional[ActiveCell] = None
    input_value: str = ""
    input_mode: str = ""
    multi_select_selected_indexes: FrozenSet[int] = frozenset()
    sum_outdated: bool = False
    f2: F2State = field(default_factory=F2State)
    active_tab_id: str = DEFAULT_TAB_ID


@dataclass(frozen=True)
class AppState:
    """Aggregate state for the whole application."""
    quote_data: QuoteData = field(default_factory=QuoteData)
    ui: UIState = field(default_factory=UIState)


def initial_quote_data(product_key: str = DEFAULT_PRODUCT_KEY) -> QuoteData:
    """A quote holding one product with a single blank row."""
    return QuoteData(current_product=product_key, products={product_key: Product()})


Reducer = Callable[[AppState, Mapping], AppState]


class StateManager:
    """
    The single owner of mutable application state.

    `dispatch` looks up the action's type in the reducer table, applies the
    pure reducer and stores the result. Callers read snapshots through
    `get_state` and must never mutate them.
    """

    def __init__(self, reducers: Optional[Mapping[str, Reducer]] = None, initial_state: Optional[AppState] = None):
        """Initialize the store.

        Args:
            reducers: Mapping of action type to reducer; defaults to the full
                quote and UI reducer table
            initial_state: Starting snapshot; defaults to an empty quote
        """
        if reducers is None:
            from .reducers import REDUCERS
            reducers = REDUCERS
        self._reducers: Dict[str, Reducer] = dict(reducers)
        self._state = initial_state or AppState()
        self._lock = threading.RLock()
        self._dispatch_count = 0

    def get_state(self) -> AppState:
        """Get the current application state."""
        return self._state

    @property
    def dispatch_count(self) -> int:
        """Number of actions applied since construction."""
        return self._dispatch_count

    def dispatch(self, action) -> None:
        """Apply `action` to the current state.

        Raises:
            ConfigurationError: if no reducer is registered for the action type
        """
        reducer = self._reducers.get(action.type)
        if reducer is None:
            raise ConfigurationError(f"No reducer registered for action type '{action.type}'")

        with self._lock:
            new_state = reducer(self._state, action.payload)
            if not isinstance(new_state, AppState):
                raise ConfigurationError(f"Reducer for '{action.type}' returned {type(new_state).__name__}")
            self._state = new_state
            self._dispatch_count += 1
        logger.debug("Dispatched %s %s", action.type, dict(action.payload))
