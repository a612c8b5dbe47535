"""
Per-product strategies: validation rules and item pricing.

A strategy is looked up by product key through `ProductFactory`. The
calculation pipeline and the keypad commit both go through the same
strategy so that input checks and pricing checks agree.
"""

from dataclasses import replace
from typing import Dict, Optional, Tuple
import logging

from .config_manager import ConfigManager, ValidationRule
from .errors import ConfigurationError, ValidationError
from .events import COLUMN_HEIGHT, COLUMN_TYPE, COLUMN_WIDTH
from .ui_logic.state_manager import QuoteItem

logger = logging.getLogger(__name__)


class ProductStrategy:
    """Base strategy: validation rules only, no pricing."""

    def __init__(self, product_key: str, rules: Dict[str, ValidationRule]):
        self.product_key = product_key
        self._rules = dict(rules)

    def get_validation_rules(self) -> Dict[str, ValidationRule]:
        return dict(self._rules)

    def validate_value(self, row_index: int, column: str, value: Optional[int]) -> Optional[ValidationError]:
        """Check one keypad value against the column rule. Unset values pass."""
        rule = self._rules.get(column)
        if rule is None or value is None:
            return None
        if not rule.accepts(value):
            return ValidationError(
                row_index,
                column,
                f"{rule.name} must be between {rule.min:g} and {rule.max:g}.",
                min=rule.min,
                max=rule.max,
            )
        return None

    def price_item(self, row_index: int, item: QuoteItem) -> Tuple[QuoteItem, Optional[ValidationError]]:
        raise NotImplementedError("Subclasses must implement price_item()")


class RollerBlindStrategy(ProductStrategy):
    """Prices roller blinds from the fabric type's width/drop matrix."""

    def __init__(self, product_key: str, rules: Dict[str, ValidationRule], config_manager: ConfigManager):
        super().__init__(product_key, rules)
        self.config_manager = config_manager

    def price_item(self, row_index: int, item: QuoteItem) -> Tuple[QuoteItem, Optional[ValidationError]]:
        """Return the item with `line_price` set, or unpriced plus the first problem found.

        Checks run in column order: width, height, then fabric type.
        """
        unpriced = replace(item, line_price=None)
        for column, value in ((COLUMN_WIDTH, item.width), (COLUMN_HEIGHT, item.height)):
            if value is None:
                return unpriced, ValidationError(row_index, column, f"Row #{row_index + 1}: {column} is required.")
            error = self.validate_value(row_index, column, value)
            if error is not None:
                error.message = f"Row #{row_index + 1}: {error.message}"
                return unpriced, error

        if not item.fabric_type:
            return unpriced, ValidationError(row_index, COLUMN_TYPE, f"Row #{row_index + 1}: fabric type is required.")

        matrix = self.config_manager.get_price_matrix(item.fabric_type)
        if matrix is None:
            return unpriced, ValidationError(
                row_index, COLUMN_TYPE, f"Row #{row_index + 1}: no price matrix for type '{item.fabric_type}'."
            )
        price = matrix.price_for(item.width, item.height)
        if price is None:
            return unpriced, ValidationError(
                row_index,
                COLUMN_WIDTH if item.width > matrix.widths[-1] else COLUMN_HEIGHT,
                f"Row #{row_index + 1}: size {item.width} x {item.height} exceeds the {matrix.name} price matrix.",
                max=matrix.widths[-1] if item.width > matrix.widths[-1] else matrix.drops[-1],
            )
        return replace(item, line_price=price), None


class ProductFactory:
    """Builds and caches one strategy per configured product key."""

    def __init__(self, config_manager: ConfigManager):
        self.config_manager = config_manager
        self._strategies: Dict[str, ProductStrategy] = {}

    def get_product_strategy(self, product_key: str) -> ProductStrategy:
        strategy = self._strategies.get(product_key)
        if strategy is not None:
            return strategy

        rules = self.config_manager.get_validation_rules(product_key)
        if rules is None:
            raise ConfigurationError(f"No product configured for key '{product_key}'")
        if not rules:
            raise ConfigurationError(f"Product '{product_key}' has no validation rules")
        strategy = RollerBlindStrategy(product_key, rules, self.config_manager)
        self._strategies[product_key] = strategy
        logger.debug("Created %s for '%s'", type(strategy).__name__, product_key)
        return strategy
