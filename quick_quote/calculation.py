"""
Calculation and validation pipeline for the current product.

`calculate_and_sum` walks every item once, prices what it can and keeps
the first validation failure in ascending row order. Data writes are never
short-circuited: the returned quote always contains every priced row,
even when a failure was found. Only the "figures are trustworthy" status
depends on the absence of errors.
"""

from dataclasses import dataclass, replace
from typing import List, Optional
import logging

from .errors import ValidationError
from .ui_logic.state_manager import QuoteData, QuoteItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculationResult:
    updated_quote_data: QuoteData
    first_error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.first_error is None


class CalculationService:
    """Stateless pricing pass over the current product."""

    def calculate_and_sum(self, quote_data: QuoteData, product_strategy) -> CalculationResult:
        """Price every non-blank item and recompute the product summary.

        Args:
            quote_data: Snapshot to price; it is not modified
            product_strategy: Strategy providing `price_item(row_index, item)`

        Returns:
            CalculationResult with the recomputed quote and the first error, if any
        """
        product = quote_data.current()
        first_error: Optional[ValidationError] = None
        priced: List[QuoteItem] = []
        error_count = 0

        for row_index, item in enumerate(product.items):
            if item.is_empty():
                priced.append(replace(item, line_price=None))
                continue
            new_item, error = product_strategy.price_item(row_index, item)
            priced.append(new_item)
            if error is not None:
                error_count += 1
                if first_error is None:
                    first_error = error

        total_price = sum(item.line_price for item in priced if item.line_price is not None)
        total_count = sum(1 for item in priced if item.line_price is not None)
        summary = replace(product.summary, total_price=total_price, total_count=total_count)
        updated = quote_data.with_current(replace(product, items=tuple(priced), summary=summary))

        if first_error is not None:
            logger.info("Calculation found %d invalid item(s); first: %s", error_count, first_error)
        else:
            logger.info("Calculation complete: %d item(s), total %.2f", total_count, total_price)
        return CalculationResult(updated_quote_data=updated, first_error=first_error)
