from __future__ import annotations

"""
Product and fee configuration loader (YAML).

Responsibilities
- Load a single configuration file holding the fee-summary rates and
  minimums, the ordered fabric type list, one price matrix per fabric
  type, and per-product validation rules for the width/height columns.
- Coerce numeric values and check structural consistency: every type in
  the sequence has a price matrix, matrix bands are strictly increasing,
  and the price grid matches the band counts.

Any problem is reported as a `ConfigurationError`; configuration faults
are never turned into user notifications.
"""

from dataclasses import dataclass
import bisect
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .errors import ConfigurationError
from .io_paths import DEFAULT_CONFIG_PATH

logger = logging.getLogger(__name__)

DEFAULT_FOCUS_DELAY = 0.1


@dataclass(frozen=True)
class F2Config:
    """Rates are percentages; minimums are currency amounts."""
    management_fee_rate: float
    management_fee_min: float
    design_fee_rate: float
    design_fee_min: float
    tax_rate: float


@dataclass(frozen=True)
class ValidationRule:
    name: str
    min: float
    max: float

    def accepts(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class PriceMatrix:
    """Price grid for one fabric type.

    `prices[d][w]` is the price for the smallest drop band `drops[d]` and
    width band `widths[w]` that fit an item.
    """
    name: str
    widths: Tuple[float, ...]
    drops: Tuple[float, ...]
    prices: Tuple[Tuple[float, ...], ...]

    def price_for(self, width: float, height: float) -> Optional[float]:
        """Return the matrix price, or None when the item exceeds the largest band."""
        w_idx = bisect.bisect_left(self.widths, width)
        d_idx = bisect.bisect_left(self.drops, height)
        if w_idx >= len(self.widths) or d_idx >= len(self.drops):
            return None
        return self.prices[d_idx][w_idx]


def _coerce_numeric(value: object, field_name: str) -> float:
    """Coerce numbers and numeric strings (with %, $ or , decorations) to float."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Non-numeric value for '{field_name}': {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        s = value.strip()
        for ch in ["%", "$", ","]:
            s = s.replace(ch, "")
        try:
            return float(s)
        except ValueError as exc:
            raise ConfigurationError(f"Non-numeric value for '{field_name}': {value!r}") from exc
    raise ConfigurationError(f"Non-numeric value for '{field_name}': {value!r}")


def _require_mapping(data: object, field_name: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"'{field_name}' must be a mapping")
    return data


def _coerce_bands(values: object, field_name: str) -> Tuple[float, ...]:
    if not isinstance(values, (list, tuple)) or not values:
        raise ConfigurationError(f"'{field_name}' must be a non-empty list")
    bands = tuple(_coerce_numeric(v, f"{field_name}[{i}]") for i, v in enumerate(values))
    for i in range(1, len(bands)):
        if bands[i] <= bands[i - 1]:
            raise ConfigurationError(f"'{field_name}' must be strictly increasing; got {list(bands)}")
    return bands


def _parse_f2(data: object) -> F2Config:
    block = _require_mapping(data, "f2")
    values = {}
    for key in F2Config.__dataclass_fields__:
        if key not in block:
            raise ConfigurationError(f"f2 is missing '{key}'")
        values[key] = _coerce_numeric(block[key], f"f2.{key}")
    return F2Config(**values)


def _parse_price_matrix(code: str, data: object) -> PriceMatrix:
    block = _require_mapping(data, f"price_matrices.{code}")
    widths = _coerce_bands(block.get("widths"), f"price_matrices.{code}.widths")
    drops = _coerce_bands(block.get("drops"), f"price_matrices.{code}.drops")
    grid = block.get("prices")
    if not isinstance(grid, (list, tuple)) or len(grid) != len(drops):
        raise ConfigurationError(f"price_matrices.{code}.prices must have one row per drop ({len(drops)})")
    prices = []
    for d, row in enumerate(grid):
        if not isinstance(row, (list, tuple)) or len(row) != len(widths):
            raise ConfigurationError(
                f"price_matrices.{code}.prices[{d}] must have one price per width ({len(widths)})"
            )
        prices.append(tuple(_coerce_numeric(p, f"price_matrices.{code}.prices[{d}][{w}]") for w, p in enumerate(row)))
    return PriceMatrix(name=str(block.get("name") or code), widths=widths, drops=drops, prices=tuple(prices))


def _parse_rules(product_key: str, data: object) -> Dict[str, ValidationRule]:
    block = _require_mapping(data, f"products.{product_key}.validation_rules")
    rules: Dict[str, ValidationRule] = {}
    for column, rule in block.items():
        rule = _require_mapping(rule, f"products.{product_key}.validation_rules.{column}")
        lo = _coerce_numeric(rule.get("min"), f"{product_key}.{column}.min")
        hi = _coerce_numeric(rule.get("max"), f"{product_key}.{column}.max")
        if lo > hi:
            raise ConfigurationError(f"{product_key}.{column}: min {lo} exceeds max {hi}")
        rules[str(column)] = ValidationRule(name=str(rule.get("name") or column), min=lo, max=hi)
    return rules


class ConfigManager:
    """Read-only access to product and fee configuration."""

    def __init__(self, data: Mapping[str, Any], source: Optional[Path] = None):
        """Validate and index an already-parsed configuration mapping.

        Args:
            data: Parsed configuration (see `quote_config.yaml` for the layout)
            source: Originating file, used in log messages only
        """
        data = _require_mapping(data, "config")
        self.source = source
        self._f2 = _parse_f2(data.get("f2"))

        sequence = data.get("fabric_type_sequence") or []
        if not isinstance(sequence, (list, tuple)):
            raise ConfigurationError("'fabric_type_sequence' must be a list of type codes")
        self._fabric_types: List[str] = [str(code) for code in sequence]
        if len(set(self._fabric_types)) != len(self._fabric_types):
            raise ConfigurationError(f"Duplicate fabric type codes in {self._fabric_types}")

        matrices = _require_mapping(data.get("price_matrices") or {}, "price_matrices")
        self._price_matrices: Dict[str, PriceMatrix] = {
            str(code): _parse_price_matrix(str(code), block) for code, block in matrices.items()
        }
        missing = [code for code in self._fabric_types if code not in self._price_matrices]
        if missing:
            raise ConfigurationError(f"No price matrix for fabric type(s): {', '.join(missing)}")

        products = _require_mapping(data.get("products") or {}, "products")
        self._rules: Dict[str, Dict[str, ValidationRule]] = {}
        for product_key, block in products.items():
            block = _require_mapping(block, f"products.{product_key}")
            self._rules[str(product_key)] = _parse_rules(str(product_key), block.get("validation_rules") or {})

        self._focus_delay = _coerce_numeric(data.get("focus_delay_seconds", DEFAULT_FOCUS_DELAY), "focus_delay_seconds")

        logger.info(
            "Configuration loaded%s: %d fabric types, %d products",
            f" from {source}" if source else "",
            len(self._fabric_types),
            len(self._rules),
        )

    @classmethod
    def from_file(cls, path: Optional[Path] = None) -> "ConfigManager":
        """Load a YAML configuration file (defaults to the packaged one)."""
        path = Path(path) if path else DEFAULT_CONFIG_PATH
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Cannot read configuration {path}: {exc}") from exc
        return cls(data, source=path)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigManager":
        return cls(data)

    def get_f2_config(self) -> F2Config:
        return self._f2

    def get_fabric_type_sequence(self) -> List[str]:
        return list(self._fabric_types)

    def get_price_matrix(self, fabric_type: str) -> Optional[PriceMatrix]:
        return self._price_matrices.get(fabric_type)

    def get_validation_rules(self, product_key: str) -> Optional[Dict[str, ValidationRule]]:
        rules = self._rules.get(product_key)
        return dict(rules) if rules is not None else None

    def product_keys(self) -> Sequence[str]:
        return sorted(self._rules)

    def get_focus_delay(self) -> float:
        """Delay before the first-cell focus request at start-up, in seconds."""
        return self._focus_delay
