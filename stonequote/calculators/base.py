"""
Shared helpers for every pricing calculator.

Units: dimensions arrive in millimetres; rates are per linear metre (Lm),
per square metre (m²) or per unit. Every money amount leaving a
calculator is rounded to cents with round(x, 2).
"""

import logging
import math
from typing import Optional

from ..errors import MissingRateConfig
from ..models import ServiceUnit
from ..schemas import LineItem, PricingWarning, WarningCode

logger = logging.getLogger(__name__)

UNIT_LABELS = {
    ServiceUnit.LINEAR_METRE: "Lm",
    ServiceUnit.SQUARE_METRE: "m²",
    ServiceUnit.FIXED: "ea",
}


class BaseCalculator:
    """All pricing calculators inherit from this."""

    # --- Unit conversion ---

    def mm_to_lm(self, length_mm: float) -> float:
        """Millimetres to linear metres."""
        return length_mm / 1000.0

    def sqm_from_dimensions(self, length_mm: float, width_mm: float) -> float:
        """Area in m² from two millimetre dimensions."""
        return (length_mm * width_mm) / 1_000_000.0

    def perimeter_mm(self, length_mm: float, width_mm: float) -> float:
        return 2.0 * (length_mm + width_mm)

    def positive(self, value: Optional[float]) -> bool:
        return value is not None and value > 0

    def clamp_zero(self, value: Optional[float]) -> float:
        """None and negatives count as zero."""
        if value is None:
            return 0.0
        return max(0.0, float(value))

    def ceil_div(self, total: float, size: float) -> int:
        """How many pieces of `size` cover `total`. Always rounds UP."""
        return int(math.ceil(total / size))

    # --- Money ---

    def money(self, amount: float) -> float:
        return round(amount, 2)

    def require_rate(self, rate: Optional[float], what: str, piece_id: str = None) -> float:
        """A rate the piece needs must be configured; never price it at $0 silently."""
        if rate is None:
            raise MissingRateConfig(f"No rate configured for {what}", piece_id=piece_id)
        return float(rate)

    # --- Builders ---

    def unit_label(self, unit: ServiceUnit) -> str:
        return UNIT_LABELS.get(unit, str(unit))

    def make_line_item(self, description: str, quantity: float, unit: str, rate: float,
                       minimum_charge: float = None, item_cls=LineItem, **extra):
        """
        Build a priced line item.

        base_amount = quantity × rate, floored at minimum_charge when one is set.
        The formula string shows how the total was reached so a quote can be audited.
        """
        base_amount = quantity * rate
        minimum_applied = False
        if minimum_charge is not None and base_amount > 0 and base_amount < minimum_charge:
            base_amount = minimum_charge
            minimum_applied = True

        formula = f"{quantity:.3f} {unit} × ${rate:.2f}"
        if minimum_applied:
            formula += f" (minimum ${minimum_charge:.2f})"
        total = self.money(base_amount)
        formula += f" = ${total:.2f}"

        if minimum_applied:
            extra["minimum_applied"] = True
        return item_cls(
            description=description,
            quantity=round(quantity, 4),
            unit=unit,
            rate=round(rate, 2),
            base_amount=self.money(base_amount),
            total=total,
            formula=formula,
            **extra,
        )

    def make_warning(self, code: WarningCode, message: str) -> PricingWarning:
        return PricingWarning(code=code, message=message)
