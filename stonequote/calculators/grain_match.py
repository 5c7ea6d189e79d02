"""
GrainMatchEvaluator — can the legs of an L/U piece be cut next to each other
on one slab so the grain flows across the corner join(s)?

Feasible arrangements on a single workable slab:
  END_TO_END    legs laid in a row: combined length <= max length, widest leg <= max width
  SIDE_BY_SIDE  legs stacked:      longest leg <= max length, combined width <= max width

The surcharge is a percentage of the fabrication subtotal. It is only
applied automatically when the match is feasible; an infeasible match is
reported with the surcharge it would carry and left to the caller.
"""

import logging

from ..models import ShapeType
from ..schemas import PieceSpec, ShapeGeometry, RateConfig, GrainMatchResult, WarningCode
from .base import BaseCalculator

logger = logging.getLogger(__name__)


class GrainMatchEvaluator(BaseCalculator):

    def arrangement(self, components: list, max_length: float, max_width: float):
        """First arrangement that fits, or None."""
        lengths = [c.length_mm for c in components]
        widths = [c.width_mm for c in components]
        if sum(lengths) <= max_length and max(widths) <= max_width:
            return "END_TO_END"
        if max(lengths) <= max_length and sum(widths) <= max_width:
            return "SIDE_BY_SIDE"
        return None

    def evaluate(self, piece: PieceSpec, geometry: ShapeGeometry, fabrication_subtotal: float,
                 max_length: float, max_width: float, rates: RateConfig) -> tuple:
        """Returns (GrainMatchResult or None, [PricingWarning])."""
        if geometry.shape_type == ShapeType.RECTANGLE or not piece.requires_grain_match:
            return None, []

        rate = rates.grain_matching_surcharge_rate
        surcharge = self.money(fabrication_subtotal * rate)
        formula = f"${fabrication_subtotal:.2f} × {rate * 100:.1f}% = ${surcharge:.2f}"
        fit = self.arrangement(geometry.components, max_length, max_width)

        if fit is not None:
            return GrainMatchResult(
                feasible=True,
                arrangement=fit,
                message=f"Legs fit {fit.replace('_', ' ').lower()} on one slab",
                surcharge_rate=rate,
                fabrication_subtotal_before_surcharge=fabrication_subtotal,
                surcharge=surcharge,
                applied=True,
                formula=formula,
            ), []

        message = (
            f"Grain match not possible: legs of this {geometry.shape_type.value} "
            f"do not fit together on one {max_length:.0f} x {max_width:.0f}mm slab"
        )
        applied = piece.accept_grain_match_risk
        logger.warning("Piece %s: %s (surcharge %s)", piece.id, message,
                       "applied at caller's request" if applied else "not applied")
        result = GrainMatchResult(
            feasible=False,
            message=message,
            surcharge_rate=rate,
            fabrication_subtotal_before_surcharge=fabrication_subtotal,
            surcharge=surcharge,
            applied=applied,
            formula=formula,
        )
        return result, [self.make_warning(WarningCode.GRAIN_MATCH_INFEASIBLE, message)]
