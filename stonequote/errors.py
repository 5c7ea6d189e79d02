"""
Pricing failures.

Anything raised from here aborts pricing for ONE piece. Advisories
(oversize joins, infeasible grain match, missing material) are never
raised; they ride on the breakdown as PricingWarning entries.
"""


class PricingError(Exception):
    """Base for all fatal per-piece pricing failures."""

    code = "PRICING_ERROR"

    def __init__(self, message: str, piece_id: str = None):
        super().__init__(message)
        self.message = message
        self.piece_id = piece_id

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message, "piece_id": self.piece_id}


class InvalidGeometry(PricingError):
    """Missing or non-positive shape dimensions for the declared shape type."""

    code = "INVALID_GEOMETRY"


class MissingRateConfig(PricingError):
    """A rate the piece needs is absent from the catalog."""

    code = "MISSING_RATE_CONFIG"


class SlabAllocationError(PricingError):
    """The slab group handed to the engine does not contain the piece being priced."""

    code = "SLAB_ALLOCATION_ERROR"
