"""
MaterialAllocationEngine — material cost for one piece.

PER_SQM   area × (1 + waste%) × price per m²
PER_SLAB  the slab group (every piece cut from the same slabs) buys
          ceil(group area / workable slab area) slabs; that cost is shared
          by area.
          Shares are allocated to the cent with the largest-remainder
          method so the pieces of a group always add up to the group cost.
"""

import logging
import math

from ..errors import MissingRateConfig, SlabAllocationError
from ..models import PricingBasis
from ..schemas import (
    PieceSpec, ShapeGeometry, MaterialCatalogEntry, MaterialBreakdown,
    SlabGroup, SlabGroupMember, WarningCode,
)
from .base import BaseCalculator
from .slab_sizes import DEFAULT_EDGE_TRIM_MM, workable_area_sqm

logger = logging.getLogger(__name__)

MIN_WASTE_PERCENT = 0.0
MAX_WASTE_PERCENT = 50.0


def build_slab_group(group_id: str, material: MaterialCatalogEntry, members: list,
                     edge_trim_mm: float = DEFAULT_EDGE_TRIM_MM) -> SlabGroup:
    """members: [(piece_id, area_sqm)] in the order the pieces were supplied."""
    return SlabGroup(
        group_id=group_id,
        slab_area_sqm=workable_area_sqm(material, edge_trim_mm),
        members=tuple(SlabGroupMember(piece_id=pid, area_sqm=area) for pid, area in members),
    )


def allocate_cents(total: float, weights: list) -> list:
    """
    Split `total` dollars across `weights` so the parts sum to total exactly.

    Each part gets the floor of its share in cents; leftover cents go to the
    largest fractional remainders, earlier entries winning ties.
    """
    total_cents = int(round(total * 100))
    if not weights:
        return []
    weight_sum = sum(weights)
    if weight_sum <= 0:
        weights = [1.0] * len(weights)
        weight_sum = float(len(weights))

    exact = [total_cents * w / weight_sum for w in weights]
    cents = [int(math.floor(e)) for e in exact]
    leftover = total_cents - sum(cents)
    order = sorted(range(len(weights)), key=lambda i: (-(exact[i] - cents[i]), i))
    for i in order[:leftover]:
        cents[i] += 1
    return [c / 100 for c in cents]


class MaterialAllocationEngine(BaseCalculator):

    def slab_count(self, group: SlabGroup) -> int:
        if group.total_area_sqm <= 0 or group.slab_area_sqm <= 0:
            return 0
        # Guard against 2.0000000001 slabs from float area sums
        return int(math.ceil(round(group.total_area_sqm / group.slab_area_sqm, 9)))

    def group_shares(self, group: SlabGroup, price_per_slab: float) -> dict:
        """piece_id → allocated material cost for every member of the group."""
        group_cost = self.money(self.slab_count(group) * price_per_slab)
        amounts = allocate_cents(group_cost, [m.area_sqm for m in group.members])
        return {m.piece_id: amount for m, amount in zip(group.members, amounts)}

    def allocate(self, piece: PieceSpec, geometry: ShapeGeometry,
                 material: MaterialCatalogEntry = None, slab_group: SlabGroup = None,
                 edge_trim_mm: float = DEFAULT_EDGE_TRIM_MM) -> tuple:
        """Returns (MaterialBreakdown or None, [PricingWarning])."""
        if material is None:
            message = (f"No material assigned to piece {piece.id}"
                       if not piece.material_id
                       else f"Material '{piece.material_id}' not found in catalog")
            return None, [self.make_warning(WarningCode.INCOMPLETE_MATERIAL,
                                            message + "; material cost excluded")]

        if material.pricing_basis == PricingBasis.PER_SLAB:
            return self._per_slab(piece, geometry, material, slab_group, edge_trim_mm)
        return self._per_sqm(piece, geometry, material)

    def _per_sqm(self, piece, geometry, material):
        price = material.price_per_sqm
        if price is None:
            raise MissingRateConfig(
                f"Material '{material.id}' is priced per m² but has no price_per_sqm",
                piece_id=piece.id,
            )

        warnings = []
        waste = material.waste_factor_percent or 0.0
        clamped = min(MAX_WASTE_PERCENT, max(MIN_WASTE_PERCENT, waste))
        if clamped != waste:
            logger.warning("Material %s waste factor %.1f%% clamped to %.1f%%",
                           material.id, waste, clamped)
            warnings.append(self.make_warning(
                WarningCode.WASTE_FACTOR_CLAMPED,
                f"Waste factor {waste:g}% is outside {MIN_WASTE_PERCENT:g}-{MAX_WASTE_PERCENT:g}%;"
                f" {clamped:g}% was used",
            ))

        area = geometry.total_area_sqm
        adjusted = area * (1 + clamped / 100)
        total = self.money(adjusted * price)
        return MaterialBreakdown(
            material_id=material.id,
            material_name=material.name,
            pricing_basis=PricingBasis.PER_SQM,
            area_sqm=round(area, 4),
            rate=round(price, 2),
            waste_factor_percent=clamped,
            adjusted_area_sqm=round(adjusted, 4),
            total=total,
            formula=f"{area:.4f} m² × (1 + {clamped:g}%) × ${price:.2f} = ${total:.2f}",
        ), warnings

    def _per_slab(self, piece, geometry, material, slab_group, edge_trim_mm):
        price = material.price_per_slab
        if price is None:
            raise MissingRateConfig(
                f"Material '{material.id}' is priced per slab but has no price_per_slab",
                piece_id=piece.id,
            )

        warnings = []
        if slab_group is None:
            slab_group = build_slab_group(piece.slab_group_id or piece.id, material,
                                          [(piece.id, geometry.total_area_sqm)], edge_trim_mm)
            warnings.append(self.make_warning(
                WarningCode.SLAB_GROUP_ASSUMED,
                f"No slab group supplied; piece {piece.id} priced as the only piece on its slab(s)",
            ))

        member = slab_group.member(piece.id)
        if member is None:
            raise SlabAllocationError(
                f"Slab group '{slab_group.group_id}' does not contain piece {piece.id}",
                piece_id=piece.id,
            )

        slab_count = self.slab_count(slab_group)
        group_cost = self.money(slab_count * price)
        total = self.group_shares(slab_group, price)[piece.id]
        group_area = slab_group.total_area_sqm
        share = (member.area_sqm / group_area * 100) if group_area > 0 else 0.0

        return MaterialBreakdown(
            material_id=material.id,
            material_name=material.name,
            pricing_basis=PricingBasis.PER_SLAB,
            area_sqm=round(member.area_sqm, 4),
            rate=round(price, 2),
            slab_group_id=slab_group.group_id,
            slab_count=slab_count,
            slab_area_sqm=round(slab_group.slab_area_sqm, 4),
            group_total_area_sqm=round(group_area, 4),
            share_percent=round(share, 2),
            group_cost=group_cost,
            total=total,
            formula=(f"{slab_count} slab(s) × ${price:.2f} = ${group_cost:.2f};"
                     f" {share:.2f}% share = ${total:.2f}"),
        ), warnings
