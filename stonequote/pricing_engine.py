"""
Piece Pricing Engine.

Composes geometry, edge measurement, fabrication, oversize/joins, grain
matching and material allocation into one PiecePricingBreakdown.
Pure math: no database, no clock, nothing cached between calls. The same
inputs always give the same breakdown in the same order.

Input: PieceSpec + MaterialCatalogEntry + RateConfig (+ SlabGroup for per-slab materials)
Output: PiecePricingBreakdown
"""

import logging

from .errors import PricingError
from .models import PricingBasis, ShapeType
from .schemas import (
    PieceSpec, MaterialCatalogEntry, RateConfig, SlabGroup,
    PiecePricingBreakdown, CostLine, PricedPiece, FailedPiece,
)
from .calculators.shape_geometry import ShapeGeometryResolver
from .calculators.edge_measurer import EdgeLinearMeasurer
from .calculators.fabrication import FabricationLineItemCalculator
from .calculators.oversize import OversizeJoinResolver
from .calculators.grain_match import GrainMatchEvaluator
from .calculators.material_allocation import MaterialAllocationEngine, build_slab_group

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Prices one piece, or a batch of pieces, from an immutable rate snapshot.
    """

    def __init__(self):
        self.geometry = ShapeGeometryResolver()
        self.edges = EdgeLinearMeasurer()
        self.fabrication = FabricationLineItemCalculator()
        self.oversize = OversizeJoinResolver()
        self.grain_match = GrainMatchEvaluator()
        self.materials = MaterialAllocationEngine()

    def preview_geometry(self, shape_type: ShapeType, shape_config=None,
                         length_mm: float = None, width_mm: float = None):
        """Lenient geometry for live editing. Never raises on incomplete dimensions."""
        return self.geometry.preview(shape_type, shape_config, length_mm, width_mm)

    def price_piece(self, piece: PieceSpec, material: MaterialCatalogEntry, rates: RateConfig,
                    slab_group: SlabGroup = None) -> PiecePricingBreakdown:
        """
        Full itemized breakdown for one piece.

        Raises:
            InvalidGeometry: shape dimensions missing, non-positive or inconsistent
            MissingRateConfig: a rate this piece needs is not configured
            SlabAllocationError: slab_group does not contain this piece
        """
        try:
            return self._price(piece, material, rates, slab_group)
        except PricingError as e:
            if e.piece_id is None:
                e.piece_id = piece.id
            raise

    def price_pieces(self, pieces: list, materials: dict, rates: RateConfig) -> list:
        """
        Price a batch. Slab groups are built once from this snapshot of the
        pieces, then every piece is priced independently: a failure on one
        piece is reported as a FailedPiece and never blocks the others.

        Args:
            pieces: [PieceSpec]
            materials: {material_id: MaterialCatalogEntry}
            rates: RateConfig

        Returns:
            [PricedPiece | FailedPiece] in the order the pieces were given
        """
        groups = self.build_slab_groups(pieces, materials, rates)
        outcomes = []
        for piece in pieces:
            material = materials.get(piece.material_id) if piece.material_id else None
            group = groups.get(piece.id)
            try:
                breakdown = self.price_piece(piece, material, rates, group)
                outcomes.append(PricedPiece(piece_id=piece.id, breakdown=breakdown))
            except PricingError as e:
                logger.warning("Piece %s failed to price: %s %s", piece.id, e.code, e.message)
                outcomes.append(FailedPiece(piece_id=piece.id, error=e.code, detail=e.message))

        failed = sum(1 for o in outcomes if isinstance(o, FailedPiece))
        logger.info("Priced batch of %d piece(s): %d failed", len(pieces), failed)
        return outcomes

    def build_slab_groups(self, pieces: list, materials: dict, rates: RateConfig) -> dict:
        """
        {piece_id: SlabGroup} for every per-slab piece that names a slab group.

        Pieces join a group when they share slab_group_id and material. A
        sibling that cannot be priced (bad geometry, unknown edge, missing
        rate) counts as 0 m², so the pieces that do price still cover the
        whole slab cost between them.
        """
        members = {}
        for piece in pieces:
            material = materials.get(piece.material_id) if piece.material_id else None
            if (material is None or piece.slab_group_id is None
                    or material.pricing_basis != PricingBasis.PER_SLAB):
                continue
            try:
                area = self._fabricate(piece, material, rates)["geometry"].total_area_sqm
            except PricingError as e:
                logger.warning("Piece %s left out of slab group %s: %s %s",
                               piece.id, piece.slab_group_id, e.code, e.message)
                area = 0.0
            members.setdefault((piece.slab_group_id, material.id), []).append((piece.id, area))

        groups = {}
        for (group_id, material_id), group_members in members.items():
            group = build_slab_group(group_id, materials[material_id], group_members,
                                     rates.slab_edge_trim_mm)
            for piece_id, _ in group_members:
                groups[piece_id] = group
        return groups

    def _price(self, piece, material, rates, slab_group):
        parts = self._fabricate(piece, material, rates)
        geometry = parts["geometry"]
        fabrication = parts["fabrication"]
        oversize = parts["oversize"]
        grain_match = parts["grain_match"]
        warnings = parts["warnings"]

        # --- Material ---
        material_breakdown, material_warnings = self.materials.allocate(
            piece, geometry, material, slab_group, rates.slab_edge_trim_mm,
        )
        warnings.extend(material_warnings)

        cost_lines = self._cost_lines(fabrication, oversize, grain_match, material_breakdown)
        piece_total = round(sum(line.total for line in cost_lines), 2)

        logger.info("Priced piece %s (%s): total %.2f, %d warning(s)",
                    piece.id, piece.shape_type.value, piece_total, len(warnings))

        return PiecePricingBreakdown(
            piece_id=piece.id,
            piece_name=piece.name,
            shape_type=piece.shape_type,
            thickness_mm=piece.thickness_mm,
            lamination_method=piece.lamination_method(rates.base_thickness_mm),
            requires_grain_match=piece.requires_grain_match and piece.shape_type != ShapeType.RECTANGLE,
            geometry=geometry,
            fabrication=fabrication,
            oversize=oversize,
            grain_match=grain_match,
            materials=material_breakdown,
            edge_runs=parts["runs"],
            cost_lines=cost_lines,
            warnings=warnings,
            piece_total=piece_total,
        )

    def _fabricate(self, piece, material, rates) -> dict:
        """Everything except the material cost. Raises PricingError like price_piece."""
        geometry = self.geometry.resolve(piece)
        runs = self.edges.measure(piece, geometry)
        fabrication = self.fabrication.calculate(piece, geometry, runs, rates)
        warnings = list(geometry.warnings)

        # --- Oversize / joins ---
        oversize, oversize_warnings = self.oversize.resolve(piece, geometry, material, rates)
        warnings.extend(oversize_warnings)

        # --- Grain matching ---
        max_length, max_width = self.oversize.workable_maximum(material, rates)
        grain_match, grain_warnings = self.grain_match.evaluate(
            piece, geometry, fabrication.subtotal, max_length, max_width, rates,
        )
        warnings.extend(grain_warnings)
        if oversize is not None and grain_match is not None:
            oversize.grain_matching_surcharge_rate = grain_match.surcharge_rate
            oversize.fabrication_subtotal_before_surcharge = grain_match.fabrication_subtotal_before_surcharge
            oversize.grain_matching_surcharge = grain_match.surcharge if grain_match.applied else 0.0

        return {
            "geometry": geometry,
            "runs": runs,
            "fabrication": fabrication,
            "oversize": oversize,
            "grain_match": grain_match,
            "warnings": warnings,
        }

    def _cost_lines(self, fabrication, oversize, grain_match, material_breakdown) -> list:
        """Rendering order: cutting, polishing, edges, join, grain match, cutouts, lamination, material, installation."""
        lines = [
            CostLine(category="cutting", description=fabrication.cutting.description,
                     total=fabrication.cutting.total),
            CostLine(category="polishing", description=fabrication.polishing.description,
                     total=fabrication.polishing.total),
        ]
        for item in fabrication.edges:
            lines.append(CostLine(category="edge", description=item.description, total=item.total))
        if oversize is not None:
            lines.append(CostLine(
                category="join",
                description=f"Join ({oversize.strategy.value.lower()}, {oversize.join_length_lm:.2f} Lm)",
                total=oversize.join_cost,
            ))
        if grain_match is not None and grain_match.applied:
            lines.append(CostLine(
                category="grain_match",
                description=f"Grain matching surcharge ({grain_match.surcharge_rate * 100:g}%)",
                total=grain_match.surcharge,
            ))
        for item in fabrication.cutouts:
            lines.append(CostLine(category="cutout", description=item.description, total=item.total))
        lines.append(CostLine(category="lamination", description=fabrication.lamination.description,
                              total=fabrication.lamination.total))
        if material_breakdown is not None:
            lines.append(CostLine(category="material", description=material_breakdown.material_name,
                                  total=material_breakdown.total))
        lines.append(CostLine(category="installation", description=fabrication.installation.description,
                              total=fabrication.installation.total))
        return lines
