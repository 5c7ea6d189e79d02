"""
FabricationLineItemCalculator — cutting, polishing, edge profiles, cutouts,
lamination and installation for one piece.

Cutting, polishing, lamination and installation are always present (total
may be 0). Edge and cutout items are only listed when they cost something.
"""

import logging
import math

from ..models import ServiceUnit, LaminationMethod
from ..errors import MissingRateConfig
from ..schemas import (
    PieceSpec, ShapeGeometry, RateConfig, FabricationBreakdown,
    EdgeLineItem, CutoutLineItem, LaminationLineItem,
)
from .base import BaseCalculator
from .edge_measurer import EdgeLinearMeasurer

logger = logging.getLogger(__name__)


class FabricationLineItemCalculator(BaseCalculator):

    def __init__(self):
        self.edges = EdgeLinearMeasurer()

    def calculate(self, piece: PieceSpec, geometry: ShapeGeometry, runs: list,
                  rates: RateConfig) -> FabricationBreakdown:
        method = piece.lamination_method(rates.base_thickness_mm)
        finished = self.edges.finished_runs(runs)
        finished_lm = self.edges.finished_length_lm(runs)

        cutting = self._cutting(piece, geometry, rates)
        polishing = self._polishing(piece, finished_lm, rates)
        edges = self._edges(piece, finished, rates)
        cutouts = self._cutouts(piece, method, rates)
        lamination = self._lamination(piece, method, finished_lm, rates)
        installation = self._installation(geometry, runs, rates)

        subtotal = (
            cutting.total
            + polishing.total
            + sum(e.total for e in edges)
            + sum(c.total for c in cutouts)
            + lamination.total
        )
        logger.debug("Piece %s fabrication: %d edge item(s), %d cutout item(s), subtotal %.2f",
                     piece.id, len(edges), len(cutouts), subtotal)
        return FabricationBreakdown(
            cutting=cutting,
            polishing=polishing,
            edges=edges,
            cutouts=cutouts,
            lamination=lamination,
            installation=installation,
            subtotal=self.money(subtotal),
        )

    def _cutting(self, piece, geometry, rates):
        rate = self.require_rate(rates.cutting_rate, "cutting", piece.id)
        unit = rates.cutting_unit
        if unit == ServiceUnit.SQUARE_METRE:
            quantity = geometry.total_area_sqm
        elif unit == ServiceUnit.FIXED:
            quantity = 1.0
        else:
            quantity = geometry.cutting_perimeter_lm
        return self.make_line_item("Cutting", quantity, self.unit_label(unit), rate)

    def _polishing(self, piece, finished_lm, rates):
        rate = self.require_rate(rates.polishing_rate, "polishing", piece.id)
        unit = rates.polishing_unit
        if unit == ServiceUnit.SQUARE_METRE:
            # Polished face area of the finished edges
            quantity = finished_lm * (piece.thickness_mm / 1000.0)
        elif unit == ServiceUnit.FIXED:
            quantity = 1.0 if finished_lm > 0 else 0.0
        else:
            quantity = finished_lm
        return self.make_line_item("Polishing", quantity, self.unit_label(unit), rate)

    def _edges(self, piece, finished_runs, rates):
        items = []
        for run in finished_runs:
            profile = rates.edge_profiles.get(run.edge_type_id)
            if profile is None:
                raise MissingRateConfig(
                    f"Unknown edge profile '{run.edge_type_id}' on {run.side} edge",
                    piece_id=piece.id,
                )
            item = self.make_line_item(
                f"{profile.name} ({run.side})",
                run.length_lm,
                "Lm",
                profile.base_rate,
                minimum_charge=profile.minimum_charge,
                item_cls=EdgeLineItem,
                edge_type_id=profile.id,
                side=run.side,
                length_mm=run.length_mm,
            )
            if item.total > 0:
                items.append(item)
        return items

    def _cutouts(self, piece, method, rates):
        multiplier = 1.0
        if method == LaminationMethod.LAMINATED:
            multiplier = rates.cutout_thickness_multiplier

        items = []
        for cutout in piece.cutouts:
            cutout_type = rates.cutout_types.get(cutout.cutout_type_id)
            if cutout_type is None:
                raise MissingRateConfig(
                    f"Unknown cutout type '{cutout.cutout_type_id}'", piece_id=piece.id
                )
            item = self.make_line_item(
                cutout_type.name,
                float(cutout.quantity),
                "ea",
                cutout_type.base_rate * multiplier,
                minimum_charge=cutout_type.minimum_charge,
                item_cls=CutoutLineItem,
                cutout_type_id=cutout_type.id,
                thickness_multiplier=multiplier,
            )
            if item.total > 0:
                items.append(item)
        return items

    def _lamination(self, piece, method, finished_lm, rates):
        if method == LaminationMethod.NONE:
            return LaminationLineItem(
                description="Lamination",
                unit="Lm",
                method=method,
                formula=f"{piece.thickness_mm:.0f}mm is base thickness, no lamination",
            )

        base = rates.base_thickness_mm
        layers = int(math.floor((piece.thickness_mm - base) / base))
        if layers <= 0:
            return LaminationLineItem(
                description=f"Lamination ({piece.thickness_mm:.0f}mm)",
                unit="Lm",
                method=method,
                formula=f"{piece.thickness_mm:.0f}mm on a {base:.0f}mm base needs no extra layer",
            )

        rate = self.require_rate(rates.lamination_rate, "lamination", piece.id)
        total = self.money(finished_lm * rate * layers)
        return LaminationLineItem(
            description=f"Lamination ({piece.thickness_mm:.0f}mm)",
            quantity=round(finished_lm, 4),
            unit="Lm",
            rate=round(rate, 2),
            base_amount=total,
            total=total,
            method=method,
            layers=layers,
            formula=f"{finished_lm:.3f} Lm × ${rate:.2f} × {layers} layer(s) = ${total:.2f}",
        )

    def _installation(self, geometry, runs, rates):
        unit = rates.installation_unit
        if unit == ServiceUnit.LINEAR_METRE:
            quantity = self.edges.outer_perimeter_lm(runs)
        elif unit == ServiceUnit.FIXED:
            quantity = 1.0
        else:
            quantity = geometry.total_area_sqm

        if rates.installation_rate is None:
            return self.make_line_item("Installation", quantity, self.unit_label(unit), 0.0)
        return self.make_line_item("Installation", quantity, self.unit_label(unit),
                                   rates.installation_rate)
