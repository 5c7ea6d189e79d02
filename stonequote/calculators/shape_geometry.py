"""
ShapeGeometryResolver — piece shape to bounding box, area, corner joins,
cutting perimeter, component rectangles, physical edges and outline.

resolve() is strict and raises InvalidGeometry; preview() runs the same
computation with validation off so a half-typed shape still renders
(area 0 rather than an exception).
"""

import logging

from ..models import ShapeType
from ..schemas import PieceSpec, ShapeGeometry, WarningCode, resolve_shape
from .base import BaseCalculator
from .registry import get_shape_builder

logger = logging.getLogger(__name__)

# Declared vs computed bounding box may differ by rounding in the caller's UI
BOUNDING_BOX_TOLERANCE_MM = 1.0


class ShapeGeometryResolver(BaseCalculator):

    def resolve(self, piece: PieceSpec) -> ShapeGeometry:
        shape = piece.resolved_shape(strict=True)
        geometry = self._compute(piece.shape_type, shape, strict=True)

        if piece.shape_type != ShapeType.RECTANGLE:
            warning = self._bounding_box_mismatch(piece, geometry)
            if warning:
                geometry.warnings.append(warning)
        return geometry

    def preview(self, shape_type: ShapeType, shape_config=None,
                length_mm: float = None, width_mm: float = None) -> ShapeGeometry:
        shape = resolve_shape(shape_type, shape_config, length_mm, width_mm, strict=False)
        return self._compute(shape_type, shape, strict=False)

    def _compute(self, shape_type: ShapeType, shape, strict: bool) -> ShapeGeometry:
        builder = get_shape_builder(shape_type)
        dims = builder.measure(shape, strict=strict)

        bounding_length, bounding_width = builder.bounding_box(dims)
        components = builder.components(dims)
        total_area = sum(c.area_sqm for c in components)
        cutting_perimeter_mm = sum(self.perimeter_mm(c.length_mm, c.width_mm) for c in components)

        return ShapeGeometry(
            shape_type=shape_type,
            bounding_length_mm=bounding_length,
            bounding_width_mm=bounding_width,
            total_area_sqm=max(0.0, total_area),
            corner_joins=builder.corner_joins(components),
            cutting_perimeter_lm=self.mm_to_lm(cutting_perimeter_mm),
            components=components,
            edges=builder.edges(dims),
            outline=builder.outline(dims),
        )

    def _bounding_box_mismatch(self, piece: PieceSpec, geometry: ShapeGeometry):
        """Pieces of L/U shape may carry a declared length/width; flag it when it disagrees."""
        declared = (piece.length_mm, piece.width_mm)
        computed = (geometry.bounding_length_mm, geometry.bounding_width_mm)
        mismatched = [
            f"{name} {d:.0f}mm vs {c:.0f}mm"
            for name, d, c in zip(("length", "width"), declared, computed)
            if d is not None and abs(d - c) > BOUNDING_BOX_TOLERANCE_MM
        ]
        if not mismatched:
            return None
        logger.warning("Piece %s declared bounding box disagrees with shape: %s",
                       piece.id, "; ".join(mismatched))
        return self.make_warning(
            WarningCode.BOUNDING_BOX_MISMATCH,
            "Declared size does not match the shape's bounding box ("
            + "; ".join(mismatched) + "). Shape dimensions were used.",
        )
