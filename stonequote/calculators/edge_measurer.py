"""
EdgeLinearMeasurer — attaches an edge profile (or raw) to each physical edge.

The edges themselves come from the geometry resolver, so what gets drawn
is exactly what gets costed. Named sides (top/bottom/left/right) take
their profile from the piece's edge_* fields; shape-specific edges
(return_end, inner_left, ...) take theirs from shape_config.edges.
"""

from ..errors import InvalidGeometry
from ..schemas import PieceSpec, ShapeGeometry, EdgeRun
from .base import BaseCalculator
from .registry import get_shape_builder


class EdgeLinearMeasurer(BaseCalculator):

    def measure(self, piece: PieceSpec, geometry: ShapeGeometry) -> list:
        """Returns one EdgeRun per physical edge, raw edges included."""
        shape_edges = dict(piece.shape_config.edges) if piece.shape_config else {}
        known = set(get_shape_builder(geometry.shape_type).edge_ids)

        unknown = sorted(set(shape_edges) - known)
        if unknown:
            raise InvalidGeometry(
                f"Unknown edge id(s) for {geometry.shape_type.value}: {', '.join(unknown)}. "
                f"Valid: {', '.join(sorted(known))}",
                piece_id=piece.id,
            )

        runs = []
        for edge in geometry.edges:
            if edge.named_side:
                edge_type_id = piece.named_edge(edge.side) or shape_edges.get(edge.side)
            else:
                edge_type_id = shape_edges.get(edge.side)
            runs.append(EdgeRun(
                side=edge.side,
                length_mm=edge.length_mm,
                edge_type_id=edge_type_id or None,
                named_side=edge.named_side,
            ))
        return runs

    def finished_runs(self, runs: list) -> list:
        return [r for r in runs if r.is_finished]

    def finished_length_lm(self, runs: list) -> float:
        return sum(r.length_lm for r in runs if r.is_finished)

    def outer_perimeter_lm(self, runs: list) -> float:
        return sum(r.length_lm for r in runs)
