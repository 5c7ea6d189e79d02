"""
OversizeJoinResolver — decides whether a piece fits one workable slab and,
when it doesn't, plans the cut into segments and prices the join(s).

No rotation is attempted: the bounding length is checked against the
workable length and the bounding width against the workable width.
Exactly at the maximum still fits.
"""

import logging

from ..models import JoinStrategy, JoinOrientation
from ..schemas import (
    PieceSpec, ShapeGeometry, RateConfig, MaterialCatalogEntry,
    OversizeBreakdown, Segment, JoinLine, WarningCode,
)
from .base import BaseCalculator
from .slab_sizes import workable_slab_dimensions

logger = logging.getLogger(__name__)


class OversizeJoinResolver(BaseCalculator):

    def workable_maximum(self, material: MaterialCatalogEntry, rates: RateConfig) -> tuple:
        """
        The material's slab less trim: its own slab size when it has one,
        otherwise the standard slab for its category. Without a material the
        configured maximum applies.
        """
        if material is not None:
            return workable_slab_dimensions(material, rates.slab_edge_trim_mm)
        return rates.max_slab_length_mm, rates.max_slab_width_mm

    def is_oversize(self, geometry: ShapeGeometry, max_length: float, max_width: float) -> bool:
        return (geometry.bounding_length_mm > max_length
                or geometry.bounding_width_mm > max_width)

    def resolve(self, piece: PieceSpec, geometry: ShapeGeometry, material: MaterialCatalogEntry,
                rates: RateConfig) -> tuple:
        """Returns (OversizeBreakdown or None, [PricingWarning])."""
        max_length, max_width = self.workable_maximum(material, rates)
        if not self.is_oversize(geometry, max_length, max_width):
            return None, []

        length = geometry.bounding_length_mm
        width = geometry.bounding_width_mm
        messages = []

        if length > max_length and width <= max_width:
            strategy = JoinStrategy.LENGTHWISE
            segments, joins = self._split_lengthwise(length, width, max_length)
            centre = length / 2
            for join in joins:
                if abs(join.position_mm - centre) < rates.join_symmetry_tolerance_mm:
                    messages.append("Join is near centre of piece - consider adjusting if possible")
        elif width > max_width and length <= max_length:
            strategy = JoinStrategy.WIDTHWISE
            segments, joins = self._split_widthwise(length, width, max_width)
            messages.append("Widthwise join - ensure waterfall continuity if applicable")
        else:
            strategy = JoinStrategy.MULTI_JOIN
            segments, joins = self._split_grid(length, width, max_length, max_width)
            messages.append(f"Complex piece requires {len(segments)} slabs and {len(joins)} joins")
            messages.append("Consider breaking into separate pieces if possible")

        warnings = [self.make_warning(WarningCode.OVERSIZE_JOIN, m) for m in messages]
        join_rate = self.require_rate(rates.join_rate, "joins on oversize pieces", piece.id)
        join_length_lm = self.mm_to_lm(sum(j.length_mm for j in joins))
        join_cost = self.money(join_length_lm * join_rate)

        logger.info("Piece %s is oversize (%.0f x %.0f > %.0f x %.0f): %s, %d segment(s)",
                    piece.id, length, width, max_length, max_width, strategy.value, len(segments))

        oversize = OversizeBreakdown(
            strategy=strategy,
            max_length_mm=max_length,
            max_width_mm=max_width,
            segments=segments,
            joins=joins,
            join_count=len(segments) - 1,
            join_length_lm=round(join_length_lm, 4),
            join_rate=round(join_rate, 2),
            join_cost=join_cost,
            formula=f"{join_length_lm:.3f} Lm × ${join_rate:.2f} = ${join_cost:.2f}",
            warnings=warnings,
        )
        return oversize, list(warnings)

    # --- Cut plans ---

    def _even_split(self, total: float, maximum: float) -> list:
        """ceil(total / n) per segment, never above maximum, remainder in the last one."""
        count = self.ceil_div(total, maximum)
        size = min(self.ceil_div(total, count), maximum)
        sizes = []
        remaining = total
        for _ in range(count):
            this = min(size, remaining)
            sizes.append(this)
            remaining -= this
        return sizes

    def _split_lengthwise(self, length, width, max_length):
        segments, joins = [], []
        position = 0.0
        sizes = self._even_split(length, max_length)
        for i, size in enumerate(sizes):
            segments.append(Segment(index=i, length_mm=size, width_mm=width, x_mm=position))
            position += size
            if i < len(sizes) - 1:
                joins.append(JoinLine(orientation=JoinOrientation.VERTICAL,
                                      position_mm=position, length_mm=width))
        return segments, joins

    def _split_widthwise(self, length, width, max_width):
        segments, joins = [], []
        position = 0.0
        sizes = self._even_split(width, max_width)
        for i, size in enumerate(sizes):
            segments.append(Segment(index=i, length_mm=length, width_mm=size, y_mm=position))
            position += size
            if i < len(sizes) - 1:
                joins.append(JoinLine(orientation=JoinOrientation.HORIZONTAL,
                                      position_mm=position, length_mm=length))
        return segments, joins

    def _split_grid(self, length, width, max_length, max_width):
        lengths = self._even_split(length, max_length)
        widths = self._even_split(width, max_width)

        segments = []
        y = 0.0
        for row_width in widths:
            x = 0.0
            for col_length in lengths:
                segments.append(Segment(index=len(segments), length_mm=col_length,
                                        width_mm=row_width, x_mm=x, y_mm=y))
                x += col_length
            y += row_width

        joins = []
        x = 0.0
        for col_length in lengths[:-1]:
            x += col_length
            joins.append(JoinLine(orientation=JoinOrientation.VERTICAL, position_mm=x, length_mm=width))
        y = 0.0
        for row_width in widths[:-1]:
            y += row_width
            joins.append(JoinLine(orientation=JoinOrientation.HORIZONTAL, position_mm=y, length_mm=length))
        return segments, joins
