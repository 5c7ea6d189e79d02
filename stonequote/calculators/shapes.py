"""
Per-shape geometry builders.

Coordinates are millimetres with the origin at the top-left corner of the
bounding box; x runs along the length, y runs down the depth. Each builder
knows its component rectangles, its physical edges (walked clockwise from
the top-left corner) and its outline polygon. Join faces between component
rectangles are internal and never appear as edges.
"""

from abc import ABC, abstractmethod

from ..errors import InvalidGeometry
from ..models import ShapeType
from ..schemas import RectangleShape, LShapeConfig, UShapeConfig, ComponentRect, EdgeSegment
from .base import BaseCalculator

NAMED_SIDES = ("top", "bottom", "left", "right")


class BaseShape(BaseCalculator, ABC):
    """One builder per member of the shape union."""

    shape_type: ShapeType = None
    config_class = None
    edge_ids: tuple = ()

    @abstractmethod
    def dimensions(self, shape) -> dict:
        """Raw dimension values keyed by name (None when missing)."""
        pass

    @abstractmethod
    def check_consistency(self, dims: dict):
        """Strict-only cross-checks between legs. Raise InvalidGeometry on failure."""
        pass

    @abstractmethod
    def bounding_box(self, dims: dict) -> tuple:
        pass

    @abstractmethod
    def components(self, dims: dict) -> list:
        pass

    @abstractmethod
    def edge_lengths(self, dims: dict) -> list:
        """[(edge_id, length_mm)] walked clockwise from the top-left corner."""
        pass

    @abstractmethod
    def outline(self, dims: dict) -> list:
        pass

    def corner_joins(self, components: list) -> int:
        """One join per meeting of two leg rectangles, counted only when every leg has area."""
        if all(c.length_mm > 0 and c.width_mm > 0 for c in components):
            return len(components) - 1
        return 0

    def measure(self, shape, strict: bool = True) -> dict:
        """Validated (strict) or zero-clamped (lenient) dimensions."""
        if not isinstance(shape, self.config_class):
            raise InvalidGeometry(
                f"{type(shape).__name__} cannot be measured as {self.shape_type.value}"
            )
        raw = self.dimensions(shape)
        if strict:
            bad = [name for name, value in raw.items() if not self.positive(value)]
            if bad:
                raise InvalidGeometry(
                    f"{self.shape_type.value} needs positive dimensions; "
                    f"missing or non-positive: {', '.join(bad)}"
                )
            dims = {name: float(value) for name, value in raw.items()}
            self.check_consistency(dims)
            return dims
        return {name: self.clamp_zero(value) for name, value in raw.items()}

    def edges(self, dims: dict) -> list:
        return [
            EdgeSegment(side=side, length_mm=length, named_side=side in NAMED_SIDES)
            for side, length in self.edge_lengths(dims)
            if length > 0
        ]


class RectangleGeometry(BaseShape):
    shape_type = ShapeType.RECTANGLE
    config_class = RectangleShape
    edge_ids = ("top", "right", "bottom", "left")

    def dimensions(self, shape):
        return {"length_mm": shape.length_mm, "width_mm": shape.width_mm}

    def check_consistency(self, dims):
        pass

    def bounding_box(self, dims):
        return dims["length_mm"], dims["width_mm"]

    def components(self, dims):
        return [ComponentRect(label="Main", length_mm=dims["length_mm"], width_mm=dims["width_mm"])]

    def edge_lengths(self, dims):
        length, width = dims["length_mm"], dims["width_mm"]
        return [("top", length), ("right", width), ("bottom", length), ("left", width)]

    def outline(self, dims):
        length, width = dims["length_mm"], dims["width_mm"]
        return [(0.0, 0.0), (length, 0.0), (length, width), (0.0, width)]


class LShapeGeometry(BaseShape):
    """leg1 across the top, leg2 returning down from the right-hand end of leg1."""

    shape_type = ShapeType.L_SHAPE
    config_class = LShapeConfig
    edge_ids = ("top", "right", "return_end", "inner_return", "bottom", "left")

    def dimensions(self, shape):
        return {
            "leg1.length_mm": shape.leg1.length_mm,
            "leg1.width_mm": shape.leg1.width_mm,
            "leg2.length_mm": shape.leg2.length_mm,
            "leg2.width_mm": shape.leg2.width_mm,
        }

    def check_consistency(self, dims):
        if dims["leg2.width_mm"] > dims["leg1.length_mm"]:
            raise InvalidGeometry(
                f"leg2 width {dims['leg2.width_mm']:.0f}mm is wider than "
                f"leg1 length {dims['leg1.length_mm']:.0f}mm"
            )

    def bounding_box(self, dims):
        return dims["leg1.length_mm"], dims["leg1.width_mm"] + dims["leg2.length_mm"]

    def components(self, dims):
        l1, w1 = dims["leg1.length_mm"], dims["leg1.width_mm"]
        l2, w2 = dims["leg2.length_mm"], dims["leg2.width_mm"]
        return [
            ComponentRect(label="Leg A", length_mm=l1, width_mm=w1),
            ComponentRect(label="Leg B", length_mm=l2, width_mm=w2,
                          x_mm=max(0.0, l1 - w2), y_mm=w1),
        ]

    def edge_lengths(self, dims):
        l1, w1 = dims["leg1.length_mm"], dims["leg1.width_mm"]
        l2, w2 = dims["leg2.length_mm"], dims["leg2.width_mm"]
        return [
            ("top", l1),
            ("right", w1 + l2),
            ("return_end", w2),
            ("inner_return", l2),
            ("bottom", l1 - w2),
            ("left", w1),
        ]

    def outline(self, dims):
        l1, w1 = dims["leg1.length_mm"], dims["leg1.width_mm"]
        l2, w2 = dims["leg2.length_mm"], dims["leg2.width_mm"]
        inner_x = max(0.0, l1 - w2)
        return [
            (0.0, 0.0), (l1, 0.0), (l1, w1 + l2),
            (inner_x, w1 + l2), (inner_x, w1), (0.0, w1),
        ]


class UShapeGeometry(BaseShape):
    """Legs down both sides (corners included), back net between them along the top."""

    shape_type = ShapeType.U_SHAPE
    config_class = UShapeConfig
    edge_ids = ("top", "right", "right_leg_end", "inner_right", "bottom", "inner_left",
                "left_leg_end", "left")

    def dimensions(self, shape):
        return {
            "left_leg.length_mm": shape.left_leg.length_mm,
            "left_leg.width_mm": shape.left_leg.width_mm,
            "back.length_mm": shape.back.length_mm,
            "back.width_mm": shape.back.width_mm,
            "right_leg.length_mm": shape.right_leg.length_mm,
            "right_leg.width_mm": shape.right_leg.width_mm,
        }

    def check_consistency(self, dims):
        back_width = dims["back.width_mm"]
        for leg in ("left_leg", "right_leg"):
            if back_width > dims[f"{leg}.length_mm"]:
                raise InvalidGeometry(
                    f"back width {back_width:.0f}mm is deeper than "
                    f"{leg} length {dims[f'{leg}.length_mm']:.0f}mm"
                )

    def bounding_box(self, dims):
        # Length is the back run, depth the longer leg
        return dims["back.length_mm"], max(dims["left_leg.length_mm"], dims["right_leg.length_mm"])

    def components(self, dims):
        wl, wr = dims["left_leg.width_mm"], dims["right_leg.width_mm"]
        lb = dims["back.length_mm"]
        return [
            ComponentRect(label="Left Leg", length_mm=dims["left_leg.length_mm"], width_mm=wl),
            ComponentRect(label="Back", length_mm=lb, width_mm=dims["back.width_mm"], x_mm=wl),
            ComponentRect(label="Right Leg", length_mm=dims["right_leg.length_mm"], width_mm=wr,
                          x_mm=wl + lb),
        ]

    def edge_lengths(self, dims):
        ll, wl = dims["left_leg.length_mm"], dims["left_leg.width_mm"]
        lb, wb = dims["back.length_mm"], dims["back.width_mm"]
        lr, wr = dims["right_leg.length_mm"], dims["right_leg.width_mm"]
        return [
            ("top", wl + lb + wr),
            ("right", lr),
            ("right_leg_end", wr),
            ("inner_right", lr - wb),
            ("bottom", lb),
            ("inner_left", ll - wb),
            ("left_leg_end", wl),
            ("left", ll),
        ]

    def outline(self, dims):
        ll, wl = dims["left_leg.length_mm"], dims["left_leg.width_mm"]
        lb, wb = dims["back.length_mm"], dims["back.width_mm"]
        lr, wr = dims["right_leg.length_mm"], dims["right_leg.width_mm"]
        right_x = wl + lb + wr
        return [
            (0.0, 0.0), (right_x, 0.0), (right_x, lr), (wl + lb, lr),
            (wl + lb, wb), (wl, wb), (wl, ll), (0.0, ll),
        ]
