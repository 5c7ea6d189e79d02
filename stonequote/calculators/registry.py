"""
Shape registry — maps ShapeType to its geometry builder.

Adding a shape means one new builder in shapes.py, one union member in
schemas.py and one entry here.
"""

from ..models import ShapeType
from .shapes import BaseShape, RectangleGeometry, LShapeGeometry, UShapeGeometry

SHAPE_REGISTRY: dict[ShapeType, type] = {
    ShapeType.RECTANGLE: RectangleGeometry,
    ShapeType.L_SHAPE: LShapeGeometry,
    ShapeType.U_SHAPE: UShapeGeometry,
}


def get_shape_builder(shape_type: ShapeType) -> BaseShape:
    """Returns an instance of the builder for a shape type, or raises ValueError."""
    if shape_type not in SHAPE_REGISTRY:
        raise ValueError(
            f"No geometry registered for shape type: {shape_type}. "
            f"Available: {list_shapes()}"
        )
    return SHAPE_REGISTRY[shape_type]()


def has_shape(shape_type: ShapeType) -> bool:
    """Check if a geometry builder exists for a shape type."""
    return shape_type in SHAPE_REGISTRY


def list_shapes() -> list[str]:
    """List all registered shape types."""
    return [s.value for s in SHAPE_REGISTRY]
