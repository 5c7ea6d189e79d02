from fastapi import APIRouter

from ..calculators.registry import SHAPE_REGISTRY
from ..pricing_engine import PricingEngine
from ..schemas import GeometryPreviewRequest, ShapeGeometry

router = APIRouter(prefix="/shapes", tags=["shapes"])

engine = PricingEngine()


@router.get("/")
def list_shapes():
    """Supported shapes and the edge ids each one accepts in shape_config.edges."""
    return [
        {"shape_type": shape_type.value, "edge_ids": list(builder.edge_ids)}
        for shape_type, builder in SHAPE_REGISTRY.items()
    ]


@router.post("/geometry", response_model=ShapeGeometry)
def preview_geometry(request: GeometryPreviewRequest):
    """Live preview while a shape is being edited. Incomplete dimensions give area 0, not an error."""
    return engine.preview_geometry(
        request.shape_type, request.shape_config, request.length_mm, request.width_mm,
    )
