from functools import cached_property
from typing import Optional, List, Dict, Tuple, Union, Literal, Annotated

from pydantic import BaseModel, Field, model_validator

from .errors import InvalidGeometry
from .models import (
    ShapeType, ServiceUnit, PricingBasis, LaminationMethod, JoinStrategy, JoinOrientation,
)
import enum


class WarningCode(str, enum.Enum):
    OVERSIZE_JOIN = "OVERSIZE_JOIN"
    GRAIN_MATCH_INFEASIBLE = "GRAIN_MATCH_INFEASIBLE"
    INCOMPLETE_MATERIAL = "INCOMPLETE_MATERIAL"
    WASTE_FACTOR_CLAMPED = "WASTE_FACTOR_CLAMPED"
    SLAB_GROUP_ASSUMED = "SLAB_GROUP_ASSUMED"
    BOUNDING_BOX_MISMATCH = "BOUNDING_BOX_MISMATCH"


class PricingWarning(BaseModel):
    code: WarningCode
    message: str


# --- Shapes ---

class LegDimensions(BaseModel):
    length_mm: Optional[float] = None
    width_mm: Optional[float] = None


class RectangleShape(BaseModel):
    shape: Literal["RECTANGLE"] = "RECTANGLE"
    length_mm: Optional[float] = None
    width_mm: Optional[float] = None


class LShapeConfig(BaseModel):
    """leg1 runs across the top; leg2 returns down from the right-hand end."""
    shape: Literal["L_SHAPE"] = "L_SHAPE"
    leg1: LegDimensions = LegDimensions()
    leg2: LegDimensions = LegDimensions()
    edges: Dict[str, Optional[str]] = {}


class UShapeConfig(BaseModel):
    """Legs run down both sides and include the corners; the back sits net between them."""
    shape: Literal["U_SHAPE"] = "U_SHAPE"
    left_leg: LegDimensions = LegDimensions()
    back: LegDimensions = LegDimensions()
    right_leg: LegDimensions = LegDimensions()
    edges: Dict[str, Optional[str]] = {}


ShapeConfig = Annotated[Union[LShapeConfig, UShapeConfig], Field(discriminator="shape")]
Shape = Union[RectangleShape, LShapeConfig, UShapeConfig]

_CONFIG_CLASSES = {
    ShapeType.L_SHAPE: LShapeConfig,
    ShapeType.U_SHAPE: UShapeConfig,
}


def resolve_shape(shape_type: ShapeType, shape_config, length_mm=None, width_mm=None,
                  strict: bool = True) -> Shape:
    """Turn (shape_type, shape_config, length, width) into one member of the shape union."""
    if shape_type == ShapeType.RECTANGLE:
        if shape_config is not None and strict:
            raise InvalidGeometry(
                f"shape_config is {shape_config.shape} but piece is declared RECTANGLE"
            )
        return RectangleShape(length_mm=length_mm, width_mm=width_mm)

    expected = _CONFIG_CLASSES[shape_type]
    if shape_config is None:
        if strict:
            raise InvalidGeometry(f"{shape_type.value} piece has no shape_config")
        return expected()
    if not isinstance(shape_config, expected):
        raise InvalidGeometry(
            f"shape_config is {shape_config.shape} but piece is declared {shape_type.value}"
        )
    return shape_config


def _tag_shape_config(data):
    # Let callers omit the union tag: the declared shape_type supplies it
    if isinstance(data, dict):
        config = data.get("shape_config")
        shape_type = data.get("shape_type")
        if isinstance(config, dict) and "shape" not in config and shape_type:
            tag = shape_type.value if isinstance(shape_type, ShapeType) else str(shape_type)
            if tag != ShapeType.RECTANGLE.value:
                data = {**data, "shape_config": {**config, "shape": tag}}
    return data


# --- Piece ---

class CutoutSpec(BaseModel):
    cutout_type_id: str
    quantity: int = Field(1, ge=0)


class PieceSpec(BaseModel):
    id: str
    name: Optional[str] = None
    shape_type: ShapeType = ShapeType.RECTANGLE
    shape_config: Optional[ShapeConfig] = None
    length_mm: Optional[float] = None
    width_mm: Optional[float] = None
    thickness_mm: float = 20
    material_id: Optional[str] = None
    edge_top: Optional[str] = None
    edge_bottom: Optional[str] = None
    edge_left: Optional[str] = None
    edge_right: Optional[str] = None
    cutouts: List[CutoutSpec] = []
    requires_grain_match: bool = False
    accept_grain_match_risk: bool = False
    slab_group_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def tag_shape_config(cls, data):
        return _tag_shape_config(data)

    def resolved_shape(self, strict: bool = True) -> Shape:
        return resolve_shape(self.shape_type, self.shape_config, self.length_mm,
                             self.width_mm, strict=strict)

    def lamination_method(self, base_thickness_mm: float) -> LaminationMethod:
        if self.thickness_mm > base_thickness_mm:
            return LaminationMethod.LAMINATED
        return LaminationMethod.NONE

    def named_edge(self, side: str) -> Optional[str]:
        return {
            "top": self.edge_top,
            "bottom": self.edge_bottom,
            "left": self.edge_left,
            "right": self.edge_right,
        }.get(side)


# --- Rate catalog ---

class EdgeProfile(BaseModel):
    id: str
    name: str
    category: Optional[str] = None
    base_rate: float
    minimum_charge: Optional[float] = None
    class Config:
        from_attributes = True


class CutoutType(BaseModel):
    id: str
    name: str
    base_rate: float
    minimum_charge: Optional[float] = None
    class Config:
        from_attributes = True


class MaterialCatalogEntry(BaseModel):
    id: str
    name: str
    category: Optional[str] = None
    pricing_basis: PricingBasis = PricingBasis.PER_SQM
    price_per_sqm: Optional[float] = None
    price_per_slab: Optional[float] = None
    waste_factor_percent: float = 0.0
    slab_length_mm: Optional[float] = None
    slab_width_mm: Optional[float] = None
    class Config:
        from_attributes = True


class RateConfig(BaseModel):
    cutting_rate: Optional[float] = None
    cutting_unit: ServiceUnit = ServiceUnit.LINEAR_METRE
    polishing_rate: Optional[float] = None
    polishing_unit: ServiceUnit = ServiceUnit.LINEAR_METRE
    installation_rate: Optional[float] = None
    installation_unit: ServiceUnit = ServiceUnit.SQUARE_METRE
    lamination_rate: Optional[float] = None
    join_rate: Optional[float] = None
    base_thickness_mm: float = 20
    max_slab_length_mm: float = 3200   # Workable, already net of edge trim
    max_slab_width_mm: float = 1600
    slab_edge_trim_mm: float = 20
    grain_matching_surcharge_rate: float = 0.15
    cutout_thickness_multiplier: float = 1.0
    join_symmetry_tolerance_mm: float = 200
    edge_profiles: Dict[str, EdgeProfile] = {}
    cutout_types: Dict[str, CutoutType] = {}


# --- Slab groups ---

class SlabGroupMember(BaseModel):
    piece_id: str
    area_sqm: float
    class Config:
        frozen = True


class SlabGroup(BaseModel):
    """Pieces cut from the same physical slab(s). Built once per recomputation, never edited."""
    group_id: str
    slab_area_sqm: float
    members: Tuple[SlabGroupMember, ...] = ()
    class Config:
        frozen = True

    @cached_property
    def total_area_sqm(self) -> float:
        return sum(m.area_sqm for m in self.members)

    def member(self, piece_id: str) -> Optional[SlabGroupMember]:
        for m in self.members:
            if m.piece_id == piece_id:
                return m
        return None


# --- Geometry ---

class ComponentRect(BaseModel):
    label: str
    length_mm: float
    width_mm: float
    x_mm: float = 0.0
    y_mm: float = 0.0

    @property
    def area_sqm(self) -> float:
        return (self.length_mm * self.width_mm) / 1_000_000


class EdgeSegment(BaseModel):
    side: str
    length_mm: float
    named_side: bool = False


class ShapeGeometry(BaseModel):
    shape_type: ShapeType
    bounding_length_mm: float
    bounding_width_mm: float
    total_area_sqm: float
    corner_joins: int
    cutting_perimeter_lm: float
    components: List[ComponentRect] = []
    edges: List[EdgeSegment] = []
    outline: List[Tuple[float, float]] = []
    warnings: List[PricingWarning] = []


class EdgeRun(BaseModel):
    side: str
    length_mm: float
    edge_type_id: Optional[str] = None   # None = raw
    named_side: bool = False

    @property
    def length_lm(self) -> float:
        return self.length_mm / 1000

    @property
    def is_finished(self) -> bool:
        return self.edge_type_id is not None


# --- Line items ---

class LineItem(BaseModel):
    description: str
    quantity: float = 0.0
    unit: str = ""
    rate: float = 0.0
    base_amount: float = 0.0
    total: float = 0.0
    formula: str = ""


class EdgeLineItem(LineItem):
    edge_type_id: str
    side: str
    length_mm: float
    minimum_applied: bool = False


class CutoutLineItem(LineItem):
    cutout_type_id: str
    thickness_multiplier: float = 1.0
    minimum_applied: bool = False


class LaminationLineItem(LineItem):
    method: LaminationMethod = LaminationMethod.NONE
    layers: int = 0


class FabricationBreakdown(BaseModel):
    cutting: LineItem
    polishing: LineItem
    edges: List[EdgeLineItem] = []
    cutouts: List[CutoutLineItem] = []
    lamination: LaminationLineItem
    installation: LineItem
    subtotal: float = 0.0   # Cutting + polishing + edges + cutouts + lamination


class Segment(BaseModel):
    index: int
    length_mm: float
    width_mm: float
    x_mm: float = 0.0
    y_mm: float = 0.0


class JoinLine(BaseModel):
    orientation: JoinOrientation
    position_mm: float
    length_mm: float


class OversizeBreakdown(BaseModel):
    is_oversize: bool = True
    strategy: JoinStrategy
    max_length_mm: float
    max_width_mm: float
    segments: List[Segment] = []
    joins: List[JoinLine] = []
    join_count: int
    join_length_lm: float
    join_rate: float
    join_cost: float
    formula: str = ""
    warnings: List[PricingWarning] = []
    # Mirrored from the grain-match result when the piece also needs one
    grain_matching_surcharge_rate: Optional[float] = None
    fabrication_subtotal_before_surcharge: Optional[float] = None
    grain_matching_surcharge: Optional[float] = None


class GrainMatchResult(BaseModel):
    requested: bool = True
    feasible: bool
    arrangement: Optional[str] = None   # 'END_TO_END' | 'SIDE_BY_SIDE'
    message: str
    surcharge_rate: float
    fabrication_subtotal_before_surcharge: float
    surcharge: float
    applied: bool
    formula: str = ""


class MaterialBreakdown(BaseModel):
    material_id: str
    material_name: str
    pricing_basis: PricingBasis
    area_sqm: float
    rate: float
    waste_factor_percent: float = 0.0
    adjusted_area_sqm: Optional[float] = None
    slab_group_id: Optional[str] = None
    slab_count: Optional[int] = None
    slab_area_sqm: Optional[float] = None
    group_total_area_sqm: Optional[float] = None
    share_percent: Optional[float] = None
    group_cost: Optional[float] = None
    total: float
    formula: str = ""


class CostLine(BaseModel):
    category: str   # cutting | polishing | edge | join | grain_match | cutout | lamination | material | installation
    description: str
    total: float


class PiecePricingBreakdown(BaseModel):
    piece_id: str
    piece_name: Optional[str] = None
    shape_type: ShapeType
    thickness_mm: float
    lamination_method: LaminationMethod
    requires_grain_match: bool = False
    geometry: ShapeGeometry
    fabrication: FabricationBreakdown
    oversize: Optional[OversizeBreakdown] = None
    grain_match: Optional[GrainMatchResult] = None
    materials: Optional[MaterialBreakdown] = None
    edge_runs: List[EdgeRun] = []
    cost_lines: List[CostLine] = []
    warnings: List[PricingWarning] = []
    piece_total: float


# --- Batch outcomes ---

class PricedPiece(BaseModel):
    status: Literal["PRICED"] = "PRICED"
    piece_id: str
    breakdown: PiecePricingBreakdown


class FailedPiece(BaseModel):
    status: Literal["FAILED"] = "FAILED"
    piece_id: str
    error: str
    detail: str


PieceOutcome = Annotated[Union[PricedPiece, FailedPiece], Field(discriminator="status")]


# --- API bodies ---

class GeometryPreviewRequest(BaseModel):
    shape_type: ShapeType = ShapeType.RECTANGLE
    shape_config: Optional[ShapeConfig] = None
    length_mm: Optional[float] = None
    width_mm: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def tag_shape_config(cls, data):
        return _tag_shape_config(data)


class PiecePricingRequest(BaseModel):
    piece: PieceSpec
    slab_group: Optional[SlabGroup] = None


class BatchPricingRequest(BaseModel):
    pieces: List[PieceSpec]


class BatchPricingResponse(BaseModel):
    results: List[PieceOutcome] = []
    priced_count: int = 0
    failed_count: int = 0


class RateCatalogResponse(BaseModel):
    rates: RateConfig
    materials: List[MaterialCatalogEntry] = []
