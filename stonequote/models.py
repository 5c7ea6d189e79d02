from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, Boolean
from datetime import datetime
from .database import Base
import enum


# --- Enums (shared by the ORM tables and the pydantic schemas) ---

class ShapeType(str, enum.Enum):
    RECTANGLE = "RECTANGLE"
    L_SHAPE = "L_SHAPE"
    U_SHAPE = "U_SHAPE"


class ServiceType(str, enum.Enum):
    CUTTING = "CUTTING"
    POLISHING = "POLISHING"
    INSTALLATION = "INSTALLATION"
    LAMINATION = "LAMINATION"
    JOIN = "JOIN"


class ServiceUnit(str, enum.Enum):
    LINEAR_METRE = "LINEAR_METRE"
    SQUARE_METRE = "SQUARE_METRE"
    FIXED = "FIXED"


class PricingBasis(str, enum.Enum):
    PER_SQM = "PER_SQM"
    PER_SLAB = "PER_SLAB"


class LaminationMethod(str, enum.Enum):
    NONE = "NONE"
    LAMINATED = "LAMINATED"


class JoinStrategy(str, enum.Enum):
    LENGTHWISE = "LENGTHWISE"
    WIDTHWISE = "WIDTHWISE"
    MULTI_JOIN = "MULTI_JOIN"


class JoinOrientation(str, enum.Enum):
    VERTICAL = "VERTICAL"      # Join line runs across the width
    HORIZONTAL = "HORIZONTAL"  # Join line runs along the length


# --- Rate catalog tables (read by rate_catalog.py, seeded on startup) ---

class ServiceRate(Base):
    """One rate per single-channel service: cutting, polishing, lamination, join, installation."""
    __tablename__ = "service_rates"

    id = Column(Integer, primary_key=True, index=True)
    service_type = Column(Enum(ServiceType), unique=True, nullable=False)
    rate = Column(Float, nullable=False)
    unit = Column(Enum(ServiceUnit), default=ServiceUnit.LINEAR_METRE)
    description = Column(String)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class EdgeType(Base):
    """Edge profiles, priced per linear metre of finished edge."""
    __tablename__ = "edge_types"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)  # 'polish' | 'profile' | 'waterfall'
    base_rate = Column(Float, nullable=False)
    minimum_charge = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True)


class CutoutType(Base):
    """Machined openings, priced per unit."""
    __tablename__ = "cutout_types"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    base_rate = Column(Float, nullable=False)
    minimum_charge = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True)


class Material(Base):
    __tablename__ = "materials"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=True)  # Brand/family, e.g. 'caesarstone', 'granite'
    pricing_basis = Column(Enum(PricingBasis), default=PricingBasis.PER_SQM)
    price_per_sqm = Column(Float, nullable=True)
    price_per_slab = Column(Float, nullable=True)
    waste_factor_percent = Column(Float, default=0.0)
    # Physical slab size; overrides the configured workable maximum when set
    slab_length_mm = Column(Integer, nullable=True)
    slab_width_mm = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
