"""
Rate catalog — reads the rate tables into the engine's input types.

The engine never touches the database; routers call load_rate_config()
and load_materials() once per request and hand the snapshot over.
Engine constants (base thickness, slab maxima, grain surcharge) come from
Settings so they can be changed per deployment without a migration.
"""

import logging
from sqlalchemy.orm import Session

from . import models
from .config import settings
from .schemas import RateConfig, EdgeProfile, CutoutType, MaterialCatalogEntry

logger = logging.getLogger(__name__)

# Default rates: engineered stone, 20mm, AUD
DEFAULT_SERVICE_RATES = {
    models.ServiceType.CUTTING: {"rate": 17.50, "unit": models.ServiceUnit(settings.CUTTING_UNIT),
                                 "description": "Stone cutting per lineal metre"},
    models.ServiceType.POLISHING: {"rate": 45.00, "unit": models.ServiceUnit(settings.POLISHING_UNIT),
                                   "description": "Edge polishing per lineal metre"},
    models.ServiceType.INSTALLATION: {"rate": 140.00, "unit": models.ServiceUnit(settings.INSTALLATION_UNIT),
                                      "description": "Installation per square metre"},
    models.ServiceType.LAMINATION: {"rate": 70.00, "unit": models.ServiceUnit.LINEAR_METRE,
                                    "description": "Build-up lamination per lineal metre of finished edge, per layer"},
    models.ServiceType.JOIN: {"rate": 85.00, "unit": models.ServiceUnit.LINEAR_METRE,
                              "description": "Slab join per lineal metre of join line"},
}

DEFAULT_EDGE_TYPES = [
    {"id": "pencil_round", "name": "Pencil Round", "category": "polish", "base_rate": 18.00},
    {"id": "bullnose", "name": "Bullnose", "category": "profile", "base_rate": 55.00},
    {"id": "ogee", "name": "Ogee", "category": "profile", "base_rate": 65.00},
    {"id": "beveled", "name": "Beveled", "category": "profile", "base_rate": 50.00},
    {"id": "curved_finished", "name": "Curved Finished Edge", "category": "profile",
     "base_rate": 300.00, "minimum_charge": 300.00},
]

DEFAULT_CUTOUT_TYPES = [
    {"id": "hotplate", "name": "Hotplate Cutout", "base_rate": 65.00},
    {"id": "gpo", "name": "GPO (Power Outlet)", "base_rate": 65.00},
    {"id": "tap_hole", "name": "Tap Hole", "base_rate": 65.00},
    {"id": "drop_in_sink", "name": "Drop-in Sink", "base_rate": 65.00},
    {"id": "undermount_sink", "name": "Undermount Sink", "base_rate": 300.00},
    {"id": "flush_cooktop", "name": "Flush Mount Cooktop", "base_rate": 450.00},
    {"id": "drainer_groove", "name": "Drainer Groove", "base_rate": 150.00},
]

DEFAULT_MATERIALS = [
    {"id": "caesarstone_pure_white", "name": "Caesarstone Pure White", "category": "caesarstone",
     "pricing_basis": models.PricingBasis.PER_SQM, "price_per_sqm": 450.00, "waste_factor_percent": 10.0},
    {"id": "essastone_carrara", "name": "Essastone Carrara", "category": "essastone",
     "pricing_basis": models.PricingBasis.PER_SQM, "price_per_sqm": 380.00, "waste_factor_percent": 12.0},
    {"id": "calacatta_marble", "name": "Calacatta Marble", "category": "marble",
     "pricing_basis": models.PricingBasis.PER_SLAB, "price_per_slab": 4200.00},
    {"id": "dekton_entzo", "name": "Dekton Entzo", "category": "dekton",
     "pricing_basis": models.PricingBasis.PER_SLAB, "price_per_slab": 3600.00},
]


def seed_defaults(db: Session) -> int:
    """Insert any missing default rows. Safe to run multiple times — skips existing."""
    seeded = 0
    for service_type, data in DEFAULT_SERVICE_RATES.items():
        existing = db.query(models.ServiceRate).filter(
            models.ServiceRate.service_type == service_type
        ).first()
        if not existing:
            db.add(models.ServiceRate(service_type=service_type, **data))
            seeded += 1

    for model, rows in ((models.EdgeType, DEFAULT_EDGE_TYPES),
                        (models.CutoutType, DEFAULT_CUTOUT_TYPES),
                        (models.Material, DEFAULT_MATERIALS)):
        for data in rows:
            if db.get(model, data["id"]) is None:
                db.add(model(**data))
                seeded += 1

    db.commit()
    if seeded:
        logger.info("Seeded %d default rate catalog row(s)", seeded)
    return seeded


def load_rate_config(db: Session) -> RateConfig:
    """Snapshot of every rate the engine may need. Missing rows stay None."""
    services = {r.service_type: r for r in db.query(models.ServiceRate).all()}

    def rate(service_type):
        row = services.get(service_type)
        return row.rate if row else None

    def unit(service_type, default):
        row = services.get(service_type)
        return row.unit if row and row.unit else default

    edges = db.query(models.EdgeType).filter(models.EdgeType.is_active == True).all()  # noqa: E712
    cutouts = db.query(models.CutoutType).filter(models.CutoutType.is_active == True).all()  # noqa: E712

    return RateConfig(
        cutting_rate=rate(models.ServiceType.CUTTING),
        cutting_unit=unit(models.ServiceType.CUTTING, models.ServiceUnit(settings.CUTTING_UNIT)),
        polishing_rate=rate(models.ServiceType.POLISHING),
        polishing_unit=unit(models.ServiceType.POLISHING, models.ServiceUnit(settings.POLISHING_UNIT)),
        installation_rate=rate(models.ServiceType.INSTALLATION),
        installation_unit=unit(models.ServiceType.INSTALLATION,
                               models.ServiceUnit(settings.INSTALLATION_UNIT)),
        lamination_rate=rate(models.ServiceType.LAMINATION),
        join_rate=rate(models.ServiceType.JOIN),
        base_thickness_mm=settings.BASE_THICKNESS_MM,
        max_slab_length_mm=settings.MAX_SLAB_LENGTH_MM,
        max_slab_width_mm=settings.MAX_SLAB_WIDTH_MM,
        slab_edge_trim_mm=settings.SLAB_EDGE_TRIM_MM,
        grain_matching_surcharge_rate=settings.GRAIN_MATCHING_SURCHARGE_PERCENT / 100,
        cutout_thickness_multiplier=settings.CUTOUT_THICKNESS_MULTIPLIER,
        join_symmetry_tolerance_mm=settings.JOIN_SYMMETRY_TOLERANCE_MM,
        edge_profiles={e.id: EdgeProfile.model_validate(e) for e in edges},
        cutout_types={c.id: CutoutType.model_validate(c) for c in cutouts},
    )


def load_materials(db: Session, ids=None) -> dict:
    """{material_id: MaterialCatalogEntry} for active materials, optionally limited to ids."""
    query = db.query(models.Material).filter(models.Material.is_active == True)  # noqa: E712
    if ids is not None:
        wanted = {i for i in ids if i}
        if not wanted:
            return {}
        query = query.filter(models.Material.id.in_(wanted))
    return {m.id: MaterialCatalogEntry.model_validate(m) for m in query.all()}
