from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..rate_catalog import seed_defaults, load_rate_config, load_materials
from ..schemas import RateCatalogResponse

router = APIRouter(prefix="/rates", tags=["rates"])


@router.get("/seed")
def seed_rates(db: Session = Depends(get_db)):
    """Seed default rates, edge profiles, cutout types and materials. Safe to run multiple times — skips existing."""
    seeded = seed_defaults(db)
    return {"ok": True, "seeded": seeded}


@router.get("/", response_model=RateCatalogResponse)
def list_rates(db: Session = Depends(get_db)):
    """Read-only view of the rate snapshot the pricing endpoints use."""
    materials = load_materials(db)
    return RateCatalogResponse(
        rates=load_rate_config(db),
        materials=sorted(materials.values(), key=lambda m: m.id),
    )
