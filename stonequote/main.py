from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from .config import settings
from .database import engine, Base
from .errors import PricingError
from .routers import shapes, pricing, rates

logger = logging.getLogger("stonequote")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Stone Benchtop Quoting",
    description=f"Piece geometry and fabrication pricing for {settings.COMPANY_NAME}",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(shapes.router, prefix="/api")
app.include_router(pricing.router, prefix="/api")
app.include_router(rates.router, prefix="/api")


@app.exception_handler(PricingError)
def pricing_error_handler(request: Request, exc: PricingError):
    logger.warning("Pricing failed for piece %s: %s %s", exc.piece_id, exc.code, exc.message)
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.get("/health")
def health():
    return {"status": "ok", "app": "stonequote", "currency": settings.CURRENCY}


@app.on_event("startup")
def auto_seed():
    """Auto-seed service rates, edge profiles, cutout types and materials on first run."""
    from .database import SessionLocal
    from .rate_catalog import seed_defaults
    db = SessionLocal()
    try:
        seed_defaults(db)
    finally:
        db.close()
