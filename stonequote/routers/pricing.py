from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from ..pricing_engine import PricingEngine
from ..rate_catalog import load_rate_config, load_materials
from ..schemas import (
    PiecePricingRequest, PiecePricingBreakdown, BatchPricingRequest, BatchPricingResponse,
    FailedPiece,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["pricing"])

engine = PricingEngine()


@router.post("/piece", response_model=PiecePricingBreakdown)
def price_piece(request: PiecePricingRequest, db: Session = Depends(get_db)):
    """
    Price one piece against the current rate catalog.

    Pricing errors (bad geometry, missing rates, wrong slab group) are
    returned as 422 by the app-level PricingError handler.
    """
    piece = request.piece
    rates = load_rate_config(db)
    materials = load_materials(db, [piece.material_id])
    material = materials.get(piece.material_id) if piece.material_id else None
    return engine.price_piece(piece, material, rates, request.slab_group)


@router.post("/pieces", response_model=BatchPricingResponse)
def price_pieces(request: BatchPricingRequest, db: Session = Depends(get_db)):
    """Price a batch. Each piece succeeds or fails on its own."""
    rates = load_rate_config(db)
    materials = load_materials(db, [p.material_id for p in request.pieces])
    results = engine.price_pieces(request.pieces, materials, rates)
    failed = sum(1 for r in results if isinstance(r, FailedPiece))
    return BatchPricingResponse(
        results=results,
        priced_count=len(results) - failed,
        failed_count=failed,
    )
