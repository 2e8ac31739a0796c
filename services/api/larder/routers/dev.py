"""Dev-only endpoints for seeding.

Endpoints:
- POST /api/dev/seed - Load the unit catalog, categories and sample ingredients
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas import SeedResponse
from ..services.catalog_seed import seed_catalog
from ..settings import settings

router = APIRouter()


@router.post("/dev/seed", response_model=SeedResponse)
def seed(db: Session = Depends(get_db)):
    """Idempotently seed reference data."""
    if not settings.dev_endpoints_enabled:
        raise HTTPException(status_code=404, detail="Not found")

    summary = seed_catalog(db)
    return SeedResponse(
        units=summary.units,
        equivalents=summary.equivalents,
        categories=summary.categories,
        subcategories=summary.subcategories,
        ingredients=summary.ingredients,
    )
