import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..deps import get_db
from ..models import Ingredient, DensityConversion, Unit, UnitType
from ..schemas import DensityCreate, DensityUpdate, DensityOut

logger = logging.getLogger("larder.units")

router = APIRouter()


def _get_ingredient_or_404(db: Session, ingredient_id: int) -> Ingredient:
    ingredient = db.get(Ingredient, ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return ingredient


def _require_unit_type(db: Session, unit_id: int, unit_type: UnitType, label: str) -> Unit:
    unit = db.get(Unit, unit_id)
    if not unit:
        raise HTTPException(status_code=400, detail=f"Unknown {label} unit: {unit_id}")
    if unit.type != unit_type:
        raise HTTPException(
            status_code=400,
            detail=f"{label.capitalize()} unit must be a {unit_type.value} unit (got {unit.type.value})",
        )
    return unit


@router.get("/ingredients/{ingredient_id}/densities", response_model=list[DensityOut])
def list_densities(ingredient_id: int, db: Session = Depends(get_db)):
    _get_ingredient_or_404(db, ingredient_id)
    stmt = (
        select(DensityConversion)
        .where(DensityConversion.ingredient_id == ingredient_id)
        .order_by(DensityConversion.id)
    )
    return db.execute(stmt).scalars().all()


@router.post(
    "/ingredients/{ingredient_id}/densities",
    response_model=DensityOut,
    status_code=status.HTTP_201_CREATED,
)
def create_density(ingredient_id: int, req: DensityCreate, db: Session = Depends(get_db)):
    ingredient = _get_ingredient_or_404(db, ingredient_id)

    # The volume/weight sides are fixed; lookups depend on it
    _require_unit_type(db, req.volume_unit_id, UnitType.VOLUME, "volume")
    _require_unit_type(db, req.weight_unit_id, UnitType.WEIGHT, "weight")

    existing = db.execute(
        select(DensityConversion).where(
            DensityConversion.ingredient_id == ingredient.id,
            DensityConversion.volume_unit_id == req.volume_unit_id,
            DensityConversion.weight_unit_id == req.weight_unit_id,
        )
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(
            status_code=409,
            detail="A density conversion for this ingredient and unit pair already exists",
        )

    density = DensityConversion(ingredient_id=ingredient.id, **req.model_dump())
    db.add(density)
    db.commit()
    db.refresh(density)
    logger.info(
        f"Added density for ingredient {ingredient.id}: "
        f"1 unit {density.volume_unit_id} = {density.conversion_factor} unit {density.weight_unit_id}"
    )
    return density


@router.put("/densities/{density_id}", response_model=DensityOut)
def update_density(density_id: int, req: DensityUpdate, db: Session = Depends(get_db)):
    density = db.get(DensityConversion, density_id)
    if not density:
        raise HTTPException(status_code=404, detail="Density conversion not found")

    changes = req.model_dump(exclude_unset=True)
    if "conversion_factor" in changes and changes["conversion_factor"] is None:
        raise HTTPException(status_code=400, detail="conversion_factor cannot be cleared")

    for key, value in changes.items():
        setattr(density, key, value)
    db.commit()
    db.refresh(density)
    return density


@router.delete("/densities/{density_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_density(density_id: int, db: Session = Depends(get_db)):
    density = db.get(DensityConversion, density_id)
    if not density:
        raise HTTPException(404, "Density conversion not found")

    db.delete(density)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
