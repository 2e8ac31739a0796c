"""
Router for the unit catalog and unit conversion.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select, func, or_, update
from sqlalchemy.orm import Session

from ..deps import get_db, get_catalog
from ..models import Unit, Ingredient, DensityConversion, MeasurementSystem, UnitType
from ..schemas import (
    UnitCreate,
    UnitUpdate,
    UnitOut,
    UnitDetailOut,
    UnitConvertRequest,
    UnitConvertResponse,
)
from ..services.unit_catalog import SqlUnitCatalog
from ..services.unit_conversion import convert

logger = logging.getLogger("larder.units")

router = APIRouter()


def _get_unit_or_404(db: Session, unit_id: int) -> Unit:
    unit = db.get(Unit, unit_id)
    if not unit:
        raise HTTPException(status_code=404, detail="Unit not found")
    return unit


def _validate_links(
    db: Session,
    unit_id: Optional[int],
    system: MeasurementSystem,
    unit_type: UnitType,
    base_unit_id: Optional[int],
    equivalent_unit_id: Optional[int],
    equivalent_factor: Optional[float],
):
    """Enforce base/equivalent invariants before a unit is written.

    - base unit: exists, same type + system, not itself, no cycle
    - equivalent: given together with its factor, same type, other system
    """
    if base_unit_id is not None:
        if unit_id is not None and base_unit_id == unit_id:
            raise HTTPException(status_code=400, detail="A unit cannot be its own base unit")

        base = db.get(Unit, base_unit_id)
        if not base:
            raise HTTPException(status_code=400, detail=f"Base unit {base_unit_id} not found")
        if base.type != unit_type or base.system != system:
            raise HTTPException(
                status_code=400,
                detail="Base unit must have the same type and measurement system",
            )

        # Walk up from the new base; reaching ourselves means a cycle
        if unit_id is not None:
            seen = set()
            current = base
            while current is not None and current.base_unit_id is not None:
                if current.base_unit_id == unit_id:
                    raise HTTPException(status_code=400, detail="Base unit chain would form a cycle")
                if current.id in seen:
                    break
                seen.add(current.id)
                current = db.get(Unit, current.base_unit_id)

    if (equivalent_unit_id is None) != (equivalent_factor is None):
        raise HTTPException(
            status_code=400,
            detail="equivalent_unit_id and equivalent_factor must be provided together",
        )

    if equivalent_unit_id is not None:
        if unit_id is not None and equivalent_unit_id == unit_id:
            raise HTTPException(status_code=400, detail="A unit cannot be its own equivalent")
        equivalent = db.get(Unit, equivalent_unit_id)
        if not equivalent:
            raise HTTPException(status_code=400, detail=f"Equivalent unit {equivalent_unit_id} not found")
        if equivalent.type != unit_type:
            raise HTTPException(status_code=400, detail="Equivalent unit must have the same type")
        if equivalent.system == system:
            raise HTTPException(
                status_code=400,
                detail="Equivalent unit must belong to the other measurement system",
            )


@router.get("/", response_model=list[UnitOut])
def list_units(
    system: Optional[MeasurementSystem] = None,
    type: Optional[UnitType] = None,
    db: Session = Depends(get_db),
):
    stmt = select(Unit)
    if system:
        stmt = stmt.where(Unit.system == system)
    if type:
        stmt = stmt.where(Unit.type == type)
    stmt = stmt.order_by(Unit.system, Unit.type, Unit.name)
    return db.execute(stmt).scalars().all()


@router.post("/convert", response_model=UnitConvertResponse)
def convert_units(
    req: UnitConvertRequest,
    catalog: SqlUnitCatalog = Depends(get_catalog),
):
    """
    Convert a quantity from one unit to another.

    Conversion failures propagate as ConversionError and are mapped to
    status codes by the app-level handler.
    """
    result = convert(
        catalog,
        quantity=req.quantity,
        from_unit_id=req.from_unit_id,
        to_unit_id=req.to_unit_id,
        ingredient_id=req.ingredient_id,
    )
    return UnitConvertResponse(**result.to_dict())


@router.get("/{unit_id}", response_model=UnitDetailOut)
def get_unit(unit_id: int, db: Session = Depends(get_db)):
    return _get_unit_or_404(db, unit_id)


@router.post("/", response_model=UnitDetailOut, status_code=status.HTTP_201_CREATED)
def create_unit(req: UnitCreate, db: Session = Depends(get_db)):
    _validate_links(
        db,
        unit_id=None,
        system=req.system,
        unit_type=req.type,
        base_unit_id=req.base_unit_id,
        equivalent_unit_id=req.equivalent_unit_id,
        equivalent_factor=req.equivalent_factor,
    )

    unit = Unit(**req.model_dump())
    db.add(unit)
    db.commit()
    db.refresh(unit)
    logger.info(f"Created unit {unit.id} ({unit.abbreviation})")
    return unit


@router.put("/{unit_id}", response_model=UnitDetailOut)
def update_unit(unit_id: int, req: UnitUpdate, db: Session = Depends(get_db)):
    unit = _get_unit_or_404(db, unit_id)
    changes = req.model_dump(exclude_unset=True)

    # Clearing the equivalent link drops its factor too
    if "equivalent_unit_id" in changes and changes["equivalent_unit_id"] is None:
        changes.setdefault("equivalent_factor", None)

    merged = {
        "system": unit.system,
        "type": unit.type,
        "base_unit_id": unit.base_unit_id,
        "equivalent_unit_id": unit.equivalent_unit_id,
        "equivalent_factor": unit.equivalent_factor,
    }
    merged.update({k: v for k, v in changes.items() if k in merged})

    if merged["system"] is None or merged["type"] is None:
        raise HTTPException(status_code=400, detail="system and type cannot be cleared")
    if "conversion_factor" in changes and changes["conversion_factor"] is None:
        raise HTTPException(status_code=400, detail="conversion_factor cannot be cleared")

    if merged["system"] != unit.system or merged["type"] != unit.type:
        referencing = db.execute(
            select(func.count(Unit.id)).where(
                or_(Unit.base_unit_id == unit.id, Unit.equivalent_unit_id == unit.id)
            )
        ).scalar_one()
        if referencing:
            raise HTTPException(
                status_code=400,
                detail="Cannot change system or type of a unit referenced by other units",
            )

    _validate_links(
        db,
        unit_id=unit.id,
        system=merged["system"],
        unit_type=merged["type"],
        base_unit_id=merged["base_unit_id"],
        equivalent_unit_id=merged["equivalent_unit_id"],
        equivalent_factor=merged["equivalent_factor"],
    )

    for key, value in changes.items():
        setattr(unit, key, value)
    db.commit()
    db.refresh(unit)
    return unit


@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_unit(unit_id: int, db: Session = Depends(get_db)):
    unit = _get_unit_or_404(db, unit_id)

    ingredient_count = db.execute(
        select(func.count(Ingredient.id)).where(
            or_(Ingredient.default_unit_id == unit.id, Ingredient.package_unit_id == unit.id)
        )
    ).scalar_one()
    if ingredient_count > 0:
        raise HTTPException(status_code=400, detail="Cannot delete unit that is used by ingredients")

    derived_count = db.execute(
        select(func.count(Unit.id)).where(Unit.base_unit_id == unit.id)
    ).scalar_one()
    if derived_count > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete unit that is used as a base unit for other units",
        )

    density_count = db.execute(
        select(func.count(DensityConversion.id)).where(
            or_(
                DensityConversion.volume_unit_id == unit.id,
                DensityConversion.weight_unit_id == unit.id,
            )
        )
    ).scalar_one()
    if density_count > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete unit that is used by density conversions",
        )

    # Drop cross-system links pointing at this unit
    db.execute(
        update(Unit)
        .where(Unit.equivalent_unit_id == unit.id)
        .values(equivalent_unit_id=None, equivalent_factor=None)
    )
    db.delete(unit)
    db.commit()
    logger.info(f"Deleted unit {unit_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
