from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..deps import get_db

router = APIRouter()


def _get_ingredient_or_404(db: Session, ingredient_id: int) -> models.Ingredient:
    ingredient = db.get(models.Ingredient, ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return ingredient


def _validate_references(db: Session, data: dict):
    """Check that category/subcategory/unit ids point at real rows."""
    category_id = data.get("category_id")
    if category_id is not None and not db.get(models.IngredientCategory, category_id):
        raise HTTPException(status_code=400, detail=f"Category {category_id} not found")

    subcategory_id = data.get("subcategory_id")
    if subcategory_id is not None:
        subcategory = db.get(models.IngredientSubcategory, subcategory_id)
        if not subcategory:
            raise HTTPException(status_code=400, detail=f"Subcategory {subcategory_id} not found")
        if category_id is not None and subcategory.category_id != category_id:
            raise HTTPException(status_code=400, detail="Subcategory does not belong to the category")

    for field in ("default_unit_id", "package_unit_id"):
        unit_id = data.get(field)
        if unit_id is not None and not db.get(models.Unit, unit_id):
            raise HTTPException(status_code=400, detail=f"Unit {unit_id} not found ({field})")


@router.get("/", response_model=list[schemas.IngredientOut])
def list_ingredients(
    db: Session = Depends(get_db),
    category_id: Optional[int] = None,
    subcategory_id: Optional[int] = None,
    is_perishable: Optional[bool] = None,
    storage_type: Optional[models.StorageType] = None,
    is_local: Optional[bool] = None,
    is_organic: Optional[bool] = None,
    is_seasonal_item: Optional[bool] = None,
    search: Optional[str] = None,
    limit: int = Query(200, ge=1, le=1000),
    offset: int = Query(0, ge=0),
):
    """List ingredients with optional filtering."""
    query = db.query(models.Ingredient)

    if category_id is not None:
        query = query.filter(models.Ingredient.category_id == category_id)
    if subcategory_id is not None:
        query = query.filter(models.Ingredient.subcategory_id == subcategory_id)
    if is_perishable is not None:
        query = query.filter(models.Ingredient.is_perishable == is_perishable)
    if storage_type is not None:
        query = query.filter(models.Ingredient.storage_type == storage_type)
    if is_local is not None:
        query = query.filter(models.Ingredient.is_local == is_local)
    if is_organic is not None:
        query = query.filter(models.Ingredient.is_organic == is_organic)
    if is_seasonal_item is not None:
        query = query.filter(models.Ingredient.is_seasonal_item == is_seasonal_item)

    if search:
        term = f"%{search.lower()}%"
        query = query.filter(
            or_(
                func.lower(models.Ingredient.name).like(term),
                func.lower(models.Ingredient.description).like(term),
            )
        )

    return query.order_by(models.Ingredient.name).limit(limit).offset(offset).all()


@router.get("/{ingredient_id}", response_model=schemas.IngredientDetailOut)
def get_ingredient(ingredient_id: int, db: Session = Depends(get_db)):
    return _get_ingredient_or_404(db, ingredient_id)


@router.post("/", response_model=schemas.IngredientOut, status_code=status.HTTP_201_CREATED)
def create_ingredient(req: schemas.IngredientCreate, db: Session = Depends(get_db)):
    data = req.model_dump()
    _validate_references(db, data)

    ingredient = models.Ingredient(**data)
    db.add(ingredient)
    db.commit()
    db.refresh(ingredient)
    return ingredient


@router.put("/{ingredient_id}", response_model=schemas.IngredientOut)
def update_ingredient(
    ingredient_id: int,
    req: schemas.IngredientUpdate,
    db: Session = Depends(get_db),
):
    ingredient = _get_ingredient_or_404(db, ingredient_id)
    changes = req.model_dump(exclude_unset=True)

    for required in ("name", "category_id", "default_unit_id"):
        if required in changes and changes[required] is None:
            raise HTTPException(status_code=400, detail=f"{required} cannot be cleared")

    # Subcategory must still match the (possibly new) category
    merged = {
        "category_id": changes.get("category_id", ingredient.category_id),
        "subcategory_id": changes.get("subcategory_id", ingredient.subcategory_id),
        "default_unit_id": changes.get("default_unit_id"),
        "package_unit_id": changes.get("package_unit_id"),
    }
    _validate_references(db, merged)

    for key, value in changes.items():
        setattr(ingredient, key, value)
    db.commit()
    db.refresh(ingredient)
    return ingredient


@router.delete("/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ingredient(ingredient_id: int, db: Session = Depends(get_db)):
    ingredient = _get_ingredient_or_404(db, ingredient_id)
    # density_conversions cascade via the relationship
    db.delete(ingredient)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
