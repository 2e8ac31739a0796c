"""Ingredient categories and their subcategories."""

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..deps import get_db
from ..models import IngredientCategory, IngredientSubcategory, Ingredient
from ..schemas import (
    CategoryCreate,
    CategoryUpdate,
    CategoryOut,
    CategoryDetailOut,
    SubcategoryCreate,
    SubcategoryUpdate,
    SubcategoryOut,
)

router = APIRouter()


def _get_category_or_404(db: Session, category_id: int) -> IngredientCategory:
    category = db.get(IngredientCategory, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _get_subcategory_or_404(db: Session, subcategory_id: int) -> IngredientSubcategory:
    subcategory = db.get(IngredientSubcategory, subcategory_id)
    if not subcategory:
        raise HTTPException(status_code=404, detail="Subcategory not found")
    return subcategory


def _commit_or_409(db: Session, detail: str):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=detail)


# --- Categories ---

@router.get("/categories", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    stmt = select(IngredientCategory).order_by(IngredientCategory.display_order, IngredientCategory.name)
    return db.execute(stmt).scalars().all()


@router.get("/categories/{category_id}", response_model=CategoryDetailOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _get_category_or_404(db, category_id)


@router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(req: CategoryCreate, db: Session = Depends(get_db)):
    data = req.model_dump()
    data["display_order"] = data["display_order"] or 0
    category = IngredientCategory(**data)
    db.add(category)
    _commit_or_409(db, f"Category '{req.name}' already exists")
    db.refresh(category)
    return category


@router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, req: CategoryUpdate, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    for key, value in req.model_dump(exclude_unset=True).items():
        if key in ("name", "display_order") and value is None:
            continue
        setattr(category, key, value)
    _commit_or_409(db, "Category name already in use")
    db.refresh(category)
    return category


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)

    ingredient_count = db.execute(
        select(func.count(Ingredient.id)).where(Ingredient.category_id == category.id)
    ).scalar_one()
    if ingredient_count > 0:
        raise HTTPException(status_code=400, detail="Cannot delete category with associated ingredients")

    db.delete(category)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Subcategories ---

@router.get("/categories/{category_id}/subcategories", response_model=list[SubcategoryOut])
def list_subcategories(category_id: int, db: Session = Depends(get_db)):
    _get_category_or_404(db, category_id)
    stmt = (
        select(IngredientSubcategory)
        .where(IngredientSubcategory.category_id == category_id)
        .order_by(IngredientSubcategory.display_order, IngredientSubcategory.name)
    )
    return db.execute(stmt).scalars().all()


@router.post(
    "/categories/{category_id}/subcategories",
    response_model=SubcategoryOut,
    status_code=status.HTTP_201_CREATED,
)
def create_subcategory(category_id: int, req: SubcategoryCreate, db: Session = Depends(get_db)):
    category = _get_category_or_404(db, category_id)
    data = req.model_dump()
    data["display_order"] = data["display_order"] or 0
    subcategory = IngredientSubcategory(category_id=category.id, **data)
    db.add(subcategory)
    _commit_or_409(db, f"Subcategory '{req.name}' already exists in this category")
    db.refresh(subcategory)
    return subcategory


@router.get("/subcategories/{subcategory_id}", response_model=SubcategoryOut)
def get_subcategory(subcategory_id: int, db: Session = Depends(get_db)):
    return _get_subcategory_or_404(db, subcategory_id)


@router.put("/subcategories/{subcategory_id}", response_model=SubcategoryOut)
def update_subcategory(subcategory_id: int, req: SubcategoryUpdate, db: Session = Depends(get_db)):
    subcategory = _get_subcategory_or_404(db, subcategory_id)
    for key, value in req.model_dump(exclude_unset=True).items():
        if key in ("name", "display_order") and value is None:
            continue
        setattr(subcategory, key, value)
    _commit_or_409(db, "Subcategory name already in use")
    db.refresh(subcategory)
    return subcategory


@router.delete("/subcategories/{subcategory_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subcategory(subcategory_id: int, db: Session = Depends(get_db)):
    subcategory = _get_subcategory_or_404(db, subcategory_id)

    ingredient_count = db.execute(
        select(func.count(Ingredient.id)).where(Ingredient.subcategory_id == subcategory.id)
    ).scalar_one()
    if ingredient_count > 0:
        raise HTTPException(status_code=400, detail="Cannot delete subcategory with associated ingredients")

    db.delete(subcategory)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
