"""Pydantic schemas for the Larder API.

Request/response models for:
- Units of measure + conversion
- Ingredient densities
- Categories / subcategories
- Ingredients
"""

from datetime import datetime
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict, Field

from .models import MeasurementSystem, UnitType, StorageType


# --- Units ---

class UnitRef(BaseModel):
    id: int
    name: str
    abbreviation: str

    model_config = ConfigDict(from_attributes=True)


class UnitCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    abbreviation: str = Field(..., min_length=1, max_length=20)
    system: MeasurementSystem
    type: UnitType
    base_unit_id: Optional[int] = Field(None, gt=0)
    conversion_factor: float = Field(1.0, gt=0)
    equivalent_unit_id: Optional[int] = Field(None, gt=0)
    equivalent_factor: Optional[float] = Field(None, gt=0)


class UnitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    abbreviation: Optional[str] = Field(None, min_length=1, max_length=20)
    system: Optional[MeasurementSystem] = None
    type: Optional[UnitType] = None
    base_unit_id: Optional[int] = Field(None, gt=0)
    conversion_factor: Optional[float] = Field(None, gt=0)
    equivalent_unit_id: Optional[int] = Field(None, gt=0)
    equivalent_factor: Optional[float] = Field(None, gt=0)


class UnitOut(BaseModel):
    id: int
    name: str
    abbreviation: str
    system: MeasurementSystem
    type: UnitType
    base_unit_id: Optional[int]
    conversion_factor: float
    equivalent_unit_id: Optional[int]
    equivalent_factor: Optional[float]

    model_config = ConfigDict(from_attributes=True)


class UnitDetailOut(UnitOut):
    base_unit: Optional[UnitRef] = None
    equivalent_unit: Optional[UnitRef] = None


# --- Conversion ---

class UnitConvertRequest(BaseModel):
    # Positivity is checked by the engine so it can report InvalidQuantity
    quantity: float
    from_unit_id: int = Field(..., gt=0)
    to_unit_id: int = Field(..., gt=0)
    ingredient_id: Optional[int] = Field(None, gt=0)


class UnitConvertResponse(BaseModel):
    original_quantity: float
    original_unit: str
    converted_quantity: float
    converted_unit: str
    conversion_path: str
    strategy: Literal["direct", "base_unit", "equivalent", "density"]
    factor: float
    direction: Optional[Literal["volume_to_weight", "weight_to_volume"]] = None


# --- Densities ---

class DensityCreate(BaseModel):
    volume_unit_id: int = Field(..., gt=0)
    weight_unit_id: int = Field(..., gt=0)
    conversion_factor: float = Field(..., gt=0)
    notes: Optional[str] = None


class DensityUpdate(BaseModel):
    conversion_factor: Optional[float] = Field(None, gt=0)
    notes: Optional[str] = None


class DensityOut(BaseModel):
    id: int
    ingredient_id: int
    volume_unit_id: int
    weight_unit_id: int
    conversion_factor: float
    notes: Optional[str]
    volume_unit: Optional[UnitRef] = None
    weight_unit: Optional[UnitRef] = None

    model_config = ConfigDict(from_attributes=True)


# --- Categories ---

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    store_section: Optional[str] = Field(None, max_length=120)
    display_order: Optional[int] = Field(None, ge=0)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    store_section: Optional[str] = Field(None, max_length=120)
    display_order: Optional[int] = Field(None, ge=0)


class SubcategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0)


class SubcategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    display_order: Optional[int] = Field(None, ge=0)


class SubcategoryOut(BaseModel):
    id: int
    category_id: int
    name: str
    description: Optional[str]
    display_order: int

    model_config = ConfigDict(from_attributes=True)


class CategoryOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    store_section: Optional[str]
    display_order: int

    model_config = ConfigDict(from_attributes=True)


class CategoryDetailOut(CategoryOut):
    subcategories: list[SubcategoryOut] = []


# --- Ingredients ---

class IngredientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: int = Field(..., gt=0)
    subcategory_id: Optional[int] = Field(None, gt=0)
    default_unit_id: int = Field(..., gt=0)
    package_unit_id: Optional[int] = Field(None, gt=0)
    is_perishable: bool = False
    storage_type: Optional[StorageType] = None
    shelf_life_days: Optional[int] = Field(None, gt=0)
    storage_instructions: Optional[str] = None
    preferred_supplier: Optional[str] = Field(None, max_length=200)
    supplier_notes: Optional[str] = None
    order_lead_time_days: Optional[int] = Field(None, gt=0)
    cost_per_unit_dollars: Optional[float] = Field(None, gt=0)
    package_size: Optional[float] = Field(None, gt=0)
    is_local: bool = False
    is_organic: bool = False
    is_seasonal_item: bool = False
    has_variable_price: bool = False
    is_special_order: bool = False


class IngredientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category_id: Optional[int] = Field(None, gt=0)
    subcategory_id: Optional[int] = Field(None, gt=0)
    default_unit_id: Optional[int] = Field(None, gt=0)
    package_unit_id: Optional[int] = Field(None, gt=0)
    is_perishable: Optional[bool] = None
    storage_type: Optional[StorageType] = None
    shelf_life_days: Optional[int] = Field(None, gt=0)
    storage_instructions: Optional[str] = None
    preferred_supplier: Optional[str] = Field(None, max_length=200)
    supplier_notes: Optional[str] = None
    order_lead_time_days: Optional[int] = Field(None, gt=0)
    cost_per_unit_dollars: Optional[float] = Field(None, gt=0)
    package_size: Optional[float] = Field(None, gt=0)
    is_local: Optional[bool] = None
    is_organic: Optional[bool] = None
    is_seasonal_item: Optional[bool] = None
    has_variable_price: Optional[bool] = None
    is_special_order: Optional[bool] = None


class IngredientOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    category_id: int
    subcategory_id: Optional[int]
    default_unit_id: int
    package_unit_id: Optional[int]
    is_perishable: bool
    storage_type: Optional[StorageType]
    shelf_life_days: Optional[int]
    storage_instructions: Optional[str]
    preferred_supplier: Optional[str]
    supplier_notes: Optional[str]
    order_lead_time_days: Optional[int]
    cost_per_unit_dollars: Optional[float]
    package_size: Optional[float]
    is_local: bool
    is_organic: bool
    is_seasonal_item: bool
    has_variable_price: bool
    is_special_order: bool
    created_at: Optional[datetime] = None

    category: Optional[CategoryOut] = None
    default_unit: Optional[UnitRef] = None
    package_unit: Optional[UnitRef] = None

    model_config = ConfigDict(from_attributes=True)


class IngredientDetailOut(IngredientOut):
    subcategory: Optional[SubcategoryOut] = None
    density_conversions: list[DensityOut] = []


# --- Dev ---

class SeedResponse(BaseModel):
    units: int
    equivalents: int
    categories: int
    subcategories: int
    ingredients: int
