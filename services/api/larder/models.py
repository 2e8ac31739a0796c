"""SQLAlchemy ORM models for the Larder API.

Tables:
- units: Units of measure (metric + US), with optional base unit and cross-system equivalent
- ingredient_categories / ingredient_subcategories: Store-section grouping for ingredients
- ingredients: Ingredient catalog entries
- ingredient_densities: Per-ingredient volume -> weight factors
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Text,
    Integer,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Numeric,
    UniqueConstraint,
    Enum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func, false

from .db import Base


class MeasurementSystem(str, enum.Enum):
    METRIC = "METRIC"
    US = "US"


class UnitType(str, enum.Enum):
    VOLUME = "VOLUME"
    WEIGHT = "WEIGHT"
    COUNT = "COUNT"
    LENGTH = "LENGTH"
    TEMPERATURE = "TEMPERATURE"


class StorageType(str, enum.Enum):
    ROOM_TEMPERATURE = "ROOM_TEMPERATURE"
    REFRIGERATED = "REFRIGERATED"
    FROZEN = "FROZEN"
    DRY_STORAGE = "DRY_STORAGE"
    COOL_DARK = "COOL_DARK"


class Unit(Base):
    """Unit of measure.

    A unit without a base reference is itself a base unit for its
    (system, type). `conversion_factor` is how many base units one of this
    unit equals. `equivalent_factor` relates it to a unit in the other system:
    1 unit = equivalent_factor equivalent units.
    """
    __tablename__ = "units"
    __table_args__ = (
        Index("ix_units_base_unit_id", "base_unit_id"),
        Index("ix_units_system_type", "system", "type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(20), nullable=False)
    system: Mapped[MeasurementSystem] = mapped_column(
        Enum(MeasurementSystem, name="measurement_system"), nullable=False
    )
    type: Mapped[UnitType] = mapped_column(
        Enum(UnitType, name="unit_type"), nullable=False
    )

    base_unit_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="RESTRICT"), nullable=True
    )
    conversion_factor: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)

    equivalent_unit_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )
    equivalent_factor: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    base_unit: Mapped[Optional["Unit"]] = relationship(
        "Unit", remote_side=[id], foreign_keys=[base_unit_id]
    )
    equivalent_unit: Mapped[Optional["Unit"]] = relationship(
        "Unit", remote_side=[id], foreign_keys=[equivalent_unit_id]
    )


class IngredientCategory(Base):
    """Top-level ingredient grouping, mapped to a store section."""
    __tablename__ = "ingredient_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    store_section: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    subcategories: Mapped[list["IngredientSubcategory"]] = relationship(
        "IngredientSubcategory",
        back_populates="category",
        cascade="all, delete-orphan",
        order_by="IngredientSubcategory.display_order",
    )


class IngredientSubcategory(Base):
    __tablename__ = "ingredient_subcategories"
    __table_args__ = (
        Index("ix_ingredient_subcategories_category_id", "category_id"),
        UniqueConstraint("category_id", "name", name="uq_subcategory_category_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredient_categories.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    category: Mapped["IngredientCategory"] = relationship(
        "IngredientCategory", back_populates="subcategories"
    )


class Ingredient(Base):
    """Ingredient catalog entry."""
    __tablename__ = "ingredients"
    __table_args__ = (
        Index("ix_ingredients_category_id", "category_id"),
        Index("ix_ingredients_name", "name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredient_categories.id", ondelete="RESTRICT"), nullable=False
    )
    subcategory_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("ingredient_subcategories.id", ondelete="SET NULL"), nullable=True
    )
    default_unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="RESTRICT"), nullable=False
    )
    package_unit_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="RESTRICT"), nullable=True
    )

    # Storage
    is_perishable: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    storage_type: Mapped[Optional[StorageType]] = mapped_column(
        Enum(StorageType, name="storage_type"), nullable=True
    )
    shelf_life_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    storage_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Purchasing
    preferred_supplier: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    supplier_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_lead_time_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cost_per_unit_dollars: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    package_size: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Sourcing flags
    is_local: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    is_organic: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    is_seasonal_item: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    has_variable_price: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    is_special_order: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    category: Mapped["IngredientCategory"] = relationship("IngredientCategory")
    subcategory: Mapped[Optional["IngredientSubcategory"]] = relationship("IngredientSubcategory")
    default_unit: Mapped["Unit"] = relationship("Unit", foreign_keys=[default_unit_id])
    package_unit: Mapped[Optional["Unit"]] = relationship("Unit", foreign_keys=[package_unit_id])

    density_conversions: Mapped[list["DensityConversion"]] = relationship(
        "DensityConversion", back_populates="ingredient", cascade="all, delete-orphan"
    )


class DensityConversion(Base):
    """Ingredient-specific volume -> weight factor.

    volume quantity * conversion_factor = weight quantity. Which side is
    volume and which is weight is fixed by the columns.
    """
    __tablename__ = "ingredient_densities"
    __table_args__ = (
        Index("ix_ingredient_densities_ingredient_id", "ingredient_id"),
        UniqueConstraint(
            "ingredient_id", "volume_unit_id", "weight_unit_id",
            name="uq_ingredient_density_units",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ingredient_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False
    )
    volume_unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="RESTRICT"), nullable=False
    )
    weight_unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="RESTRICT"), nullable=False
    )
    conversion_factor: Mapped[float] = mapped_column(Float, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    ingredient: Mapped["Ingredient"] = relationship("Ingredient", back_populates="density_conversions")
    volume_unit: Mapped["Unit"] = relationship("Unit", foreign_keys=[volume_unit_id])
    weight_unit: Mapped["Unit"] = relationship("Unit", foreign_keys=[weight_unit_id])
