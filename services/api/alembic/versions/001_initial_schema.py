"""Initial schema: units, categories, ingredients, ingredient densities

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

measurement_system = sa.Enum("METRIC", "US", name="measurement_system")
unit_type = sa.Enum("VOLUME", "WEIGHT", "COUNT", "LENGTH", "TEMPERATURE", name="unit_type")
storage_type = sa.Enum(
    "ROOM_TEMPERATURE", "REFRIGERATED", "FROZEN", "DRY_STORAGE", "COOL_DARK",
    name="storage_type",
)


def upgrade() -> None:
    # Units of measure (self-referencing base + equivalent)
    op.create_table(
        "units",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("abbreviation", sa.String(20), nullable=False),
        sa.Column("system", measurement_system, nullable=False),
        sa.Column("type", unit_type, nullable=False),
        sa.Column("base_unit_id", sa.Integer, sa.ForeignKey("units.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("conversion_factor", sa.Float, nullable=False, server_default="1.0"),
        sa.Column("equivalent_unit_id", sa.Integer, sa.ForeignKey("units.id", ondelete="SET NULL"), nullable=True),
        sa.Column("equivalent_factor", sa.Float, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("conversion_factor > 0", name="ck_units_conversion_factor_positive"),
        sa.CheckConstraint("base_unit_id IS NULL OR base_unit_id <> id", name="ck_units_not_own_base"),
    )
    op.create_index("ix_units_base_unit_id", "units", ["base_unit_id"])
    op.create_index("ix_units_system_type", "units", ["system", "type"])

    # Categories
    op.create_table(
        "ingredient_categories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), unique=True, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("store_section", sa.String(120), nullable=True),
        sa.Column("display_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "ingredient_subcategories",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("category_id", sa.Integer, sa.ForeignKey("ingredient_categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("display_order", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint("category_id", "name", name="uq_subcategory_category_name"),
    )
    op.create_index("ix_ingredient_subcategories_category_id", "ingredient_subcategories", ["category_id"])

    # Ingredients
    op.create_table(
        "ingredients",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category_id", sa.Integer, sa.ForeignKey("ingredient_categories.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("subcategory_id", sa.Integer, sa.ForeignKey("ingredient_subcategories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("default_unit_id", sa.Integer, sa.ForeignKey("units.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("package_unit_id", sa.Integer, sa.ForeignKey("units.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("is_perishable", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("storage_type", storage_type, nullable=True),
        sa.Column("shelf_life_days", sa.Integer, nullable=True),
        sa.Column("storage_instructions", sa.Text, nullable=True),
        sa.Column("preferred_supplier", sa.String(200), nullable=True),
        sa.Column("supplier_notes", sa.Text, nullable=True),
        sa.Column("order_lead_time_days", sa.Integer, nullable=True),
        sa.Column("cost_per_unit_dollars", sa.Numeric(10, 2), nullable=True),
        sa.Column("package_size", sa.Float, nullable=True),
        sa.Column("is_local", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_organic", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_seasonal_item", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("has_variable_price", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_special_order", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_ingredients_category_id", "ingredients", ["category_id"])
    op.create_index("ix_ingredients_name", "ingredients", ["name"])

    # Density conversions (volume -> weight per ingredient)
    op.create_table(
        "ingredient_densities",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("ingredient_id", sa.Integer, sa.ForeignKey("ingredients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("volume_unit_id", sa.Integer, sa.ForeignKey("units.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("weight_unit_id", sa.Integer, sa.ForeignKey("units.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("conversion_factor", sa.Float, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("ingredient_id", "volume_unit_id", "weight_unit_id", name="uq_ingredient_density_units"),
        sa.CheckConstraint("conversion_factor > 0", name="ck_ingredient_densities_factor_positive"),
    )
    op.create_index("ix_ingredient_densities_ingredient_id", "ingredient_densities", ["ingredient_id"])


def downgrade() -> None:
    op.drop_table("ingredient_densities")
    op.drop_table("ingredients")
    op.drop_table("ingredient_subcategories")
    op.drop_table("ingredient_categories")
    op.drop_table("units")
    storage_type.drop(op.get_bind(), checkfirst=True)
    unit_type.drop(op.get_bind(), checkfirst=True)
    measurement_system.drop(op.get_bind(), checkfirst=True)
