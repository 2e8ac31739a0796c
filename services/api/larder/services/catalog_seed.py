"""
Reference-data seeding: units of measure, categories, sample ingredients.

Every function is idempotent: rows are matched on their natural key and
updated in place, so re-running the seed never duplicates anything.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import (
    Unit,
    MeasurementSystem,
    UnitType,
    IngredientCategory,
    IngredientSubcategory,
    Ingredient,
    DensityConversion,
    StorageType,
)

logger = logging.getLogger("larder.seed")

METRIC = MeasurementSystem.METRIC
US = MeasurementSystem.US
VOLUME = UnitType.VOLUME
WEIGHT = UnitType.WEIGHT
COUNT = UnitType.COUNT

# (name, abbreviation, system, type)
BASE_UNITS = [
    ("Milliliter", "ml", METRIC, VOLUME),
    ("Teaspoon", "tsp", US, VOLUME),
    ("Gram", "g", METRIC, WEIGHT),
    ("Ounce", "oz", US, WEIGHT),
    ("Each", "ea", METRIC, COUNT),
    ("Each", "ea", US, COUNT),
    ("Piece", "pc", METRIC, COUNT),
    ("Piece", "pc", US, COUNT),
]

# (name, abbreviation, system, type, base unit name, factor to base)
DERIVED_UNITS = [
    ("Liter", "L", METRIC, VOLUME, "Milliliter", 1000),
    ("Deciliter", "dl", METRIC, VOLUME, "Milliliter", 100),
    ("Centiliter", "cl", METRIC, VOLUME, "Milliliter", 10),
    ("Tablespoon", "tbsp", US, VOLUME, "Teaspoon", 3),
    ("Fluid Ounce", "fl oz", US, VOLUME, "Teaspoon", 6),
    ("Cup", "cup", US, VOLUME, "Teaspoon", 48),
    ("Pint", "pt", US, VOLUME, "Teaspoon", 96),
    ("Quart", "qt", US, VOLUME, "Teaspoon", 192),
    ("Gallon", "gal", US, VOLUME, "Teaspoon", 768),
    ("Kilogram", "kg", METRIC, WEIGHT, "Gram", 1000),
    ("Milligram", "mg", METRIC, WEIGHT, "Gram", 0.001),
    ("Pound", "lb", US, WEIGHT, "Ounce", 16),
    ("Dozen", "doz", US, COUNT, "Each", 12),
    ("Pair", "pr", METRIC, COUNT, "Each", 2),
    ("Bunch", "bunch", US, COUNT, "Each", 1),
    ("Head", "head", US, COUNT, "Each", 1),
    ("Clove", "clove", US, COUNT, "Each", 1),
    ("Sprig", "sprig", US, COUNT, "Each", 1),
]

# 1 from-unit = factor to-units, across measurement systems
EQUIVALENTS = [
    (("Milliliter", METRIC), ("Teaspoon", US), 0.202884),
    (("Liter", METRIC), ("Quart", US), 1.05669),
    (("Cup", US), ("Milliliter", METRIC), 236.588),
    (("Gram", METRIC), ("Ounce", US), 0.035274),
    (("Kilogram", METRIC), ("Pound", US), 2.20462),
]

# (name, description, store section, subcategories[(name, description)])
CATEGORIES = [
    ("Grains & Dry Goods", "Rice, beans, flours, and other dry goods", "Dry Goods Aisle", [
        ("Rice", "Different varieties of rice"),
        ("Beans & Legumes", "Beans, lentils, and other legumes"),
        ("Flour", "Different types of flour"),
        ("Pasta", "Pasta and noodles"),
        ("Breakfast Cereals", "Ready-to-eat cereals"),
        ("Baking Ingredients", "Ingredients used for baking"),
    ]),
    ("Oil", "Cooking oils and plant-based fats", "Oil & Vinegar Aisle", [
        ("Vegetable Oils", "Oils from plant sources"),
        ("Nut & Seed Oils", "Specialty oils from nuts and seeds"),
        ("Plant-Based Butters", "Vegan butter alternatives"),
    ]),
    ("Spices (Dry)", "Herbs, spices, and seasonings in Powdered form", "Spice Aisle", [
        ("Whole Spices", "Unground spices"),
        ("Ground Spices", "Ground spice powders"),
        ("Spice Blends", "Pre-mixed spice combinations"),
        ("Salt & Pepper", "Various salts and peppers"),
        ("Sweeteners", "Sugar and other sweeteners"),
    ]),
    ("Vegetables", "Fresh vegetables", "Produce Section", [
        ("Leafy Greens", "Spinach, kale, lettuce, etc."),
        ("Root Vegetables", "Potatoes, carrots, beets, etc."),
        ("Cruciferous", "Broccoli, cauliflower, cabbage, etc."),
        ("Alliums", "Onions, garlic, leeks, etc."),
        ("Squash & Gourds", "Pumpkins, zucchini, etc."),
        ("Nightshades", "Tomatoes, peppers, eggplant, etc."),
        ("Canned Vegetables", "Preserved vegetables"),
        ("Mushrooms", "All varieties of edible fungi"),
    ]),
    ("Dairy & Alternatives", "Dairy products and plant-based alternatives", "Refrigerated Section", [
        ("Milk & Plant Milks", "Dairy milk and plant-based alternatives"),
        ("Cheese & Vegan Cheese", "Dairy cheese and plant-based alternatives"),
        ("Yogurt & Fermented", "Yogurt and fermented dairy/alternatives"),
        ("Butter & Alternatives", "Butter, ghee, and plant-based alternatives"),
        ("Eggs & Substitutes", "Eggs and egg replacers"),
    ]),
    ("Frozen Vegetables", "Frozen vegetables", "Produce Section", []),
    ("Ready to Eat", "Items that require no cooking, ready for immediate consumption", "Various Sections", [
        ("Fresh Fruits", "Whole fruits ready for consumption"),
        ("Cut Vegetables", "Pre-cut vegetables and crudites"),
        ("Dips & Spreads", "Ready-to-eat dips and spreads"),
        ("Packaged Snacks", "Pre-packaged snack items"),
        ("Bread & Crackers", "Ready-to-eat bread products"),
        ("Desserts", "Ready-to-eat desserts and sweets"),
        ("Beverages", "Ready-to-drink beverages"),
    ]),
    ("Fruits", "Fresh and dried fruits", "Produce Section", [
        ("Berries", "Strawberries, blueberries, etc."),
        ("Citrus", "Oranges, lemons, limes, etc."),
        ("Tropical", "Bananas, mangoes, pineapples, etc."),
        ("Stone Fruits", "Peaches, plums, cherries, etc."),
        ("Pome Fruits", "Apples, pears, etc."),
        ("Melons", "Watermelon, cantaloupe, etc."),
    ]),
    ("Condiments", "Sauces, spreads, and condiments", "Condiments Aisle", [
        ("Sauces", "Various cooking and table sauces"),
        ("Vinegars", "Different types of vinegar"),
        ("Spreads", "Nut butters, jams, etc."),
        ("Pickles & Ferments", "Pickled and fermented foods"),
        ("Dressings", "Salad dressings and marinades"),
    ]),
    ("Beverages", "Coffee, tea, drinks and beverage ingredients", "Beverage Aisle", [
        ("Coffee", "Coffee beans and ground coffee"),
        ("Tea", "Different types of tea"),
        ("Juices", "Fruit and vegetable juices"),
        ("Plant Milks", "Shelf-stable plant-based milks"),
        ("Other Beverages", "Other drink ingredients"),
    ]),
    ("Snacks & Desserts", "Vegetarian snacks, sweets, and dessert ingredients", "Snack Aisle", [
        ("Cookies & Crackers", "Sweet and savory baked snacks"),
        ("Chips & Crisps", "Potato chips and similar snacks"),
        ("Nuts & Trail Mixes", "Mixed nuts and trail mixes"),
        ("Energy Bars", "Granola and protein bars"),
        ("Sweets", "Vegetarian candies and confections"),
        ("Dessert Ingredients", "Specialty ingredients for desserts"),
    ]),
    ("Herbs", "Fresh and dried herbs", "Produce Section", [
        ("Fresh Herbs", "Fresh culinary herbs"),
        ("Dried Herbs", "Dried culinary herbs"),
    ]),
    ("Nuts & Seeds", "Various nuts and seeds", "Dry Goods Aisle", [
        ("Tree Nuts", "Various tree nuts"),
        ("Seeds", "Edible seeds"),
        ("Nut & Seed Butters", "Spreads made from nuts and seeds"),
    ]),
]


@dataclass
class SeedSummary:
    units: int = 0
    equivalents: int = 0
    categories: int = 0
    subcategories: int = 0
    ingredients: int = 0


def _upsert_unit(db: Session, name, abbreviation, system, unit_type, base_unit_id=None, factor=1.0) -> Unit:
    unit = db.execute(
        select(Unit).where(Unit.name == name, Unit.system == system, Unit.type == unit_type)
    ).scalar_one_or_none()
    if unit is None:
        unit = Unit(name=name, system=system, type=unit_type)
        db.add(unit)
    unit.abbreviation = abbreviation
    unit.base_unit_id = base_unit_id
    unit.conversion_factor = float(factor)
    db.flush()
    return unit


def seed_units(db: Session, summary: SeedSummary) -> dict[tuple, Unit]:
    """Seed base units, derived units, then cross-system equivalents.

    Returns the units keyed by (name, system, type).
    """
    units: dict[tuple, Unit] = {}

    for name, abbreviation, system, unit_type in BASE_UNITS:
        units[(name, system, unit_type)] = _upsert_unit(db, name, abbreviation, system, unit_type)

    for name, abbreviation, system, unit_type, base_name, factor in DERIVED_UNITS:
        base = units.get((base_name, system, unit_type))
        if base is None:
            logger.warning(f"Base unit for {name} not found, skipping")
            continue
        units[(name, system, unit_type)] = _upsert_unit(
            db, name, abbreviation, system, unit_type, base.id, factor
        )
    summary.units = len(units)

    by_name_system = {(name, system): unit for (name, system, _), unit in units.items()}
    for (from_name, from_system), (to_name, to_system), factor in EQUIVALENTS:
        source = by_name_system.get((from_name, from_system))
        target = by_name_system.get((to_name, to_system))
        if source is None or target is None:
            logger.warning(f"Units for equivalent {from_name} -> {to_name} not found, skipping")
            continue
        source.equivalent_unit_id = target.id
        source.equivalent_factor = factor
        summary.equivalents += 1

    db.flush()
    return units


def seed_categories(db: Session, summary: SeedSummary) -> dict[str, IngredientCategory]:
    categories = {}
    for order, (name, description, store_section, subcategories) in enumerate(CATEGORIES, start=1):
        category = db.execute(
            select(IngredientCategory).where(IngredientCategory.name == name)
        ).scalar_one_or_none()
        if category is None:
            category = IngredientCategory(name=name)
            db.add(category)
        category.description = description
        category.store_section = store_section
        category.display_order = order
        db.flush()
        categories[name] = category

        for sub_order, (sub_name, sub_description) in enumerate(subcategories, start=1):
            subcategory = db.execute(
                select(IngredientSubcategory).where(
                    IngredientSubcategory.category_id == category.id,
                    IngredientSubcategory.name == sub_name,
                )
            ).scalar_one_or_none()
            if subcategory is None:
                subcategory = IngredientSubcategory(category_id=category.id, name=sub_name)
                db.add(subcategory)
            subcategory.description = sub_description
            subcategory.display_order = sub_order
            summary.subcategories += 1

    db.flush()
    summary.categories = len(categories)
    return categories


def _subcategory(db: Session, category: IngredientCategory, name: str):
    return db.execute(
        select(IngredientSubcategory).where(
            IngredientSubcategory.category_id == category.id,
            IngredientSubcategory.name == name,
        )
    ).scalar_one_or_none()


def seed_sample_ingredients(db: Session, units, categories, summary: SeedSummary):
    cup = units[("Cup", US, VOLUME)]
    gram = units[("Gram", METRIC, WEIGHT)]
    kilogram = units[("Kilogram", METRIC, WEIGHT)]

    samples = [
        dict(
            name="Fresh Spinach",
            description="Fresh leafy green vegetable",
            category=categories["Vegetables"],
            subcategory="Leafy Greens",
            default_unit_id=cup.id,
            is_perishable=True,
            storage_type=StorageType.REFRIGERATED,
            shelf_life_days=7,
            storage_instructions="Keep refrigerated in high humidity drawer",
            is_local=True,
            is_organic=True,
            is_seasonal_item=True,
            has_variable_price=True,
            density=30,
        ),
        dict(
            name="All-Purpose Flour",
            description="Unbleached all-purpose wheat flour",
            category=categories["Grains & Dry Goods"],
            subcategory="Flour",
            default_unit_id=kilogram.id,
            storage_type=StorageType.DRY_STORAGE,
            density=120,
        ),
    ]

    for sample in samples:
        category = sample.pop("category")
        subcategory = _subcategory(db, category, sample.pop("subcategory"))
        grams_per_cup = sample.pop("density")

        ingredient = db.execute(
            select(Ingredient).where(Ingredient.name == sample["name"])
        ).scalar_one_or_none()
        if ingredient is None:
            ingredient = Ingredient(**sample, category_id=category.id)
            ingredient.subcategory_id = subcategory.id if subcategory else None
            db.add(ingredient)
            db.flush()
            logger.info(f"Created sample ingredient: {ingredient.name}")

        density = db.execute(
            select(DensityConversion).where(
                DensityConversion.ingredient_id == ingredient.id,
                DensityConversion.volume_unit_id == cup.id,
                DensityConversion.weight_unit_id == gram.id,
            )
        ).scalar_one_or_none()
        if density is None:
            db.add(DensityConversion(
                ingredient_id=ingredient.id,
                volume_unit_id=cup.id,
                weight_unit_id=gram.id,
                conversion_factor=grams_per_cup,
                notes="Approximate, lightly spooned",
            ))
        summary.ingredients += 1

    db.flush()


def seed_catalog(db: Session) -> SeedSummary:
    """Seed everything and commit. Safe to call repeatedly."""
    summary = SeedSummary()
    logger.info("Seeding units of measure...")
    units = seed_units(db, summary)
    logger.info("Seeding categories and subcategories...")
    categories = seed_categories(db, summary)
    seed_sample_ingredients(db, units, categories, summary)
    db.commit()
    logger.info(
        f"Seeded {summary.units} units ({summary.equivalents} equivalents), "
        f"{summary.categories} categories, {summary.subcategories} subcategories"
    )
    return summary
