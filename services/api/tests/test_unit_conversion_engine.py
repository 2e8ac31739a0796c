"""
Tests for the unit conversion engine against an in-memory catalog.
"""

import math

import pytest

from larder.services.unit_conversion import (
    UnitRecord,
    DensityRecord,
    convert,
    resolve_base,
    DIRECT_CONVERSION_PATH,
    UNKNOWN_INGREDIENT,
    InvalidQuantityError,
    UnitNotFoundError,
    IngredientRequiredError,
    DensityConversionNotFoundError,
    IncompatibleUnitTypesError,
    IncompatibleBaseUnitsError,
)

TSP = UnitRecord(1, "Teaspoon", "tsp", "US", "VOLUME")
TBSP = UnitRecord(2, "Tablespoon", "tbsp", "US", "VOLUME", 3, 1, "tsp")
CUP = UnitRecord(3, "Cup", "cup", "US", "VOLUME", 48, 1, "tsp", equivalent_unit_id=10, equivalent_factor=236.588)
ML = UnitRecord(10, "Milliliter", "ml", "METRIC", "VOLUME", equivalent_unit_id=1, equivalent_factor=0.202884)
LITER = UnitRecord(11, "Liter", "L", "METRIC", "VOLUME", 1000, 10, "ml")
GRAM = UnitRecord(20, "Gram", "g", "METRIC", "WEIGHT")
KG = UnitRecord(21, "Kilogram", "kg", "METRIC", "WEIGHT", 1000, 20, "g")
OUNCE = UnitRecord(30, "Ounce", "oz", "US", "WEIGHT")
EACH = UnitRecord(40, "Each", "ea", "US", "COUNT")
DOZEN = UnitRecord(41, "Dozen", "doz", "US", "COUNT", 12, 40, "ea")

FLOUR_ID = 7
FLOUR_CUP_GRAM = DensityRecord(1, FLOUR_ID, CUP.id, GRAM.id, 120.0)


class FakeCatalog:
    def __init__(self, units, densities=(), names=None):
        self.units = {u.id: u for u in units}
        self.densities = {
            (d.ingredient_id, d.volume_unit_id, d.weight_unit_id): d for d in densities
        }
        self.names = names or {}

    def get_unit(self, unit_id):
        return self.units.get(unit_id)

    def get_density_conversion(self, ingredient_id, volume_unit_id, weight_unit_id):
        return self.densities.get((ingredient_id, volume_unit_id, weight_unit_id))

    def get_ingredient_display_name(self, ingredient_id):
        if ingredient_id not in self.names:
            raise LookupError(f"Ingredient {ingredient_id} not found")
        return self.names[ingredient_id]

    def list_equivalent_units(self, unit_type):
        return sorted(
            (u for u in self.units.values() if u.type == unit_type and u.equivalent_unit_id is not None),
            key=lambda u: u.id,
        )


@pytest.fixture
def catalog():
    return FakeCatalog(
        [TSP, TBSP, CUP, ML, LITER, GRAM, KG, OUNCE, EACH, DOZEN],
        densities=[FLOUR_CUP_GRAM, DensityRecord(2, 9, CUP.id, GRAM.id, 30.0)],
        names={FLOUR_ID: "All-Purpose Flour"},
    )


# --- Same type ---

def test_tablespoons_to_teaspoons(catalog):
    res = convert(catalog, 2, TBSP.id, TSP.id)
    assert res.converted_quantity == 6
    assert res.original_unit == "tbsp"
    assert res.converted_unit == "tsp"
    assert res.strategy == "base_unit"
    assert res.factor == 3
    assert res.conversion_path == "Converted 2 tbsp to 6 tsp."


def test_kilograms_to_grams(catalog):
    res = convert(catalog, 2.5, KG.id, GRAM.id)
    assert res.converted_quantity == 2500
    assert res.strategy == "base_unit"


def test_base_to_derived_divides(catalog):
    res = convert(catalog, 6, TSP.id, TBSP.id)
    assert res.converted_quantity == pytest.approx(2)
    assert res.conversion_path == "Converted to 2 tbsp."


def test_derived_to_derived_goes_through_base(catalog):
    # 1 cup = 48 tsp = 16 tbsp
    res = convert(catalog, 1, CUP.id, TBSP.id)
    assert res.converted_quantity == pytest.approx(16)
    assert "48 tsp" in res.conversion_path


def test_base_unit_to_itself_is_direct(catalog):
    res = convert(catalog, 3.5, TSP.id, TSP.id)
    assert res.converted_quantity == 3.5
    assert res.strategy == "direct"
    assert res.factor == 1.0
    assert res.conversion_path == DIRECT_CONVERSION_PATH


def test_derived_unit_to_itself_keeps_quantity(catalog):
    res = convert(catalog, 4, TBSP.id, TBSP.id)
    assert res.converted_quantity == pytest.approx(4)


@pytest.mark.parametrize("a,b", [(TBSP, CUP), (KG, GRAM), (LITER, ML), (DOZEN, EACH), (TSP, CUP)])
@pytest.mark.parametrize("qty", [0.5, 1, 3.7, 1000])
def test_round_trip_within_shared_base(catalog, a, b, qty):
    there = convert(catalog, qty, a.id, b.id)
    back = convert(catalog, there.converted_quantity, b.id, a.id)
    assert back.converted_quantity == pytest.approx(qty, rel=1e-9)


def test_multi_hop_chain_multiplies_factors():
    pint = UnitRecord(71, "Pint", "pt", "US", "VOLUME", 96, TSP.id, "tsp")
    quart = UnitRecord(70, "Quart", "qt", "US", "VOLUME", 2, pint.id, "pt")
    catalog = FakeCatalog([TSP, pint, quart])

    res = convert(catalog, 1, quart.id, TSP.id)
    assert res.converted_quantity == 192
    # The target is the root, not the quart's immediate base, so a final line is still added
    assert res.conversion_path.count("Converted") == 2


# --- Cross-system equivalents ---

def test_cup_to_milliliters_uses_equivalent(catalog):
    res = convert(catalog, 1, CUP.id, ML.id)
    assert res.strategy == "equivalent"
    assert res.converted_quantity == pytest.approx(236.588)
    assert "1 cup = 236.588 ml" in res.conversion_path


def test_liters_to_teaspoons_prefers_bridge_touching_endpoint(catalog):
    # ml -> tsp touches the target; cup -> ml touches neither endpoint
    res = convert(catalog, 1, LITER.id, TSP.id)
    assert res.strategy == "equivalent"
    assert res.converted_quantity == pytest.approx(202.884)


def test_declared_pair_beats_lower_id_bridge():
    # Metric base declared first (lower id) with its own equivalent, as seeded
    ml = UnitRecord(4, "Milliliter", "ml", "METRIC", "VOLUME", equivalent_unit_id=5, equivalent_factor=0.202884)
    tsp = UnitRecord(5, "Teaspoon", "tsp", "US", "VOLUME")
    cup = UnitRecord(6, "Cup", "cup", "US", "VOLUME", 48, 5, "tsp", equivalent_unit_id=4, equivalent_factor=236.588)
    catalog = FakeCatalog([ml, tsp, cup])

    res = convert(catalog, 1, cup.id, ml.id)
    assert res.strategy == "equivalent"
    assert res.converted_quantity == pytest.approx(236.588, rel=1e-12)
    assert res.factor == pytest.approx(236.588, rel=1e-12)
    assert "Crossed systems via 1 cup = 236.588 ml" in res.conversion_path

    back = convert(catalog, 236.588, ml.id, cup.id)
    assert back.converted_quantity == pytest.approx(1, rel=1e-12)
    assert "1 cup = 236.588 ml" in back.conversion_path


def test_unrelated_bases_are_rejected(catalog):
    with pytest.raises(IncompatibleBaseUnitsError) as exc:
        convert(catalog, 1, GRAM.id, OUNCE.id)
    assert exc.value.kind == "IncompatibleBaseUnits"


# --- Invalid base references ---

def test_base_reference_of_other_type_is_ignored(catalog):
    odd = UnitRecord(50, "Odd", "odd", "US", "VOLUME", 5, GRAM.id, "g")
    catalog.units[odd.id] = odd

    root, factor = resolve_base(catalog, odd)
    assert root is odd
    assert factor == 1.0

    res = convert(catalog, 2, odd.id, odd.id)
    assert res.converted_quantity == 2
    assert res.conversion_path == DIRECT_CONVERSION_PATH


def test_base_cycle_terminates():
    a = UnitRecord(60, "A", "a", "US", "VOLUME", 2, 61, "b")
    b = UnitRecord(61, "B", "b", "US", "VOLUME", 2, 60, "a")
    catalog = FakeCatalog([a, b])

    with pytest.raises(IncompatibleBaseUnitsError):
        convert(catalog, 1, a.id, b.id)


# --- Density ---

def test_volume_to_weight_multiplies(catalog):
    res = convert(catalog, 2, CUP.id, GRAM.id, ingredient_id=FLOUR_ID)
    assert res.converted_quantity == 240
    assert res.strategy == "density"
    assert res.direction == "volume_to_weight"
    assert res.factor == 120
    assert "All-Purpose Flour" in res.conversion_path


def test_weight_to_volume_divides(catalog):
    res = convert(catalog, 240, GRAM.id, CUP.id, ingredient_id=FLOUR_ID)
    assert res.converted_quantity == 2
    assert res.direction == "weight_to_volume"
    assert res.factor == 120


def test_density_requires_ingredient(catalog):
    with pytest.raises(IngredientRequiredError) as exc:
        convert(catalog, 1, CUP.id, GRAM.id)
    assert exc.value.kind == "IngredientRequiredForConversion"


def test_density_missing_row(catalog):
    with pytest.raises(DensityConversionNotFoundError):
        convert(catalog, 1, CUP.id, GRAM.id, ingredient_id=8)


def test_density_lookup_is_exact_on_unit_pair(catalog):
    # Flour has cup/g only; tbsp/g and cup/kg are not derived from it
    with pytest.raises(DensityConversionNotFoundError):
        convert(catalog, 1, TBSP.id, GRAM.id, ingredient_id=FLOUR_ID)
    with pytest.raises(DensityConversionNotFoundError):
        convert(catalog, 1, CUP.id, KG.id, ingredient_id=FLOUR_ID)


def test_unknown_ingredient_name_degrades(catalog):
    res = convert(catalog, 1, CUP.id, GRAM.id, ingredient_id=9)
    assert res.converted_quantity == 30
    assert UNKNOWN_INGREDIENT in res.conversion_path


# --- Failures ---

@pytest.mark.parametrize("qty", [0, -1, -0.001, math.nan, math.inf, True, "2"])
def test_invalid_quantity(catalog, qty):
    with pytest.raises(InvalidQuantityError):
        convert(catalog, qty, TBSP.id, TSP.id)


def test_invalid_quantity_checked_before_units(catalog):
    with pytest.raises(InvalidQuantityError):
        convert(catalog, 0, 999, 998)


@pytest.mark.parametrize("from_id,to_id", [(999, TSP.id), (TSP.id, 999), (998, 999)])
def test_unit_not_found(catalog, from_id, to_id):
    with pytest.raises(UnitNotFoundError) as exc:
        convert(catalog, 1, from_id, to_id)
    assert exc.value.kind == "UnitNotFound"


@pytest.mark.parametrize("a,b", [(EACH, GRAM), (GRAM, DOZEN), (EACH, CUP)])
def test_incompatible_types(catalog, a, b):
    with pytest.raises(IncompatibleUnitTypesError):
        convert(catalog, 1, a.id, b.id, ingredient_id=FLOUR_ID)


def test_result_to_dict_shape(catalog):
    data = convert(catalog, 2, TBSP.id, TSP.id).to_dict()
    assert set(data) == {
        "original_quantity", "original_unit", "converted_quantity",
        "converted_unit", "conversion_path", "strategy", "factor", "direction",
    }
    assert data["direction"] is None
