"""
Unit Conversion Engine.

Converts a quantity between two catalog units. Strategies, in order:

1. Same unit type: normalize through the shared base unit.
2. Same unit type, different base units: bridge the two measurement
   systems through a declared equivalent unit.
3. VOLUME <-> WEIGHT: ingredient-specific density factor.

Anything else (e.g. COUNT -> WEIGHT) is not convertible.

The engine never touches the database directly; it reads units and
densities through a `UnitCatalog` handed in by the caller.
"""

import logging
import math
from dataclasses import dataclass
from numbers import Real
from typing import Optional, Literal, Protocol, NamedTuple

logger = logging.getLogger("larder.units")

# --- Types ---

Strategy = Literal["direct", "base_unit", "equivalent", "density"]
Direction = Literal["volume_to_weight", "weight_to_volume"]

VOLUME = "VOLUME"
WEIGHT = "WEIGHT"
DENSITY_TYPES = frozenset({VOLUME, WEIGHT})

UNKNOWN_INGREDIENT = "Unknown Ingredient"
DIRECT_CONVERSION_PATH = "Direct conversion, same unit type and base."


@dataclass(frozen=True)
class UnitRecord:
    """Read-only snapshot of a unit, with its base unit inlined."""
    id: int
    name: str
    abbreviation: str
    system: str
    type: str
    conversion_factor: float = 1.0
    base_unit_id: Optional[int] = None
    base_unit_abbreviation: Optional[str] = None
    equivalent_unit_id: Optional[int] = None
    equivalent_factor: Optional[float] = None


@dataclass(frozen=True)
class DensityRecord:
    id: int
    ingredient_id: int
    volume_unit_id: int
    weight_unit_id: int
    conversion_factor: float
    notes: Optional[str] = None


class UnitCatalog(Protocol):
    """Read-only view of units and densities used by the engine."""

    def get_unit(self, unit_id: int) -> Optional[UnitRecord]: ...

    def get_density_conversion(
        self, ingredient_id: int, volume_unit_id: int, weight_unit_id: int
    ) -> Optional[DensityRecord]: ...

    def get_ingredient_display_name(self, ingredient_id: int) -> str: ...

    def list_equivalent_units(self, unit_type: str) -> list[UnitRecord]: ...


# --- Errors ---

class ConversionError(Exception):
    """Base exception for conversion failures.

    `kind` is the stable discriminator the API boundary maps to a status code.
    """
    kind = "ConversionError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidQuantityError(ConversionError):
    kind = "InvalidQuantity"


class UnitNotFoundError(ConversionError):
    kind = "UnitNotFound"


class IngredientRequiredError(ConversionError):
    kind = "IngredientRequiredForConversion"


class DensityConversionNotFoundError(ConversionError):
    kind = "DensityConversionNotFound"


class IncompatibleUnitTypesError(ConversionError):
    kind = "IncompatibleUnitTypes"


class IncompatibleBaseUnitsError(ConversionError):
    """Same unit type, but the base chains never meet and no equivalent bridges them."""
    kind = "IncompatibleBaseUnits"


# --- Result ---

class ConversionResult:
    def __init__(
        self,
        original_quantity: float,
        original_unit: str,
        converted_quantity: float,
        converted_unit: str,
        conversion_path: str,
        strategy: Strategy,
        factor: float,
        direction: Optional[Direction] = None,
    ):
        self.original_quantity = original_quantity
        self.original_unit = original_unit
        self.converted_quantity = converted_quantity
        self.converted_unit = converted_unit
        self.conversion_path = conversion_path
        self.strategy = strategy
        self.factor = factor
        self.direction = direction

    def to_dict(self):
        return {
            "original_quantity": self.original_quantity,
            "original_unit": self.original_unit,
            "converted_quantity": self.converted_quantity,
            "converted_unit": self.converted_unit,
            "conversion_path": self.conversion_path,
            "strategy": self.strategy,
            "factor": self.factor,
            "direction": self.direction,
        }


class _Bridge(NamedTuple):
    source: UnitRecord
    target: UnitRecord
    factor: float
    reversed: bool
    root_ratio: float  # 1 from-root = root_ratio to-root


# --- Helpers ---

def _fmt(value: float) -> str:
    """Trace-friendly number: 6 instead of 6.0, six significant digits otherwise."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6g}"


def _is_valid_quantity(quantity) -> bool:
    if isinstance(quantity, bool) or not isinstance(quantity, Real):
        return False
    return math.isfinite(quantity) and quantity > 0


def _valid_base_reference(unit: UnitRecord, base: UnitRecord) -> bool:
    return (
        base.id != unit.id
        and base.type == unit.type
        and base.system == unit.system
        and unit.conversion_factor is not None
        and unit.conversion_factor > 0
    )


def resolve_base(catalog: UnitCatalog, unit: UnitRecord) -> tuple[UnitRecord, float]:
    """Walk the base-unit chain to its root.

    Returns (root unit, factor) where 1 `unit` = factor root units.
    Invalid references (missing, other type/system, cycles, non-positive
    factors) end the walk; the unit reached so far is treated as the root.
    """
    current = unit
    factor = 1.0
    seen = {unit.id}

    while current.base_unit_id is not None:
        base = catalog.get_unit(current.base_unit_id)
        if base is None or base.id in seen or not _valid_base_reference(current, base):
            logger.warning(
                "Ignoring invalid base unit reference %s -> %s",
                current.id, current.base_unit_id,
            )
            break
        factor *= current.conversion_factor
        seen.add(base.id)
        current = base

    return current, factor


def _find_bridge(
    catalog: UnitCatalog,
    from_unit: UnitRecord,
    to_unit: UnitRecord,
    from_root: UnitRecord,
    to_root: UnitRecord,
) -> Optional[_Bridge]:
    """Find an equivalent-unit pair linking the two base chains.

    A pair declared between the from and to units wins, then pairs touching
    one of them, then the lowest unit id.
    """
    candidates = []
    endpoints = {from_unit.id, to_unit.id}

    for source in catalog.list_equivalent_units(from_unit.type):
        if source.equivalent_unit_id is None or not source.equivalent_factor or source.equivalent_factor <= 0:
            continue
        target = catalog.get_unit(source.equivalent_unit_id)
        if target is None or target.type != source.type:
            continue

        source_root, source_factor = resolve_base(catalog, source)
        target_root, target_factor = resolve_base(catalog, target)
        f = source.equivalent_factor

        if source_root.id == from_root.id and target_root.id == to_root.id:
            # 1 from-root = 1/sf source = f/sf target = f*tf/sf to-root
            bridge = _Bridge(source, target, f, False, f * target_factor / source_factor)
        elif source_root.id == to_root.id and target_root.id == from_root.id:
            bridge = _Bridge(source, target, f, True, source_factor / (f * target_factor))
        else:
            continue

        # Exact declared pair first, then bridges touching one endpoint
        rank = 2 - len(endpoints & {source.id, target.id})
        candidates.append((rank, source.id, bridge))

    if not candidates:
        return None
    candidates.sort(key=lambda c: (c[0], c[1]))
    return candidates[0][2]


def _ingredient_name(catalog: UnitCatalog, ingredient_id: int) -> str:
    try:
        name = catalog.get_ingredient_display_name(ingredient_id)
    except Exception as e:
        logger.warning(f"Ingredient name lookup failed for {ingredient_id}: {e}")
        return UNKNOWN_INGREDIENT
    return name or UNKNOWN_INGREDIENT


# --- Strategies ---

def convert_same_type(
    catalog: UnitCatalog,
    quantity: float,
    from_unit: UnitRecord,
    to_unit: UnitRecord,
) -> ConversionResult:
    """Base-unit normalization: quantity -> base -> target."""
    from_root, from_factor = resolve_base(catalog, from_unit)
    to_root, to_factor = resolve_base(catalog, to_unit)

    if from_root.id != to_root.id:
        return convert_equivalent(
            catalog, quantity, from_unit, to_unit,
            from_root, from_factor, to_root, to_factor,
        )

    from_has_base = from_root.id != from_unit.id
    to_has_base = to_root.id != to_unit.id
    path = []

    base_qty = quantity
    if from_has_base:
        base_qty = quantity * from_factor
        path.append(
            f"Converted {_fmt(quantity)} {from_unit.abbreviation} "
            f"to {_fmt(base_qty)} {from_root.abbreviation}."
        )

    result = base_qty
    if to_has_base:
        result = base_qty / to_factor
        path.append(f"Converted to {_fmt(result)} {to_unit.abbreviation}.")
    elif from_has_base and to_unit.id != from_unit.base_unit_id:
        # Target is the root but not the immediate base (multi-hop chain)
        path.append(f"Converted to {_fmt(result)} {to_unit.abbreviation}.")

    if not path:
        return ConversionResult(
            quantity, from_unit.abbreviation, quantity, to_unit.abbreviation,
            DIRECT_CONVERSION_PATH, "direct", 1.0,
        )

    return ConversionResult(
        quantity, from_unit.abbreviation, result, to_unit.abbreviation,
        " ".join(path), "base_unit", from_factor / to_factor,
    )


def convert_equivalent(
    catalog: UnitCatalog,
    quantity: float,
    from_unit: UnitRecord,
    to_unit: UnitRecord,
    from_root: UnitRecord,
    from_factor: float,
    to_root: UnitRecord,
    to_factor: float,
) -> ConversionResult:
    """Cross-system conversion through a declared equivalent unit."""
    bridge = _find_bridge(catalog, from_unit, to_unit, from_root, to_root)
    if bridge is None:
        raise IncompatibleBaseUnitsError(
            f"Cannot convert {from_unit.abbreviation} to {to_unit.abbreviation}: "
            f"base units {from_root.abbreviation} and {to_root.abbreviation} are unrelated"
        )

    path = []
    base_qty = quantity * from_factor
    if from_root.id != from_unit.id:
        path.append(
            f"Converted {_fmt(quantity)} {from_unit.abbreviation} "
            f"to {_fmt(base_qty)} {from_root.abbreviation}."
        )

    other_base_qty = base_qty * bridge.root_ratio
    path.append(
        f"Crossed systems via 1 {bridge.source.abbreviation} = {_fmt(bridge.factor)} "
        f"{bridge.target.abbreviation}: {_fmt(base_qty)} {from_root.abbreviation} "
        f"= {_fmt(other_base_qty)} {to_root.abbreviation}."
    )

    result = other_base_qty / to_factor
    if to_root.id != to_unit.id:
        path.append(f"Converted to {_fmt(result)} {to_unit.abbreviation}.")

    return ConversionResult(
        quantity, from_unit.abbreviation, result, to_unit.abbreviation,
        " ".join(path), "equivalent", from_factor * bridge.root_ratio / to_factor,
    )


def convert_by_density(
    catalog: UnitCatalog,
    quantity: float,
    from_unit: UnitRecord,
    to_unit: UnitRecord,
    ingredient_id: Optional[int],
) -> ConversionResult:
    """VOLUME <-> WEIGHT using the ingredient's density row."""
    if ingredient_id is None:
        raise IngredientRequiredError(
            "Ingredient ID is required for volume-weight conversion"
        )

    if from_unit.type == VOLUME:
        volume_unit, weight_unit = from_unit, to_unit
    else:
        volume_unit, weight_unit = to_unit, from_unit

    density = catalog.get_density_conversion(ingredient_id, volume_unit.id, weight_unit.id)
    if density is None or not density.conversion_factor or density.conversion_factor <= 0:
        raise DensityConversionNotFoundError(
            f"No density conversion found for ingredient {ingredient_id} "
            f"between {volume_unit.abbreviation} and {weight_unit.abbreviation}"
        )

    factor = density.conversion_factor
    name = _ingredient_name(catalog, ingredient_id)

    if from_unit.type == VOLUME:
        converted = quantity * factor
        direction: Direction = "volume_to_weight"
    else:
        converted = quantity / factor
        direction = "weight_to_volume"

    path = (
        f"Converted using density factor: 1 {volume_unit.abbreviation} = "
        f"{_fmt(factor)} {weight_unit.abbreviation} for {name}"
    )

    return ConversionResult(
        quantity, from_unit.abbreviation, converted, to_unit.abbreviation,
        path, "density", factor, direction,
    )


# --- Entry point ---

def convert(
    catalog: UnitCatalog,
    quantity: float,
    from_unit_id: int,
    to_unit_id: int,
    ingredient_id: Optional[int] = None,
) -> ConversionResult:
    """
    Convert `quantity` from one catalog unit to another.

    Raises a ConversionError subclass when no valid path exists. Pure:
    nothing is written back to the catalog.
    """
    if not _is_valid_quantity(quantity):
        raise InvalidQuantityError(f"Quantity must be a positive number, got {quantity!r}")

    from_unit = catalog.get_unit(from_unit_id)
    to_unit = catalog.get_unit(to_unit_id)

    if from_unit is None or to_unit is None:
        missing = [str(uid) for uid, u in ((from_unit_id, from_unit), (to_unit_id, to_unit)) if u is None]
        raise UnitNotFoundError(f"Unit not found: {', '.join(missing)}")

    if from_unit.type == to_unit.type:
        result = convert_same_type(catalog, quantity, from_unit, to_unit)
    elif {from_unit.type, to_unit.type} == DENSITY_TYPES:
        result = convert_by_density(catalog, quantity, from_unit, to_unit, ingredient_id)
    else:
        raise IncompatibleUnitTypesError(
            f"Cannot convert between {from_unit.type} and {to_unit.type} units"
        )

    logger.debug(
        "Converted %s %s -> %s %s via %s",
        quantity, from_unit.abbreviation, result.converted_quantity,
        to_unit.abbreviation, result.strategy,
    )
    return result
