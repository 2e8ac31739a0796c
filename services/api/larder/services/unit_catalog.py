"""SQLAlchemy-backed catalog for the conversion engine.

Rows are copied into frozen records as they are read, so the engine never
holds live ORM objects and the data it sees cannot change mid-conversion.
Units are memoized per catalog instance (one instance per request).
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Unit, UnitType, Ingredient, DensityConversion
from .unit_conversion import UnitRecord, DensityRecord


def unit_record(unit: Unit) -> UnitRecord:
    base = unit.base_unit
    return UnitRecord(
        id=unit.id,
        name=unit.name,
        abbreviation=unit.abbreviation,
        system=unit.system.value,
        type=unit.type.value,
        conversion_factor=float(unit.conversion_factor) if unit.conversion_factor is not None else 1.0,
        base_unit_id=unit.base_unit_id,
        base_unit_abbreviation=base.abbreviation if base is not None else None,
        equivalent_unit_id=unit.equivalent_unit_id,
        equivalent_factor=float(unit.equivalent_factor) if unit.equivalent_factor is not None else None,
    )


class SqlUnitCatalog:
    def __init__(self, db: Session):
        self.db = db
        self._units: dict[int, Optional[UnitRecord]] = {}

    def get_unit(self, unit_id: int) -> Optional[UnitRecord]:
        if unit_id not in self._units:
            unit = self.db.get(Unit, unit_id)
            self._units[unit_id] = unit_record(unit) if unit is not None else None
        return self._units[unit_id]

    def get_density_conversion(
        self, ingredient_id: int, volume_unit_id: int, weight_unit_id: int
    ) -> Optional[DensityRecord]:
        row = self.db.execute(
            select(DensityConversion).where(
                DensityConversion.ingredient_id == ingredient_id,
                DensityConversion.volume_unit_id == volume_unit_id,
                DensityConversion.weight_unit_id == weight_unit_id,
            )
        ).scalar_one_or_none()

        if row is None:
            return None
        return DensityRecord(
            id=row.id,
            ingredient_id=row.ingredient_id,
            volume_unit_id=row.volume_unit_id,
            weight_unit_id=row.weight_unit_id,
            conversion_factor=float(row.conversion_factor),
            notes=row.notes,
        )

    def get_ingredient_display_name(self, ingredient_id: int) -> str:
        name = self.db.execute(
            select(Ingredient.name).where(Ingredient.id == ingredient_id)
        ).scalar_one_or_none()
        if name is None:
            raise LookupError(f"Ingredient {ingredient_id} not found")
        return name

    def list_equivalent_units(self, unit_type: str) -> list[UnitRecord]:
        rows = self.db.execute(
            select(Unit)
            .where(Unit.type == UnitType(unit_type), Unit.equivalent_unit_id.is_not(None))
            .order_by(Unit.id)
        ).scalars().all()

        records = []
        for unit in rows:
            record = unit_record(unit)
            self._units.setdefault(record.id, record)
            records.append(record)
        return records
