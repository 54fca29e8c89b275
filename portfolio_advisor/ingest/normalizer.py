"""
Descriptor normalizer: raw building record -> BuildingDescriptor.

A record either passes every field check and becomes an immutable
descriptor, or it is rejected with the full list of field errors. Nothing in
between reaches the batch.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..core.models import BuildingDescriptor
from ..utils.validation import (
    ValidationError,
    parse_int,
    validate_construction_year,
    validate_cost,
    validate_floor_area,
    validate_latitude,
    validate_longitude,
    validate_number_of_floors,
    validate_required_text,
)

logger = logging.getLogger(__name__)


# Upper bound (inclusive) -> period label, checked in order
CONSTRUCTION_PERIODS: Tuple[Tuple[int, str], ...] = (
    (1944, "pre-1945"),
    (1970, "1945-1970"),
    (1990, "1971-1990"),
    (2000, "1991-2000"),
    (2010, "2001-2010"),
)
LATEST_PERIOD = "post-2010"

# Accepted spellings for raw record keys (CSV columns and camelCase forms)
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "building_id"),
    "name": ("name", "building_name"),
    "category": ("category",),
    "country": ("country",),
    "property_type": ("property_type", "propertyType", "building_type"),
    "lat": ("lat", "latitude"),
    "lng": ("lng", "lon", "longitude"),
    "floor_area": ("floor_area", "floorArea"),
    "construction_year": ("construction_year", "constructionYear"),
    "number_of_floors": ("number_of_floors", "numberOfFloors"),
    "floor_number": ("floor_number", "floorNumber"),
    "archetype_name": ("archetype_name", "archetypeName"),
    "modifications": ("modifications",),
    "capex": ("capex", "estimated_capex", "estimatedCapex"),
    "annual_maintenance_cost": ("annual_maintenance_cost", "annualMaintenanceCost"),
}


class RecordValidationError(ValueError):
    """A raw record failed one or more field checks."""

    def __init__(self, errors: List[ValidationError], row: Optional[int] = None):
        self.errors = errors
        self.row = row
        prefix = f"Row {row}: " if row is not None else ""
        super().__init__(prefix + "; ".join(str(e) for e in errors))

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


@dataclass
class RejectedRecord:
    row: int
    errors: List[ValidationError]

    @property
    def messages(self) -> List[str]:
        return [f"Row {self.row}: {e}" for e in self.errors]


@dataclass
class NormalizationReport:
    """Outcome of normalizing a batch of raw records."""

    buildings: List[BuildingDescriptor] = field(default_factory=list)
    rejected: List[RejectedRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)  # file-level problems

    @property
    def ok(self) -> bool:
        return not self.rejected and not self.errors

    @property
    def messages(self) -> List[str]:
        lines = list(self.errors)
        for rejected in self.rejected:
            lines.extend(rejected.messages)
        return lines


def derive_construction_period(year: int) -> str:
    """Map a construction year to its period bucket."""
    for upper, label in CONSTRUCTION_PERIODS:
        if year <= upper:
            return label
    return LATEST_PERIOD


def _lookup(raw: Mapping[str, Any], name: str) -> Any:
    for key in FIELD_ALIASES[name]:
        if key in raw:
            return raw[key]
    return None


def normalize_building(
    raw: Mapping[str, Any],
    *,
    source: str = "manual",
    row: Optional[int] = None,
    id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> BuildingDescriptor:
    """
    Validate a raw building record and build its canonical descriptor.

    Args:
        raw: Mapping with building fields (snake_case or camelCase keys)
        source: "csv" or "manual"
        row: Row number for error messages
        id_factory: Id generator used when the record has no id

    Returns:
        Immutable BuildingDescriptor

    Raises:
        RecordValidationError: with every failing field
    """
    errors: List[ValidationError] = []
    values: Dict[str, Any] = {}

    def check(name: str, validator: Callable[[Any], Any]) -> None:
        try:
            values[name] = validator(_lookup(raw, name))
        except ValidationError as e:
            errors.append(e)

    check("name", lambda v: validate_required_text(v, "building_name"))
    check("lat", validate_latitude)
    check("lng", validate_longitude)
    check("category", lambda v: validate_required_text(v, "category"))
    check("country", lambda v: validate_required_text(v, "country"))
    check("floor_area", validate_floor_area)
    check("construction_year", validate_construction_year)
    check("number_of_floors", validate_number_of_floors)
    check("property_type", lambda v: validate_required_text(v, "property_type"))
    check("capex", lambda v: validate_cost(v, "capex"))
    check("annual_maintenance_cost", lambda v: validate_cost(v, "annual_maintenance_cost"))

    floor_number = _lookup(raw, "floor_number")
    if floor_number is not None and str(floor_number).strip():
        try:
            values["floor_number"] = parse_int(floor_number, "floor_number")
        except ValidationError as e:
            errors.append(e)

    modifications = _lookup(raw, "modifications")
    if modifications is not None and not isinstance(modifications, Mapping):
        errors.append(ValidationError("modifications must be a mapping", field="modifications"))

    if errors:
        raise RecordValidationError(errors, row=row)

    building_id = _lookup(raw, "id")
    building_id = str(building_id).strip() if building_id not in (None, "") else id_factory()

    archetype_name = _lookup(raw, "archetype_name")
    archetype_name = str(archetype_name).strip() if archetype_name else None

    return BuildingDescriptor(
        id=building_id,
        name=values["name"],
        source=source,
        category=values["category"],
        country=values["country"],
        property_type=values["property_type"],
        lat=values["lat"],
        lng=values["lng"],
        floor_area=values["floor_area"],
        construction_year=values["construction_year"],
        construction_period=derive_construction_period(values["construction_year"]),
        number_of_floors=values["number_of_floors"],
        floor_number=values.get("floor_number"),
        archetype_name=archetype_name or None,
        modifications=dict(modifications) if modifications else None,
        capex_override=values["capex"],
        maintenance_override=values["annual_maintenance_cost"],
    )


def normalize_batch(
    records: Iterable[Mapping[str, Any]],
    *,
    source: str = "manual",
    first_row: int = 1,
) -> NormalizationReport:
    """
    Normalize many records, keeping valid ones and collecting rejections.

    Args:
        records: Raw building records
        source: "csv" or "manual"
        first_row: Row number of the first record (2 for CSV data after a header)
    """
    report = NormalizationReport()
    for row, raw in enumerate(records, start=first_row):
        try:
            report.buildings.append(normalize_building(raw, source=source, row=row))
        except RecordValidationError as e:
            report.rejected.append(RejectedRecord(row=row, errors=e.errors))

    if report.rejected:
        logger.warning(
            f"Rejected {len(report.rejected)} of "
            f"{len(report.buildings) + len(report.rejected)} building records"
        )
    return report
