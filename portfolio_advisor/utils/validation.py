"""
Field-level input validation for building records.

Each validator checks one field and raises ``ValidationError`` naming that
field. The descriptor normalizer runs all of them and reports every failure
for a record at once.

Usage:
    from portfolio_advisor.utils.validation import (
        validate_latitude,
        validate_construction_year,
        ValidationError,
    )

    lat = validate_latitude("45.07")
"""

import logging
import math
from typing import Any, List, Optional

logger = logging.getLogger(__name__)

MIN_CONSTRUCTION_YEAR = 1800
MAX_CONSTRUCTION_YEAR = 2030
MAX_FLOORS = 100

# EPC labels, worst to best
EPC_CLASSES = ("G", "F", "E", "D", "C", "B", "A", "A+")


class ValidationError(ValueError):
    """Raised when a single input field fails validation."""

    def __init__(self, message: str, field: str = "", suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field = field
        self.suggestions = suggestions or []


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_float(value: Any, field: str) -> float:
    """Parse a number, rejecting blanks, NaN and infinities."""
    if isinstance(value, bool) or _is_blank(value):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number: got '{value}'", field=field)
    if not math.isfinite(number):
        raise ValidationError(f"{field} must be a finite number: got '{value}'", field=field)
    return number


def parse_int(value: Any, field: str) -> int:
    """Parse an integer; floats with a fractional part are rejected."""
    number = parse_float(value, field)
    if not number.is_integer():
        raise ValidationError(f"{field} must be a whole number: got '{value}'", field=field)
    return int(number)


def parse_optional_float(value: Any, field: str) -> Optional[float]:
    """Blank or missing means absent (None); ``0`` stays ``0.0``."""
    if _is_blank(value):
        return None
    return parse_float(value, field)


def validate_required_text(value: Any, field: str) -> str:
    """Require a non-empty string after trimming."""
    if _is_blank(value):
        raise ValidationError(f"{field} is empty", field=field)
    return str(value).strip()


def validate_latitude(value: Any) -> float:
    lat = parse_float(value, "lat")
    if not (-90 <= lat <= 90):
        raise ValidationError(f"Invalid latitude {lat}: must be between -90 and 90", field="lat")
    return lat


def validate_longitude(value: Any) -> float:
    lng = parse_float(value, "lng")
    if not (-180 <= lng <= 180):
        raise ValidationError(f"Invalid longitude {lng}: must be between -180 and 180", field="lng")
    return lng


def validate_construction_year(
    year: Any,
    min_year: int = MIN_CONSTRUCTION_YEAR,
    max_year: int = MAX_CONSTRUCTION_YEAR,
) -> int:
    """
    Validate building construction year.

    Raises:
        ValidationError: If year is not a whole number in [min_year, max_year]
    """
    value = parse_int(year, "construction_year")

    if value < min_year:
        raise ValidationError(
            f"Construction year {value} is too old (minimum: {min_year})",
            field="construction_year",
        )

    if value > max_year:
        raise ValidationError(
            f"Construction year {value} is too far in the future (maximum: {max_year})",
            field="construction_year",
        )

    return value


def validate_floor_area(area: Any) -> float:
    """Floor area in m², strictly positive."""
    value = parse_float(area, "floor_area")
    if value <= 0:
        raise ValidationError(
            f"Floor area must be a positive number: got {value}",
            field="floor_area",
        )
    return value


def validate_number_of_floors(floors: Any, max_floors: int = MAX_FLOORS) -> int:
    """Number of floors, between 1 and ``max_floors``."""
    value = parse_int(floors, "number_of_floors")
    if value < 1 or value > max_floors:
        raise ValidationError(
            f"number_of_floors must be between 1 and {max_floors}: got {value}",
            field="number_of_floors",
        )
    return value


def validate_cost(value: Any, field: str) -> Optional[float]:
    """
    Optional non-negative cost override.

    Returns None when the value is absent. An explicit ``0`` is kept.
    """
    cost = parse_optional_float(value, field)
    if cost is not None and cost < 0:
        raise ValidationError(f"{field} cannot be negative: got {cost}", field=field)
    return cost


def validate_energy_class(energy_class: str) -> str:
    """
    Validate an EPC label (G to A+).

    Raises:
        ValidationError: If the label is not on the scale
    """
    normalized = (energy_class or "").strip().upper()

    if normalized not in EPC_CLASSES:
        raise ValidationError(
            f"Invalid energy class '{energy_class}'",
            field="energy_class",
            suggestions=[f"Valid classes are: {', '.join(EPC_CLASSES)}"],
        )

    return normalized
