"""
CSV import of building portfolios.

The header must contain every required column or the whole file is
rejected. Rows with the wrong number of cells, or with invalid fields, are
rejected one by one and never reach the batch.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Union

from .normalizer import (
    NormalizationReport,
    RecordValidationError,
    RejectedRecord,
    normalize_building,
)
from ..utils.validation import ValidationError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    "building_name",
    "lat",
    "lng",
    "category",
    "country",
    "floor_area",
    "construction_year",
    "number_of_floors",
    "property_type",
)
OPTIONAL_COLUMNS = (
    "archetype_name",
    "floor_number",
    "capex",
    "annual_maintenance_cost",
)


def _read_text(source: Union[str, Path]) -> str:
    if isinstance(source, Path):
        return source.read_text(encoding="utf-8-sig")
    return source


def load_buildings_csv(source: Union[str, Path]) -> NormalizationReport:
    """
    Parse a building CSV into descriptors.

    Args:
        source: CSV text, or a Path to a CSV file

    Returns:
        NormalizationReport with accepted buildings, per-row rejections and
        file-level errors
    """
    text = _read_text(source).lstrip("\ufeff")
    rows = [
        (number, cells)
        for number, cells in enumerate(csv.reader(io.StringIO(text)), start=1)
        if any(cell.strip() for cell in cells)
    ]

    if not rows:
        return NormalizationReport(errors=["CSV file is empty"])

    header = [cell.strip() for cell in rows[0][1]]
    missing = [col for col in REQUIRED_COLUMNS if col not in header]
    if missing:
        logger.warning(f"CSV rejected, missing columns: {', '.join(missing)}")
        return NormalizationReport(errors=[f"Missing required columns: {', '.join(missing)}"])

    report = NormalizationReport()
    for row_number, cells in rows[1:]:
        if len(cells) != len(header):
            error = ValidationError(
                f"expected {len(header)} columns, found {len(cells)}",
                field="row",
            )
            report.rejected.append(RejectedRecord(row=row_number, errors=[error]))
            continue

        record = {key: value.strip() for key, value in zip(header, cells)}
        try:
            report.buildings.append(normalize_building(record, source="csv", row=row_number))
        except RecordValidationError as e:
            report.rejected.append(RejectedRecord(row=row_number, errors=e.errors))

    logger.info(
        f"Loaded {len(report.buildings)} buildings from CSV "
        f"({len(report.rejected)} rows rejected)"
    )
    return report
