"""Building input: validation, normalization and CSV import."""

from .normalizer import (
    NormalizationReport,
    RecordValidationError,
    RejectedRecord,
    derive_construction_period,
    normalize_batch,
    normalize_building,
)
from .csv_loader import REQUIRED_COLUMNS, OPTIONAL_COLUMNS, load_buildings_csv

__all__ = [
    "NormalizationReport",
    "RecordValidationError",
    "RejectedRecord",
    "derive_construction_period",
    "normalize_batch",
    "normalize_building",
    "REQUIRED_COLUMNS",
    "OPTIONAL_COLUMNS",
    "load_buildings_csv",
]
