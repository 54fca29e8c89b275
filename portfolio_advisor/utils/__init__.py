"""Utility modules."""

from .logging_config import (
    get_logger,
    setup_logging,
    AdvisorFormatter,
    FileFormatter,
)
from .retry import (
    retry_with_backoff,
    RetryConfig,
    RetryableRequest,
    DEFAULT_RETRY_CONFIG,
)
from .validation import (
    validate_latitude,
    validate_longitude,
    validate_construction_year,
    validate_floor_area,
    validate_number_of_floors,
    validate_required_text,
    validate_cost,
    validate_energy_class,
    ValidationError,
    EPC_CLASSES,
)

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    "AdvisorFormatter",
    "FileFormatter",
    # Retry
    "retry_with_backoff",
    "RetryConfig",
    "RetryableRequest",
    "DEFAULT_RETRY_CONFIG",
    # Validation
    "validate_latitude",
    "validate_longitude",
    "validate_construction_year",
    "validate_floor_area",
    "validate_number_of_floors",
    "validate_required_text",
    "validate_cost",
    "validate_energy_class",
    "ValidationError",
    "EPC_CLASSES",
]
