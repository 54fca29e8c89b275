"""Remote collaborators: interfaces and HTTP clients."""

from .base import (
    CollaboratorError,
    EstimationService,
    EvaluationService,
    FinancialService,
    ResponseParsingError,
)
from .clients import (
    EnergyServiceClient,
    FinancialServiceClient,
    RenovationServiceClient,
    descriptor_payload,
)

__all__ = [
    "CollaboratorError",
    "EstimationService",
    "EvaluationService",
    "FinancialService",
    "ResponseParsingError",
    "EnergyServiceClient",
    "FinancialServiceClient",
    "RenovationServiceClient",
    "descriptor_payload",
]
