"""
Collaborator interfaces consumed by the per-building pipeline.

Any object with matching async methods can be injected: the HTTP clients in
``portfolio_advisor.services.clients`` or in-memory fakes in tests.
"""

from typing import List, Optional, Protocol, Sequence, runtime_checkable

from ..core.models import (
    BuildingDescriptor,
    EstimationResult,
    RenovationScenario,
    RiskAssessment,
    RiskAssessmentRequest,
)


class CollaboratorError(RuntimeError):
    """A remote collaborator could not be reached or answered with an error."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{service}: {message}{detail}")


class ResponseParsingError(CollaboratorError):
    """A collaborator answered, but the payload does not have the expected shape."""


@runtime_checkable
class EstimationService(Protocol):
    async def estimate(self, descriptor: BuildingDescriptor) -> EstimationResult:
        ...


@runtime_checkable
class EvaluationService(Protocol):
    async def evaluate(
        self,
        descriptor: BuildingDescriptor,
        estimation: EstimationResult,
        measures: Sequence[str],
    ) -> List[RenovationScenario]:
        ...


@runtime_checkable
class FinancialService(Protocol):
    async def assess_risk(self, request: RiskAssessmentRequest) -> RiskAssessment:
        ...
