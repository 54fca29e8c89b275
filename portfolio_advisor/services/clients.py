"""
HTTP clients for the energy-forecasting and financial-risk services.

Each client wraps a blocking ``RetryableRequest`` and runs it in the event
loop's default executor, so sibling buildings keep progressing while one
waits on the network. Replies are validated with pydantic before they are
handed back.
"""

import asyncio
import functools
import logging
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..core.config import Settings
from ..core.models import (
    BuildingDescriptor,
    EstimationResult,
    RenovationScenario,
    RiskAssessment,
    RiskAssessmentRequest,
    ScenarioId,
)
from ..utils.retry import RetryableRequest, RetryConfig
from .base import CollaboratorError, ResponseParsingError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

ESTIMATE_PATH = "/forecasting/estimate"
EVALUATE_PATH = "/forecasting/evaluate"
RISK_ASSESSMENT_PATH = "/financial/risk-assessment"


class _ServiceClient:
    """Shared transport for the three clients."""

    service_name = "service"

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 120.0,
        max_retries: int = 2,
        session: Optional[requests.Session] = None,
    ):
        self._api = RetryableRequest(
            base_url,
            config=RetryConfig(max_retries=max_retries),
            timeout=timeout,
            token=token,
            session=session,
        )

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None):
        return cls(
            settings.api_base_url,
            token=settings.api_token,
            timeout=settings.request_timeout_sec,
            max_retries=settings.max_retries,
            session=session,
        )

    def close(self) -> None:
        self._api.close()

    async def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        loop = asyncio.get_running_loop()
        call = functools.partial(self._api.post_json, path, payload)
        try:
            return await loop.run_in_executor(None, call)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise CollaboratorError(self.service_name, f"request to {path} failed", status) from e
        except requests.JSONDecodeError as e:
            raise ResponseParsingError(self.service_name, f"reply from {path} is not JSON") from e
        except requests.RequestException as e:
            raise CollaboratorError(self.service_name, f"request to {path} failed: {e}") from e

    def _parse(self, model: Type[M], data: Any, path: str) -> M:
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ResponseParsingError(
                self.service_name,
                f"unexpected reply from {path}: {e.error_count()} invalid field(s)",
            ) from e


def descriptor_payload(descriptor: BuildingDescriptor) -> Dict[str, Any]:
    """Wire form of a building for the forecasting service."""
    payload = descriptor.model_dump(
        mode="json",
        exclude={"capex_override", "maintenance_override", "source"},
        exclude_none=True,
    )
    archetype = descriptor.archetype
    if archetype is not None:
        payload["archetype"] = archetype.model_dump()
    return payload


class EnergyServiceClient(_ServiceClient):
    """Baseline energy estimation (``POST /forecasting/estimate``)."""

    service_name = "energy-estimation"

    async def estimate(self, descriptor: BuildingDescriptor) -> EstimationResult:
        data = await self._post(ESTIMATE_PATH, descriptor_payload(descriptor))
        result = self._parse(EstimationResult, data, ESTIMATE_PATH)
        logger.debug(
            f"Estimated {descriptor.name}: EPC {result.estimated_epc}, "
            f"{result.annual_energy_needs:.0f} kWh/yr",
            extra={"building_id": descriptor.id, "stage": "estimate"},
        )
        return result


class _ScenarioReply(BaseModel):
    scenarios: List[RenovationScenario]


class RenovationServiceClient(_ServiceClient):
    """Renovation scenario evaluation (``POST /forecasting/evaluate``)."""

    service_name = "renovation-evaluation"

    async def evaluate(
        self,
        descriptor: BuildingDescriptor,
        estimation: EstimationResult,
        measures: Sequence[str],
    ) -> List[RenovationScenario]:
        payload = {
            "building": descriptor_payload(descriptor),
            "baseline": estimation.model_dump(mode="json", exclude_none=True),
            "measures": list(measures),
        }
        data = await self._post(EVALUATE_PATH, payload)
        reply = self._parse(_ScenarioReply, data, EVALUATE_PATH)

        ids = sorted(s.id for s in reply.scenarios)
        expected = sorted([ScenarioId.CURRENT.value, ScenarioId.RENOVATED.value])
        if ids != expected:
            raise ResponseParsingError(
                self.service_name,
                f"expected exactly one 'current' and one 'renovated' scenario, got {ids}",
            )
        return reply.scenarios


class FinancialServiceClient(_ServiceClient):
    """Monte Carlo risk assessment (``POST /financial/risk-assessment``)."""

    service_name = "financial-risk"

    async def assess_risk(self, request: RiskAssessmentRequest) -> RiskAssessment:
        data = await self._post(RISK_ASSESSMENT_PATH, request.to_payload())
        return self._parse(RiskAssessment, data, RISK_ASSESSMENT_PATH)
