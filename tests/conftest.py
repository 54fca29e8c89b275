"""
Pytest configuration and fixtures for Portfolio Renovation Advisor tests.

Provides reusable test fixtures for:
- Raw building records and validated descriptors
- In-memory fakes for the three remote collaborators
- Scenario and financial outcome builders for ranking tests
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import pytest

from portfolio_advisor.core.models import (
    BuildingDescriptor,
    EstimationResult,
    FinancialOutcome,
    PointForecasts,
    RenovationScenario,
    RiskAssessment,
    RiskAssessmentRequest,
    ScenarioId,
)
from portfolio_advisor.ingest.normalizer import normalize_building


# =============================================================================
# BUILDING FIXTURES
# =============================================================================

def raw_building(**overrides: Any) -> Dict[str, Any]:
    """A valid raw record (CSV-style keys); override any field."""
    record = {
        "building_name": "Via Roma 12",
        "lat": "45.0703",
        "lng": "7.6869",
        "category": "Residential",
        "country": "Italy",
        "floor_area": "120",
        "construction_year": "1975",
        "number_of_floors": "4",
        "property_type": "Apartment",
    }
    record.update(overrides)
    return record


def make_building(building_id: str, name: Optional[str] = None, **overrides: Any) -> BuildingDescriptor:
    """Validated descriptor with a fixed id."""
    return normalize_building(raw_building(id=building_id, building_name=name or building_id, **overrides))


@pytest.fixture
def building() -> BuildingDescriptor:
    return make_building("b-1", "Via Roma 12")


@pytest.fixture
def portfolio() -> List[BuildingDescriptor]:
    """Seven buildings: three windows at the default concurrency of 3."""
    return [make_building(f"b-{i}", f"Building {i}") for i in range(1, 8)]


# =============================================================================
# COLLABORATOR FAKES
# =============================================================================

class FakeEstimator:
    """Estimation collaborator with optional delay, failures and call tracking."""

    def __init__(
        self,
        needs: float = 10_000.0,
        epc: str = "E",
        delay: float = 0.0,
        fail_for: Sequence[str] = (),
        events: Optional[List] = None,
    ):
        self.needs = needs
        self.epc = epc
        self.delay = delay
        self.fail_for = set(fail_for)
        self.events = events if events is not None else []
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def estimate(self, descriptor: BuildingDescriptor) -> EstimationResult:
        self.calls.append(descriptor.id)
        self.events.append(("start", descriptor.id))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if descriptor.id in self.fail_for:
                raise ConnectionError(f"estimation service unavailable for {descriptor.id}")
            return EstimationResult(
                estimated_epc=self.epc,
                annual_energy_needs=self.needs,
                annual_energy_cost=self.needs * 0.25,
                heating_cooling_needs=self.needs * 0.7,
                comfort_index=55.0,
                flexibility_index=40.0,
            )
        finally:
            self.in_flight -= 1


class FakeEvaluator:
    """Evaluation collaborator returning a current and a renovated scenario."""

    def __init__(
        self,
        renovated_needs: float = 6_000.0,
        renovated_epc: str = "B",
        fail_for: Sequence[str] = (),
        scenarios: Optional[List[RenovationScenario]] = None,
    ):
        self.renovated_needs = renovated_needs
        self.renovated_epc = renovated_epc
        self.fail_for = set(fail_for)
        self.scenarios = scenarios
        self.calls: List[Dict[str, Any]] = []

    async def evaluate(
        self,
        descriptor: BuildingDescriptor,
        estimation: EstimationResult,
        measures: Sequence[str],
    ) -> List[RenovationScenario]:
        self.calls.append({"building_id": descriptor.id, "measures": list(measures)})
        await asyncio.sleep(0)
        if descriptor.id in self.fail_for:
            raise ValueError(f"no scenarios for {descriptor.id}")
        if self.scenarios is not None:
            return self.scenarios
        return [
            make_scenario(
                ScenarioId.CURRENT.value,
                estimation.estimated_epc,
                estimation.annual_energy_needs,
                comfort=estimation.comfort_index,
            ),
            make_scenario(
                ScenarioId.RENOVATED.value,
                self.renovated_epc,
                self.renovated_needs,
                comfort=75.0,
                measures=list(measures),
            ),
        ]


class FakeFinancial:
    """Risk-assessment collaborator recording every request."""

    def __init__(
        self,
        npv: float = 25_000.0,
        roi: float = 0.6,
        metadata: Optional[Dict[str, Any]] = None,
        probabilities: Optional[Dict[str, float]] = None,
        fail_for_savings: Optional[float] = None,
    ):
        self.npv = npv
        self.roi = roi
        self.metadata = metadata or {}
        self.probabilities = probabilities
        self.fail_for_savings = fail_for_savings
        self.requests: List[RiskAssessmentRequest] = []

    async def assess_risk(self, request: RiskAssessmentRequest) -> RiskAssessment:
        self.requests.append(request)
        await asyncio.sleep(0)
        if self.fail_for_savings is not None and request.annual_energy_savings == self.fail_for_savings:
            raise TimeoutError("risk assessment timed out")
        return make_assessment(
            npv=self.npv,
            roi=self.roi,
            metadata=dict(self.metadata),
            probabilities=self.probabilities,
        )


@pytest.fixture
def estimator() -> FakeEstimator:
    return FakeEstimator()


@pytest.fixture
def evaluator() -> FakeEvaluator:
    return FakeEvaluator()


@pytest.fixture
def financial() -> FakeFinancial:
    return FakeFinancial()


# =============================================================================
# SCENARIO / OUTCOME BUILDERS
# =============================================================================

def make_scenario(
    scenario_id: str,
    epc: str,
    needs: float,
    comfort: float = 60.0,
    measures: Optional[List[str]] = None,
) -> RenovationScenario:
    return RenovationScenario(
        id=scenario_id,
        label=scenario_id.title(),
        epc_class=epc,
        annual_energy_needs=needs,
        annual_energy_cost=needs * 0.25,
        comfort_index=comfort,
        flexibility_index=50.0,
        measures=measures or [],
    )


def make_assessment(
    npv: float = 25_000.0,
    roi: float = 0.6,
    metadata: Optional[Dict[str, Any]] = None,
    probabilities: Optional[Dict[str, float]] = None,
) -> RiskAssessment:
    return RiskAssessment(
        point_forecasts=PointForecasts(
            NPV=npv, IRR=0.08, ROI=roi, PBP=9.5, DPP=12.0, MonthlyAvgSavings=85.0, SuccessRate=0.82
        ),
        metadata=metadata or {},
        probabilities=probabilities,
    )


def make_outcome(scenario_id: str, npv: float = 0.0, roi: float = 0.0) -> FinancialOutcome:
    return FinancialOutcome(
        scenario_id=scenario_id,
        net_present_value=npv,
        return_on_investment=roi,
        payback_time=10.0,
    )
