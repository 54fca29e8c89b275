"""
Per-building pipeline: estimate -> evaluate -> financial.

Stages run strictly in order for one building. The only suspension points
are the collaborator calls, which lets the orchestrator interleave several
buildings on one event loop.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.models import (
    AnalysisStatus,
    BuildingAnalysisResult,
    BuildingDescriptor,
    CostSource,
    FinancialOutcome,
    FundingConfig,
    OutputTier,
    RenovationScenario,
    RiskAssessment,
    RiskAssessmentRequest,
    ScenarioId,
)
from ..services.base import (
    EstimationService,
    EvaluationService,
    FinancialService,
    ResponseParsingError,
)

logger = logging.getLogger(__name__)

STAGE_ESTIMATE = "estimate"
STAGE_EVALUATE = "evaluate"
STAGE_FINANCIAL = "financial"

PROBABILITY_PREFIX = "Pr("


class StageError(RuntimeError):
    """A pipeline stage failed for one building."""

    def __init__(self, stage: str, building_id: str, cause: BaseException):
        self.stage = stage
        self.building_id = building_id
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")


def resolve_cost(
    building_value: Optional[float],
    global_value: Optional[float],
) -> Tuple[Optional[float], CostSource]:
    """
    Pick a cost by precedence: building override, then global, then none.

    ``0`` is a value. ``None`` means "let the financial service use its own
    default".
    """
    if building_value is not None:
        return building_value, CostSource.BUILDING
    if global_value is not None:
        return global_value, CostSource.GLOBAL
    return None, CostSource.COLLABORATOR


def loan_terms(funding: FundingConfig, capex: Optional[float]) -> Tuple[float, int]:
    """(loan_amount, loan_term) for the funding mode.

    A loan always sends its duration; the amount is 0 until capex is known.
    """
    if not funding.is_loan:
        return 0.0, 0
    amount = capex * funding.loan.percentage / 100 if capex is not None else 0.0
    return amount, funding.loan.duration


def extract_probabilities(assessment: RiskAssessment) -> Dict[str, float]:
    """Reply probabilities plus numeric ``Pr(...)`` entries found in metadata."""
    probabilities: Dict[str, float] = dict(assessment.probabilities or {})
    for key, value in assessment.metadata.items():
        if not key.startswith(PROBABILITY_PREFIX):
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        probabilities[key] = float(value)
    return probabilities


def metadata_cost(metadata: Dict[str, Any], key: str) -> Optional[float]:
    """Numeric cost the financial service reports in its metadata, if any."""
    value = metadata.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def check_scenarios(scenarios: Sequence[RenovationScenario]) -> None:
    ids = sorted(s.id for s in scenarios)
    expected = sorted([ScenarioId.CURRENT.value, ScenarioId.RENOVATED.value])
    if ids != expected:
        raise ResponseParsingError(
            "renovation-evaluation",
            f"expected exactly one 'current' and one 'renovated' scenario, got {ids}",
        )


class BuildingPipeline:
    """
    Runs the three analysis stages for one building.

    Collaborators are injected so tests can swap in fakes.
    """

    def __init__(
        self,
        estimator: EstimationService,
        evaluator: EvaluationService,
        financial: FinancialService,
        output_tier: OutputTier = OutputTier.PROFESSIONAL,
    ):
        self.estimator = estimator
        self.evaluator = evaluator
        self.financial = financial
        self.output_tier = output_tier

    async def run(
        self,
        descriptor: BuildingDescriptor,
        selected_measures: Sequence[str],
        funding: FundingConfig,
        project_lifetime: int,
        global_capex: Optional[float] = None,
        global_maintenance: Optional[float] = None,
    ) -> BuildingAnalysisResult:
        """
        Analyse one building.

        Raises:
            StageError: if any stage fails; ``stage`` names which one
        """
        log_extra = {"building_id": descriptor.id}

        try:
            estimation = await self.estimator.estimate(descriptor)
        except Exception as e:
            raise StageError(STAGE_ESTIMATE, descriptor.id, e) from e

        try:
            scenarios = await self.evaluator.evaluate(descriptor, estimation, list(selected_measures))
            check_scenarios(scenarios)
        except Exception as e:
            raise StageError(STAGE_EVALUATE, descriptor.id, e) from e

        capex, capex_source = resolve_cost(descriptor.capex_override, global_capex)
        maintenance, maintenance_source = resolve_cost(descriptor.maintenance_override, global_maintenance)
        loan_amount, loan_term = loan_terms(funding, capex)

        logger.debug(
            f"Costs for {descriptor.name}: capex={capex} ({capex_source.value}), "
            f"maintenance={maintenance} ({maintenance_source.value})",
            extra={**log_extra, "stage": STAGE_FINANCIAL},
        )

        current_needs = next(
            s.annual_energy_needs for s in scenarios if s.id == ScenarioId.CURRENT.value
        )
        risk_requests = [
            RiskAssessmentRequest(
                annual_energy_savings=max(0.0, current_needs - scenario.annual_energy_needs),
                project_lifetime=project_lifetime,
                output_level=self.output_tier,
                capex=capex,
                annual_maintenance_cost=maintenance,
                loan_amount=loan_amount,
                loan_term=loan_term,
            )
            for scenario in scenarios
        ]

        try:
            assessments = await asyncio.gather(
                *(self.financial.assess_risk(request) for request in risk_requests)
            )
        except Exception as e:
            raise StageError(STAGE_FINANCIAL, descriptor.id, e) from e

        outcomes = {
            scenario.id: self._to_outcome(
                scenario.id, request, assessment, capex_source, maintenance_source
            )
            for scenario, request, assessment in zip(scenarios, risk_requests, assessments)
        }

        return BuildingAnalysisResult(
            building_id=descriptor.id,
            building_name=descriptor.name,
            status=AnalysisStatus.SUCCESS,
            estimation=estimation,
            scenarios=list(scenarios),
            financial_outcomes=outcomes,
        )

    @staticmethod
    def _to_outcome(
        scenario_id: str,
        request: RiskAssessmentRequest,
        assessment: RiskAssessment,
        capex_source: CostSource,
        maintenance_source: CostSource,
    ) -> FinancialOutcome:
        forecasts = assessment.point_forecasts
        capex = request.capex
        if capex is None:
            capex = metadata_cost(assessment.metadata, "capex")
        maintenance = request.annual_maintenance_cost
        if maintenance is None:
            maintenance = metadata_cost(assessment.metadata, "annual_maintenance_cost")
        return FinancialOutcome(
            scenario_id=scenario_id,
            capital_expenditure=capex,
            annual_maintenance_cost=maintenance,
            capex_source=capex_source,
            maintenance_source=maintenance_source,
            annual_energy_savings=request.annual_energy_savings,
            net_present_value=forecasts.npv,
            internal_rate_of_return=forecasts.irr,
            return_on_investment=forecasts.roi,
            payback_time=forecasts.pbp,
            discounted_payback_time=forecasts.dpp,
            monthly_savings=forecasts.monthly_avg_savings,
            success_probability=forecasts.success_rate,
            percentiles=assessment.percentiles,
            probabilities=extract_probabilities(assessment),
            metadata=dict(assessment.metadata),
        )
