"""
Criteria extraction for renovation alternatives.

Every criterion is normalized to [0, 1] with higher meaning better, so the
TOPSIS step can treat all five as benefit criteria.
"""

import math
from typing import List, Mapping, Optional, Sequence, Tuple

from ..core.models import CriteriaVector, FinancialOutcome, RenovationScenario, ScenarioId
from ..utils.validation import EPC_CLASSES, ValidationError, validate_energy_class

# ROI is a fraction; 2.0 (200%) maps to a full score
ROI_NORMALIZATION = 2.0
# NPV scale for the tanh squash, EUR
NPV_SCALE = 50_000.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def epc_score(epc_class: Optional[str]) -> float:
    """
    Position on the G..A+ scale divided by 7; unknown labels score 0.

    Labels are trimmed and matched case-insensitively, so "a+" scores as "A+".
    """
    try:
        label = validate_energy_class(epc_class)
    except ValidationError:
        return 0.0
    return EPC_CLASSES.index(label) / (len(EPC_CLASSES) - 1)


def roi_score(roi: float) -> float:
    return clamp(roi / ROI_NORMALIZATION)


def npv_score(npv: float) -> float:
    """Map NPV to [0, 1]: positive values land above 0.5, the rest below."""
    squashed = math.tanh(npv / NPV_SCALE)
    if npv > 0:
        return 0.5 + 0.5 * squashed
    # Negative NPV gives a negative tanh; clamp brings it to 0
    return clamp(0.5 * squashed)


def financial_score(outcome: Optional[FinancialOutcome]) -> float:
    if outcome is None:
        return 0.0
    return clamp((roi_score(outcome.return_on_investment) + npv_score(outcome.net_present_value)) / 2)


def split_baseline(
    scenarios: Sequence[RenovationScenario],
) -> Tuple[float, List[RenovationScenario]]:
    """
    Separate the baseline from the alternatives to rank.

    The baseline energy need is the ``current`` scenario's, or the first
    alternative's when no ``current`` scenario exists.

    Returns:
        (baseline_energy_needs, alternatives)
    """
    current = next((s for s in scenarios if s.id == ScenarioId.CURRENT.value), None)
    alternatives = [s for s in scenarios if s.id != ScenarioId.CURRENT.value]
    if current is not None:
        return current.annual_energy_needs, alternatives
    if alternatives:
        return alternatives[0].annual_energy_needs, alternatives
    return 0.0, alternatives


def compute_criteria(
    scenario: RenovationScenario,
    outcome: Optional[FinancialOutcome],
    baseline_energy_needs: float,
) -> CriteriaVector:
    """Build the five-criteria vector for one alternative."""
    if baseline_energy_needs > 0:
        efficiency = clamp(1 - scenario.annual_energy_needs / baseline_energy_needs)
    else:
        efficiency = 0.0

    res_integration = epc_score(scenario.epc_class)

    return CriteriaVector(
        energy_efficiency=efficiency,
        res_integration=res_integration,
        sustainability=clamp((efficiency + res_integration) / 2),
        user_comfort=clamp(scenario.comfort_index / 100),
        financial=financial_score(outcome),
    )


def build_criteria(
    scenarios: Sequence[RenovationScenario],
    outcomes_by_scenario: Mapping[str, FinancialOutcome],
) -> List[Tuple[RenovationScenario, CriteriaVector]]:
    """Criteria vectors for every non-baseline scenario, in input order."""
    baseline, alternatives = split_baseline(scenarios)
    return [
        (scenario, compute_criteria(scenario, outcomes_by_scenario.get(scenario.id), baseline))
        for scenario in alternatives
    ]
