"""
Multi-criteria ranking of renovation alternatives.

Usage:
    from portfolio_advisor.ranking import rank_scenarios

    ranking = rank_scenarios(result.scenarios, result.financial_outcomes, "cost-optimization")
"""

import logging
from typing import List, Mapping, Optional, Sequence

from ..core.models import FinancialOutcome, RankingResult, RenovationScenario
from .criteria import build_criteria, compute_criteria, epc_score, financial_score, split_baseline
from .personas import DEFAULT_PERSONAS, CatalogError, PersonaCatalog, RankingLookupError
from .topsis import closeness_coefficients, rank_order

logger = logging.getLogger(__name__)


class RankingEngine:
    """Ranks a building's alternatives for a persona. Results are never cached."""

    def __init__(self, catalog: Optional[PersonaCatalog] = None):
        self.catalog = catalog or PersonaCatalog()

    def rank(
        self,
        scenarios: Sequence[RenovationScenario],
        outcomes_by_scenario: Mapping[str, FinancialOutcome],
        persona_id: str,
    ) -> List[RankingResult]:
        """
        Rank the non-baseline scenarios by TOPSIS closeness.

        Raises:
            RankingLookupError: persona_id is not in the catalog
        """
        persona = self.catalog.get(persona_id)

        rows = build_criteria(scenarios, outcomes_by_scenario)
        scores = closeness_coefficients(
            [criteria.as_list() for _, criteria in rows],
            persona.weights.as_list(),
        )

        results = [
            RankingResult(scenario_id=rows[index][0].id, rank=position, score=scores[index])
            for position, index in enumerate(rank_order(scores), start=1)
        ]
        logger.debug(
            f"Ranked {len(results)} alternatives for persona {persona.id}",
            extra={"persona_id": persona.id},
        )
        return results


def rank_scenarios(
    scenarios: Sequence[RenovationScenario],
    outcomes_by_scenario: Mapping[str, FinancialOutcome],
    persona_id: str,
    catalog: Optional[PersonaCatalog] = None,
) -> List[RankingResult]:
    """Convenience wrapper around ``RankingEngine.rank``."""
    return RankingEngine(catalog).rank(scenarios, outcomes_by_scenario, persona_id)


__all__ = [
    "RankingEngine",
    "rank_scenarios",
    "PersonaCatalog",
    "DEFAULT_PERSONAS",
    "RankingLookupError",
    "CatalogError",
    "build_criteria",
    "compute_criteria",
    "split_baseline",
    "epc_score",
    "financial_score",
    "closeness_coefficients",
    "rank_order",
]
