"""
Portfolio batch orchestrator.

Runs the per-building pipeline over a list of buildings in consecutive
windows of ``concurrency_limit``. Buildings inside a window run concurrently
and the next window starts only when every building of the current one has
settled. A failing building is recorded as an error entry; it never stops its
siblings or later windows.

Usage:
    orchestrator = PortfolioOrchestrator(estimator, evaluator, financial)
    results = await orchestrator.analyze(
        buildings,
        selected_measures=["wall-insulation", "windows"],
        funding=FundingConfig(),
        project_lifetime=20,
        on_progress=lambda done, total, name: print(f"{done}/{total} {name}"),
    )
"""

import asyncio
import logging
import time
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from ..core.config import Settings
from ..core.models import (
    AnalysisProgress,
    AnalysisStatus,
    BuildingAnalysisResult,
    BuildingDescriptor,
    FundingConfig,
    OutputTier,
)
from ..services.base import EstimationService, EvaluationService, FinancialService
from .pipeline import BuildingPipeline, StageError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class BatchConfig:
    """Batch execution settings."""

    concurrency_limit: int = 3
    output_tier: OutputTier = OutputTier.PROFESSIONAL

    def __post_init__(self):
        if self.concurrency_limit < 1:
            raise ValueError(f"concurrency_limit must be >= 1, got {self.concurrency_limit}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "BatchConfig":
        return cls(
            concurrency_limit=settings.concurrency_limit,
            output_tier=OutputTier(settings.output_tier),
        )


def initial_results(buildings: Sequence[BuildingDescriptor]) -> Dict[str, BuildingAnalysisResult]:
    """Result map at batch start: one ``pending`` entry per building."""
    return {b.id: BuildingAnalysisResult.pending(b) for b in buildings}


def check_unique_ids(buildings: Sequence[BuildingDescriptor]) -> None:
    duplicates = [bid for bid, count in Counter(b.id for b in buildings).items() if count > 1]
    if duplicates:
        raise ValueError(f"Duplicate building ids in batch: {', '.join(sorted(duplicates))}")


def windows(buildings: Sequence[BuildingDescriptor], size: int) -> List[List[BuildingDescriptor]]:
    """Consecutive slices of ``size`` buildings, last one possibly shorter."""
    return [list(buildings[i:i + size]) for i in range(0, len(buildings), size)]


class PortfolioOrchestrator:
    """
    Windowed, failure-isolating batch runner for building analyses.
    """

    def __init__(
        self,
        estimator: EstimationService,
        evaluator: EvaluationService,
        financial: FinancialService,
        config: Optional[BatchConfig] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            estimator: Baseline energy estimation collaborator
            evaluator: Renovation scenario collaborator
            financial: Risk-assessment collaborator
            config: Batch configuration (default: BatchConfig())
        """
        self.config = config or BatchConfig()
        self.pipeline = BuildingPipeline(
            estimator,
            evaluator,
            financial,
            output_tier=self.config.output_tier,
        )

        logger.info(
            f"PortfolioOrchestrator initialized: "
            f"concurrency_limit={self.config.concurrency_limit}, "
            f"output_tier={self.config.output_tier.value}"
        )

    async def analyze(
        self,
        buildings: Sequence[BuildingDescriptor],
        selected_measures: Sequence[str],
        funding: FundingConfig,
        project_lifetime: int,
        on_progress: Optional[ProgressCallback] = None,
        global_capex: Optional[float] = None,
        global_maintenance: Optional[float] = None,
        results: Optional[Dict[str, BuildingAnalysisResult]] = None,
    ) -> Dict[str, BuildingAnalysisResult]:
        """
        Analyse every building and return results keyed by building id.

        Args:
            buildings: Validated building descriptors
            selected_measures: Renovation measure ids
            funding: Financing configuration
            project_lifetime: Years
            on_progress: Called once per settled building with
                (completed, total, building_name)
            global_capex: Portfolio-wide capex, used when a building has none
            global_maintenance: Portfolio-wide maintenance cost, same rule
            results: Optional map from ``initial_results`` to fill in place,
                so callers can watch entries move from pending to final;
                buildings missing from it are added as pending

        Returns:
            Dict of building id -> BuildingAnalysisResult, one entry per building

        Raises:
            ValueError: if two buildings share an id
        """
        check_unique_ids(buildings)
        if not buildings:
            return {}

        if results is None:
            results = initial_results(buildings)
        else:
            for building in buildings:
                results.setdefault(building.id, BuildingAnalysisResult.pending(building))

        total = len(buildings)
        completed = 0
        start = time.time()

        async def run_one(building: BuildingDescriptor) -> None:
            nonlocal completed
            results[building.id] = results[building.id].model_copy(
                update={"status": AnalysisStatus.RUNNING}
            )
            try:
                result = await self.pipeline.run(
                    building,
                    selected_measures,
                    funding,
                    project_lifetime,
                    global_capex=global_capex,
                    global_maintenance=global_maintenance,
                )
            except StageError as e:
                logger.warning(
                    f"Analysis failed for {building.name}: {e}",
                    extra={"building_id": building.id, "stage": e.stage},
                )
                result = BuildingAnalysisResult.failure(building, str(e), stage=e.stage)
            except Exception as e:
                logger.warning(
                    f"Analysis failed for {building.name}: {e}",
                    extra={"building_id": building.id},
                )
                result = BuildingAnalysisResult.failure(building, str(e) or type(e).__name__)

            results[building.id] = result
            completed += 1
            progress = AnalysisProgress(
                completed=completed, total=total, current_building_name=building.name
            )
            logger.info(
                f"[{progress.completed}/{progress.total}] {building.name}: {result.status.value} "
                f"({progress.fraction:.0%})",
                extra={"building_id": building.id},
            )
            if on_progress is not None:
                on_progress(progress.completed, progress.total, progress.current_building_name)

        batches = windows(buildings, self.config.concurrency_limit)
        logger.info(
            f"Starting portfolio analysis: {total} buildings in {len(batches)} windows "
            f"of up to {self.config.concurrency_limit}"
        )

        for index, window in enumerate(batches, start=1):
            logger.info(
                f"Window {index}/{len(batches)}: {len(window)} buildings",
                extra={"window": index},
            )
            await asyncio.gather(*(run_one(b) for b in window))

        succeeded = sum(1 for r in results.values() if r.is_success)
        logger.info(
            f"Portfolio analysis complete: {succeeded}/{total} successful "
            f"in {time.time() - start:.1f}s"
        )
        return results
