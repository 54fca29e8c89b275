"""
Portfolio orchestration: per-building pipeline, windowed batch runner and
portfolio-level analytics.
"""

from .pipeline import (
    BuildingPipeline,
    StageError,
    extract_probabilities,
    loan_terms,
    resolve_cost,
)
from .orchestrator import (
    BatchConfig,
    PortfolioOrchestrator,
    ProgressCallback,
    initial_results,
)
from .portfolio_report import PortfolioAnalytics, generate_portfolio_report

__all__ = [
    "BuildingPipeline",
    "StageError",
    "extract_probabilities",
    "loan_terms",
    "resolve_cost",
    "BatchConfig",
    "PortfolioOrchestrator",
    "ProgressCallback",
    "initial_results",
    "PortfolioAnalytics",
    "generate_portfolio_report",
]
