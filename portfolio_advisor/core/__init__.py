"""Core configuration and data models."""

from .config import Settings, settings
from .models import (
    AnalysisProgress,
    AnalysisStatus,
    BuildingAnalysisResult,
    BuildingDescriptor,
    CostSource,
    CriteriaVector,
    EstimationResult,
    FinancialOutcome,
    FinancingType,
    FundingConfig,
    LoanDetails,
    OutputTier,
    Persona,
    PersonaWeights,
    RankingResult,
    RenovationScenario,
    RiskAssessment,
    RiskAssessmentRequest,
    ScenarioId,
)

__all__ = [
    "Settings",
    "settings",
    "AnalysisProgress",
    "AnalysisStatus",
    "BuildingAnalysisResult",
    "BuildingDescriptor",
    "CostSource",
    "CriteriaVector",
    "EstimationResult",
    "FinancialOutcome",
    "FinancingType",
    "FundingConfig",
    "LoanDetails",
    "OutputTier",
    "Persona",
    "PersonaWeights",
    "RankingResult",
    "RenovationScenario",
    "RiskAssessment",
    "RiskAssessmentRequest",
    "ScenarioId",
]
