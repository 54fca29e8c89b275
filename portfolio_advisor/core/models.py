"""
Pydantic models for portfolio renovation analysis.

Covers the validated building descriptor, the replies of the remote
collaborators (estimation, scenario evaluation, risk assessment), the
per-building analysis result and the ranking types.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# ENUMS
# =============================================================================


class ScenarioId(str, Enum):
    CURRENT = "current"
    RENOVATED = "renovated"


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


class OutputTier(str, Enum):
    """How much statistical detail the financial service returns."""

    PRIVATE = "private"
    PROFESSIONAL = "professional"
    PUBLIC = "public"
    COMPLETE = "complete"


class FinancingType(str, Enum):
    SELF_FUNDED = "self-funded"
    LOAN = "loan"


class CostSource(str, Enum):
    """Where a resolved capex / maintenance value came from."""

    BUILDING = "building"
    GLOBAL = "global"
    COLLABORATOR = "collaborator"


CRITERIA = (
    "energy_efficiency",
    "res_integration",
    "sustainability",
    "user_comfort",
    "financial",
)


# =============================================================================
# BUILDING INPUT
# =============================================================================


class ArchetypeRef(BaseModel):
    name: str
    category: str
    country: str


class BuildingDescriptor(BaseModel):
    """Canonical, validated building record. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    source: Literal["csv", "manual"] = "manual"
    category: str
    country: str
    property_type: str
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    floor_area: float = Field(gt=0, description="m²")
    construction_year: int = Field(ge=1800, le=2030)
    construction_period: str
    number_of_floors: int = Field(ge=1)
    floor_number: Optional[int] = None
    archetype_name: Optional[str] = None
    modifications: Optional[Dict[str, Any]] = None
    capex_override: Optional[float] = Field(default=None, ge=0, description="EUR")
    maintenance_override: Optional[float] = Field(default=None, ge=0, description="EUR/year")

    @property
    def has_modifications(self) -> bool:
        return bool(self.modifications)

    @property
    def archetype(self) -> Optional[ArchetypeRef]:
        if not self.archetype_name:
            return None
        return ArchetypeRef(name=self.archetype_name, category=self.category, country=self.country)


class LoanDetails(BaseModel):
    percentage: float = Field(default=0.0, ge=0, le=100, description="Share of capex financed, 0-100")
    duration: int = Field(default=0, ge=0, description="Years")
    interest_rate: float = Field(default=0.0, ge=0, le=1, description="Annual rate as a fraction")


class FundingConfig(BaseModel):
    financing_type: FinancingType = FinancingType.SELF_FUNDED
    loan: LoanDetails = Field(default_factory=LoanDetails)

    @property
    def is_loan(self) -> bool:
        return self.financing_type == FinancingType.LOAN


# =============================================================================
# COLLABORATOR REPLIES
# =============================================================================


class EstimationResult(BaseModel):
    """Baseline energy performance of one building."""

    estimated_epc: str
    annual_energy_needs: float = Field(ge=0, description="kWh/year")
    annual_energy_cost: float = Field(ge=0, description="EUR/year")
    heating_cooling_needs: float = Field(default=0.0, ge=0, description="kWh/year")
    comfort_index: float = Field(ge=0, le=100)
    flexibility_index: float = Field(ge=0, le=100)
    archetype: Optional[ArchetypeRef] = None


class RenovationScenario(BaseModel):
    id: str = Field(description="\"current\", \"renovated\" or another alternative id")
    label: str = ""
    epc_class: str
    annual_energy_needs: float = Field(ge=0, description="kWh/year")
    annual_energy_cost: float = Field(default=0.0, ge=0, description="EUR/year")
    heating_cooling_needs: float = Field(default=0.0, ge=0)
    comfort_index: float = Field(ge=0, le=100)
    flexibility_index: float = Field(ge=0, le=100)
    measures: List[str] = Field(default_factory=list)


class PointForecasts(BaseModel):
    """
    Median indicators from the risk assessment.

    NPV, ROI and PBP must be numbers. The other keys must be present but may
    be null (e.g. no IRR when cash flows never turn positive).
    """

    model_config = ConfigDict(populate_by_name=True)

    npv: float = Field(alias="NPV")
    irr: Optional[float] = Field(alias="IRR")
    roi: float = Field(alias="ROI")
    pbp: float = Field(alias="PBP")
    dpp: Optional[float] = Field(alias="DPP")
    monthly_avg_savings: Optional[float] = Field(alias="MonthlyAvgSavings")
    success_rate: Optional[float] = Field(alias="SuccessRate")


class PercentileBand(BaseModel):
    P10: float
    P20: Optional[float] = None
    P30: Optional[float] = None
    P40: Optional[float] = None
    P50: float
    P60: Optional[float] = None
    P70: Optional[float] = None
    P80: Optional[float] = None
    P90: float


class RiskAssessmentRequest(BaseModel):
    """Payload for one risk-assessment call. ``None`` costs mean "use the service default"."""

    annual_energy_savings: float = Field(ge=0, description="kWh/year")
    project_lifetime: int = Field(ge=1)
    output_level: OutputTier = OutputTier.PROFESSIONAL
    capex: Optional[float] = Field(default=None, ge=0)
    annual_maintenance_cost: Optional[float] = Field(default=None, ge=0)
    loan_amount: float = Field(default=0.0, ge=0)
    loan_term: int = Field(default=0, ge=0)

    def to_payload(self) -> Dict[str, Any]:
        # Unresolved costs are left out so the service falls back to its dataset
        return self.model_dump(mode="json", exclude_none=True)


class RiskAssessment(BaseModel):
    point_forecasts: PointForecasts
    metadata: Dict[str, Any] = Field(default_factory=dict)
    percentiles: Optional[Dict[str, PercentileBand]] = None
    probabilities: Optional[Dict[str, float]] = None

    @field_validator("probabilities")
    @classmethod
    def _probabilities_in_range(cls, value: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
        if value:
            for key, prob in value.items():
                if not 0.0 <= prob <= 1.0:
                    raise ValueError(f"probability {key}={prob} outside [0, 1]")
        return value


# =============================================================================
# ANALYSIS RESULTS
# =============================================================================


class FinancialOutcome(BaseModel):
    """Financial indicators for one scenario of one building."""

    scenario_id: str
    capital_expenditure: Optional[float] = None
    annual_maintenance_cost: Optional[float] = None
    capex_source: CostSource = CostSource.COLLABORATOR
    maintenance_source: CostSource = CostSource.COLLABORATOR
    annual_energy_savings: float = 0.0

    net_present_value: float
    internal_rate_of_return: Optional[float] = None
    return_on_investment: float
    payback_time: float
    discounted_payback_time: Optional[float] = None
    monthly_savings: Optional[float] = None
    success_probability: Optional[float] = None

    percentiles: Optional[Dict[str, PercentileBand]] = None
    probabilities: Dict[str, float] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class BuildingAnalysisResult(BaseModel):
    """Outcome of the pipeline for one building, keyed by building id."""

    building_id: str
    building_name: str = ""
    status: AnalysisStatus = AnalysisStatus.PENDING
    error: Optional[str] = None
    failed_stage: Optional[str] = None
    estimation: Optional[EstimationResult] = None
    scenarios: List[RenovationScenario] = Field(default_factory=list)
    financial_outcomes: Dict[str, FinancialOutcome] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_variant(self) -> "BuildingAnalysisResult":
        if self.status == AnalysisStatus.SUCCESS and (self.estimation is None or not self.scenarios):
            raise ValueError("success result requires estimation and scenarios")
        if self.status == AnalysisStatus.ERROR and not self.error:
            raise ValueError("error result requires an error message")
        return self

    @classmethod
    def pending(cls, building: BuildingDescriptor) -> "BuildingAnalysisResult":
        return cls(building_id=building.id, building_name=building.name)

    @classmethod
    def failure(
        cls,
        building: BuildingDescriptor,
        error: str,
        stage: Optional[str] = None,
    ) -> "BuildingAnalysisResult":
        return cls(
            building_id=building.id,
            building_name=building.name,
            status=AnalysisStatus.ERROR,
            error=error or "unknown error",
            failed_stage=stage,
        )

    @property
    def is_success(self) -> bool:
        return self.status == AnalysisStatus.SUCCESS

    def scenario(self, scenario_id: str) -> Optional[RenovationScenario]:
        return next((s for s in self.scenarios if s.id == scenario_id), None)

    def outcome(self, scenario_id: str) -> Optional[FinancialOutcome]:
        return self.financial_outcomes.get(scenario_id)


class AnalysisProgress(BaseModel):
    completed: int = Field(ge=0)
    total: int = Field(ge=0)
    current_building_name: str = ""

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0


# =============================================================================
# RANKING
# =============================================================================


class CriteriaVector(BaseModel):
    """Five normalized criteria for one alternative, higher is better."""

    energy_efficiency: float = Field(ge=0, le=1)
    res_integration: float = Field(ge=0, le=1)
    sustainability: float = Field(ge=0, le=1)
    user_comfort: float = Field(ge=0, le=1)
    financial: float = Field(ge=0, le=1)

    def as_list(self) -> List[float]:
        return [getattr(self, name) for name in CRITERIA]


class PersonaWeights(BaseModel):
    energy_efficiency: float = Field(ge=0, le=1)
    res_integration: float = Field(ge=0, le=1)
    sustainability: float = Field(ge=0, le=1)
    user_comfort: float = Field(ge=0, le=1)
    financial: float = Field(ge=0, le=1)

    @model_validator(mode="after")
    def _sum_to_one(self) -> "PersonaWeights":
        total = sum(self.as_list())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"persona weights must sum to 1, got {total:.6f}")
        return self

    def as_list(self) -> List[float]:
        return [getattr(self, name) for name in CRITERIA]


class Persona(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    weights: PersonaWeights


class RankingResult(BaseModel):
    scenario_id: str
    rank: int = Field(ge=1)
    score: float = Field(ge=0, le=1, description="TOPSIS closeness coefficient")
