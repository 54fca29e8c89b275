"""
Tests for core data models.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from portfolio_advisor.core.config import Settings
from portfolio_advisor.core.models import (
    AnalysisProgress,
    AnalysisStatus,
    BuildingAnalysisResult,
    PointForecasts,
    RiskAssessmentRequest,
)

from conftest import make_building


class TestBuildingAnalysisResult:
    """Tests for the result variants."""

    def test_pending(self):
        result = BuildingAnalysisResult.pending(make_building("b-1", "Via Roma"))
        assert result.status == AnalysisStatus.PENDING
        assert result.building_name == "Via Roma"
        assert not result.is_success

    def test_failure(self):
        result = BuildingAnalysisResult.failure(make_building("b-1"), "boom", stage="financial")
        assert result.status == AnalysisStatus.ERROR
        assert result.failed_stage == "financial"

    def test_failure_without_message_gets_placeholder(self):
        result = BuildingAnalysisResult.failure(make_building("b-1"), "")
        assert result.error == "unknown error"

    def test_success_requires_payload(self):
        with pytest.raises(PydanticValidationError):
            BuildingAnalysisResult(building_id="b-1", status=AnalysisStatus.SUCCESS)


class TestPointForecasts:
    def test_wire_names(self):
        forecasts = PointForecasts.model_validate(
            {"NPV": 1.0, "IRR": None, "ROI": 0.1, "PBP": 5.0, "DPP": None, "MonthlyAvgSavings": None, "SuccessRate": None}
        )
        assert forecasts.npv == 1.0
        assert forecasts.irr is None

    def test_npv_required(self):
        with pytest.raises(PydanticValidationError):
            PointForecasts.model_validate(
                {"NPV": None, "IRR": None, "ROI": 0.1, "PBP": 5.0, "DPP": None, "MonthlyAvgSavings": None, "SuccessRate": None}
            )


class TestRiskAssessmentRequest:
    def test_payload_keeps_zero_costs(self):
        payload = RiskAssessmentRequest(
            annual_energy_savings=100.0, project_lifetime=20, capex=0.0, annual_maintenance_cost=None
        ).to_payload()

        assert payload["capex"] == 0.0
        assert "annual_maintenance_cost" not in payload


class TestAnalysisProgress:
    def test_fraction(self):
        assert AnalysisProgress(completed=3, total=7).fraction == pytest.approx(3 / 7)
        assert AnalysisProgress(completed=0, total=0).fraction == 1.0


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PRA_CONCURRENCY_LIMIT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.concurrency_limit == 3
        assert settings.default_project_lifetime == 20
        assert settings.output_tier == "professional"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PRA_CONCURRENCY_LIMIT", "6")
        assert Settings(_env_file=None).concurrency_limit == 6
