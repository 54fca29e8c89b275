"""
Tests for portfolio analytics and report generation.
"""

import json
from typing import Optional

import pytest

from portfolio_advisor.core.models import (
    AnalysisStatus,
    BuildingAnalysisResult,
    EstimationResult,
    FinancialOutcome,
)
from portfolio_advisor.orchestrator.portfolio_report import (
    PortfolioAnalytics,
    generate_portfolio_report,
)

from conftest import make_building, make_scenario


def success(building_id: str, npv: float, roi: float, capex: Optional[float], before: str = "E", after: str = "B"):
    return BuildingAnalysisResult(
        building_id=building_id,
        building_name=f"Building {building_id}",
        status=AnalysisStatus.SUCCESS,
        estimation=EstimationResult(
            estimated_epc=before,
            annual_energy_needs=10000.0,
            annual_energy_cost=2500.0,
            comfort_index=50.0,
            flexibility_index=40.0,
        ),
        scenarios=[make_scenario("current", before, 10000.0), make_scenario("renovated", after, 6000.0)],
        financial_outcomes={
            "current": FinancialOutcome(
                scenario_id="current", net_present_value=0.0, return_on_investment=0.0, payback_time=0.0
            ),
            "renovated": FinancialOutcome(
                scenario_id="renovated",
                capital_expenditure=capex,
                annual_energy_savings=4000.0,
                net_present_value=npv,
                return_on_investment=roi,
                payback_time=10.0,
            ),
        },
    )


@pytest.fixture
def results():
    failed = BuildingAnalysisResult.failure(make_building("b-3", "Building b-3"), "estimate failed: timeout", "estimate")
    pending = BuildingAnalysisResult.pending(make_building("b-4", "Building b-4"))
    return {
        "b-1": success("b-1", npv=20000.0, roi=0.5, capex=40000.0),
        "b-2": success("b-2", npv=-4000.0, roi=0.1, capex=60000.0, before="D", after="C"),
        "b-3": failed,
        "b-4": pending,
    }


class TestPortfolioAnalytics:
    """Tests for PortfolioAnalytics.from_results."""

    def test_counts(self, results):
        analytics = PortfolioAnalytics.from_results(results)

        assert analytics.total_buildings == 4
        assert analytics.succeeded == 2
        assert analytics.failed == 1
        assert analytics.pending == 1

    def test_aggregates_over_successes_only(self, results):
        analytics = PortfolioAnalytics.from_results(results)

        assert analytics.total_capex_eur == 100000.0
        assert analytics.total_npv_eur == 16000.0
        assert analytics.average_npv_eur == 8000.0
        assert analytics.average_roi == pytest.approx(0.3)
        assert analytics.total_energy_savings_kwh == 8000.0
        assert analytics.average_payback_years == 10.0

    def test_unknown_capex_left_out_of_total(self, results):
        """A success whose capex stayed unknown adds nothing to the capex total."""
        results["b-5"] = success("b-5", npv=1000.0, roi=0.2, capex=None)
        analytics = PortfolioAnalytics.from_results(results)

        assert analytics.total_capex_eur == 100000.0
        assert analytics.succeeded == 3

    def test_epc_distribution(self, results):
        analytics = PortfolioAnalytics.from_results(results)

        assert analytics.epc_before == {"E": 1, "D": 1}
        assert analytics.epc_after == {"B": 1, "C": 1}

    def test_top_npv_sorted(self, results):
        analytics = PortfolioAnalytics.from_results(results)
        assert [b["building"] for b in analytics.top_10_npv] == ["Building b-1", "Building b-2"]

    def test_failures_listed(self, results):
        analytics = PortfolioAnalytics.from_results(results)
        assert analytics.failures == [
            {"building": "Building b-3", "stage": "estimate", "error": "estimate failed: timeout"}
        ]

    def test_empty(self):
        analytics = PortfolioAnalytics.from_results({})
        assert analytics.total_buildings == 0
        assert analytics.average_npv_eur == 0.0


class TestGeneratePortfolioReport:
    """Tests for report rendering."""

    def test_markdown(self, results):
        content = generate_portfolio_report(PortfolioAnalytics.from_results(results), format="markdown")

        assert content.startswith("# Portfolio Renovation Report")
        assert "- **Analyzed**: 2" in content
        assert "| E | 1 | 0 |" in content
        assert "**Building b-3** (estimate)" in content

    def test_json(self, results):
        content = generate_portfolio_report(PortfolioAnalytics.from_results(results), format="json")
        data = json.loads(content)

        assert data["summary"]["succeeded"] == 2
        assert data["financial"]["total_capex_eur"] == 100000.0

    def test_written_to_file(self, results, tmp_path):
        path = tmp_path / "reports" / "portfolio.md"
        generate_portfolio_report(PortfolioAnalytics.from_results(results), output_path=path)
        assert path.read_text(encoding="utf-8").startswith("# Portfolio Renovation Report")

    def test_unknown_format(self, results):
        with pytest.raises(ValueError):
            generate_portfolio_report(PortfolioAnalytics.from_results(results), format="pdf")
