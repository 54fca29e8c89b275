"""
Portfolio analytics and reporting.

Aggregates per-building results into portfolio-level figures. Only
``success`` entries contribute to totals and averages; failed and pending
buildings are counted but never averaged in.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..core.models import AnalysisStatus, BuildingAnalysisResult, ScenarioId

logger = logging.getLogger(__name__)


@dataclass
class PortfolioAnalytics:
    """Aggregate analytics for a building portfolio."""

    # Counts
    total_buildings: int = 0
    succeeded: int = 0
    failed: int = 0
    pending: int = 0

    # Energy metrics (renovated scenario)
    total_current_energy_kwh: float = 0.0
    total_energy_savings_kwh: float = 0.0
    average_energy_savings_kwh: float = 0.0

    # Financial metrics (renovated scenario)
    total_capex_eur: float = 0.0
    total_npv_eur: float = 0.0
    average_npv_eur: float = 0.0
    average_roi: float = 0.0
    average_payback_years: float = 0.0

    # Top buildings
    top_10_npv: List[Dict[str, Any]] = field(default_factory=list)

    # EPC distribution
    epc_before: Dict[str, int] = field(default_factory=dict)
    epc_after: Dict[str, int] = field(default_factory=dict)

    # Failures
    failures: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: Mapping[str, BuildingAnalysisResult]) -> "PortfolioAnalytics":
        """
        Create analytics from the orchestrator's result map.

        Args:
            results: Dict of building id -> BuildingAnalysisResult

        Returns:
            PortfolioAnalytics instance
        """
        analytics = cls()
        analytics.total_buildings = len(results)

        renovated_rows = []
        for r in results.values():
            if r.status == AnalysisStatus.ERROR:
                analytics.failed += 1
                analytics.failures.append(
                    {"building": r.building_name, "stage": r.failed_stage, "error": r.error}
                )
                continue
            if not r.is_success:
                analytics.pending += 1
                continue

            analytics.succeeded += 1

            current = r.scenario(ScenarioId.CURRENT.value)
            renovated = r.scenario(ScenarioId.RENOVATED.value)
            if current is not None:
                analytics.total_current_energy_kwh += current.annual_energy_needs
                analytics.epc_before[current.epc_class] = analytics.epc_before.get(current.epc_class, 0) + 1
            if renovated is not None:
                analytics.epc_after[renovated.epc_class] = analytics.epc_after.get(renovated.epc_class, 0) + 1

            outcome = r.outcome(ScenarioId.RENOVATED.value)
            if outcome is None:
                continue

            analytics.total_energy_savings_kwh += outcome.annual_energy_savings
            if outcome.capital_expenditure is not None:
                analytics.total_capex_eur += outcome.capital_expenditure
            analytics.total_npv_eur += outcome.net_present_value
            renovated_rows.append((r, outcome))

        # Averages
        if renovated_rows:
            n = len(renovated_rows)
            analytics.average_energy_savings_kwh = analytics.total_energy_savings_kwh / n
            analytics.average_npv_eur = analytics.total_npv_eur / n
            analytics.average_roi = sum(o.return_on_investment for _, o in renovated_rows) / n
            analytics.average_payback_years = sum(o.payback_time for _, o in renovated_rows) / n

        analytics.top_10_npv = cls._get_top_npv(renovated_rows)

        return analytics

    @staticmethod
    def _get_top_npv(rows: List[Any], n: int = 10) -> List[Dict[str, Any]]:
        """Get top N buildings by renovated-scenario NPV."""
        sorted_rows = sorted(rows, key=lambda row: row[1].net_present_value, reverse=True)
        return [
            {
                "building": r.building_name,
                "npv_eur": o.net_present_value,
                "roi": o.return_on_investment,
                "payback_years": o.payback_time,
                "savings_kwh": o.annual_energy_savings,
            }
            for r, o in sorted_rows[:n]
        ]


def generate_portfolio_report(
    analytics: PortfolioAnalytics,
    output_path: Optional[Path] = None,
    format: str = "markdown",
) -> str:
    """
    Generate a portfolio report from analytics.

    Args:
        analytics: PortfolioAnalytics instance
        output_path: Optional path to save report
        format: Report format ("markdown", "json")

    Returns:
        Report content as string
    """
    if format == "markdown":
        content = _generate_markdown_report(analytics)
    elif format == "json":
        content = json.dumps(_analytics_to_dict(analytics), indent=2)
    else:
        raise ValueError(f"Unknown format: {format}")

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info(f"Report saved to {output_path}")

    return content


def _analytics_to_dict(analytics: PortfolioAnalytics) -> Dict[str, Any]:
    """Convert analytics to dict for serialization."""
    return {
        "summary": {
            "total_buildings": analytics.total_buildings,
            "succeeded": analytics.succeeded,
            "failed": analytics.failed,
            "pending": analytics.pending,
        },
        "energy": {
            "total_current_energy_kwh": analytics.total_current_energy_kwh,
            "total_energy_savings_kwh": analytics.total_energy_savings_kwh,
            "average_energy_savings_kwh": analytics.average_energy_savings_kwh,
        },
        "financial": {
            "total_capex_eur": analytics.total_capex_eur,
            "total_npv_eur": analytics.total_npv_eur,
            "average_npv_eur": analytics.average_npv_eur,
            "average_roi": analytics.average_roi,
            "average_payback_years": analytics.average_payback_years,
        },
        "top_buildings": {"top_10_npv": analytics.top_10_npv},
        "distributions": {
            "epc_before": analytics.epc_before,
            "epc_after": analytics.epc_after,
        },
        "failures": analytics.failures,
    }


def _generate_markdown_report(analytics: PortfolioAnalytics) -> str:
    """Generate markdown report."""
    lines = [
        "# Portfolio Renovation Report",
        "",
        "## Summary",
        "",
        f"- **Total Buildings**: {analytics.total_buildings}",
        f"- **Analyzed**: {analytics.succeeded}",
        f"- **Failed**: {analytics.failed}",
        f"- **Pending**: {analytics.pending}",
        "",
        "## Energy Metrics",
        "",
        f"- **Current Energy Needs**: {analytics.total_current_energy_kwh:,.0f} kWh/yr",
        f"- **Energy Savings**: {analytics.total_energy_savings_kwh:,.0f} kWh/yr",
        f"- **Average Savings per Building**: {analytics.average_energy_savings_kwh:,.0f} kWh/yr",
        "",
        "## Financial Metrics",
        "",
        f"- **Total CAPEX**: {analytics.total_capex_eur:,.0f} EUR",
        f"- **Total NPV**: {analytics.total_npv_eur:,.0f} EUR",
        f"- **Average NPV**: {analytics.average_npv_eur:,.0f} EUR",
        f"- **Average ROI**: {analytics.average_roi:.1%}",
        f"- **Average Payback**: {analytics.average_payback_years:.1f} years",
        "",
        "## Top 10 Buildings by NPV",
        "",
        "| Building | NPV (EUR) | ROI | Payback (years) |",
        "|----------|-----------|-----|-----------------|",
    ]

    for b in analytics.top_10_npv:
        lines.append(
            f"| {b['building']} | {b['npv_eur']:,.0f} | {b['roi']:.1%} | {b['payback_years']:.1f} |"
        )

    lines.extend([
        "",
        "## EPC Distribution",
        "",
        "| Class | Before | After |",
        "|-------|--------|-------|",
    ])

    classes = sorted(set(analytics.epc_before) | set(analytics.epc_after))
    for epc in classes:
        lines.append(
            f"| {epc} | {analytics.epc_before.get(epc, 0)} | {analytics.epc_after.get(epc, 0)} |"
        )

    if analytics.failures:
        lines.extend(["", "## Failed Buildings", ""])
        for f in analytics.failures:
            stage = f" ({f['stage']})" if f["stage"] else ""
            lines.append(f"- **{f['building']}**{stage}: {f['error']}")

    return "\n".join(lines)
