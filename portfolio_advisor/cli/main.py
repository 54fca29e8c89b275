"""
Portfolio Renovation Advisor CLI.

Usage:
    pra analyze buildings.csv --measures wall-insulation,windows
    pra analyze buildings.csv --measures roof-insulation --capex 60000 --persona comfort-driven
    pra personas
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from ..core.config import settings
from ..core.models import FinancingType, FundingConfig, LoanDetails, ScenarioId
from ..ingest.csv_loader import load_buildings_csv
from ..orchestrator.orchestrator import BatchConfig, PortfolioOrchestrator
from ..orchestrator.portfolio_report import PortfolioAnalytics, generate_portfolio_report
from ..ranking import PersonaCatalog, RankingEngine
from ..services.clients import EnergyServiceClient, FinancialServiceClient, RenovationServiceClient
from ..utils.logging_config import setup_logging

app = typer.Typer(
    name="pra",
    help="Portfolio Renovation Advisor - batch energy and financial analysis of building portfolios",
    add_completion=False,
)
console = Console()


def build_services() -> Tuple[EnergyServiceClient, RenovationServiceClient, FinancialServiceClient]:
    """HTTP collaborators configured from settings."""
    return (
        EnergyServiceClient.from_settings(settings),
        RenovationServiceClient.from_settings(settings),
        FinancialServiceClient.from_settings(settings),
    )


def _split_measures(measures: str) -> List[str]:
    return [m.strip() for m in measures.split(",") if m.strip()]


@app.command()
def analyze(
    buildings_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Building CSV file"),
    measures: str = typer.Option(..., "--measures", "-m", help="Comma-separated renovation measures"),
    lifetime: int = typer.Option(
        settings.default_project_lifetime, "--lifetime", min=1, max=30, help="Project lifetime (years)"
    ),
    capex: Optional[float] = typer.Option(None, "--capex", min=0, help="Portfolio-wide CAPEX (EUR)"),
    maintenance: Optional[float] = typer.Option(
        None, "--maintenance", min=0, help="Portfolio-wide annual maintenance cost (EUR)"
    ),
    loan_percentage: Optional[float] = typer.Option(
        None, "--loan-percentage", min=0, max=100, help="Share of CAPEX financed by a loan (%)"
    ),
    loan_duration: int = typer.Option(0, "--loan-duration", min=0, help="Loan duration (years)"),
    loan_rate: float = typer.Option(0.0, "--loan-rate", min=0, max=1, help="Loan interest rate (fraction)"),
    persona: Optional[str] = typer.Option(None, "--persona", "-p", help="Rank alternatives for this persona"),
    report: Optional[Path] = typer.Option(None, "--report", "-r", help="Write portfolio report (.md or .json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Analyse every building in a CSV file and print a portfolio summary.
    """
    setup_logging(level="DEBUG" if verbose else settings.log_level)

    console.print(Panel.fit(
        "[bold blue]Portfolio Renovation Advisor[/bold blue]\n"
        "Batch energy and financial analysis",
        border_style="blue"
    ))

    selected = _split_measures(measures)
    if not selected:
        console.print("[red]At least one renovation measure is required[/red]")
        raise typer.Exit(1)

    catalog = PersonaCatalog()
    if persona is not None and persona not in catalog:
        console.print(f"[red]Unknown persona '{persona}'[/red] (available: {', '.join(catalog.ids)})")
        raise typer.Exit(1)

    # Load buildings
    loaded = load_buildings_csv(buildings_file)
    for message in loaded.messages:
        console.print(f"  [yellow]![/yellow] {message}")
    if loaded.errors:
        raise typer.Exit(1)
    if not loaded.buildings:
        console.print("[red]No valid buildings to analyse[/red]")
        raise typer.Exit(1)

    console.print(f"[cyan]Loaded:[/cyan] {len(loaded.buildings)} buildings from {buildings_file}")

    if loan_percentage is not None:
        funding = FundingConfig(
            financing_type=FinancingType.LOAN,
            loan=LoanDetails(percentage=loan_percentage, duration=loan_duration, interest_rate=loan_rate),
        )
    else:
        funding = FundingConfig()

    estimator, evaluator, financial = build_services()
    orchestrator = PortfolioOrchestrator(
        estimator, evaluator, financial, config=BatchConfig.from_settings(settings)
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Analysing buildings", total=len(loaded.buildings))

        def on_progress(completed: int, total: int, name: str) -> None:
            progress.update(task, completed=completed, description=f"Analysed {name}")

        try:
            results = asyncio.run(
                orchestrator.analyze(
                    loaded.buildings,
                    selected,
                    funding,
                    lifetime,
                    on_progress=on_progress,
                    global_capex=capex,
                    global_maintenance=maintenance,
                )
            )
        finally:
            for client in (estimator, evaluator, financial):
                close = getattr(client, "close", None)
                if close is not None:
                    close()

    # Per-building table
    table = Table(title="Building Results")
    table.add_column("Building", style="cyan")
    table.add_column("Status")
    table.add_column("EPC", justify="center")
    table.add_column("Savings (kWh/yr)", justify="right")
    table.add_column("NPV (EUR)", justify="right")
    table.add_column("ROI", justify="right")
    table.add_column("Payback (yr)", justify="right")
    table.add_column("Note", style="dim")

    for result in results.values():
        if not result.is_success:
            table.add_row(
                result.building_name, "[red]error[/red]", "-", "-", "-", "-", "-", result.error or ""
            )
            continue
        current = result.scenario(ScenarioId.CURRENT.value)
        renovated = result.scenario(ScenarioId.RENOVATED.value)
        outcome = result.outcome(ScenarioId.RENOVATED.value)
        table.add_row(
            result.building_name,
            "[green]success[/green]",
            f"{current.epc_class} → {renovated.epc_class}",
            f"{outcome.annual_energy_savings:,.0f}",
            f"{outcome.net_present_value:,.0f}",
            f"{outcome.return_on_investment:.1%}",
            f"{outcome.payback_time:.1f}",
            "",
        )
    console.print(table)

    if persona is not None:
        engine = RankingEngine(catalog)
        ranking_table = Table(title=f"Ranking for {catalog.get(persona).name}")
        ranking_table.add_column("Building", style="cyan")
        ranking_table.add_column("Rank", justify="right")
        ranking_table.add_column("Scenario")
        ranking_table.add_column("Score", justify="right")
        for result in results.values():
            if not result.is_success:
                continue
            for ranked in engine.rank(result.scenarios, result.financial_outcomes, persona):
                ranking_table.add_row(
                    result.building_name, str(ranked.rank), ranked.scenario_id, f"{ranked.score:.2f}"
                )
        console.print(ranking_table)

    analytics = PortfolioAnalytics.from_results(results)
    console.print(
        f"\n[bold]Portfolio:[/bold] {analytics.succeeded}/{analytics.total_buildings} analysed, "
        f"{analytics.failed} failed"
    )

    if report is not None:
        fmt = "json" if report.suffix.lower() == ".json" else "markdown"
        generate_portfolio_report(analytics, output_path=report, format=fmt)
        console.print(f"[green]Report saved:[/green] {report}")

    if analytics.succeeded == 0:
        raise typer.Exit(1)


@app.command()
def personas():
    """
    List the stakeholder personas available for ranking.
    """
    catalog = PersonaCatalog()

    table = Table(title="Personas")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Efficiency", justify="right")
    table.add_column("RES", justify="right")
    table.add_column("Sustainability", justify="right")
    table.add_column("Comfort", justify="right")
    table.add_column("Financial", justify="right")

    for p in catalog:
        w = p.weights
        table.add_row(
            p.id,
            p.name,
            f"{w.energy_efficiency:.3f}",
            f"{w.res_integration:.3f}",
            f"{w.sustainability:.3f}",
            f"{w.user_comfort:.3f}",
            f"{w.financial:.3f}",
        )
    console.print(table)


@app.command()
def version():
    """Show version information."""
    from .. import __version__
    console.print(f"Portfolio Renovation Advisor v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
