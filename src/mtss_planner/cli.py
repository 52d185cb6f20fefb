"""Command-line interface for the MTSS planner."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="mtss-planner",
    help="MTSS Planner - school mapping analysis and intervention planning",
    add_completion=False,
)

console = Console()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def load_schools(path: Path) -> List["SchoolRecord"]:
    """Read a JSON array of school records."""
    from models import SchoolRecord

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return TypeAdapter(List[SchoolRecord]).validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]❌ Could not read schools from {path}: {e}[/red]")
        raise typer.Exit(code=1)


def _print_analysis(analysis) -> None:
    summary = analysis.summary
    tiers = analysis.mtss_classification
    console.print(Panel.fit(
        f"Schools: [bold]{summary.total_schools}[/bold]\n"
        f"Students: [bold]{summary.total_students:,}[/bold]\n"
        f"At risk (tier 3): [red]{summary.risky_schools}[/red]\n"
        f"Leading (tier 1): [green]{summary.excellent_schools}[/green]\n"
        f"Tiers 1/2/3: {len(tiers.tier1)}/{len(tiers.tier2)}/{len(tiers.tier3)}",
        title="Summary"
    ))

    heatmap = Table(title="Low-score heatmap")
    heatmap.add_column("Field")
    heatmap.add_column("Low schools", justify="right")
    heatmap.add_column("%", justify="right")
    for row in analysis.heatmap_data:
        heatmap.add_row(row.label, str(row.low_schools), str(row.percentage))
    console.print(heatmap)

    for insight in analysis.insights:
        console.print(f"[bold blue]{insight.title}[/bold blue]\n{insight.text}\n")


@app.command()
def version():
    """Show version information."""
    from mtss_planner import __version__

    console.print(Panel.fit(
        f"[bold blue]MTSS Planner[/bold blue]\n"
        f"Version: [green]{__version__}[/green]",
        title="Version Info"
    ))


@app.command()
def analyze(
    schools_file: Path = typer.Argument(..., help="JSON file with an array of school records"),
    insights: bool = typer.Option(True, "--insights/--no-insights", help="Generate insights with the LLM"),
    json_out: Optional[Path] = typer.Option(None, "--json", help="Write the analysis report as JSON"),
    html_out: Optional[Path] = typer.Option(None, "--html", help="Write the analysis report as HTML"),
):
    """Analyse mapped schools and print the MTSS report."""
    from analysis import analyze_schools
    from export import render_analysis_html
    from mtss_planner.config import settings

    configure_logging(settings.app.log_level)
    schools = load_schools(schools_file)
    analysis = analyze_schools(schools)

    if insights:
        from agents import InsightAgent
        from utils.llm import create_llm_client

        try:
            client = create_llm_client(settings=settings)
        except (ValueError, ImportError) as e:
            console.print(f"[yellow]Insights unavailable: {e}[/yellow]")
            client = None

        agent = InsightAgent(llm_client=client)
        analysis = analysis.with_insights(asyncio.run(agent.generate_insights(analysis)))

    _print_analysis(analysis)

    if json_out:
        json_out.write_text(analysis.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"[green]✅ JSON report written to {json_out}[/green]")
    if html_out:
        html_out.write_text(render_analysis_html(analysis), encoding="utf-8")
        console.print(f"[green]✅ HTML report written to {html_out}[/green]")


@app.command("export-csv")
def export_csv(
    schools_file: Path = typer.Argument(..., help="JSON file with an array of school records"),
    output: Optional[Path] = typer.Argument(None, help="Destination CSV file"),
    inspector: Optional[str] = typer.Option(None, "--inspector", "-i", help="Inspector name for the first column"),
):
    """Export the school mapping table as CSV."""
    from export import default_export_filename, export_schools_csv
    from mtss_planner.config import settings

    schools = load_schools(schools_file)
    if output is None:
        settings.report.export_dir.mkdir(parents=True, exist_ok=True)
        output = settings.report.export_dir / default_export_filename()

    inspector_name = inspector if inspector is not None else settings.report.inspector_name
    output.write_text(export_schools_csv(schools, inspector_name), encoding="utf-8")
    console.print(f"[green]✅ Exported {len(schools)} schools to {output}[/green]")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
