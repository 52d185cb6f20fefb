"""Standalone HTML rendering of an analysis report."""

from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from models import CATEGORIES, AnalysisData


REPORT_TEMPLATE = "analysis_report.html"


def _template_env() -> Environment:
    templates_path = Path(__file__).resolve().parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(templates_path)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml")),
    )


def _tiers(analysis: AnalysisData) -> List[Dict[str, Any]]:
    classification = analysis.mtss_classification
    return [
        {"css": "tier1", "title": "Tier 1 - universal", "schools": classification.tier1},
        {"css": "tier2", "title": "Tier 2 - targeted", "schools": classification.tier2},
        {"css": "tier3", "title": "Tier 3 - intensive", "schools": classification.tier3},
    ]


def _challenges(analysis: AnalysisData) -> List[Dict[str, Any]]:
    """Categories by affected schools, each with its phrases ranked by selections."""
    return [
        {
            "name": CATEGORIES[category].name,
            "affected_schools": frequency.affected_schools,
            "ranked": sorted(frequency.challenges.items(), key=lambda item: item[1], reverse=True),
        }
        for category, frequency in analysis.sorted_challenges()
    ]


def render_analysis_html(analysis: AnalysisData, title: str = "MTSS Analysis Report") -> str:
    """Render the report as a self-contained page; every text value is HTML-escaped."""
    template = _template_env().get_template(REPORT_TEMPLATE)
    return template.render(
        title=title,
        summary=analysis.summary,
        total_students=f"{analysis.summary.total_students:,}",
        tiers=_tiers(analysis),
        heatmap=analysis.heatmap_data,
        challenges=_challenges(analysis),
        insights=analysis.insights,
    )
