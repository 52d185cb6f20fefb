"""
Export of mapping data and analysis reports.

This package provides:
- CSV export of the school mapping table
- Standalone HTML rendering of an AnalysisData report
"""

from .csv_export import BOM, export_schools_csv, default_export_filename, mapping_headers, mapping_row
from .report import render_analysis_html

__all__ = [
    "BOM",
    "export_schools_csv",
    "default_export_filename",
    "mapping_headers",
    "mapping_row",
    "render_analysis_html",
]
