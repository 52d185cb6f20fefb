"""
Assessment aggregation and tiering engine.

This package provides:
- Score and student-count normalization
- Per-school MTSS tier classification and characterization
- Reductions (summary, heatmap, distributions, challenge counts, buckets)
- analyze_schools, which merges everything into one AnalysisData report
"""

from .engine import analyze_schools
from .classification import classify_school, classify_tier, characterize, mean_valid_score
from .normalizer import parse_score, parse_student_count, round_half_up

__all__ = [
    "analyze_schools",
    "classify_school",
    "classify_tier",
    "characterize",
    "mean_valid_score",
    "parse_score",
    "parse_student_count",
    "round_half_up",
]
