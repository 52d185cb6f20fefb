"""
Core data models for the MTSS planner.

This package contains:
- The static evaluation taxonomy (categories, fields, challenge phrases)
- School records and their per-run classification
- The analysis report and wizard step output schemas
"""

from .taxonomy import (
    FieldKey,
    MainCategory,
    CategoryDefinition,
    SubCategoryDefinition,
    TAXONOMY,
    CATEGORIES,
    HEATMAP_FIELDS,
    FIELD_LABELS,
    CHALLENGE_PHRASES,
    ORGANIZATIONAL_FIELDS,
    CORE_SUBJECT_FIELDS,
    category_of,
    challenge_phrase,
)
from .schools import SchoolRecord, ClassifiedSchool, Tier, Characterization
from .analysis_outputs import (
    AnalysisData,
    AnalysisSummary,
    HeatmapRow,
    ChallengeFrequency,
    MTSSClassification,
    FieldAverage,
    BucketCount,
    Insight,
    InsightList,
    GeneratedIssue,
    IssueSuggestions,
    FinalIssue,
    PlanSuggestions,
    InterventionPlan,
    Tier2Group,
    TierOutcomes,
)

__all__ = [
    # Taxonomy
    "FieldKey",
    "MainCategory",
    "CategoryDefinition",
    "SubCategoryDefinition",
    "TAXONOMY",
    "CATEGORIES",
    "HEATMAP_FIELDS",
    "FIELD_LABELS",
    "CHALLENGE_PHRASES",
    "ORGANIZATIONAL_FIELDS",
    "CORE_SUBJECT_FIELDS",
    "category_of",
    "challenge_phrase",

    # School records
    "SchoolRecord",
    "ClassifiedSchool",
    "Tier",
    "Characterization",

    # Analysis and wizard outputs
    "AnalysisData",
    "AnalysisSummary",
    "HeatmapRow",
    "ChallengeFrequency",
    "MTSSClassification",
    "FieldAverage",
    "BucketCount",
    "Insight",
    "InsightList",
    "GeneratedIssue",
    "IssueSuggestions",
    "FinalIssue",
    "PlanSuggestions",
    "InterventionPlan",
    "Tier2Group",
    "TierOutcomes",
]
