"""Assessment aggregation: raw school records in, one AnalysisData report out."""

import logging
from typing import Iterable

from models import (
    CORE_SUBJECT_FIELDS,
    ORGANIZATIONAL_FIELDS,
    AnalysisData,
    SchoolRecord,
)
from .aggregates import (
    analyze_challenges,
    average_fields,
    bucket_overall_performance,
    bucket_school_size,
    build_heatmap,
    build_subject_distribution,
    build_summary,
    split_tiers,
)
from .classification import classify_school


logger = logging.getLogger(__name__)


def analyze_schools(schools: Iterable[SchoolRecord]) -> AnalysisData:
    """
    Build the analysis report for a collection of school records.

    Pure and deterministic: identical input yields an identical report. The
    insights slot is left empty for the text-generation step to fill in.

    Args:
        schools: Mapped school records; never modified.

    Returns:
        AnalysisData with tiers, heatmap, distributions and challenge counts
    """
    records = list(schools)
    classified = [classify_school(school) for school in records]
    classification = split_tiers(classified)

    analysis = AnalysisData(
        schools=classified,
        summary=build_summary(classified),
        subject_distribution=build_subject_distribution(records),
        challenges_analysis=analyze_challenges(records),
        mtss_classification=classification,
        insights=[],
        heatmap_data=build_heatmap(records),
        organizational_data=average_fields(records, ORGANIZATIONAL_FIELDS),
        core_subjects_data=average_fields(records, CORE_SUBJECT_FIELDS),
        overall_performance_data=bucket_overall_performance(classification),
        school_size_data=bucket_school_size(records),
    )

    logger.info(
        "Analysis completed",
        extra={
            "total_schools": analysis.summary.total_schools,
            "tier1": len(classification.tier1),
            "tier2": len(classification.tier2),
            "tier3": len(classification.tier3),
            "challenge_categories": len(analysis.challenges_analysis),
        }
    )
    return analysis
