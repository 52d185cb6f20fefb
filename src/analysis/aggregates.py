"""
Reductions over the classified school collection.

Each function is independent of the others and depends only on its input
schools, so results can be computed in any order.
"""

from collections import Counter
from typing import Dict, List, Sequence, Set

from models import (
    CORE_SUBJECT_FIELDS,
    FIELD_LABELS,
    HEATMAP_FIELDS,
    TAXONOMY,
    AnalysisSummary,
    BucketCount,
    ChallengeFrequency,
    ClassifiedSchool,
    FieldAverage,
    FieldKey,
    HeatmapRow,
    MainCategory,
    MTSSClassification,
    SchoolRecord,
    Tier,
    challenge_phrase,
)
from .normalizer import (
    MAX_SCORE,
    MIN_SCORE,
    field_score,
    parse_student_count,
    round_half_up,
)


LOW_SCORE_MAX = 2

# (label, lower bound exclusive, upper bound inclusive); None means unbounded
SCHOOL_SIZE_BUCKETS = (
    ("Small (up to 250)", None, 250),
    ("Medium (251-400)", 250, 400),
    ("Large (401-600)", 400, 600),
    ("Very large (600+)", 600, None),
)


def split_tiers(schools: Sequence[ClassifiedSchool]) -> MTSSClassification:
    return MTSSClassification(
        tier1=[s for s in schools if s.tier == Tier.UNIVERSAL],
        tier2=[s for s in schools if s.tier == Tier.TARGETED],
        tier3=[s for s in schools if s.tier == Tier.INTENSIVE],
    )


def build_summary(schools: Sequence[ClassifiedSchool]) -> AnalysisSummary:
    return AnalysisSummary(
        total_schools=len(schools),
        total_students=sum(parse_student_count(s.students) for s in schools),
        risky_schools=sum(1 for s in schools if s.tier == Tier.INTENSIVE),
        excellent_schools=sum(1 for s in schools if s.tier == Tier.UNIVERSAL),
    )


def build_heatmap(
    schools: Sequence[SchoolRecord],
    fields: Sequence[FieldKey] = HEATMAP_FIELDS,
) -> List[HeatmapRow]:
    """
    Low-score share per field.

    Absent scores parse to 0 and therefore count as low. So do out-of-range
    entries such as "6" or "0", which parse as absent. Tier classification
    drops the same entries from its mean instead, so a school whose only
    entries are "6" is 100% low here but universal/stable in its tier.
    """
    total = len(schools)
    rows = []
    for field in fields:
        low_schools = sum(1 for s in schools if field_score(s, field) <= LOW_SCORE_MAX)
        percentage = int(round_half_up(low_schools / total * 100)) if total > 0 else 0
        rows.append(HeatmapRow(
            field=field,
            label=FIELD_LABELS[field],
            percentage=percentage,
            low_schools=low_schools,
        ))
    return rows


def build_subject_distribution(
    schools: Sequence[SchoolRecord],
    fields: Sequence[FieldKey] = CORE_SUBJECT_FIELDS,
) -> Dict[FieldKey, Dict[int, int]]:
    """Histogram of valid scores per core-subject field. Absent scores are not counted."""
    distribution = {}
    for field in fields:
        histogram = {score: 0 for score in range(MIN_SCORE, MAX_SCORE + 1)}
        for school in schools:
            score = field_score(school, field)
            if score in histogram:
                histogram[score] += 1
        distribution[field] = histogram
    return distribution


def analyze_challenges(schools: Sequence[SchoolRecord]) -> Dict[MainCategory, ChallengeFrequency]:
    """
    Count selected challenge phrases per main category.

    A school is affected in a category when at least one of its selections
    there resolves to a phrase. Categories with no resolved selections are
    left out. Keys follow taxonomy order.
    """
    analysis = {}
    for category in TAXONOMY:
        counts: Counter = Counter()
        affected: Set[int] = set()

        for sub_category in category.sub_categories:
            for school in schools:
                for index in sorted(school.selected_challenges(sub_category.key)):
                    phrase = challenge_phrase(sub_category.key, index)
                    if not phrase:
                        continue
                    counts[phrase] += 1
                    affected.add(school.id)

        if counts:
            analysis[category.key] = ChallengeFrequency(
                challenges=dict(counts),
                affected_schools=len(affected),
            )
    return analysis


def average_fields(schools: Sequence[SchoolRecord], fields: Sequence[FieldKey]) -> List[FieldAverage]:
    """Average valid score per field, rounded to 2 places; 0 when a field has no valid scores."""
    averages = []
    for field in fields:
        scores = [field_score(s, field) for s in schools]
        scores = [score for score in scores if score > 0]
        value = round_half_up(sum(scores) / len(scores), 2) if scores else 0.0
        averages.append(FieldAverage(field=field, name=FIELD_LABELS[field], value=value))
    return averages


def bucket_overall_performance(classification: MTSSClassification) -> List[BucketCount]:
    return [
        BucketCount(name="Tier 3 (low)", value=len(classification.tier3)),
        BucketCount(name="Tier 2 (medium)", value=len(classification.tier2)),
        BucketCount(name="Tier 1 (high)", value=len(classification.tier1)),
    ]


def bucket_school_size(schools: Sequence[SchoolRecord]) -> List[BucketCount]:
    """Schools per size range; empty ranges are omitted."""
    sizes = [parse_student_count(s.students) for s in schools]
    buckets = []
    for name, lower, upper in SCHOOL_SIZE_BUCKETS:
        count = sum(
            1 for size in sizes
            if (lower is None or size > lower) and (upper is None or size <= upper)
        )
        if count > 0:
            buckets.append(BucketCount(name=name, value=count))
    return buckets
