"""
Per-school tier classification and characterization.

Both work from the mean of valid scores across every heatmap field but fall
back differently when a school has no valid scores: the tier treats the mean
as 5, the characterization returns "stable" directly. The two fallbacks agree
today; they are not derived from each other.
"""

from typing import Optional

from models import (
    HEATMAP_FIELDS,
    Characterization,
    ClassifiedSchool,
    SchoolRecord,
    Tier,
)
from .normalizer import MAX_SCORE, valid_scores


INTENSIVE_MAX_MEAN = 2.5
TARGETED_MAX_MEAN = 3.5


def mean_valid_score(school: SchoolRecord) -> Optional[float]:
    """Mean of valid scores across all heatmap fields, or None when there are none."""
    scores = valid_scores(school, HEATMAP_FIELDS)
    if not scores:
        return None
    return sum(scores) / len(scores)


def classify_tier(school: SchoolRecord) -> Tier:
    mean = mean_valid_score(school)
    if mean is None:
        mean = float(MAX_SCORE)

    if mean <= INTENSIVE_MAX_MEAN:
        return Tier.INTENSIVE
    if mean <= TARGETED_MAX_MEAN:
        return Tier.TARGETED
    return Tier.UNIVERSAL


def characterize(school: SchoolRecord) -> Characterization:
    mean = mean_valid_score(school)
    if mean is None:
        return Characterization.STABLE

    if mean <= INTENSIVE_MAX_MEAN:
        return Characterization.HIGH_RISK
    if mean <= TARGETED_MAX_MEAN:
        return Characterization.MODERATE_CHALLENGES
    return Characterization.STABLE


def classify_school(school: SchoolRecord) -> ClassifiedSchool:
    """Attach tier and characterization to a copy of the record."""
    return ClassifiedSchool(
        **school.model_dump(),
        tier=classify_tier(school),
        characterization=characterize(school),
    )
