"""
Tests for per-school tier classification and characterization.
"""

import pytest

from analysis.classification import (
    characterize,
    classify_school,
    classify_tier,
    mean_valid_score,
)
from models import HEATMAP_FIELDS, Characterization, FieldKey, Tier
from conftest import make_school


def school_with_mean(total: int):
    """School whose 14 valid scores sum to `total` (mean = total / 14)."""
    scores = {}
    remaining = total
    for i, field in enumerate(HEATMAP_FIELDS):
        left = len(HEATMAP_FIELDS) - i - 1
        value = min(5, remaining - left)
        scores[field] = str(value)
        remaining -= value
    return make_school(1, scores=scores)


class TestMeanValidScore:
    """Test the mean over valid scores."""

    def test_all_valid(self, all_fives):
        assert mean_valid_score(all_fives) == 5.0

    def test_ignores_absent_and_malformed(self):
        school = make_school(1, scores={FieldKey.MATH: "2", FieldKey.SCIENCE: "4", FieldKey.VISION: "abc"})
        assert mean_valid_score(school) == 3.0

    def test_no_valid_scores(self):
        assert mean_valid_score(make_school(1)) is None


class TestClassifyTier:
    """Test tier thresholds."""

    def test_all_fives_universal(self, all_fives):
        assert classify_tier(all_fives) == Tier.UNIVERSAL

    def test_all_ones_intensive(self, all_ones):
        assert classify_tier(all_ones) == Tier.INTENSIVE

    def test_intensive_boundary(self):
        # 35 / 14 == 2.5
        school = school_with_mean(35)
        assert mean_valid_score(school) == 2.5
        assert classify_tier(school) == Tier.INTENSIVE
        assert classify_tier(school_with_mean(36)) == Tier.TARGETED

    def test_targeted_boundary(self):
        # 49 / 14 == 3.5
        school = school_with_mean(49)
        assert mean_valid_score(school) == 3.5
        assert classify_tier(school) == Tier.TARGETED
        assert classify_tier(school_with_mean(50)) == Tier.UNIVERSAL

    def test_empty_school_is_universal(self):
        assert classify_tier(make_school(1)) == Tier.UNIVERSAL

    def test_malformed_school_is_universal(self):
        assert classify_tier(make_school(1, score="n/a")) == Tier.UNIVERSAL


class TestCharacterize:
    """Test characterization labels."""

    @pytest.mark.parametrize("score,expected", [
        (1, Characterization.HIGH_RISK),
        (3, Characterization.MODERATE_CHALLENGES),
        (4, Characterization.STABLE),
    ])
    def test_labels(self, score, expected):
        assert characterize(make_school(1, score=score)) == expected

    def test_empty_school_is_stable(self):
        assert characterize(make_school(1)) == Characterization.STABLE

    def test_label_agrees_with_tier(self):
        pairs = {
            Tier.INTENSIVE: Characterization.HIGH_RISK,
            Tier.TARGETED: Characterization.MODERATE_CHALLENGES,
            Tier.UNIVERSAL: Characterization.STABLE,
        }
        for total in (14, 35, 36, 49, 50, 70):
            school = school_with_mean(total)
            assert pairs[classify_tier(school)] == characterize(school)


class TestClassifySchool:
    """Test classified copies."""

    def test_keeps_record_fields(self):
        school = make_school(7, score=2, students="310", name="Oak", principal="R. Cohen")
        classified = classify_school(school)

        assert classified.id == 7
        assert classified.name == "Oak"
        assert classified.principal == "R. Cohen"
        assert classified.students == "310"
        assert classified.tier == Tier.INTENSIVE
        assert classified.characterization == Characterization.HIGH_RISK
        assert school.score(FieldKey.MATH) == "2"
