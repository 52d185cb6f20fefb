"""
Output schemas for the analysis step and the wizard steps that consume it.

AnalysisData is the single derived report produced by the engine; the issue
and plan models carry the structured suggestions returned by the
text-generation service.

The report models are frozen all the way down: collections are tuples and
mappings are read-only views, so a report handed to the wizard or an agent
cannot be altered in place.
"""

from typing import Any, Dict, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .immutable import freeze_validator, thaw_mapping
from .schools import ClassifiedSchool
from .taxonomy import FieldKey, MainCategory


class Insight(BaseModel):
    """A titled natural-language finding about the analysed schools."""
    model_config = ConfigDict(frozen=True)

    title: str
    text: str


class AnalysisSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_schools: int = 0
    total_students: int = 0
    risky_schools: int = 0
    excellent_schools: int = 0


class HeatmapRow(BaseModel):
    """Share of schools scoring low (<= 2, absent included) on one field."""
    model_config = ConfigDict(frozen=True)

    field: FieldKey
    label: str
    percentage: int
    low_schools: int


class ChallengeFrequency(BaseModel):
    model_config = ConfigDict(frozen=True, validate_default=True)

    challenges: Mapping[str, int] = Field(default_factory=dict)  # phrase -> selections
    affected_schools: int = 0

    @field_validator("challenges", mode="after")
    @classmethod
    def freeze_challenges(cls, v: Any) -> Any:
        return freeze_validator(v)

    @field_serializer("challenges", mode="wrap")
    def serialize_mapping(self, value: Mapping, handler):
        return handler(thaw_mapping(value))


class MTSSClassification(BaseModel):
    model_config = ConfigDict(frozen=True)

    tier1: Tuple[ClassifiedSchool, ...] = ()
    tier2: Tuple[ClassifiedSchool, ...] = ()
    tier3: Tuple[ClassifiedSchool, ...] = ()


class FieldAverage(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: FieldKey
    name: str
    value: float


class BucketCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: int


class AnalysisData(BaseModel):
    """Full derived report for one set of mapped schools."""
    model_config = ConfigDict(frozen=True, validate_default=True)

    schools: Tuple[ClassifiedSchool, ...] = ()
    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
    subject_distribution: Mapping[FieldKey, Mapping[int, int]] = Field(default_factory=dict)
    challenges_analysis: Mapping[MainCategory, ChallengeFrequency] = Field(default_factory=dict)
    mtss_classification: MTSSClassification = Field(default_factory=MTSSClassification)
    insights: Tuple[Insight, ...] = ()
    heatmap_data: Tuple[HeatmapRow, ...] = ()
    organizational_data: Tuple[FieldAverage, ...] = ()
    core_subjects_data: Tuple[FieldAverage, ...] = ()
    overall_performance_data: Tuple[BucketCount, ...] = ()
    school_size_data: Tuple[BucketCount, ...] = ()

    @field_validator("subject_distribution", "challenges_analysis", mode="after")
    @classmethod
    def freeze_mappings(cls, v: Any) -> Any:
        return freeze_validator(v)

    @field_serializer("subject_distribution", "challenges_analysis", mode="wrap")
    def serialize_mapping(self, value: Mapping, handler):
        return handler(thaw_mapping(value))

    def with_insights(self, insights: List[Insight]) -> "AnalysisData":
        """Return a copy carrying externally generated insights."""
        return self.model_copy(update={"insights": tuple(insights)})

    def sorted_challenges(self) -> List[Tuple[MainCategory, ChallengeFrequency]]:
        """Categories ordered by affected schools, highest first; ties keep taxonomy order."""
        return sorted(
            self.challenges_analysis.items(),
            key=lambda item: item[1].affected_schools,
            reverse=True,
        )

    def top_challenges(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Most frequently selected challenge phrases across all categories."""
        flattened = [
            {"category": category.value, "challenge": phrase, "count": count}
            for category, frequency in self.challenges_analysis.items()
            for phrase, count in frequency.challenges.items()
        ]
        flattened.sort(key=lambda entry: entry["count"], reverse=True)
        return flattened[:limit]

    def insight_payload(self) -> Dict[str, Any]:
        """JSON-serializable summary handed to the text-generation service."""
        return {
            "summary": self.summary.model_dump(),
            "heatmap": [
                {"field": row.label, "percentageOfLowPerformingSchools": row.percentage}
                for row in self.heatmap_data
            ],
            "mtssDistribution": {
                "tier1": len(self.mtss_classification.tier1),
                "tier2": len(self.mtss_classification.tier2),
                "tier3": len(self.mtss_classification.tier3),
            },
            "mostCommonChallenges": self.top_challenges(5),
        }


class GeneratedIssue(BaseModel):
    """A candidate 'how might we' central issue suggested for the root causes."""
    title: str
    action: str
    subject: str
    context: str
    result: str
    vision: str
    rationale: str
    level: str

    def as_question(self) -> str:
        return (
            f"How can we {self.action} {self.subject} {self.context}, "
            f"in order to {self.result}?"
        )


class IssueSuggestions(BaseModel):
    """Structured response wrapper for issue suggestions."""
    issues: List[GeneratedIssue] = Field(default_factory=list)


class InsightList(BaseModel):
    """Structured response wrapper for analysis insights."""
    insights: List[Insight] = Field(default_factory=list)


class FinalIssue(GeneratedIssue):
    original_challenge: str
    root_causes: List[str] = Field(default_factory=list)


class PlanSuggestions(BaseModel):
    main_goal: str = ""
    smart_objectives: List[str] = Field(default_factory=list)


class Tier2Group(BaseModel):
    id: str
    name: str
    outcomes: List[str] = Field(default_factory=list)
    schools: List[str] = Field(default_factory=list)


class TierOutcomes(BaseModel):
    outcomes: List[str] = Field(default_factory=lambda: [""])


class InterventionPlan(BaseModel):
    """Intervention plan drafted in the final wizard step."""
    main_goal: str = ""
    smart_objectives: List[str] = Field(default_factory=lambda: [""])
    tier1: TierOutcomes = Field(default_factory=TierOutcomes)
    tier2_groups: List[Tier2Group] = Field(default_factory=list)
    tier3: TierOutcomes = Field(default_factory=TierOutcomes)
