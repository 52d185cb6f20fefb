"""
School records entered during mapping and their per-run classification.

A SchoolRecord is immutable; the mapping step replaces whole records through
the with_* helpers, so the analysis engine only ever sees complete values.
"""

from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .immutable import freeze_mapping, freeze_validator, thaw_mapping
from .taxonomy import FieldKey

# Top-level fields the mapping step may edit; id is fixed at creation
EDITABLE_FIELDS = frozenset({"name", "principal", "students", "notes"})


class Tier(int, Enum):
    """MTSS intervention tier."""
    UNIVERSAL = 1
    TARGETED = 2
    INTENSIVE = 3


class Characterization(str, Enum):
    """Human-readable risk label for a school."""
    HIGH_RISK = "high risk"
    MODERATE_CHALLENGES = "moderate challenges"
    STABLE = "stable"


class SchoolRecord(BaseModel):
    """Raw per-school mapping data as entered by the supervisor."""
    model_config = ConfigDict(frozen=True, validate_default=True)

    id: int
    name: str = ""
    principal: str = ""
    students: str = ""  # numeric-or-blank, kept as entered
    notes: str = ""
    scores: Mapping[FieldKey, str] = Field(default_factory=dict)
    challenges: Mapping[FieldKey, FrozenSet[int]] = Field(default_factory=dict)

    @field_validator("students", mode="before")
    @classmethod
    def coerce_students(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("scores", mode="before")
    @classmethod
    def coerce_scores(cls, v: Any) -> Any:
        """Accept integer or missing scores; the normalizer decides validity."""
        if not isinstance(v, Mapping):
            return v
        return {key: "" if value is None else str(value) for key, value in v.items()}

    @field_validator("scores", "challenges", mode="after")
    @classmethod
    def freeze_mappings(cls, v: Any) -> Any:
        return freeze_validator(v)

    @field_serializer("scores", "challenges", mode="wrap")
    def serialize_mapping(self, value: Mapping, handler):
        return handler(thaw_mapping(value))

    def score(self, field: FieldKey) -> str:
        return self.scores.get(field, "")

    def selected_challenges(self, field: FieldKey) -> FrozenSet[int]:
        return self.challenges.get(field, frozenset())

    def with_score(self, field: FieldKey, value: Any) -> "SchoolRecord":
        """Return a copy with one field's score replaced."""
        scores = dict(self.scores)
        scores[field] = "" if value is None else str(value)
        return self.model_copy(update={"scores": freeze_mapping(scores)})

    def with_challenge_toggled(self, field: FieldKey, index: int) -> "SchoolRecord":
        """Return a copy with a challenge index selected or deselected."""
        current = self.selected_challenges(field)
        updated = current - {index} if index in current else current | {index}
        challenges = dict(self.challenges)
        challenges[field] = frozenset(updated)
        return self.model_copy(update={"challenges": freeze_mapping(challenges)})

    def with_challenges(self, field: FieldKey, indices: Iterable[int]) -> "SchoolRecord":
        challenges = dict(self.challenges)
        challenges[field] = frozenset(indices)
        return self.model_copy(update={"challenges": freeze_mapping(challenges)})

    def with_fields(self, **changes: Any) -> "SchoolRecord":
        """
        Replace top-level fields (name, principal, students, notes) with validation.

        Raises:
            ValueError: a key is not one of the editable fields
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit school fields: {', '.join(sorted(unknown))}")
        data = self.model_dump()
        data.update(changes)
        return SchoolRecord.model_validate(data)


class ClassifiedSchool(SchoolRecord):
    """A school record plus the tier and label derived for one analysis run."""
    tier: Tier
    characterization: Characterization
