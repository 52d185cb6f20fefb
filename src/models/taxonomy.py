"""
Static evaluation taxonomy for school mapping.

Main categories, their ordered evaluation fields, and the fixed challenge
phrase list for each field. Built once at import time and never mutated;
lookups are exposed through read-only mappings.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from pydantic import BaseModel, ConfigDict


class MainCategory(str, Enum):
    """Top-level evaluation categories, in presentation order."""
    LEADERSHIP_CULTURE = "leadership_culture"
    CORE_SUBJECTS = "core_subjects"
    TEACHING_LEARNING = "teaching_learning"
    STUDENT_WELLBEING = "student_wellbeing"


class FieldKey(str, Enum):
    """Evaluation fields scored per school."""
    # Leadership & school culture
    VISION = "vision"
    STAFF_DEVELOPMENT = "staff_development"
    SCHOOL_CLIMATE = "school_climate"
    PARENT_ENGAGEMENT = "parent_engagement"

    # Core subjects
    LITERACY = "literacy"
    MATH = "math"
    ENGLISH = "english"
    SCIENCE = "science"

    # Teaching & learning
    DIFFERENTIATION = "differentiation"
    ASSESSMENT = "assessment"
    TECHNOLOGY = "technology"

    # Student wellbeing
    SOCIAL_EMOTIONAL = "social_emotional"
    SPECIAL_EDUCATION = "special_education"
    ATTENDANCE = "attendance"


class SubCategoryDefinition(BaseModel):
    """One evaluation field and its challenge phrases."""
    model_config = ConfigDict(frozen=True)

    key: FieldKey
    name: str
    challenges: Tuple[str, ...]


class CategoryDefinition(BaseModel):
    """A main category with its ordered evaluation fields."""
    model_config = ConfigDict(frozen=True)

    key: MainCategory
    name: str
    sub_categories: Tuple[SubCategoryDefinition, ...]

    @property
    def fields(self) -> Tuple[FieldKey, ...]:
        return tuple(sub.key for sub in self.sub_categories)


TAXONOMY: Tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        key=MainCategory.LEADERSHIP_CULTURE,
        name="Leadership & School Culture",
        sub_categories=(
            SubCategoryDefinition(
                key=FieldKey.VISION,
                name="Vision & Strategic Planning",
                challenges=(
                    "No shared school vision",
                    "Annual work plan not aligned with goals",
                    "Goals are not translated into measurable targets",
                    "Weak follow-through on decisions",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.STAFF_DEVELOPMENT,
                name="Staff Professional Development",
                challenges=(
                    "Professional development is not tied to school needs",
                    "High staff turnover",
                    "Limited peer learning between teachers",
                    "New teachers lack induction support",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.SCHOOL_CLIMATE,
                name="School Climate",
                challenges=(
                    "Recurring violence incidents",
                    "Low sense of belonging among students",
                    "Tension within the staff room",
                    "Inconsistent behaviour policy",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.PARENT_ENGAGEMENT,
                name="Parent & Community Engagement",
                challenges=(
                    "Low parent participation",
                    "Communication with parents is one-directional",
                    "Few community partnerships",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        key=MainCategory.CORE_SUBJECTS,
        name="Core Subject Achievement",
        sub_categories=(
            SubCategoryDefinition(
                key=FieldKey.LITERACY,
                name="Language & Literacy",
                challenges=(
                    "Gaps in reading comprehension",
                    "Weak written expression",
                    "Decoding difficulties in early grades",
                    "Limited reading for pleasure",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.MATH,
                name="Mathematics",
                challenges=(
                    "Gaps in number sense",
                    "Difficulty with word problems",
                    "Low results in external assessments",
                    "Limited use of manipulatives",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.ENGLISH,
                name="English",
                challenges=(
                    "Weak oral proficiency",
                    "Large variance between class groups",
                    "Shortage of qualified English teachers",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.SCIENCE,
                name="Science & Technology",
                challenges=(
                    "Few hands-on experiments",
                    "Lab equipment is missing or outdated",
                    "Low interest among students",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        key=MainCategory.TEACHING_LEARNING,
        name="Teaching & Learning",
        sub_categories=(
            SubCategoryDefinition(
                key=FieldKey.DIFFERENTIATION,
                name="Differentiated Instruction",
                challenges=(
                    "Teaching aimed at the middle of the class",
                    "No systematic support for struggling learners",
                    "Advanced students are not challenged",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.ASSESSMENT,
                name="Assessment Practices",
                challenges=(
                    "Assessment data is not used to plan teaching",
                    "Reliance on summative tests only",
                    "Feedback to students is rare",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.TECHNOLOGY,
                name="Technology Integration",
                challenges=(
                    "Insufficient devices for students",
                    "Teachers lack digital pedagogy skills",
                    "Unreliable network infrastructure",
                ),
            ),
        ),
    ),
    CategoryDefinition(
        key=MainCategory.STUDENT_WELLBEING,
        name="Student Wellbeing & Inclusion",
        sub_categories=(
            SubCategoryDefinition(
                key=FieldKey.SOCIAL_EMOTIONAL,
                name="Social-Emotional Learning",
                challenges=(
                    "No structured social-emotional curriculum",
                    "Counselling staff is overloaded",
                    "Rising emotional distress among students",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.SPECIAL_EDUCATION,
                name="Special Education & Inclusion",
                challenges=(
                    "Individual education plans are not implemented",
                    "Shortage of teaching assistants",
                    "Limited inclusion in regular classes",
                ),
            ),
            SubCategoryDefinition(
                key=FieldKey.ATTENDANCE,
                name="Attendance & Dropout",
                challenges=(
                    "Chronic absenteeism",
                    "Hidden dropout",
                    "No early-warning follow-up on absences",
                ),
            ),
        ),
    ),
)


CATEGORIES: Mapping[MainCategory, CategoryDefinition] = MappingProxyType(
    {category.key: category for category in TAXONOMY}
)

# Every evaluation field, in taxonomy order
HEATMAP_FIELDS: Tuple[FieldKey, ...] = tuple(
    sub.key for category in TAXONOMY for sub in category.sub_categories
)

FIELD_LABELS: Mapping[FieldKey, str] = MappingProxyType(
    {sub.key: sub.name for category in TAXONOMY for sub in category.sub_categories}
)

CHALLENGE_PHRASES: Mapping[FieldKey, Tuple[str, ...]] = MappingProxyType(
    {sub.key: sub.challenges for category in TAXONOMY for sub in category.sub_categories}
)

ORGANIZATIONAL_FIELDS: Tuple[FieldKey, ...] = CATEGORIES[MainCategory.LEADERSHIP_CULTURE].fields
CORE_SUBJECT_FIELDS: Tuple[FieldKey, ...] = CATEGORIES[MainCategory.CORE_SUBJECTS].fields

_FIELD_CATEGORY: Dict[FieldKey, MainCategory] = {
    sub.key: category.key for category in TAXONOMY for sub in category.sub_categories
}


def category_of(field: FieldKey) -> MainCategory:
    """Return the main category an evaluation field belongs to."""
    return _FIELD_CATEGORY[field]


def challenge_phrase(field: FieldKey, index: int) -> str:
    """Resolve a selected challenge index to its phrase, or '' when out of range."""
    phrases = CHALLENGE_PHRASES.get(field, ())
    if 0 <= index < len(phrases):
        return phrases[index]
    return ""
