"""Parsing of hand-entered numeric values. Malformed input degrades to absent/zero."""

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List

from models import FieldKey, SchoolRecord


ABSENT = 0
MIN_SCORE = 1
MAX_SCORE = 5

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")  # ASCII digits only


def _leading_int(raw) -> int:
    """Integer prefix of a value ('4', ' 4', '4.5', '4abc' -> 4); 0 when there is none."""
    if raw is None:
        return 0
    match = _LEADING_INT.match(str(raw))
    if not match:
        return 0
    return int(match.group(1))


def parse_score(raw) -> int:
    """Parse a Likert score to 1-5, or ABSENT (0) for blank/malformed/out-of-range input."""
    value = _leading_int(raw)
    if MIN_SCORE <= value <= MAX_SCORE:
        return value
    return ABSENT


def parse_student_count(raw) -> int:
    """Parse a student count; non-numeric input counts as 0."""
    return _leading_int(raw)


def field_score(school: SchoolRecord, field: FieldKey) -> int:
    return parse_score(school.score(field))


def valid_scores(school: SchoolRecord, fields: Iterable[FieldKey]) -> List[int]:
    """Parsed scores for the given fields, absent ones dropped."""
    scores = [field_score(school, field) for field in fields]
    return [s for s in scores if s > ABSENT]


def round_half_up(value: float, places: int = 0) -> float:
    """Round the exact binary value half away from zero, e.g. 2.125 -> 2.13."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
