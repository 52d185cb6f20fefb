"""CSV export of the school mapping table."""

import csv
import io
from datetime import date
from typing import List, Optional, Sequence

from models import FIELD_LABELS, HEATMAP_FIELDS, FieldKey, SchoolRecord, challenge_phrase


BOM = "\ufeff"


def mapping_headers() -> List[str]:
    return [
        "Inspector",
        "School name",
        "Principal",
        "Student count",
        *(FIELD_LABELS[field] for field in HEATMAP_FIELDS),
        "Notes",
        *(f"{FIELD_LABELS[field]} challenges" for field in HEATMAP_FIELDS),
    ]


def _challenge_text(school: SchoolRecord, field: FieldKey) -> str:
    phrases = (challenge_phrase(field, index) for index in sorted(school.selected_challenges(field)))
    return "; ".join(phrase for phrase in phrases if phrase)


def mapping_row(school: SchoolRecord, inspector_name: str = "") -> List[str]:
    return [
        inspector_name,
        school.name,
        school.principal,
        school.students,
        *(school.score(field) for field in HEATMAP_FIELDS),
        school.notes,
        *(_challenge_text(school, field) for field in HEATMAP_FIELDS),
    ]


def export_schools_csv(schools: Sequence[SchoolRecord], inspector_name: str = "") -> str:
    """
    Render the mapping table as CSV text.

    The output starts with a UTF-8 byte order mark so spreadsheet tools detect
    the encoding; every cell is quoted.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(mapping_headers())
    for school in schools:
        writer.writerow(mapping_row(school, inspector_name))
    return BOM + buffer.getvalue()


def default_export_filename(on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"school_mapping_{on.strftime('%d_%m_%Y')}.csv"
