import logging

import pandas as pd

from seating.errors import ValidationError
from seating.models import Student

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"stu_id", "stu_name"}
OPTIONAL_COLUMNS = {
    "role": "student",
    "dept": None,
    "year": None,
    "academic_status": "active",
    "credits": 0,
    "backlogs": 0,
}


def _value(row, column):
    value = row.get(column, OPTIONAL_COLUMNS.get(column))
    if pd.isna(value):
        return OPTIONAL_COLUMNS.get(column)
    return value


def _required(row, column):
    value = row[column]
    text = "" if pd.isna(value) else str(value).strip()
    if not text:
        raise ValueError(f"{column} is blank")
    return text


def _student_from_row(row):
    year = _value(row, "year")
    return Student(
        id=None,
        stu_id=_required(row, "stu_id"),
        name=_required(row, "stu_name"),
        role=str(_value(row, "role")).strip().lower(),
        department=_value(row, "dept"),
        year=int(year) if year is not None else None,
        academic_status=str(_value(row, "academic_status")).strip().lower(),
        credits=int(_value(row, "credits")),
        backlogs=int(_value(row, "backlogs")),
    )


def students_from_frame(df):
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValidationError("Missing columns in roster", {"missing": sorted(missing)})

    students = []
    for index, row in df.iterrows():
        try:
            students.append(_student_from_row(row))
        except (ValueError, TypeError) as e:
            # index + 2: header is sheet row 1
            raise ValidationError(f"Bad roster row: {e}",
                                  {"row": int(index) + 2, "stu_id": str(row["stu_id"])}) from e

    return students


def student_import_excel(file_path):
    try:
        df = pd.read_excel(file_path)
    except Exception as e:
        raise ValidationError(f"Excel read failed: {e}", {"file_path": str(file_path)}) from e

    students = students_from_frame(df)
    logger.info("Read %d students from %s", len(students), file_path)
    return students
