import pandas as pd
import pytest

from seating.errors import ValidationError
from seating.student_import import student_import_excel, students_from_frame


def test_defaults_for_missing_optional_columns():
    df = pd.DataFrame({"stu_id": [101, 102], "stu_name": ["Asha ", "Ben"], "dept": ["CS", None]})

    students = students_from_frame(df)

    assert [s.stu_id for s in students] == ["101", "102"]
    assert students[0].name == "Asha"
    assert students[0].role == "student"
    assert students[0].academic_status == "active"
    assert students[1].department is None
    assert students[1].year is None


def test_missing_required_columns():
    with pytest.raises(ValidationError) as exc:
        students_from_frame(pd.DataFrame({"stu_id": [1]}))
    assert exc.value.details == {"missing": ["stu_name"]}


def test_reads_workbook(tmp_path):
    path = tmp_path / "students.xlsx"
    pd.DataFrame({
        "stu_id": ["S1", "S2"],
        "stu_name": ["Asha", "Ben"],
        "dept": ["CS", "ME"],
        "year": [3, 2],
        "academic_status": ["active", "Detained"],
    }).to_excel(path, index=False)

    students = student_import_excel(path)

    assert [(s.department, s.year, s.academic_status) for s in students] == \
        [("CS", 3, "active"), ("ME", 2, "detained")]


def test_unreadable_file(tmp_path):
    with pytest.raises(ValidationError):
        student_import_excel(tmp_path / "missing.xlsx")


def test_non_numeric_year_reports_the_row():
    df = pd.DataFrame({"stu_id": ["S1", "S2"], "stu_name": ["Asha", "Ben"], "year": [3, "third"]})

    with pytest.raises(ValidationError) as exc:
        students_from_frame(df)
    assert exc.value.details == {"row": 3, "stu_id": "S2"}


@pytest.mark.parametrize("column", ["credits", "backlogs"])
def test_non_numeric_counts_rejected(column):
    df = pd.DataFrame({"stu_id": ["S1"], "stu_name": ["Asha"], column: ["n/a"]})

    with pytest.raises(ValidationError):
        students_from_frame(df)


@pytest.mark.parametrize("stu_id,stu_name", [(None, "Asha"), ("  ", "Asha"), ("S1", None)])
def test_blank_required_cells_rejected(stu_id, stu_name):
    df = pd.DataFrame({"stu_id": [stu_id], "stu_name": [stu_name]})

    with pytest.raises(ValidationError) as exc:
        students_from_frame(df)
    assert exc.value.details["row"] == 2


def test_blank_id_in_workbook(tmp_path):
    path = tmp_path / "students.xlsx"
    pd.DataFrame({"stu_id": ["S1", None], "stu_name": ["Asha", "Ben"]}).to_excel(path, index=False)

    with pytest.raises(ValidationError):
        student_import_excel(path)
