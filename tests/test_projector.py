from seating.models import SeatAssignment
from seating.projector import grid_to_json, project_grid
from tests.conftest import make_room, make_student


def test_places_students_and_skips_unknown_or_out_of_range():
    room = make_room(1, 2, 3)
    students = {1: make_student(1, dept=None), 2: make_student(2, dept="ME")}
    seats = [
        SeatAssignment(1, 1, 1, 0, 0),
        SeatAssignment(1, 1, 2, 1, 2),
        SeatAssignment(1, 1, 99, 0, 1),
        SeatAssignment(1, 1, 2, 5, 5),
    ]

    grid = project_grid(room, seats, students)

    assert grid[0][0].student_id == 1
    assert grid[0][0].department == "UNKNOWN"
    assert grid[1][2].department == "ME"
    assert grid[0][1].empty

    as_json = grid_to_json(grid)
    assert as_json[0][1] is None
    assert as_json[1][2] == {"student_id": 2, "name": "Student 2", "department": "ME", "role": "student"}


def test_does_not_touch_assignments():
    room = make_room(1, 1, 2)
    seat = SeatAssignment(1, 1, 1, 0, 1)

    project_grid(room, [seat], {1: make_student(1)})

    assert (seat.row, seat.column, seat.student_id) == (0, 1, 1)
