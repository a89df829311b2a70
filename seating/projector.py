import logging

from seating.layouts import generate_grid, validate_dimensions
from seating.models import GridCell

logger = logging.getLogger(__name__)


def project_grid(room, assignments, students):
    """Rebuild a room's seating grid from stored assignments.

    ``students`` maps student id to Student. Assignments whose student is no
    longer on the roster, or whose cell falls outside the room, stay empty.
    """
    validate_dimensions(room)
    grid = generate_grid(room.rows, room.columns)

    for seat in assignments:
        student = students.get(seat.student_id)
        if student is None:
            logger.info("Seat (%d, %d) in room %s references missing student %s",
                        seat.row, seat.column, room.room_number, seat.student_id)
            continue
        if not (0 <= seat.row < room.rows and 0 <= seat.column < room.columns):
            logger.warning("Seat (%d, %d) lies outside room %s", seat.row, seat.column, room.room_number)
            continue

        grid[seat.row][seat.column] = GridCell(
            student_id=student.id,
            name=student.name,
            department=student.department or "UNKNOWN",
            role=student.role,
        )

    return grid


def grid_to_json(grid):
    return [[cell.to_dict() for cell in row] for row in grid]
