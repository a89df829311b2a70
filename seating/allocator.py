"""Seat allocation engine.

Eligible students are grouped into cohorts (department and year), cohorts are
queued largest first, and rooms are filled row by row from that shared queue.
Which student takes the next seat is decided by an ordering strategy:

- ``block`` drains the queue in order, so each cohort sits together
- ``checkerboard`` prefers a student whose cohort differs from the already
  seated neighbours (see ``layouts.neighbours`` for the adjacency rules)

Everything here is pure computation over in-memory objects; persistence and
locking live in ``seating.service``.
"""

import logging
from collections import deque

from seating.errors import ValidationError
from seating.layouts import ADJACENCY_RULES, generate_grid, neighbours, validate_dimensions
from seating.models import AllocationResult, AllocationStats, GridCell, SeatAssignment

logger = logging.getLogger(__name__)

ELIGIBLE_ROLE = "student"
DETAINED_STATUS = "detained"
DEFAULT_DEPARTMENT = "General"
DEFAULT_YEAR = 1


def is_eligible(student):
    return student.role == ELIGIBLE_ROLE and student.academic_status != DETAINED_STATUS


def filter_eligible(students):
    return [s for s in students if is_eligible(s)]


def cohort_key(student):
    return f"{student.department or DEFAULT_DEPARTMENT}|{student.year or DEFAULT_YEAR}"


def group_cohorts(students):
    """Group students by cohort, largest cohort first.

    Ties keep the order in which the cohorts were first seen, and members keep
    their roster order.
    """
    groups = {}
    for student in students:
        groups.setdefault(cohort_key(student), []).append(student)

    return sorted(groups.items(), key=lambda item: -len(item[1]))


class SeatQueue:
    """Students waiting for a seat, kept per cohort in fill order."""

    def __init__(self, cohorts):
        self._cohorts = [(key, deque(members)) for key, members in cohorts]
        self._size = sum(len(members) for _, members in self._cohorts)

    def __len__(self):
        return self._size

    def __iter__(self):
        for key, members in self._cohorts:
            for student in members:
                yield key, student

    def remaining(self):
        return [student for _, student in self]

    def popleft(self):
        for key, members in self._cohorts:
            if members:
                self._size -= 1
                return key, members.popleft()
        raise IndexError("pop from an empty SeatQueue")

    def pop_other_than(self, keys):
        """Pop from the largest cohort not in ``keys``, or from the head if every cohort is excluded."""
        best = None
        for key, members in self._cohorts:
            if not members or key in keys:
                continue
            if best is None or len(members) > len(best[1]):
                best = (key, members)

        if best is None:
            return self.popleft()

        self._size -= 1
        return best[0], best[1].popleft()


class BlockStrategy:
    name = "block"

    def next_student(self, queue, keys, row, column):
        return queue.popleft()


class CheckerboardStrategy:
    name = "checkerboard"

    def __init__(self, adjacency="row"):
        if adjacency not in ADJACENCY_RULES:
            raise ValidationError(f"Unknown adjacency rule: {adjacency}",
                                  {"allowed": list(ADJACENCY_RULES)})
        self.adjacency = adjacency

    def next_student(self, queue, keys, row, column):
        taken = {keys[r][c] for r, c in neighbours(row, column, self.adjacency)}
        return queue.pop_other_than(taken)


STRATEGIES = {
    BlockStrategy.name: BlockStrategy,
    CheckerboardStrategy.name: CheckerboardStrategy,
}


def get_strategy(name="block", adjacency="row"):
    if name not in STRATEGIES:
        raise ValidationError(f"Unknown seating strategy: {name}",
                              {"allowed": sorted(STRATEGIES)})
    if name == CheckerboardStrategy.name:
        return CheckerboardStrategy(adjacency)
    return BlockStrategy()


def fill_room(room, queue, exam_id, strategy=None):
    """Fill one room row by row from ``queue``, draining it.

    Returns the room grid and one assignment per filled cell.
    """
    validate_dimensions(room)
    strategy = strategy or BlockStrategy()

    grid = generate_grid(room.rows, room.columns)
    keys = [[None] * room.columns for _ in range(room.rows)]
    assignments = []

    for row in range(room.rows):
        for column in range(room.columns):
            if not queue:
                return grid, assignments

            key, student = strategy.next_student(queue, keys, row, column)
            keys[row][column] = key
            grid[row][column] = GridCell(
                student_id=student.id,
                name=student.name,
                department=student.department,
                role=student.role,
            )
            assignments.append(SeatAssignment(
                exam_id=exam_id,
                room_id=room.id,
                student_id=student.id,
                row=row,
                column=column,
            ))

    return grid, assignments


def allocate_rooms(students, rooms, exam_id, strategy=None):
    """Seat the eligible part of ``students`` across ``rooms`` in list order."""
    for room in rooms:
        validate_dimensions(room)

    eligible = filter_eligible(students)
    queue = SeatQueue(group_cohorts(eligible))

    assignments = []
    grids = {}
    for room in rooms:
        if not queue:
            break
        grid, seated = fill_room(room, queue, exam_id, strategy)
        if seated:
            grids[room.id] = grid
            assignments.extend(seated)
            logger.debug("Room %s took %d students", room.room_number, len(seated))

    stats = AllocationStats(
        total=len(eligible),
        assigned=len(assignments),
        rooms_used=len(grids),
    )
    return AllocationResult(assignments, stats, grids, unseated=queue.remaining())
