"""Allocation orchestration.

``SeatingService`` pulls the roster and rooms through a ``PersistenceGateway``,
runs the allocation engine and replaces the stored seats for the affected
scope in a single transaction:

- a single-room run replaces the seats of (exam, room)
- a multi-room run replaces every seat of the exam

Runs for the same exam are serialised with ``ExamLocks``; runs for different
exams do not block each other.
"""

import logging
import threading
from collections import Counter
from contextlib import contextmanager

from seating.allocator import ELIGIBLE_ROLE, allocate_rooms, filter_eligible, get_strategy
from seating.config import get_settings
from seating.errors import ConflictError, NotFoundError, PreconditionFailedError, ValidationError
from seating.exports import allocation_rows
from seating.layouts import seat_number, validate_dimensions
from seating.projector import project_grid

logger = logging.getLogger(__name__)


class ExamLocks:
    """One mutex per exam id, kept only while someone holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        # exam id -> [lock, holders and waiters]
        self._locks = {}

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, exam_id, timeout=0):
        with self._guard:
            entry = self._locks.setdefault(exam_id, [threading.Lock(), 0])
            entry[1] += 1

        lock = entry[0]
        try:
            if timeout > 0:
                acquired = lock.acquire(timeout=timeout)
            else:
                acquired = lock.acquire(blocking=False)
            if not acquired:
                raise ConflictError(f"Seating for exam {exam_id} is already being allocated",
                                    {"exam_id": exam_id})
            try:
                yield
            finally:
                lock.release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[exam_id]


exam_locks = ExamLocks()


def ensure_single_seat(assignments):
    repeated = sorted(sid for sid, n in Counter(a.student_id for a in assignments).items() if n > 1)
    if repeated:
        raise ConflictError("Students were given more than one seat", {"student_ids": repeated})


class SeatingService:
    def __init__(self, gateway, settings=None, locks=None):
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.locks = locks if locks is not None else exam_locks

    def _strategy(self, name=None):
        return get_strategy(name or self.settings.strategy, self.settings.adjacency)

    def _require_exam(self, exam_id):
        exam = self.gateway.get_exam(exam_id)
        if exam is None:
            raise NotFoundError("Exam not found", {"exam_id": exam_id})
        return exam

    def _require_room(self, room_id):
        room = self.gateway.get_room(room_id)
        if room is None:
            raise NotFoundError("Room not found", {"room_id": room_id})
        return room

    def _replace(self, exam_id, result, room_id=None):
        ensure_single_seat(result.assignments)
        with self.gateway.transaction():
            deleted = self.gateway.delete_assignments(exam_id, room_id)
            result.assignments = self.gateway.insert_assignments(result.assignments)

        logger.info("Exam %s: replaced %d seats with %d (room scope: %s)",
                    exam_id, deleted, len(result.assignments), room_id if room_id is not None else "all")

    def allocate_room(self, exam_id, room_id, strategy=None):
        """Seat eligible students in one room, replacing that room's seats for the exam.

        Students already seated in another room for the same exam are left out.
        """
        self._require_exam(exam_id)
        room = self._require_room(room_id)
        validate_dimensions(room)
        order = self._strategy(strategy)

        with self.locks.hold(exam_id, self.settings.lock_timeout):
            eligible = filter_eligible(self.gateway.list_students(role=ELIGIBLE_ROLE))
            if not eligible:
                raise PreconditionFailedError("No eligible students found", {"exam_id": exam_id})

            elsewhere = {a.student_id for a in self.gateway.list_assignments(exam_id)
                         if a.room_id != room.id}
            candidates = [s for s in eligible if s.id not in elsewhere]
            if not candidates:
                raise PreconditionFailedError(
                    "All eligible students are already seated in other rooms",
                    {"exam_id": exam_id, "seated_elsewhere": len(elsewhere)},
                )

            result = allocate_rooms(candidates, [room], exam_id, order)
            result.stats.seated_elsewhere = len(eligible) - len(candidates)
            self._replace(exam_id, result, room_id=room.id)

        self._report(exam_id, result, 1)
        return result

    def allocate_exam(self, exam_id, room_ids=None, strategy=None):
        """Seat eligible students across rooms in the given order, replacing all seats of the exam."""
        self._require_exam(exam_id)
        if room_ids is None:
            rooms = self.gateway.list_rooms()
        else:
            if len(set(room_ids)) != len(room_ids):
                raise ValidationError("Room list contains duplicates", {"room_ids": list(room_ids)})
            rooms = [self._require_room(rid) for rid in room_ids]

        if not rooms:
            raise PreconditionFailedError("No rooms available for allocation", {"exam_id": exam_id})
        for room in rooms:
            validate_dimensions(room)
        order = self._strategy(strategy)

        with self.locks.hold(exam_id, self.settings.lock_timeout):
            eligible = filter_eligible(self.gateway.list_students(role=ELIGIBLE_ROLE))
            if not eligible:
                raise PreconditionFailedError("No eligible students found", {"exam_id": exam_id})

            result = allocate_rooms(eligible, rooms, exam_id, order)
            self._replace(exam_id, result)

        self._report(exam_id, result, len(rooms))
        return result

    def _report(self, exam_id, result, room_count):
        stats = result.stats
        logger.info("Exam %s: %d eligible, %d seated across %d of %d rooms",
                    exam_id, stats.total, stats.assigned, stats.rooms_used, room_count)
        if stats.unseated:
            logger.warning("Exam %s: %d students could not be seated, not enough seats",
                           exam_id, stats.unseated)

    def get_grid(self, exam_id, room_id):
        self._require_exam(exam_id)
        room = self._require_room(room_id)
        assignments = self.gateway.list_assignments(exam_id, room.id)
        students = self.gateway.get_students(a.student_id for a in assignments)

        return {
            "room": {
                "id": room.id,
                "room_number": room.room_number,
                "rows": room.rows,
                "columns": room.columns,
                "capacity": room.capacity,
                "building": room.building,
            },
            "grid": project_grid(room, assignments, students),
            "total_seated": len(assignments),
        }

    def lookup_seat(self, stu_id, exam_id):
        self._require_exam(exam_id)
        student = self.gateway.get_student_by_roll(stu_id)
        if student is None:
            raise NotFoundError("Student not found", {"stu_id": stu_id})

        seat = next((a for a in self.gateway.list_assignments(exam_id)
                     if a.student_id == student.id), None)
        if seat is None:
            raise NotFoundError("Seat not allocated yet", {"stu_id": stu_id, "exam_id": exam_id})

        room = self._require_room(seat.room_id)
        return {
            "stu_id": student.stu_id,
            "stu_name": student.name,
            "exam_id": exam_id,
            "room_number": room.room_number,
            "building": room.building,
            "row": seat.row,
            "column": seat.column,
            "seat_number": seat_number(room, seat.row, seat.column),
        }

    def capacity_check(self, room_ids=None):
        rooms = self.gateway.list_rooms() if room_ids is None else [self._require_room(r) for r in room_ids]
        students = self.gateway.list_students(role=ELIGIBLE_ROLE)
        eligible = filter_eligible(students)
        total_seats = sum(room.seats for room in rooms)

        return {
            "rooms": len(rooms),
            "total_students": len(students),
            "eligible_students": len(eligible),
            "detained_students": len(students) - len(eligible),
            "total_seats": total_seats,
            "shortage_students": max(0, len(eligible) - total_seats),
            "spare_seats": max(0, total_seats - len(eligible)),
        }

    def room_plan(self, exam_id, room_id):
        """Seated students of one room as export rows, in seat order."""
        self._require_exam(exam_id)
        room = self._require_room(room_id)
        assignments = self.gateway.list_assignments(exam_id, room.id)
        students = self.gateway.get_students(a.student_id for a in assignments)

        rows = allocation_rows(room, assignments, students)
        if not rows:
            raise NotFoundError("No allocation found. Run /seatings/allocate first.",
                                {"exam_id": exam_id, "room_id": room_id})
        return room, rows
