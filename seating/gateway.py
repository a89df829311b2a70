"""Persistence gateway used by the allocation service.

The service only talks to ``PersistenceGateway``; ``SqlAlchemyGateway`` is the
implementation backed by the tables in ``seating.db_models``.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seating.db_models import ExamDB, RoomDB, SeatAssignmentDB, StudentDB
from seating.errors import PersistenceError
from seating.models import Exam, Room, SeatAssignment, Student

logger = logging.getLogger(__name__)


class PersistenceGateway(ABC):

    @abstractmethod
    def list_rooms(self) -> list[Room]: ...

    @abstractmethod
    def get_room(self, room_id) -> Room | None: ...

    @abstractmethod
    def get_exam(self, exam_id) -> Exam | None: ...

    @abstractmethod
    def list_students(self, role: str | None = None) -> list[Student]: ...

    @abstractmethod
    def get_students(self, ids) -> dict: ...

    @abstractmethod
    def get_student_by_roll(self, stu_id) -> Student | None: ...

    @abstractmethod
    def list_assignments(self, exam_id, room_id=None) -> list[SeatAssignment]: ...

    @abstractmethod
    def delete_assignments(self, exam_id, room_id=None) -> int: ...

    @abstractmethod
    def insert_assignments(self, records: list[SeatAssignment]) -> list[SeatAssignment]: ...

    @abstractmethod
    def transaction(self):
        """Context manager: everything inside commits together or not at all."""


def to_student(row):
    return Student(
        id=row.id,
        stu_id=row.stu_id,
        name=row.stu_name,
        role=row.role,
        department=row.dept,
        year=row.year,
        academic_status=row.academic_status,
        credits=row.credits,
        backlogs=row.backlogs,
    )


def to_room(row):
    return Room(
        id=row.id,
        room_number=row.room_number,
        rows=row.rows,
        columns=row.columns,
        capacity=row.capacity,
        building=row.building,
    )


def to_exam(row):
    return Exam(
        id=row.id,
        subject=row.subject,
        exam_date=row.exam_date,
        start_time=row.start_time,
        end_time=row.end_time,
        department=row.department,
        semester=row.semester,
    )


def to_assignment(row):
    return SeatAssignment(
        id=row.id,
        exam_id=row.exam_id,
        room_id=row.room_id,
        student_id=row.student_id,
        row=row.row_no,
        column=row.col_no,
        created_at=row.created_at,
    )


class SqlAlchemyGateway(PersistenceGateway):
    def __init__(self, db: Session):
        self.db = db

    def list_rooms(self):
        return [to_room(r) for r in self.db.query(RoomDB).order_by(RoomDB.id).all()]

    def get_room(self, room_id):
        row = self.db.get(RoomDB, room_id)
        return to_room(row) if row else None

    def get_exam(self, exam_id):
        row = self.db.get(ExamDB, exam_id)
        return to_exam(row) if row else None

    def list_students(self, role=None):
        query = self.db.query(StudentDB)
        if role is not None:
            query = query.filter(StudentDB.role == role)
        return [to_student(s) for s in query.order_by(StudentDB.id).all()]

    def get_students(self, ids):
        ids = set(ids)
        if not ids:
            return {}
        rows = self.db.query(StudentDB).filter(StudentDB.id.in_(ids)).all()
        return {row.id: to_student(row) for row in rows}

    def get_student_by_roll(self, stu_id):
        row = self.db.query(StudentDB).filter(StudentDB.stu_id == stu_id).first()
        return to_student(row) if row else None

    def _scope(self, exam_id, room_id=None):
        query = self.db.query(SeatAssignmentDB).filter(SeatAssignmentDB.exam_id == exam_id)
        if room_id is not None:
            query = query.filter(SeatAssignmentDB.room_id == room_id)
        return query

    def list_assignments(self, exam_id, room_id=None):
        rows = self._scope(exam_id, room_id).order_by(
            SeatAssignmentDB.room_id, SeatAssignmentDB.row_no, SeatAssignmentDB.col_no
        ).all()
        return [to_assignment(r) for r in rows]

    def delete_assignments(self, exam_id, room_id=None):
        deleted = self._scope(exam_id, room_id).delete(synchronize_session=False)
        self.db.flush()
        return deleted

    def insert_assignments(self, records):
        rows = [
            SeatAssignmentDB(
                exam_id=r.exam_id,
                room_id=r.room_id,
                student_id=r.student_id,
                row_no=r.row,
                col_no=r.column,
                created_at=r.created_at,
            )
            for r in records
        ]
        self.db.add_all(rows)
        self.db.flush()
        return [to_assignment(r) for r in rows]

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Seat assignment write rolled back: %s", e)
            raise PersistenceError("Seat assignments could not be saved",
                                   {"reason": str(getattr(e, "orig", e))}) from e
        except Exception:
            self.db.rollback()
            raise
