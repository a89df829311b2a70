from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from seating.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class StudentDB(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    stu_id = Column(String, unique=True, nullable=False)
    stu_name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="student")
    dept = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    academic_status = Column(String, nullable=False, default="active")
    credits = Column(Integer, nullable=False, default=0)
    backlogs = Column(Integer, nullable=False, default=0)


class RoomDB(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String, unique=True, index=True, nullable=False)
    rows = Column(Integer, nullable=False)
    columns = Column(Integer, nullable=False)
    capacity = Column(Integer, nullable=False)
    building = Column(String, nullable=True)


class ExamDB(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    subject = Column(String, nullable=False)
    exam_date = Column(String, nullable=True)
    start_time = Column(String, nullable=True)
    end_time = Column(String, nullable=True)
    department = Column(String, nullable=True)
    semester = Column(String, nullable=True)


class SeatAssignmentDB(Base):
    __tablename__ = "seat_assignments"
    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_seat_exam_student"),
        UniqueConstraint("exam_id", "room_id", "row_no", "col_no", name="uq_seat_exam_cell"),
    )

    id = Column(Integer, primary_key=True, index=True)

    exam_id = Column(Integer, ForeignKey("exams.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    row_no = Column(Integer, nullable=False)
    col_no = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    exam = relationship("ExamDB")
    room = relationship("RoomDB")
    student = relationship("StudentDB")
