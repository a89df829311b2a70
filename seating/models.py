from datetime import datetime, timezone


class Student:
    def __init__(self, id, stu_id, name, role="student", department=None, year=None,
                 academic_status="active", credits=0, backlogs=0):
        self.id = id
        self.stu_id = stu_id
        self.name = name
        self.role = role
        self.department = department
        self.year = year
        self.academic_status = academic_status
        self.credits = credits
        self.backlogs = backlogs

    def __repr__(self):
        return f"Student(id={self.id!r}, stu_id={self.stu_id!r}, department={self.department!r}, year={self.year!r})"


class Room:
    def __init__(self, id, room_number, rows, columns, capacity=None, building=None):
        self.id = id
        self.room_number = room_number
        self.rows = rows
        self.columns = columns
        # not checked against rows * columns
        self.capacity = rows * columns if capacity is None else capacity
        self.building = building

    @property
    def seats(self):
        return self.rows * self.columns

    def __repr__(self):
        return f"Room(id={self.id!r}, room_number={self.room_number!r}, rows={self.rows}, columns={self.columns})"


class Exam:
    def __init__(self, id, subject, exam_date=None, start_time=None, end_time=None,
                 department=None, semester=None):
        self.id = id
        self.subject = subject
        self.exam_date = exam_date
        self.start_time = start_time
        self.end_time = end_time
        self.department = department
        self.semester = semester


class SeatAssignment:
    def __init__(self, exam_id, room_id, student_id, row, column, id=None, created_at=None):
        self.id = id
        self.exam_id = exam_id
        self.room_id = room_id
        self.student_id = student_id
        self.row = row
        self.column = column
        self.created_at = created_at or datetime.now(timezone.utc)

    def to_dict(self):
        return {
            "id": self.id,
            "exam_id": self.exam_id,
            "room_id": self.room_id,
            "student_id": self.student_id,
            "row": self.row,
            "column": self.column,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return (f"SeatAssignment(exam_id={self.exam_id!r}, room_id={self.room_id!r}, "
                f"student_id={self.student_id!r}, row={self.row}, column={self.column})")


class GridCell:
    def __init__(self, student_id=None, name=None, department=None, role=None):
        self.student_id = student_id
        self.name = name
        self.department = department
        self.role = role

    @property
    def empty(self):
        return self.student_id is None

    def to_dict(self):
        if self.empty:
            return None
        return {
            "student_id": self.student_id,
            "name": self.name,
            "department": self.department,
            "role": self.role,
        }


class AllocationStats:
    def __init__(self, total=0, assigned=0, rooms_used=0, seated_elsewhere=0):
        self.total = total
        self.assigned = assigned
        self.rooms_used = rooms_used
        self.seated_elsewhere = seated_elsewhere

    @property
    def unseated(self):
        return self.total - self.assigned

    def to_dict(self):
        return {
            "total": self.total,
            "assigned": self.assigned,
            "rooms_used": self.rooms_used,
            "unseated": self.unseated,
            "seated_elsewhere": self.seated_elsewhere,
        }


class AllocationResult:
    def __init__(self, assignments, stats, grids, unseated=None):
        self.assignments = assignments
        self.stats = stats
        # room id -> grid, only for rooms that were filled
        self.grids = grids
        self.unseated = unseated or []
