"""Shared fixtures: an in-memory SQLite store, a gateway over it and an API client."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from seating.config import Settings
from seating.database import Base, get_db
from seating.db_models import ExamDB, RoomDB, StudentDB
from seating.gateway import SqlAlchemyGateway
from seating.main_api import app
from seating.models import Room, Student
from seating.service import ExamLocks, SeatingService


def make_student(i, dept="CS", year=3, status="active", role="student"):
    return Student(id=i, stu_id=f"S{i:03d}", name=f"Student {i}", role=role,
                   department=dept, year=year, academic_status=status)


def make_room(room_id, rows, columns, number=None):
    return Room(id=room_id, room_number=number or f"R{room_id}", rows=rows, columns=columns)


def add_students(db, count, dept="CS", year=3, status="active", role="student", start=None):
    start = start if start is not None else db.query(StudentDB).count() + 1
    rows = [
        StudentDB(stu_id=f"S{i:03d}", stu_name=f"Student {i}", role=role,
                  dept=dept, year=year, academic_status=status)
        for i in range(start, start + count)
    ]
    db.add_all(rows)
    db.commit()
    return rows


def add_room(db, number, rows, columns, building=None):
    room = RoomDB(room_number=number, rows=rows, columns=columns,
                  capacity=rows * columns, building=building)
    db.add(room)
    db.commit()
    return room


def add_exam(db, subject="Data Structures"):
    exam = ExamDB(subject=subject, exam_date="2026-11-02", start_time="09:00",
                  end_time="12:00", department="CS", semester="5")
    db.add(exam)
    db.commit()
    return exam


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway(db):
    return SqlAlchemyGateway(db)


@pytest.fixture
def locks():
    return ExamLocks()


@pytest.fixture
def service(gateway, locks):
    return SeatingService(gateway, settings=Settings(_env_file=None), locks=locks)


@pytest.fixture
def exam(db):
    return add_exam(db)


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
