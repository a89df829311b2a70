import logging
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from seating.config import get_settings
from seating.database import Base, engine, get_db
from seating.db_models import ExamDB, RoomDB, StudentDB
from seating.errors import SeatingError, ValidationError
from seating.exports import export_excel, export_pdf
from seating.gateway import SqlAlchemyGateway
from seating.layouts import generate_grid
from seating.logging_setup import configure_logging
from seating.projector import grid_to_json
from seating.service import SeatingService
from seating.student_import import student_import_excel

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    configure_logging(get_settings().log_level)
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="Seat Allocator API", lifespan=lifespan)


@app.exception_handler(SeatingError)
async def seating_error_handler(request: Request, exc: SeatingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code,
                        content={"error": exc.message, "details": exc.details})


def get_service(db: Session = Depends(get_db)):
    return SeatingService(SqlAlchemyGateway(db))


def room_json(r):
    return {
        "id": r.id,
        "room_number": r.room_number,
        "rows": r.rows,
        "columns": r.columns,
        "capacity": r.capacity,
        "building": r.building,
    }


def exam_json(e):
    return {
        "id": e.id,
        "subject": e.subject,
        "exam_date": e.exam_date,
        "start_time": e.start_time,
        "end_time": e.end_time,
        "department": e.department,
        "semester": e.semester,
    }


@app.get("/")
def root():
    return {"message": "Seat Allocator API is running !"}


@app.get("/students")
def get_students(db: Session = Depends(get_db)):
    students = db.query(StudentDB).order_by(StudentDB.id).all()
    return [
        {
            "id": s.id,
            "stu_id": s.stu_id,
            "stu_name": s.stu_name,
            "role": s.role,
            "dept": s.dept,
            "year": s.year,
            "academic_status": s.academic_status,
        }
        for s in students
    ]


@app.post("/students/import")
def import_students_from_excel(file_path: str | None = Body(None, embed=True),
                               db: Session = Depends(get_db)):
    file_path = file_path or get_settings().roster_path

    try:
        students = student_import_excel(file_path)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    inserted = 0
    skipped = 0
    seen = {s for (s,) in db.query(StudentDB.stu_id).all()}

    for s in students:
        if s.stu_id in seen:
            skipped += 1
            continue

        db.add(StudentDB(
            stu_id=s.stu_id,
            stu_name=s.name,
            role=s.role,
            dept=s.department,
            year=s.year,
            academic_status=s.academic_status,
            credits=s.credits,
            backlogs=s.backlogs,
        ))
        seen.add(s.stu_id)
        inserted += 1

    db.commit()
    logger.info("Roster import from %s: %d inserted, %d skipped", file_path, inserted, skipped)

    return {
        "message": "Student import completed",
        "inserted": inserted,
        "skipped_duplicates": skipped,
    }


class RoomCreate(BaseModel):
    room_number: str
    rows: int = Field(ge=1)
    columns: int = Field(ge=1)
    capacity: int | None = Field(default=None, ge=0)
    building: str | None = None


@app.get("/rooms")
def get_rooms(db: Session = Depends(get_db)):
    return [room_json(r) for r in db.query(RoomDB).order_by(RoomDB.id).all()]


@app.post("/rooms")
def create_room(req: RoomCreate, db: Session = Depends(get_db)):
    existing = db.query(RoomDB).filter(RoomDB.room_number == req.room_number).first()
    if existing:
        return {"message": f"Room {req.room_number} already exists", "room": room_json(existing)}

    room = RoomDB(
        room_number=req.room_number,
        rows=req.rows,
        columns=req.columns,
        capacity=req.capacity if req.capacity is not None else req.rows * req.columns,
        building=req.building,
    )
    db.add(room)
    db.commit()
    db.refresh(room)

    return {"message": "Room created", "room": room_json(room)}


class ExamCreate(BaseModel):
    subject: str
    exam_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    department: str | None = None
    semester: str | None = None


@app.get("/exams")
def get_exams(db: Session = Depends(get_db)):
    return [exam_json(e) for e in db.query(ExamDB).order_by(ExamDB.id).all()]


@app.post("/exams", status_code=201)
def create_exam(req: ExamCreate, db: Session = Depends(get_db)):
    exam = ExamDB(**req.model_dump())
    db.add(exam)
    db.commit()
    db.refresh(exam)
    return exam_json(exam)


class AllocateRequest(BaseModel):
    exam_id: int
    room_id: int
    strategy: Literal["block", "checkerboard"] | None = None


class AllocateAllRequest(BaseModel):
    exam_id: int
    room_ids: list[int] | None = None
    strategy: Literal["block", "checkerboard"] | None = None


def _completed(stats):
    if stats.unseated:
        return f"Seating allocation completed, {stats.unseated} students could not be seated"
    return "Seating allocation completed"


@app.post("/seatings/allocate", status_code=201)
def allocate_room(req: AllocateRequest, service: SeatingService = Depends(get_service)):
    result = service.allocate_room(req.exam_id, req.room_id, req.strategy)
    room = service.gateway.get_room(req.room_id)
    grid = result.grids.get(room.id) or generate_grid(room.rows, room.columns)

    return {
        "message": _completed(result.stats),
        "count": len(result.assignments),
        "stats": result.stats.to_dict(),
        "grid": grid_to_json(grid),
        "seatings": [a.to_dict() for a in result.assignments],
    }


@app.post("/seatings/allocate-all", status_code=201)
def allocate_all_rooms(req: AllocateAllRequest, service: SeatingService = Depends(get_service)):
    result = service.allocate_exam(req.exam_id, req.room_ids, req.strategy)

    return {
        "message": _completed(result.stats),
        "stats": result.stats.to_dict(),
        "unseated": [s.stu_id for s in result.unseated],
        "assignments": [a.to_dict() for a in result.assignments],
    }


@app.get("/seatings/grid/{exam_id}/{room_id}")
def get_seating_grid(exam_id: int, room_id: int, service: SeatingService = Depends(get_service)):
    view = service.get_grid(exam_id, room_id)
    view["grid"] = grid_to_json(view["grid"])
    return view


@app.get("/capacity-check")
def capacity_check(room_ids: list[int] | None = Query(None),
                   service: SeatingService = Depends(get_service)):
    return service.capacity_check(room_ids)


@app.get("/public/seat-lookup")
def seat_lookup(stu_id: str, exam_id: int, service: SeatingService = Depends(get_service)):
    return service.lookup_seat(stu_id, exam_id)


@app.get("/export/allocation/excel")
def export_allocation_excel(exam_id: int, room_id: int, service: SeatingService = Depends(get_service)):
    room, rows = service.room_plan(exam_id, room_id)
    file_path = export_excel(rows, get_settings().export_dir, exam_id, room)

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


@app.get("/export/allocation/pdf")
def export_allocation_pdf(exam_id: int, room_id: int, service: SeatingService = Depends(get_service)):
    room, rows = service.room_plan(exam_id, room_id)
    file_path = export_pdf(rows, get_settings().export_dir, exam_id, room)

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/pdf"
    )
