import argparse
import logging
import re
import sys

import pandas as pd

from seating.allocator import allocate_rooms, get_strategy
from seating.config import get_settings
from seating.errors import SeatingError, ValidationError
from seating.layouts import seat_number
from seating.logging_setup import configure_logging
from seating.models import Room
from seating.student_import import student_import_excel

logger = logging.getLogger(__name__)

ROOM_SPEC = re.compile(r"^(?P<number>[^:]+):(?P<rows>\d+)x(?P<columns>\d+)$")


def parse_room(spec, room_id):
    """``B201:6x5`` -> Room B201 with 6 rows and 5 columns."""
    match = ROOM_SPEC.match(spec.strip())
    if not match:
        raise ValidationError(f"Bad room spec {spec!r}, expected NUMBER:ROWSxCOLUMNS")
    return Room(
        id=room_id,
        room_number=match["number"],
        rows=int(match["rows"]),
        columns=int(match["columns"]),
    )


def build_parser():
    settings = get_settings()
    p = argparse.ArgumentParser(description="Exam seat allocation dry run (no database)")
    p.add_argument("--roster", default=settings.roster_path, help="Excel roster with stu_id, stu_name, dept, year, ...")
    p.add_argument("--room", action="append", required=True, dest="rooms",
                   help="Room as NUMBER:ROWSxCOLUMNS, repeat in fill order")
    p.add_argument("--strategy", choices=["block", "checkerboard"], default=settings.strategy)
    p.add_argument("--adjacency", choices=["row", "grid"], default=settings.adjacency)
    p.add_argument("--exam", default="DRY-RUN", help="Exam label stored on the assignments")
    p.add_argument("--output", help="Write the seating plan to this .xlsx file")
    p.add_argument("--log-level", default=settings.log_level)
    return p


def run(args):
    students = student_import_excel(args.roster)
    for i, s in enumerate(students, start=1):
        s.id = i
    by_id = {s.id: s for s in students}

    rooms = [parse_room(spec, i) for i, spec in enumerate(args.rooms, start=1)]
    rooms_by_id = {r.id: r for r in rooms}

    result = allocate_rooms(students, rooms, args.exam, get_strategy(args.strategy, args.adjacency))

    print("\n--- Seat Allocation ---")
    rows = []
    for a in result.assignments:
        s = by_id[a.student_id]
        room = rooms_by_id[a.room_id]
        print(f"{s.stu_id} {s.name} -> Room {room.room_number} | Row {a.row + 1} | Column {a.column + 1}")
        rows.append({
            "stu_id": s.stu_id,
            "stu_name": s.name,
            "dept": s.department,
            "year": s.year,
            "room_number": room.room_number,
            "seat": seat_number(room, a.row, a.column),
            "row": a.row + 1,
            "column": a.column + 1,
        })

    stats = result.stats
    print(f"\nEligible: {stats.total}  Seated: {stats.assigned}  Rooms used: {stats.rooms_used}")
    if stats.unseated:
        print(f"Not seated ({stats.unseated}): " + ", ".join(s.stu_id for s in result.unseated))

    if args.output:
        pd.DataFrame(rows).to_excel(args.output, index=False)
        print(f"Seating plan written to {args.output}")

    return 0 if not stats.unseated else 2


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return run(args)
    except SeatingError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
