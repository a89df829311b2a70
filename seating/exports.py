"""Excel and PDF exports of one room's seating plan."""

import re
from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from seating.layouts import seat_number


def allocation_rows(room, assignments, students):
    data = []
    for seat in sorted(assignments, key=lambda a: (a.row, a.column)):
        student = students.get(seat.student_id)
        if student is None:
            continue
        data.append({
            "stu_id": student.stu_id,
            "stu_name": student.name,
            "dept": student.department,
            "year": student.year,
            "room_number": room.room_number,
            "seat": seat_number(room, seat.row, seat.column),
            "row": seat.row + 1,
            "column": seat.column + 1,
        })
    return data


def _export_path(export_dir, exam_id, room, suffix):
    directory = Path(export_dir)
    directory.mkdir(parents=True, exist_ok=True)
    label = re.sub(r"[^A-Za-z0-9_-]+", "_", str(room.room_number)).strip("_") or str(room.id)
    return directory / f"allocation_{exam_id}_{label}.{suffix}"


def export_excel(rows, export_dir, exam_id, room):
    file_path = _export_path(export_dir, exam_id, room, "xlsx")
    pd.DataFrame(rows).to_excel(file_path, index=False)
    return file_path


def export_pdf(rows, export_dir, exam_id, room, title=None):
    file_path = _export_path(export_dir, exam_id, room, "pdf")

    c = canvas.Canvas(str(file_path), pagesize=A4)
    width, height = A4

    y = height - 50
    c.setFont("Helvetica-Bold", 14)
    c.drawString(50, y, title or f"Seating Arrangement - Room {room.room_number}")
    y -= 30

    c.setFont("Helvetica", 10)
    c.drawString(50, y, "Stu ID")
    c.drawString(130, y, "Name")
    c.drawString(300, y, "Dept")
    c.drawString(380, y, "Seat")
    c.drawString(430, y, "Row")
    c.drawString(480, y, "Column")
    y -= 15

    c.line(50, y, 550, y)
    y -= 15

    for row in rows:
        if y < 60:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = height - 50

        c.drawString(50, y, str(row["stu_id"]))
        c.drawString(130, y, row["stu_name"][:26])
        c.drawString(300, y, str(row["dept"] or "")[:12])
        c.drawString(380, y, str(row["seat"]))
        c.drawString(430, y, str(row["row"]))
        c.drawString(480, y, str(row["column"]))
        y -= 15

    c.save()
    return file_path
