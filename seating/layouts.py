from seating.errors import ValidationError
from seating.models import GridCell

ADJACENCY_RULES = ("row", "grid")


def validate_dimensions(room):
    if not isinstance(room.rows, int) or not isinstance(room.columns, int) \
            or room.rows < 1 or room.columns < 1:
        raise ValidationError(
            f"Room {room.room_number} has invalid dimensions",
            {"room_id": room.id, "rows": room.rows, "columns": room.columns},
        )


def generate_grid(rows, columns):
    return [[GridCell() for _ in range(columns)] for _ in range(rows)]


def seat_number(room, row, column):
    """1-based seat label, counted row by row."""
    return row * room.columns + column + 1


def neighbours(row, column, adjacency="row"):
    """Cells already filled before (row, column) in row-major order that count as adjacent.

    ``row`` only looks at the seat to the left; ``grid`` also looks at the
    seat in front (the same column of the previous row).
    """
    if adjacency not in ADJACENCY_RULES:
        raise ValidationError(f"Unknown adjacency rule: {adjacency}",
                              {"allowed": list(ADJACENCY_RULES)})

    cells = []
    if column > 0:
        cells.append((row, column - 1))
    if adjacency == "grid" and row > 0:
        cells.append((row - 1, column))
    return cells
