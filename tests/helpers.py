from keymatrix.model.geometry_primitives import Point
from keymatrix.model.key import Key
from keymatrix.model.store import MatrixAssignmentStore


def make_grid(n_rows: int, n_cols: int, pitch: float = 1.0) -> list[Key]:
    """1u keys in row-major order; key (r, c) gets id r * n_cols + c."""
    return [Key(x=c * pitch, y=r * pitch) for r in range(n_rows) for c in range(n_cols)]


def center_of(row: int, col: int, pitch: float = 1.0) -> Point:
    return Point(col * pitch + 0.5, row * pitch + 0.5)


def matrix_labels(store: MatrixAssignmentStore) -> list[str]:
    return [k.labels[0] for k in store.keys]
