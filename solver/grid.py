# solver/grid.py

from models import ShapeVariant

EMPTY = 0
FULL = 1


class Grid:
    """W×H occupancy surface with reversible placement.

    ``fits``/``place``/``unplace`` are the innermost loop of the search: they
    walk the variant's cell tuple and poke the backing bytearray in place.
    """

    __slots__ = ("width", "height", "cells", "occupied")

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.cells = bytearray(self.width * self.height)
        self.occupied = 0

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def free(self) -> int:
        return self.width * self.height - self.occupied

    def is_occupied(self, x: int, y: int) -> bool:
        return self.cells[y * self.width + x] != EMPTY

    def fits(self, variant: ShapeVariant, x: int, y: int) -> bool:
        W = self.width
        H = self.height
        cells = self.cells
        for dx, dy in variant.cells:
            cx = x + dx
            cy = y + dy
            if cx < 0 or cy < 0 or cx >= W or cy >= H:
                return False
            if cells[cy * W + cx]:
                return False
        return True

    def place(self, variant: ShapeVariant, x: int, y: int) -> None:
        W = self.width
        cells = self.cells
        for dx, dy in variant.cells:
            cells[(y + dy) * W + x + dx] = FULL
        self.occupied += len(variant.cells)

    def unplace(self, variant: ShapeVariant, x: int, y: int) -> None:
        W = self.width
        cells = self.cells
        for dx, dy in variant.cells:
            cells[(y + dy) * W + x + dx] = EMPTY
        self.occupied -= len(variant.cells)

    def snapshot(self) -> bytes:
        return bytes(self.cells)

    def render(self) -> str:
        rows = [["#" if self.is_occupied(x, y) else "." for x in range(self.width)] for y in range(self.height)]
        return "\n".join("".join(r) for r in rows)

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, occupied={self.occupied})"


__all__ = ["Grid"]
