from dataclasses import dataclass, field
from typing import Dict, Tuple

Cell = Tuple[int, int]

@dataclass(frozen=True)
class Shape:
    id: int
    cells: Tuple[Cell, ...]

    @property
    def area(self) -> int:
        return len(self.cells)

@dataclass(frozen=True)
class ShapeVariant:
    """One rotation/reflection of a shape, normalised so min x = min y = 0."""

    cells: Tuple[Cell, ...]
    width: int = field(init=False)
    height: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "width", max(x for x, _ in self.cells) + 1)
        object.__setattr__(self, "height", max(y for _, y in self.cells) + 1)

    @property
    def area(self) -> int:
        return len(self.cells)

@dataclass(frozen=True)
class Region:
    id: int
    width: int
    height: int
    demand: Dict[int, int]

    @property
    def area(self) -> int:
        return self.width * self.height

    def instance_count(self) -> int:
        return sum(self.demand.values())

@dataclass(frozen=True)
class Placement:
    shape_id: int
    variant: ShapeVariant
    x: int
    y: int

    def cells(self) -> Tuple[Cell, ...]:
        return tuple((self.x + dx, self.y + dy) for dx, dy in self.variant.cells)
