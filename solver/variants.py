# solver/variants.py
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Sequence, Set, Tuple

from models import Cell, Shape, ShapeVariant

VariantTable = Mapping[int, Tuple[ShapeVariant, ...]]

# ---------------- transforms ----------------

def _rotate(cells: Iterable[Cell]) -> Tuple[Cell, ...]:
    return tuple((y, -x) for x, y in cells)


def _reflect(cells: Iterable[Cell]) -> Tuple[Cell, ...]:
    return tuple((-x, y) for x, y in cells)


def normalize(cells: Iterable[Cell]) -> Tuple[Cell, ...]:
    """Translate so min x = min y = 0 and return the cells sorted."""
    pts = list(cells)
    min_x = min(x for x, _ in pts)
    min_y = min(y for _, y in pts)
    return tuple(sorted((x - min_x, y - min_y) for x, y in pts))


# ---------------- public ----------------

def canonicalize(cells: Sequence[Cell]) -> Tuple[ShapeVariant, ...]:
    """
    Return the distinct rotations/reflections of ``cells``.

    Eight compositions (0-1 reflections × 0-3 quarter turns) are generated;
    variants with identical normalised cell lists collapse to one entry.
    The result is sorted by cell list so search order is deterministic.
    """
    seen: Set[Tuple[Cell, ...]] = set()
    base = tuple(cells)
    for pts in (base, _reflect(base)):
        for _ in range(4):
            seen.add(normalize(pts))
            pts = _rotate(pts)
    return tuple(ShapeVariant(c) for c in sorted(seen))


def build_variant_table(shapes: Iterable[Shape]) -> VariantTable:
    table: Dict[int, Tuple[ShapeVariant, ...]] = {}
    for shape in shapes:
        table[shape.id] = canonicalize(shape.cells)
    return MappingProxyType(table)


__all__ = ["VariantTable", "canonicalize", "normalize", "build_variant_table"]
