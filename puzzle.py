# puzzle.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models import Region, Shape

_SHAPE_HEADER_RE = re.compile(r"^(?P<id>\d+)\s*:$")
_REGION_RE = re.compile(
    r"^(?P<w>-?\d+)\s*[x×]\s*(?P<h>-?\d+)\s*:(?P<counts>.*)$",
    re.IGNORECASE,
)
_ROW_RE = re.compile(r"^[#.]+$")

SOLID = "#"


class PuzzleFormatError(ValueError):
    def __init__(self, line_no: int, message: str):
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no
        self.message = message


@dataclass(frozen=True)
class Puzzle:
    shapes: Tuple[Shape, ...]
    regions: Tuple[Region, ...]

    def shape_ids(self) -> List[int]:
        return [s.id for s in self.shapes]


def _finish_shape(shape_id: int, rows: List[str], header_line: int) -> Shape:
    cells = [
        (x, y)
        for y, row in enumerate(rows)
        for x, ch in enumerate(row)
        if ch == SOLID
    ]
    if not cells:
        raise PuzzleFormatError(header_line, f"shape {shape_id} has no solid cells")
    return Shape(shape_id, tuple(cells))


def _parse_counts(raw: str, line_no: int) -> List[int]:
    counts: List[int] = []
    for tok in raw.split():
        try:
            n = int(tok)
        except ValueError:
            raise PuzzleFormatError(line_no, f"count {tok!r} is not an integer") from None
        if n < 0:
            raise PuzzleFormatError(line_no, f"negative count {n}")
        counts.append(n)
    return counts


def parse_puzzle(text: str) -> Puzzle:
    """
    Parse the puzzle text into shapes and regions.

    Shape blocks come first (``N:`` then rows of ``#``/``.``), region lines
    (``WxH: c0 c1 ...``) after.  Counts are positional by shape id; missing
    trailing counts are zero.
    """
    shapes: Dict[int, Shape] = {}
    regions: List[Region] = []

    current_id: Optional[int] = None
    current_rows: List[str] = []
    header_line = 0

    def _close_block() -> None:
        nonlocal current_id, current_rows
        if current_id is None:
            return
        shapes[current_id] = _finish_shape(current_id, current_rows, header_line)
        current_id = None
        current_rows = []

    for line_no, raw_line in enumerate((text or "").splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            _close_block()
            continue

        m = _REGION_RE.match(line)
        if m:
            _close_block()
            w, h = int(m.group("w")), int(m.group("h"))
            if w <= 0 or h <= 0:
                raise PuzzleFormatError(line_no, f"region {w}x{h} must have positive dimensions")
            counts = _parse_counts(m.group("counts"), line_no)
            demand: Dict[int, int] = {}
            for shape_id, n in enumerate(counts):
                if n == 0:
                    continue
                if shape_id not in shapes:
                    raise PuzzleFormatError(line_no, f"count given for unknown shape {shape_id}")
                demand[shape_id] = n
            regions.append(Region(len(regions), w, h, demand))
            continue

        m = _SHAPE_HEADER_RE.match(line)
        if m:
            _close_block()
            if regions:
                raise PuzzleFormatError(line_no, "shape defined after the first region")
            current_id = int(m.group("id"))
            if current_id in shapes:
                raise PuzzleFormatError(line_no, f"duplicate shape {current_id}")
            header_line = line_no
            continue

        if _ROW_RE.match(line):
            if current_id is None:
                raise PuzzleFormatError(line_no, "shape row outside a shape block")
            current_rows.append(line)
            continue

        raise PuzzleFormatError(line_no, f"unrecognised line {line!r}")

    _close_block()

    return Puzzle(
        shapes=tuple(shapes[k] for k in sorted(shapes)),
        regions=tuple(regions),
    )


def format_demand(region: Region) -> str:
    if not region.demand:
        return "none"
    return ", ".join(f"{sid}×{n}" for sid, n in sorted(region.demand.items()))


__all__ = ["Puzzle", "PuzzleFormatError", "parse_puzzle", "format_demand"]
