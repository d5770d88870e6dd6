import random
import string
from typing import Dict, List, Sequence, Tuple

from models import Placement

_LABELS = string.ascii_uppercase + string.ascii_lowercase + string.digits

CELL_PX = 24


def _color(key: str) -> str:
    rng = random.Random(key)
    r = rng.randint(40, 200)
    g = rng.randint(40, 200)
    b = rng.randint(40, 200)
    return f"rgb({r},{g},{b})"


def render_ascii(placements: Sequence[Placement], W: int, H: int) -> str:
    """One letter per placement, ``.`` for empty cells."""
    rows = [["."] * W for _ in range(H)]
    for i, p in enumerate(placements):
        label = _LABELS[i % len(_LABELS)]
        for x, y in p.cells():
            rows[y][x] = label
    return "\n".join("".join(r) for r in rows)


def render_result(placements: Sequence[Placement], W: int, H: int) -> Tuple[str, str]:
    palette: Dict[str, str] = {}
    for p in placements:
        key = f"shape {p.shape_id}"
        palette.setdefault(key, _color(key))

    svg_w = W * CELL_PX + 2
    svg_h = H * CELL_PX + 2

    blocks: List[str] = []
    for i, p in enumerate(placements):
        fill = palette[f"shape {p.shape_id}"]
        for x, y in p.cells():
            blocks.append(
                f'<rect x="{x * CELL_PX + 1}" y="{y * CELL_PX + 1}" width="{CELL_PX}" height="{CELL_PX}" '
                f'fill="{fill}" stroke="black" stroke-width="1"/>'
            )
        ax, ay = p.cells()[0]
        blocks.append(
            f'<text x="{ax * CELL_PX + 5}" y="{ay * CELL_PX + 17}" font-size="12" fill="black">{i}</text>'
        )
    frame = f'<rect x="1" y="1" width="{svg_w-2}" height="{svg_h-2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{frame}{"".join(blocks)}</svg>'
    )

    legend = "".join(f"<li><span class='swatch' style='background:{c}'></span>{n}</li>" for n, c in palette.items())
    return svg, legend
