# solver/planner.py
from dataclasses import dataclass
from typing import List, Optional, Tuple

from models import Region, ShapeVariant
from solver.variants import VariantTable

REASON_AREA = "area"
REASON_EXTENT = "extent"


@dataclass(frozen=True)
class PlacementTask:
    shape_id: int
    instance: int
    variants: Tuple[ShapeVariant, ...]

    @property
    def area(self) -> int:
        return self.variants[0].area


def demanded_area(region: Region, variant_table: VariantTable) -> int:
    return sum(variant_table[sid][0].area * n for sid, n in region.demand.items() if n > 0)


def plan(region: Region, variant_table: VariantTable) -> Tuple[Optional[List[PlacementTask]], Optional[str]]:
    """
    Expand the region's demand into placement tasks, most-constrained first.

    Returns ``(tasks, None)`` or ``(None, reason)`` when a pre-check already
    proves the region infeasible (``"area"``: demanded cells exceed W×H;
    ``"extent"``: some shape has no orientation that fits the rectangle).
    The region's demand mapping is only read.
    """
    if demanded_area(region, variant_table) > region.width * region.height:
        return None, REASON_AREA

    tasks: List[PlacementTask] = []
    for sid, n in region.demand.items():
        if n <= 0:
            continue
        variants = variant_table[sid]
        if not any(v.width <= region.width and v.height <= region.height for v in variants):
            return None, REASON_EXTENT
        tasks.extend(PlacementTask(sid, k, variants) for k in range(n))

    tasks.sort(key=lambda t: (len(t.variants), t.shape_id, t.instance))
    return tasks, None


__all__ = ["PlacementTask", "plan", "demanded_area", "REASON_AREA", "REASON_EXTENT"]
