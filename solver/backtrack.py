# solver/backtrack.py
"""
Depth-first placement search with in-place commit/rollback.

The search walks the planned tasks in order.  For task ``i`` it tries every
variant and, per variant, every anchor in row-major order; a fitting
placement is committed on the grid and the search descends to ``i + 1``.
When a level runs out of candidates the placement of the previous level is
rolled back and that level resumes from its next candidate.  Exhausting
level 0 means the region cannot be packed.

Levels are kept on an explicit cursor stack rather than the Python call
stack, so regions with many hundreds of instances do not hit the
interpreter's recursion limit.

Two pruning rules cut the tree without losing solutions:

#.  Identical-instance ordering.  Consecutive tasks of the same shape are
    interchangeable, so task ``i`` only considers placements strictly after
    the one task ``i - 1`` committed (ordered by variant index, then
    row-major anchor).
#.  Coverage pruning.  Once slack (free cells minus remaining demanded
    cells) is small, every free cell that some pending shape could still
    cover is marked.  A pending shape with no fitting placement, or fewer
    coverable cells than the remaining demand, ends the branch.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from config import CFG
from models import Placement, ShapeVariant
from solver.grid import Grid
from solver.planner import PlacementTask


@dataclass
class SearchStats:
    nodes: int = 0          # placements committed
    backtracks: int = 0     # placements rolled back
    pruned: int = 0         # branches cut by coverage pruning
    max_depth: int = 0

    def as_dict(self):
        return {
            "nodes": self.nodes,
            "backtracks": self.backtracks,
            "pruned": self.pruned,
            "max_depth": self.max_depth,
        }


def _anchor(variant: ShapeVariant, k: int, W: int) -> Tuple[int, int]:
    ay, ax = divmod(k, W - variant.width + 1)
    return ax, ay


def search(
    grid: Grid,
    tasks: Sequence[PlacementTask],
    *,
    stats: Optional[SearchStats] = None,
    solution: Optional[List[Placement]] = None,
    symmetry_break: Optional[bool] = None,
    prune_slack: Optional[int] = None,
) -> bool:
    """Return True iff every task can be placed on ``grid`` without overlap.

    On success the grid holds the packing and, when ``solution`` is given, it
    is filled with the committed placements in task order.  On failure the
    grid is back to the occupancy it had on entry.
    """
    if symmetry_break is None:
        symmetry_break = bool(CFG.SYMMETRY_BREAK)
    if prune_slack is None:
        prune_slack = int(CFG.PRUNE_SLACK)
    st = stats if stats is not None else SearchStats()

    n = len(tasks)
    W = grid.width
    H = grid.height

    # remaining[i]: cells still demanded by tasks i..n-1
    remaining = [0] * (n + 1)
    for i in range(n - 1, -1, -1):
        remaining[i] = remaining[i + 1] + tasks[i].area

    # pending[i]: distinct shapes among tasks i..n-1
    pending: List[Tuple[int, ...]] = [()] * (n + 1)
    variants_of: Dict[int, Tuple[ShapeVariant, ...]] = {}
    for i in range(n - 1, -1, -1):
        sid = tasks[i].shape_id
        variants_of[sid] = tasks[i].variants
        tail = pending[i + 1]
        pending[i] = tail if sid in tail else (sid,) + tail

    follows_twin = [
        bool(symmetry_break) and i > 0 and tasks[i].shape_id == tasks[i - 1].shape_id
        for i in range(n)
    ]

    # Bit (y * W + x) mirrors grid cell (x, y); only coverage pruning reads it.
    bases: Dict[Tuple[int, int], int] = {}
    for sid, variants in variants_of.items():
        for vi, v in enumerate(variants):
            bases[(sid, vi)] = sum(1 << (dy * W + dx) for dx, dy in v.cells)
    placement_masks: Dict[int, List[int]] = {}

    def _masks_for(sid: int) -> List[int]:
        masks = placement_masks.get(sid)
        if masks is None:
            masks = []
            for vi, v in enumerate(variants_of[sid]):
                base = bases[(sid, vi)]
                for ay in range(H - v.height + 1):
                    for ax in range(W - v.width + 1):
                        masks.append(base << (ay * W + ax))
            placement_masks[sid] = masks
        return masks

    def _coverage_prunes(i: int, occ: int) -> bool:
        need = remaining[i]
        if prune_slack < 0 or grid.free - need > prune_slack:
            return False
        covered = 0
        for sid in pending[i]:
            any_fit = False
            for m in _masks_for(sid):
                if not occ & m:
                    covered |= m
                    any_fit = True
            if not any_fit:
                return True
        return bin(covered).count("1") < need

    def _next_fit(variants: Tuple[ShapeVariant, ...], vi: int, k: int) -> Optional[Tuple[int, int]]:
        while vi < len(variants):
            v = variants[vi]
            span_w = W - v.width + 1
            span_h = H - v.height + 1
            if span_w > 0 and span_h > 0:
                total = span_w * span_h
                while k < total:
                    ay, ax = divmod(k, span_w)
                    if grid.fits(v, ax, ay):
                        return vi, k
                    k += 1
            vi += 1
            k = 0
        return None

    if n == 0:
        if solution is not None:
            solution.clear()
        return True

    occ = 0
    for idx, c in enumerate(grid.cells):
        if c:
            occ |= 1 << idx

    if _coverage_prunes(0, occ):
        st.pruned += 1
        return False

    chosen: List[Optional[Tuple[int, int]]] = [None] * n
    i = 0
    start: Optional[Tuple[int, int]] = (0, 0)

    while True:
        if i == n:
            if solution is not None:
                solution.clear()
                for t, (vi, k) in zip(tasks, chosen):
                    v = t.variants[vi]
                    ax, ay = _anchor(v, k, W)
                    solution.append(Placement(t.shape_id, v, ax, ay))
            return True

        task = tasks[i]
        hit = _next_fit(task.variants, *start) if start is not None else None

        if hit is not None:
            vi, k = hit
            v = task.variants[vi]
            ax, ay = _anchor(v, k, W)
            grid.place(v, ax, ay)
            occ |= bases[(task.shape_id, vi)] << (ay * W + ax)
            st.nodes += 1
            chosen[i] = hit
            i += 1
            if i > st.max_depth:
                st.max_depth = i
            if i < n:
                if _coverage_prunes(i, occ):
                    st.pruned += 1
                    start = None
                elif follows_twin[i]:
                    start = (vi, k + 1)
                else:
                    start = (0, 0)
            continue

        # level i exhausted: retreat
        if i == 0:
            return False
        i -= 1
        task = tasks[i]
        vi, k = chosen[i]
        v = task.variants[vi]
        ax, ay = _anchor(v, k, W)
        grid.unplace(v, ax, ay)
        occ ^= bases[(task.shape_id, vi)] << (ay * W + ax)
        st.backtracks += 1
        chosen[i] = None
        start = (vi, k + 1)


__all__ = ["SearchStats", "search"]
