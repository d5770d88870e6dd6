# solver/cp_sat.py
"""Independent CP-SAT formulation of the region packing question.

One Boolean per (instance, variant, anchor).  Each instance takes exactly
one placement and every cell is covered at most once.  Used as an
alternative engine and to cross-check the backtracking verdicts.
"""
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from models import Placement, Region, ShapeVariant
from solver.planner import plan
from solver.variants import VariantTable

Option = Tuple[ShapeVariant, int, int]

REASON_INFEASIBLE = "Proven infeasible"
REASON_TIMEBOX = "Stopped before solution (timebox)"
REASON_INVALID = "Model invalid (configuration error)"


def _options_for(variants, W: int, H: int) -> List[Option]:
    opts: List[Option] = []
    for v in variants:
        for y in range(H - v.height + 1):
            for x in range(W - v.width + 1):
                opts.append((v, x, y))
    return opts


def try_pack_cp_sat(
    region: Region,
    variant_table: VariantTable,
    max_seconds: Optional[float] = None,
) -> Tuple[Optional[bool], List[Placement], str]:
    """
    Returns (ok, placements, reason).

    ``ok`` is True when a packing was found, False when CP-SAT proved none
    exists (or a pre-check did), and None when the time box ran out first.
    """
    tasks, reason = plan(region, variant_table)
    if tasks is None:
        return False, [], reason
    if not tasks:
        return True, [], "packed"

    W, H = region.width, region.height
    seconds = CFG.CP_SAT_SECONDS if max_seconds is None else max_seconds

    options_by_shape: Dict[int, List[Option]] = {}
    for t in tasks:
        if t.shape_id not in options_by_shape:
            options_by_shape[t.shape_id] = _options_for(t.variants, W, H)

    m = _cp.CpModel()
    n = len(tasks)

    # exactly one placement per instance
    p = []
    for i, t in enumerate(tasks):
        opts = options_by_shape[t.shape_id]
        row = [m.NewBoolVar(f"p_{i}_{k}") for k in range(len(opts))]
        m.AddExactlyOne(row)
        p.append(row)

    # identical instances: strictly increasing placement index
    place_idx = []
    for i, t in enumerate(tasks):
        opts = options_by_shape[t.shape_id]
        idx = m.NewIntVar(0, max(0, len(opts) - 1), f"idx_{i}")
        m.Add(idx == sum(k * p[i][k] for k in range(len(opts))))
        place_idx.append(idx)
    for a in range(1, n):
        if tasks[a].shape_id == tasks[a - 1].shape_id:
            m.Add(place_idx[a - 1] < place_idx[a])

    # no overlap
    cell_to_vars: Dict[Tuple[int, int], List] = defaultdict(list)
    for i, t in enumerate(tasks):
        for k, (v, x, y) in enumerate(options_by_shape[t.shape_id]):
            for dx, dy in v.cells:
                cell_to_vars[(x + dx, y + dy)].append(p[i][k])
    for vars_here in cell_to_vars.values():
        if len(vars_here) > 1:
            m.AddAtMostOne(vars_here)

    solver = _cp.CpSolver()
    solver.parameters.max_time_in_seconds = float(seconds)
    solver.parameters.max_memory_in_mb = int(CFG.MAX_MEMORY_MB)
    solver.parameters.num_search_workers = int(CFG.WORKERS)
    solver.parameters.random_seed = int(CFG.RANDOM_SEED)
    solver.parameters.log_search_progress = False

    res = solver.Solve(m)

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        placed: List[Placement] = []
        for i, t in enumerate(tasks):
            for k, (v, x, y) in enumerate(options_by_shape[t.shape_id]):
                if solver.BooleanValue(p[i][k]):
                    placed.append(Placement(t.shape_id, v, x, y))
                    break
        return True, placed, "packed"
    if res == _cp.INFEASIBLE:
        return False, [], REASON_INFEASIBLE
    if res == _cp.MODEL_INVALID:
        return None, [], REASON_INVALID
    return None, [], REASON_TIMEBOX


__all__ = ["try_pack_cp_sat", "REASON_INFEASIBLE", "REASON_TIMEBOX", "REASON_INVALID"]
