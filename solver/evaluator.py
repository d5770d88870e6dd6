# solver/evaluator.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from config import CFG, ENGINES
from models import Placement, Region
from solver.backtrack import SearchStats, search
from solver.grid import Grid
from solver.planner import plan
from solver.variants import VariantTable

log = logging.getLogger(__name__)

REASON_PACKED = "packed"
REASON_EXHAUSTED = "exhausted"


@dataclass
class RegionResult:
    region_id: int
    fits: Optional[bool]            # None: undecided (timebox / crash)
    reason: str
    elapsed: float = 0.0
    stats: Dict[str, int] = field(default_factory=dict)
    placements: List[Placement] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        return {
            "region_id": self.region_id,
            "fits": self.fits,
            "reason": self.reason,
            "elapsed": round(self.elapsed, 6),
            "stats": dict(self.stats),
        }


def evaluate(
    region: Region,
    variant_table: VariantTable,
    *,
    stats: Optional[SearchStats] = None,
    solution: Optional[List[Placement]] = None,
) -> bool:
    """Decide whether every demanded instance fits into ``region``."""
    tasks, _reason = plan(region, variant_table)
    if tasks is None:
        return False
    grid = Grid(region.width, region.height)
    return search(grid, tasks, stats=stats, solution=solution)


def _evaluate_backtrack(region: Region, variant_table: VariantTable, keep_solution: bool) -> RegionResult:
    tasks, reason = plan(region, variant_table)
    if tasks is None:
        return RegionResult(region.id, False, reason)
    stats = SearchStats()
    solution: Optional[List[Placement]] = [] if keep_solution else None
    ok = search(Grid(region.width, region.height), tasks, stats=stats, solution=solution)
    return RegionResult(
        region.id,
        ok,
        REASON_PACKED if ok else REASON_EXHAUSTED,
        stats=stats.as_dict(),
        placements=list(solution or []),
    )


def _evaluate_cp_sat(region: Region, variant_table: VariantTable, keep_solution: bool) -> RegionResult:
    from solver.cp_sat import try_pack_cp_sat  # ortools is only needed for this engine

    ok, placed, reason = try_pack_cp_sat(region, variant_table)
    return RegionResult(region.id, ok, reason, placements=placed if keep_solution else [])


def evaluate_region(
    region: Region,
    variant_table: VariantTable,
    *,
    engine: Optional[str] = None,
    keep_solution: bool = False,
    timeout: Optional[float] = None,
) -> RegionResult:
    engine = (engine or CFG.ENGINE or "backtrack").strip().lower()
    if engine not in ENGINES:
        raise ValueError(f"unknown engine {engine!r} (expected one of {', '.join(ENGINES)})")
    limit = CFG.REGION_TIMEOUT if timeout is None else timeout

    t0 = time.time()
    if limit and limit > 0:
        from solver.isolate import run_region_isolated

        details: Dict[str, object] = {}
        ok, note = run_region_isolated(
            region, variant_table, limit, engine=engine, keep_solution=keep_solution, details=details
        )
        result = RegionResult(
            region.id,
            ok,
            note or (REASON_PACKED if ok else REASON_EXHAUSTED),
            stats=details.get("stats", {}),
            placements=details.get("placements", []),
        )
    elif engine == "cp_sat":
        result = _evaluate_cp_sat(region, variant_table, keep_solution)
    else:
        result = _evaluate_backtrack(region, variant_table, keep_solution)
    result.elapsed = time.time() - t0

    log.debug(
        "region %d %dx%d: fits=%s reason=%s elapsed=%.3fs %s",
        region.id, region.width, region.height, result.fits, result.reason,
        result.elapsed, result.stats or "",
    )
    return result


def evaluate_all(
    regions: Iterable[Region],
    variant_table: VariantTable,
    *,
    engine: Optional[str] = None,
    on_result: Optional[Callable[[Region, RegionResult], None]] = None,
    keep_solution: bool = False,
    timeout: Optional[float] = None,
) -> List[RegionResult]:
    results: List[RegionResult] = []
    for region in regions:
        res = evaluate_region(
            region, variant_table, engine=engine, keep_solution=keep_solution, timeout=timeout
        )
        results.append(res)
        if on_result is not None:
            on_result(region, res)
    fit = sum(1 for r in results if r.fits)
    log.info("evaluated %d regions: %d fit", len(results), fit)
    return results


def count_fitting(regions: Iterable[Region], variant_table: VariantTable) -> int:
    return sum(1 for region in regions if evaluate(region, variant_table))


__all__ = [
    "RegionResult",
    "evaluate",
    "evaluate_region",
    "evaluate_all",
    "count_fitting",
    "REASON_PACKED",
    "REASON_EXHAUSTED",
]
