# solver/isolate.py
import multiprocessing as mp
import queue
import time
import traceback
from typing import Any, Dict, Optional, Tuple

from models import Region
from solver.variants import VariantTable


# Worker must be top-level (picklable under spawn)
def _region_worker(q, region: Region, table: dict, engine: str, keep_solution: bool):
    try:
        from solver.evaluator import evaluate_region  # import inside child

        res = evaluate_region(region, table, engine=engine, keep_solution=keep_solution, timeout=0)
        q.put(("ok", res.fits, res.reason, res.stats, res.placements))
    except MemoryError:
        q.put(("err", None, "Child ran out of memory", {}, []))
    except Exception as e:
        q.put(("exc", None, f"{e}\n{traceback.format_exc()}", {}, []))


def run_region_isolated(
    region: Region,
    variant_table: VariantTable,
    max_seconds: float,
    *,
    engine: str = "backtrack",
    keep_solution: bool = False,
    details: Optional[Dict[str, Any]] = None,
) -> Tuple[Optional[bool], Optional[str]]:
    """
    Evaluate one region in a child process with a wall-clock deadline.

    Returns (fits, note).  ``fits`` is None when the child timed out,
    crashed or returned nothing; ``note`` then says which.  When ``details``
    is given it receives the child's ``stats`` and ``placements`` (the
    latter only with ``keep_solution``).
    """
    ctx = mp.get_context("spawn")
    q = ctx.Queue()
    # mappingproxy does not pickle; the child only reads it
    p = ctx.Process(
        target=_region_worker,
        args=(q, region, dict(variant_table), engine, keep_solution),
    )
    p.daemon = True
    p.start()

    # Drain the queue while waiting: a child blocks on exit until its
    # queued result has been read.
    deadline = time.time() + float(max_seconds)
    msg = None
    while msg is None:
        try:
            msg = q.get(timeout=0.05)
        except queue.Empty:
            if not p.is_alive():
                # exited; pick up a result that was flushed on the way out
                try:
                    msg = q.get(timeout=0.5)
                except queue.Empty:
                    pass
                break
            if time.time() >= deadline:
                p.terminate()
                p.join(2.0)
                return None, "killed: timeout"
    p.join(2.0)

    if msg is None:
        if p.exitcode not in (0, None):
            return None, f"child exit {p.exitcode}"
        return None, "no-result"

    tag, ok, reason, stats, placements = msg
    if tag != "ok":
        return None, reason
    if details is not None:
        details["stats"] = dict(stats)
        details["placements"] = list(placements)
    return ok, reason
