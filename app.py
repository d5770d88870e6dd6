# app.py — JSON front end for the region packer
from __future__ import annotations
import os
import time
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, Response, abort, jsonify, request, send_from_directory

from config import CFG
from io_files import write_verdicts
from models import Region
from puzzle import Puzzle, PuzzleFormatError, format_demand, parse_puzzle
from render import render_result
from solver.evaluator import RegionResult, evaluate_region
from solver.variants import VariantTable, build_variant_table

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer as progress_start,
    set_status, set_total, set_current, set_message, record_region, set_done,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


def _verdicts_location() -> Tuple[str, str]:
    _full, directory, filename = _resolve_output_paths(CFG.VERDICTS_OUT, "verdicts.txt")
    return directory, filename


LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "reason": "no run yet",
    "fits": 0,
    "total": 0,
    "regions": [],
    "elapsed_str": "0s",
    "verdicts_filename": _verdicts_location()[1],
}

# Regions and results of the last run; /layout draws the packings kept here.
LAST_RUN: Dict[str, Any] = {"puzzle": None, "results": []}

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def _fmt_elapsed(seconds: float) -> str:
    if seconds < 1:
        return "0s"
    m, s = divmod(int(seconds), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    if h == 0:
        return f"{m}m {s}s"
    return f"{h}h {m}m {s}s"


def _puzzle_text_from_request() -> str:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict) and isinstance(payload.get("puzzle"), str):
        return payload["puzzle"]
    form_val = request.form.get("puzzle")
    if form_val:
        return form_val
    return request.get_data(as_text=True) or ""


def _region_entry(region: Region, res: RegionResult) -> Dict[str, Any]:
    entry = res.as_dict()
    entry.update({
        "width": region.width,
        "height": region.height,
        "demand": format_demand(region),
    })
    return entry


def _finalize_solver_progress(ok_flag: bool, reason_text: str) -> None:
    """Write the terminal solver status and the summary message."""

    set_done(ok_flag, reason=reason_text)


def _run_puzzle(puzzle: Puzzle, table: VariantTable) -> Tuple[List[RegionResult], List[Dict[str, Any]]]:
    set_total(len(puzzle.regions))
    results: List[RegionResult] = []
    entries: List[Dict[str, Any]] = []
    for region in puzzle.regions:
        set_current(f"region {region.id} ({region.width}x{region.height})")
        res = evaluate_region(region, table, keep_solution=True)
        record_region(region.id, res.fits, reason=res.reason, elapsed=res.elapsed)
        results.append(res)
        entries.append(_region_entry(region, res))
    return results, entries


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    progress_start()
    set_status("Solving")
    t0 = time.time()

    text = _puzzle_text_from_request()
    try:
        puzzle = parse_puzzle(text)
    except PuzzleFormatError as e:
        reason = f"Bad puzzle: {e}"
        LAST_RUN.update({"puzzle": None, "results": []})
        _finalize_solver_progress(False, reason)
        LAST_RESULT.update({
            "ok": False,
            "reason": reason,
            "fits": 0,
            "total": 0,
            "regions": [],
            "elapsed_str": _fmt_elapsed(time.time() - t0),
        })
        return jsonify(LAST_RESULT), 400

    table = build_variant_table(puzzle.shapes)
    results, entries = _run_puzzle(puzzle, table)
    fit = sum(1 for r in results if r.fits)
    LAST_RUN.update({"puzzle": puzzle, "results": results})

    reason = f"{fit} of {len(puzzle.regions)} regions fit"
    _finalize_solver_progress(True, reason)

    verdicts_name = _verdicts_location()[1]
    try:
        path = write_verdicts(results, BASE_DIR)
        verdicts_name = os.path.basename(path) or verdicts_name
    except OSError:
        app.logger.warning("could not write verdict file", exc_info=True)
        set_message(f"{reason} (verdict file not written)")

    LAST_RESULT.update({
        "ok": True,
        "reason": reason,
        "fits": fit,
        "total": len(puzzle.regions),
        "regions": entries,
        "elapsed_str": _fmt_elapsed(time.time() - t0),
        "verdicts_filename": verdicts_name,
    })
    return jsonify(LAST_RESULT)


@app.route("/result/latest")
def result_latest():
    return jsonify(LAST_RESULT)


@app.route("/layout/<int:region_id>")
def layout(region_id: int):
    puzzle: Optional[Puzzle] = LAST_RUN.get("puzzle")
    results: List[RegionResult] = LAST_RUN.get("results") or []
    if puzzle is None or not (0 <= region_id < len(results)):
        abort(404)
    res = results[region_id]
    # undecided (None) and infeasible regions have no packing to draw
    if res.fits is not True:
        abort(404)
    region = puzzle.regions[region_id]
    svg, _legend = render_result(res.placements, region.width, region.height)
    return Response(svg, mimetype="image/svg+xml")


@app.route("/download/verdicts")
def download_verdicts():
    directory, filename = _verdicts_location()
    return send_from_directory(directory, filename, as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
