#!/usr/bin/env python3
"""Command-line entry: count the regions of a puzzle file that can be packed."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from config import CFG, ENGINES
from io_files import write_layout_view_html, write_verdicts
from models import Region
from puzzle import PuzzleFormatError, format_demand, parse_puzzle
from render import render_ascii, render_result
from solver.evaluator import RegionResult, evaluate_all
from solver.variants import build_variant_table

log = logging.getLogger("packer.cli")

_VERDICT = {True: "fits", False: "no", None: "undecided"}


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="polypack", description=__doc__)
    ap.add_argument("puzzle", help="puzzle text file ('-' for stdin)")
    ap.add_argument("--engine", choices=ENGINES, default=None, help="decision engine (default: PK_ENGINE)")
    ap.add_argument("--timeout", type=float, default=None, help="per-region deadline in seconds (0 = none)")
    ap.add_argument("--show", action="store_true", help="print the packing of every fitting region")
    ap.add_argument("--out", default=None, help="directory for the verdict file (and layout preview with --show)")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def _write_preview(puzzle_regions, results: List[RegionResult], out_dir: str) -> Optional[str]:
    svgs: List[str] = []
    legend_items: List[str] = []
    for region, res in zip(puzzle_regions, results):
        if not (res.fits and res.placements):
            continue
        svg, legend = render_result(res.placements, region.width, region.height)
        svgs.append(f"<h2>region {region.id} ({region.width}x{region.height})</h2>{svg}")
        if legend not in legend_items:
            legend_items.append(legend)
    if not svgs:
        return None
    return write_layout_view_html("".join(svgs), "".join(legend_items), out_dir, title="Packed regions")


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, CFG.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.puzzle == "-":
        text = sys.stdin.read()
    else:
        with open(args.puzzle, "r", encoding="utf-8") as fh:
            text = fh.read()

    try:
        puzzle = parse_puzzle(text)
    except PuzzleFormatError as e:
        log.error("bad puzzle: %s", e)
        return 2

    table = build_variant_table(puzzle.shapes)
    log.info(
        "%d shapes (%s variants), %d regions",
        len(puzzle.shapes),
        "/".join(str(len(table[s.id])) for s in puzzle.shapes),
        len(puzzle.regions),
    )

    def _report(region: Region, res: RegionResult) -> None:
        log.info(
            "region %d %dx%d [%s]: %s (%s, %.3fs)",
            region.id, region.width, region.height, format_demand(region),
            _VERDICT[res.fits], res.reason, res.elapsed,
        )
        if args.show and res.fits and res.placements:
            print(render_ascii(res.placements, region.width, region.height))
            print()

    results = evaluate_all(
        puzzle.regions,
        table,
        engine=args.engine,
        on_result=_report,
        keep_solution=args.show,
        timeout=args.timeout,
    )

    if args.out:
        path = write_verdicts(results, args.out)
        log.info("verdicts written to %s", path)
        if args.show:
            preview = _write_preview(puzzle.regions, results, args.out)
            if preview:
                log.info("layout preview written to %s", preview)

    print(sum(1 for r in results if r.fits))
    return 0


if __name__ == "__main__":
    sys.exit(main())
