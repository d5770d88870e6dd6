"""Helpers for writing run outputs to disk."""

from __future__ import annotations

import os
from typing import Sequence

from config import CFG
from solver.evaluator import RegionResult


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def _verdict_word(fits) -> str:
    if fits is None:
        return "undecided"
    return "fits" if fits else "no"


def write_verdicts(results: Sequence[RegionResult], base_dir: str) -> str:
    """Write one line per region plus the aggregate count."""

    path = _resolve_output_path(base_dir, CFG.VERDICTS_OUT, "verdicts.txt")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not results:
            f.write("No regions\n")
        for r in results:
            f.write(f"region {r.region_id}: {_verdict_word(r.fits)} ({r.reason}, {r.elapsed:.3f}s)\n")
        fit = sum(1 for r in results if r.fits)
        f.write(f"fits: {fit} / {len(results)}\n")
    return path


def write_layout_view_html(svg: str, legend_html: str, base_dir: str, *, title: str = "Layout View") -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    with open(path, "w", encoding="utf-8") as vf:
        vf.write(
            f"""<!doctype html>
<html><head><meta charset='utf-8'><title>{title}</title></head>
<body>
<h1>{title}</h1>
<section><div>{svg}</div></section>
<section><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""
        )
    return path


__all__ = ["write_verdicts", "write_layout_view_html"]
