import pytest

import solver.evaluator as evaluator
from models import Region, Shape
from puzzle import parse_puzzle
from solver.evaluator import (
    REASON_EXHAUSTED,
    REASON_PACKED,
    count_fitting,
    evaluate,
    evaluate_all,
    evaluate_region,
)
from solver.planner import REASON_AREA
from solver.variants import build_variant_table
from tests.data import EXAMPLE_PUZZLE, EXAMPLE_VERDICTS, QUICK_PUZZLE, SQUARE_2X2


@pytest.fixture(scope="module")
def example():
    puzzle = parse_puzzle(EXAMPLE_PUZZLE)
    return puzzle, build_variant_table(puzzle.shapes)


@pytest.fixture(scope="module")
def example_run(example):
    puzzle, table = example
    seen = []
    results = evaluate_all(
        puzzle.regions,
        table,
        engine="backtrack",
        keep_solution=True,
        timeout=0,
        on_result=lambda region, res: seen.append((region.id, res.fits)),
    )
    return results, seen


def test_example_verdicts(example_run):
    results, _seen = example_run
    assert [r.fits for r in results] == EXAMPLE_VERDICTS
    assert sum(1 for r in results if r.fits) == 2


def test_evaluate_all_reports_each_region(example_run):
    _results, seen = example_run
    assert seen == [(0, True), (1, True), (2, False)]


def test_evaluate_bool_on_fitting_regions(example):
    puzzle, table = example
    assert evaluate(puzzle.regions[0], table) is True
    assert evaluate(puzzle.regions[1], table) is True


def test_count_fitting():
    puzzle = parse_puzzle(QUICK_PUZZLE)
    assert count_fitting(puzzle.regions, build_variant_table(puzzle.shapes)) == 2


def test_area_precheck_skips_search(monkeypatch):
    def _boom(*args, **kwargs):
        raise AssertionError("search should not run when the area check fails")

    monkeypatch.setattr(evaluator, "search", _boom)
    table = build_variant_table([Shape(0, SQUARE_2X2)])
    region = Region(0, 2, 2, {0: 2})
    assert evaluate(region, table) is False
    res = evaluate_region(region, table, engine="backtrack", timeout=0)
    assert res.fits is False
    assert res.reason == REASON_AREA


def test_empty_demand_always_fits():
    table = build_variant_table([Shape(0, SQUARE_2X2)])
    res = evaluate_region(Region(0, 1, 1, {}), table, engine="backtrack", timeout=0)
    assert res.fits is True
    assert res.reason == REASON_PACKED


def test_region_results_carry_reason_and_solution(example, example_run):
    puzzle, _table = example
    results, _seen = example_run
    ok, _, no = results

    assert ok.reason == REASON_PACKED
    assert len(ok.placements) == puzzle.regions[0].instance_count()
    assert ok.stats["nodes"] >= 2

    assert no.reason == REASON_EXHAUSTED
    assert no.placements == []

    d = ok.as_dict()
    assert d["region_id"] == 0
    assert d["fits"] is True
    assert "placements" not in d


def test_unknown_engine_is_rejected(example):
    puzzle, table = example
    with pytest.raises(ValueError):
        evaluate_region(puzzle.regions[0], table, engine="annealing")
