from models import Region, Shape
from puzzle import parse_puzzle
from solver.backtrack import SearchStats, search
from solver.grid import Grid
from solver.planner import plan
from solver.variants import build_variant_table
from tests.data import DOMINO, EXAMPLE_PUZZLE, L_TROMINO, SQUARE_2X2


class CheckedGrid(Grid):
    """Grid that asserts every commit is legal and every rollback matches."""

    def __init__(self, width, height):
        super().__init__(width, height)
        self.committed = []
        self.max_occupied = 0

    def place(self, variant, x, y):
        assert self.fits(variant, x, y), "search committed an overlapping placement"
        super().place(variant, x, y)
        self.committed.append((variant, x, y))
        assert self.occupied == sum(1 for c in self.cells if c)
        self.max_occupied = max(self.max_occupied, self.occupied)

    def unplace(self, variant, x, y):
        assert self.committed and self.committed[-1] == (variant, x, y), "rollback out of order"
        self.committed.pop()
        super().unplace(variant, x, y)
        assert self.occupied == sum(1 for c in self.cells if c)


def _tasks(region, table):
    tasks, reason = plan(region, table)
    assert reason is None
    return tasks


def test_empty_task_list_is_trivially_packed():
    grid = Grid(2, 2)
    solution = ["stale"]
    assert search(grid, [], solution=solution) is True
    assert solution == []
    assert grid.occupied == 0


def test_search_never_overlaps_and_records_solution():
    puzzle = parse_puzzle(EXAMPLE_PUZZLE)
    table = build_variant_table(puzzle.shapes)
    region = puzzle.regions[1]
    grid = CheckedGrid(region.width, region.height)
    solution = []
    assert search(grid, _tasks(region, table), solution=solution)

    assert len(solution) == region.instance_count()
    covered = [c for p in solution for c in p.cells()]
    assert len(covered) == len(set(covered))
    assert all(0 <= x < region.width and 0 <= y < region.height for x, y in covered)
    assert grid.occupied == len(covered)


def test_failed_search_rolls_grid_back():
    puzzle = parse_puzzle(EXAMPLE_PUZZLE)
    table = build_variant_table(puzzle.shapes)
    region = puzzle.regions[2]
    grid = CheckedGrid(region.width, region.height)
    stats = SearchStats()
    assert search(grid, _tasks(region, table), stats=stats) is False
    assert grid.occupied == 0
    assert not any(grid.cells)
    assert grid.committed == []
    assert stats.nodes == stats.backtracks


def test_prefilled_cells_are_respected_and_restored():
    table = build_variant_table([Shape(0, SQUARE_2X2)])
    tasks = _tasks(Region(0, 4, 2, {0: 2}), table)
    grid = Grid(4, 2)
    (sq,) = table[0]
    grid.place(sq, 0, 0)
    before = grid.snapshot()
    assert search(grid, tasks) is False
    assert grid.snapshot() == before
    assert grid.occupied == 4


def test_tight_tiling_with_dominoes():
    table = build_variant_table([Shape(0, DOMINO)])
    region = Region(0, 4, 3, {0: 6})
    grid = Grid(4, 3)
    solution = []
    assert search(grid, _tasks(region, table), solution=solution)
    assert grid.free == 0
    assert len(solution) == 6


def test_parity_blocked_region_is_rejected():
    # 3x3 minus nothing: three L-trominoes cover nine cells but a 3x3
    # square cannot be tiled by L-trominoes.
    table = build_variant_table([Shape(0, L_TROMINO)])
    region = Region(0, 3, 3, {0: 3})
    grid = CheckedGrid(3, 3)
    assert search(grid, _tasks(region, table)) is False
    assert grid.occupied == 0


def test_pruning_does_not_change_verdicts():
    puzzle = parse_puzzle(EXAMPLE_PUZZLE)
    table = build_variant_table(puzzle.shapes)
    for region in puzzle.regions[:2]:
        tasks = _tasks(region, table)
        plain = search(Grid(region.width, region.height), tasks, symmetry_break=False, prune_slack=-1)
        pruned = search(Grid(region.width, region.height), tasks, symmetry_break=True, prune_slack=10_000)
        assert plain == pruned


def test_stats_track_depth():
    table = build_variant_table([Shape(0, DOMINO)])
    region = Region(0, 2, 2, {0: 2})
    stats = SearchStats()
    assert search(Grid(2, 2), _tasks(region, table), stats=stats)
    assert stats.max_depth == 2
    assert stats.nodes >= 2
    assert set(stats.as_dict()) == {"nodes", "backtracks", "pruned", "max_depth"}
