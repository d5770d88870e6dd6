from models import Shape, ShapeVariant
from puzzle import parse_puzzle
from solver.variants import build_variant_table, canonicalize, normalize
from tests.data import (
    DOMINO,
    EXAMPLE_PUZZLE,
    EXAMPLE_VARIANT_COUNTS,
    F_PENTOMINO,
    L_TROMINO,
    SQUARE_2X2,
)


def test_solid_square_collapses_to_single_variant():
    variants = canonicalize(SQUARE_2X2)
    assert len(variants) == 1
    assert variants[0].cells == tuple(sorted(SQUARE_2X2))


def test_asymmetric_shape_has_eight_variants():
    variants = canonicalize(F_PENTOMINO)
    assert len(variants) == 8
    assert len({v.cells for v in variants}) == 8


def test_domino_and_l_tromino_counts():
    assert len(canonicalize(DOMINO)) == 2
    assert len(canonicalize(L_TROMINO)) == 4


def test_variants_are_normalised_to_origin():
    for v in canonicalize(F_PENTOMINO):
        assert min(x for x, _ in v.cells) == 0
        assert min(y for _, y in v.cells) == 0
        assert list(v.cells) == sorted(v.cells)
        assert v.area == len(F_PENTOMINO)


def test_canonicalize_is_idempotent_on_each_variant():
    for v in canonicalize(F_PENTOMINO):
        again = canonicalize(v.cells)
        assert v in again
        # Every orientation generates the same family of orientations.
        assert set(again) == set(canonicalize(F_PENTOMINO))


def test_canonical_square_recanonicalises_to_itself():
    (v,) = canonicalize(SQUARE_2X2)
    assert canonicalize(v.cells) == (v,)


def test_translation_does_not_change_the_variant_set():
    shifted = tuple((x + 5, y - 3) for x, y in L_TROMINO)
    assert canonicalize(shifted) == canonicalize(L_TROMINO)


def test_variant_dimensions():
    v = ShapeVariant(((0, 0), (1, 0), (2, 0), (2, 1)))
    assert (v.width, v.height) == (3, 2)


def test_normalize_subtracts_minimum():
    assert normalize([(3, 4), (4, 4), (3, 5)]) == ((0, 0), (0, 1), (1, 0))


def test_example_shapes_variant_counts():
    puzzle = parse_puzzle(EXAMPLE_PUZZLE)
    table = build_variant_table(puzzle.shapes)
    assert {sid: len(vs) for sid, vs in table.items()} == EXAMPLE_VARIANT_COUNTS


def test_variant_table_is_read_only():
    table = build_variant_table([Shape(0, SQUARE_2X2)])
    try:
        table[1] = ()  # type: ignore[index]
    except TypeError:
        pass
    else:
        raise AssertionError("variant table accepted a write")
    assert list(table) == [0]
