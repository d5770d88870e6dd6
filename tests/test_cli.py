import os

from cli import main
from config import CFG
from tests.data import EXAMPLE_PUZZLE, QUICK_PUZZLE


def _puzzle_file(tmp_path, text=EXAMPLE_PUZZLE):
    path = tmp_path / "puzzle.txt"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_cli_prints_fitting_count(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(CFG, "REGION_TIMEOUT", 0.0)
    rc = main([_puzzle_file(tmp_path), "--engine", "backtrack"])
    assert rc == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "2"


def test_cli_show_and_out_write_files(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(CFG, "REGION_TIMEOUT", 0.0)
    monkeypatch.setattr(CFG, "VERDICTS_OUT", "verdicts.txt")
    monkeypatch.setattr(CFG, "LAYOUT_HTML", "layout_view.html")
    out_dir = tmp_path / "out"

    rc = main([_puzzle_file(tmp_path, QUICK_PUZZLE), "--show", "--out", str(out_dir)])
    assert rc == 0

    out = capsys.readouterr().out
    # two packings of letters, then the count
    assert "A" in out and "." in out
    assert out.strip().splitlines()[-1] == "2"

    verdicts = (out_dir / "verdicts.txt").read_text(encoding="utf-8")
    assert verdicts.splitlines()[-1] == "fits: 2 / 3"
    assert os.path.exists(out_dir / "layout_view.html")


def test_cli_returns_2_on_bad_puzzle(tmp_path, capsys):
    rc = main([_puzzle_file(tmp_path, "0:\n\n3x3: 1\n")])
    assert rc == 2
    assert capsys.readouterr().out == ""


def test_cli_show_with_deadline_prints_packings(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(CFG, "VERDICTS_OUT", "verdicts.txt")
    monkeypatch.setattr(CFG, "LAYOUT_HTML", "layout_view.html")
    out_dir = tmp_path / "out"

    rc = main([
        _puzzle_file(tmp_path, QUICK_PUZZLE),
        "--show", "--timeout", "30", "--engine", "backtrack", "--out", str(out_dir),
    ])
    assert rc == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[-1] == "2"
    # 4x4 packing: four rows of width 4 before the first blank line
    assert [len(row) for row in lines[:4]] == [4, 4, 4, 4]
    assert "A" in lines[0] + lines[1] + lines[2] + lines[3]
    assert os.path.exists(out_dir / "layout_view.html")
