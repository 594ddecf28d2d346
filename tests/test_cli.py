"""Tests for the segcompare command line front end."""

import json
from pathlib import Path

import pytest

from segcompare import cli


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


def test_scan(mask_folders, capsys):
    assert cli.main(["scan", str(mask_folders.gt)]) == 0
    assert capsys.readouterr().out.split() == ["a.png", "b.png", "c.png"]


def test_scan_missing_folder(tmp_path: Path):
    assert cli.main(["scan", str(tmp_path / "nope")]) == 1


def test_validate_exit_codes(mask_folders, tmp_path: Path, capsys):
    folders = [str(mask_folders.original), str(mask_folders.gt), str(mask_folders.mine)]
    assert cli.main(["validate"] + folders) == 0
    assert json.loads(capsys.readouterr().out)["common_files"] == ["a.png", "b.png", "c.png"]

    empty = tmp_path / "empty"
    empty.mkdir()
    assert cli.main(["validate"] + folders + [str(empty)]) == 1
    assert cli.main(["validate", str(mask_folders.gt)]) == 1


def test_compare_then_export(mask_folders, tmp_path: Path, capsys):
    scores = tmp_path / "scores.json"
    analysis = tmp_path / "analysis.json"

    code = cli.main([
        "compare",
        "--original", str(mask_folders.original),
        "--gt", str(mask_folders.gt),
        "--mine", str(mask_folders.mine),
        "--source", f"other={mask_folders.other}",
        "--json", str(scores),
        "--analysis", str(analysis),
    ])

    assert code == 0
    out = capsys.readouterr().out
    assert "My Result: IOU 100.00%" in out
    assert "other: IOU 0.00%" in out
    saved = json.loads(scores.read_text(encoding="utf-8"))
    assert [item["filename"] for item in saved] == ["a.png", "b.png", "c.png"]
    assert len(json.loads(analysis.read_text(encoding="utf-8"))["selected_images"]) == 3

    dest = tmp_path / "picked"
    dest.mkdir()
    assert cli.main(["export", "--results", str(scores), "--dest", str(dest), "--files", "b.png"]) == 0
    assert sorted(p.name for p in (dest / "b_png").iterdir()) == \
        ["GT_b.png", "My Result_b.png", "Original_b.png", "other_b.png"]


def test_bad_source_argument(mask_folders):
    with pytest.raises(SystemExit):
        cli.main(["compare", "--original", "o", "--gt", "g", "--mine", "m", "--source", "nolabel"])


def test_export_unreadable_results(tmp_path: Path):
    dest = tmp_path / "picked"
    dest.mkdir()
    assert cli.main(["export", "--results", str(tmp_path / "none.json"), "--dest", str(dest)]) == 1

    garbled = tmp_path / "garbled.json"
    garbled.write_text("{not json", encoding="utf-8")
    assert cli.main(["export", "--results", str(garbled), "--dest", str(dest)]) == 1

    incomplete = tmp_path / "incomplete.json"
    incomplete.write_text(json.dumps([{"iou_scores": {}}]), encoding="utf-8")
    assert cli.main(["export", "--results", str(incomplete), "--dest", str(dest)]) == 1
    assert list(dest.iterdir()) == []
