"""Tests for the success/failure command entry points used by front ends."""

import os
from pathlib import Path

from segcompare import commands
from segcompare.models import ComparisonSource, ExportSelection, ProgressEvent


def test_scan_folder(mask_folders, tmp_path: Path):
    assert commands.scan_folder(str(mask_folders.gt)) == (True, ["a.png", "b.png", "c.png"], "")

    missing = commands.scan_folder(str(tmp_path / "nope"))
    assert not missing.ok
    assert "nope" in missing.error


def test_validate_folders(mask_folders, tmp_path: Path):
    result = commands.validate_folders([str(mask_folders.original), str(mask_folders.gt),
                                        str(mask_folders.mine)])
    assert result.ok
    assert result.value.is_valid

    too_few = commands.validate_folders([str(mask_folders.gt)])
    assert not too_few.ok
    assert "3" in too_few.error

    absent = commands.validate_folders([str(mask_folders.original), str(tmp_path / "x"),
                                        str(mask_folders.mine)])
    assert not absent.ok
    assert "ground truth" in absent.error


def test_progress_channel_delivers_named_events(mask_folders):
    received = []
    channel = commands.ProgressChannel()
    channel.subscribe(lambda name, event: received.append((name, event.to_dict())))
    channel.subscribe(lambda name, event: 1 / 0)

    result = commands.compare_batch(str(mask_folders.gt), str(mask_folders.mine),
                                    [ComparisonSource("other", str(mask_folders.other))],
                                    ["a.png", "b.png"], progress=channel)

    assert result.ok
    assert len(result.value) == 2
    assert [name for name, _ in received] == ["progress_update"] * 3
    assert received[-1][1] == {"current": 2, "total": 2, "percentage": 100.0, "current_file": "Done"}


def test_unsubscribe():
    received = []
    channel = commands.ProgressChannel()
    handler = lambda name, event: received.append(event)
    channel.subscribe(handler)
    channel.unsubscribe(handler)
    channel.emit(ProgressEvent(0, 1, 0.0, "a.png"))
    assert received == []


def test_export_selected(tmp_path: Path):
    source = tmp_path / "x.png"
    source.write_bytes(b"x")

    ok = commands.export_selected(str(tmp_path), [ExportSelection("x.png", {"GT": str(source)})])
    assert ok.ok
    assert ok.value.exported_count == 1

    failed = commands.export_selected(str(tmp_path), [ExportSelection("y.png", {"GT": str(tmp_path / "no.png")})])
    assert not failed.ok
    assert failed.value.copied_count == 0
    assert failed.error.startswith("Partially exported (1/1)")

    no_dest = commands.export_selected(str(tmp_path / "missing"), [])
    assert not no_dest.ok
    assert no_dest.value is None


def test_scan_folder_unlistable(tmp_path: Path, monkeypatch):
    def denied(path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr(os, "scandir", denied)
    assert commands.scan_folder(str(tmp_path)) == (True, [], "")


def test_compare_batch_can_be_cancelled(mask_folders):
    events = []
    channel = commands.ProgressChannel()
    channel.subscribe(lambda name, event: events.append(event))

    result = commands.compare_batch(str(mask_folders.gt), str(mask_folders.mine), [],
                                    ["a.png", "b.png", "c.png"], progress=channel,
                                    should_cancel=lambda: len(events) >= 1)

    assert result.ok
    assert [r.filename for r in result.value] == ["a.png"]
    assert all(e.percentage < 100.0 for e in events)
