"""Tests for per-image case analysis of comparison results."""

import json
from pathlib import Path

import pytest

from segcompare.analysis import (
    analyze_result, analyze_results, export_analysis_json, filter_cases, format_percentage,
    iou_status, ordered_labels, sort_cases, summarize_sources,
)
from segcompare.models import ComparisonResult


def _result(filename: str, ious: dict, accs: dict = None) -> ComparisonResult:
    return ComparisonResult(
        filename=filename,
        iou_scores=ious,
        accuracy_scores=accs if accs is not None else dict(ious),
        paths={label: f"/{label}/{filename}" for label in ious},
    )


@pytest.mark.parametrize("ious, category", [
    ({"My Result": 0.9, "a": 0.5}, "primary_advantage"),
    ({"My Result": 0.85, "a": 0.8}, "best"),
    ({"My Result": 0.2, "a": 0.3}, "worst"),
    ({"My Result": 0.1, "a": 0.9}, "high_variance"),
    ({"My Result": 0.5, "a": 0.6}, "typical"),
])
def test_categories(ious, category):
    assert analyze_result(_result("x.png", ious)).category == category


def test_statistics():
    case = analyze_result(_result("x.png", {"My Result": 0.8, "a": 0.4, "b": 0.6},
                                  {"My Result": 0.9, "a": 0.7, "b": 0.8}))
    assert case.avg_iou == pytest.approx(0.6)
    assert case.max_iou == pytest.approx(0.8)
    assert case.min_iou == pytest.approx(0.4)
    assert case.iou_variance == pytest.approx(((0.2 ** 2) * 2) / 3)
    assert case.avg_accuracy == pytest.approx(0.8)
    assert case.primary_iou == pytest.approx(0.8)
    assert case.others_avg_iou == pytest.approx(0.5)
    assert case.primary_advantage == pytest.approx(0.3)


def test_unavailable_scores_are_ignored():
    case = analyze_result(_result("x.png", {"My Result": None, "a": 0.4}))
    assert case.avg_iou == pytest.approx(0.4)
    assert case.primary_iou == 0.0
    assert case.iou_variance == 0.0


def test_filter_and_sort():
    cases = analyze_results([
        _result("b.png", {"My Result": 0.85, "a": 0.8}),
        _result("a.png", {"My Result": 0.9, "a": 0.9}),
        _result("c.png", {"My Result": 0.1, "a": 0.2}),
    ])

    best = filter_cases(cases, "best")
    assert [c.filename for c in best] == ["b.png", "a.png"]
    assert [c.filename for c in filter_cases(cases, "marked", {"c.png"})] == ["c.png"]
    assert len(filter_cases(cases)) == 3

    assert [c.filename for c in sort_cases(cases, "avg_iou")] == ["a.png", "b.png", "c.png"]
    assert [c.filename for c in sort_cases(cases, "filename", descending=False)] == \
        ["a.png", "b.png", "c.png"]

    with pytest.raises(ValueError):
        sort_cases(cases, "nonsense")
    with pytest.raises(ValueError):
        filter_cases(cases, "nonsense")


def test_summarize_sources():
    summary = summarize_sources([
        _result("a.png", {"My Result": 1.0, "a": 0.5}),
        _result("b.png", {"My Result": 0.5, "a": None}),
    ])
    assert list(summary) == ["My Result", "a"]
    assert summary["My Result"]["mean_iou"] == pytest.approx(0.75)
    assert summary["a"]["mean_iou"] == pytest.approx(0.5)
    assert summary["a"]["count"] == 1


def test_status_and_formatting():
    assert iou_status(0.7) == "success"
    assert iou_status(0.4) == "warning"
    assert iou_status(0.39) == "error"
    assert format_percentage(0.12345) == "12.35%"


def test_ordered_labels():
    paths = {"zeta": "z", "Original": "o", "My Result": "m", "GT": "g", "alpha": "a"}
    assert ordered_labels(paths) == ["GT", "My Result", "Original", "alpha", "zeta"]


def test_export_analysis_json(tmp_path: Path):
    cases = analyze_results([_result("a.png", {"My Result": 0.9, "a": 0.5})])
    out = tmp_path / "analysis.json"

    export_analysis_json(str(out), cases, {"sort_by": "avg_iou"})

    document = json.loads(out.read_text(encoding="utf-8"))
    assert document["selection_criteria"] == {"sort_by": "avg_iou"}
    assert document["selected_images"][0]["filename"] == "a.png"
    assert document["selected_images"][0]["category"] == "primary_advantage"
    assert "timestamp" in document
