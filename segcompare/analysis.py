"""
Per-image case analysis of comparison results.

Aggregates the per-source scores of each image, sorts images into
categories (best, worst, high variance, cases where the primary result
clearly beats the others) and exports a JSON summary of chosen cases.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np

from segcompare.config import AnalysisDefaults, ResultLabels
from segcompare.models import CaseAnalysis, ComparisonResult

logger = logging.getLogger(__name__)


def _valid_scores(scores: Dict[str, Optional[float]]) -> List[float]:
    return [value for value in scores.values() if value is not None]


def categorize(avg_iou: float, iou_variance: float, primary_iou: float,
               primary_advantage: float) -> str:
    """First matching category wins."""
    if (primary_advantage > AnalysisDefaults.ADVANTAGE_MARGIN
            and primary_iou > AnalysisDefaults.ADVANTAGE_MIN_IOU):
        return 'primary_advantage'
    if avg_iou >= AnalysisDefaults.BEST_AVG_IOU:
        return 'best'
    if avg_iou <= AnalysisDefaults.WORST_AVG_IOU:
        return 'worst'
    if iou_variance > AnalysisDefaults.HIGH_VARIANCE:
        return 'high_variance'
    return 'typical'


def analyze_result(result: ComparisonResult,
                   primary_label: str = ResultLabels.PRIMARY) -> CaseAnalysis:
    """
    Compute aggregate statistics of one comparison result.

    Args:
        result: Scores of one image
        primary_label: Label of the result being championed

    Returns:
        CaseAnalysis of the image
    """
    iou_values = _valid_scores(result.iou_scores)
    acc_values = _valid_scores(result.accuracy_scores)

    avg_iou = float(np.mean(iou_values)) if iou_values else 0.0
    max_iou = float(np.max(iou_values)) if iou_values else 0.0
    min_iou = float(np.min(iou_values)) if iou_values else 0.0
    avg_accuracy = float(np.mean(acc_values)) if acc_values else 0.0
    # Population variance
    iou_variance = float(np.var(iou_values)) if len(iou_values) > 1 else 0.0

    primary_iou = result.iou_scores.get(primary_label) or 0.0
    others = [value for label, value in result.iou_scores.items()
              if label != primary_label and value is not None]
    others_avg_iou = float(np.mean(others)) if others else 0.0
    primary_advantage = primary_iou - others_avg_iou

    return CaseAnalysis(
        filename=result.filename,
        avg_iou=avg_iou,
        max_iou=max_iou,
        min_iou=min_iou,
        iou_variance=iou_variance,
        avg_accuracy=avg_accuracy,
        primary_iou=primary_iou,
        others_avg_iou=others_avg_iou,
        primary_advantage=primary_advantage,
        category=categorize(avg_iou, iou_variance, primary_iou, primary_advantage),
    )


def analyze_results(results: Iterable[ComparisonResult],
                    primary_label: str = ResultLabels.PRIMARY) -> List[CaseAnalysis]:
    return [analyze_result(result, primary_label) for result in results]


def filter_cases(cases: Sequence[CaseAnalysis], filter_by: str = 'all',
                 marked: Optional[Iterable[str]] = None) -> List[CaseAnalysis]:
    """
    Keep the cases of one category, the marked filenames, or everything.

    Raises:
        ValueError: If filter_by is not 'all', 'marked' or a category name
    """
    if filter_by == 'all':
        return list(cases)
    if filter_by == 'marked':
        marked_set = set(marked or [])
        return [case for case in cases if case.filename in marked_set]
    if filter_by not in AnalysisDefaults.CATEGORIES:
        raise ValueError(f"Unknown filter: {filter_by}")
    return [case for case in cases if case.category == filter_by]


def sort_cases(cases: Sequence[CaseAnalysis], sort_by: str = 'primary_advantage',
               descending: bool = True) -> List[CaseAnalysis]:
    """
    Sort cases by filename or by one of the numeric statistics.

    Raises:
        ValueError: If sort_by is not a known key
    """
    if sort_by not in AnalysisDefaults.SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")
    return sorted(cases, key=lambda case: getattr(case, sort_by), reverse=descending)


def summarize_sources(results: Iterable[ComparisonResult]) -> Dict[str, Dict[str, float]]:
    """
    Mean IOU and accuracy of every label over all results.

    Returns:
        label -> {'mean_iou', 'mean_accuracy', 'count'}, in first-seen order
    """
    ious: Dict[str, List[float]] = {}
    accuracies: Dict[str, List[float]] = {}
    for result in results:
        for label, value in result.iou_scores.items():
            ious.setdefault(label, [])
            if value is not None:
                ious[label].append(value)
        for label, value in result.accuracy_scores.items():
            accuracies.setdefault(label, [])
            if value is not None:
                accuracies[label].append(value)

    summary = {}
    for label, values in ious.items():
        acc_values = accuracies.get(label, [])
        summary[label] = {
            'mean_iou': float(np.mean(values)) if values else 0.0,
            'mean_accuracy': float(np.mean(acc_values)) if acc_values else 0.0,
            'count': len(values),
        }
    return summary


def iou_status(iou: float) -> str:
    """'success', 'warning' or 'error' band of an IOU score."""
    if iou >= AnalysisDefaults.STATUS_SUCCESS:
        return 'success'
    if iou >= AnalysisDefaults.STATUS_WARNING:
        return 'warning'
    return 'error'


def format_percentage(value: float) -> str:
    return f"{value * 100:.2f}%"


def ordered_labels(paths: Dict[str, str], primary_label: str = ResultLabels.PRIMARY) -> List[str]:
    """Display order: ground truth, primary result, then the rest alphabetically."""
    leading = [ResultLabels.GROUND_TRUTH, primary_label]
    rest = sorted(label for label in paths if label not in leading)
    return [label for label in leading if label in paths] + rest


def export_analysis_json(path: str, cases: Sequence[CaseAnalysis],
                         criteria: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Write the statistics of the given cases to a JSON file.

    Args:
        path: Output file
        cases: Cases to export
        criteria: Sort/filter settings the cases were chosen with

    Returns:
        The document that was written
    """
    document = {
        'timestamp': datetime.now().isoformat(),
        'selection_criteria': dict(criteria or {}),
        'selected_images': [
            {
                'filename': case.filename,
                'category': case.category,
                'avg_iou': case.avg_iou,
                'max_iou': case.max_iou,
                'min_iou': case.min_iou,
                'iou_variance': case.iou_variance,
                'avg_accuracy': case.avg_accuracy,
            }
            for case in cases
        ],
    }
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(document, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported analysis of {len(cases)} images to {path}")
    return document
