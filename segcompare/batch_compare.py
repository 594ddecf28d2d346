"""
Batch comparison of result folders against a ground-truth folder.
"""
import os
import logging
from typing import Callable, Dict, List, Optional, Sequence

from segcompare.config import ProgressDefaults, ResultLabels
from segcompare.errors import SegCompareError
from segcompare.mask_metrics import PixelMetricsCalculator
from segcompare.models import ComparisonResult, ComparisonSource, ProgressEvent

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]


class BatchComparator:
    """
    Scores every common file of a primary result folder and any number of
    comparison folders against ground truth.

    Failures of a single metric are logged and replaced by ``fallback_score``
    so that one unreadable image never aborts the batch. The failure message
    is kept in ``ComparisonResult.failures`` under the affected label.
    """

    def __init__(self, calculator: Optional[PixelMetricsCalculator] = None,
                 fallback_score: Optional[float] = 0.0,
                 primary_label: str = ResultLabels.PRIMARY):
        self.calculator = calculator or PixelMetricsCalculator()
        self.fallback_score = fallback_score
        self.primary_label = primary_label

    def compare_batch(self, ground_truth_folder: str, primary_result_folder: str,
                      comparison_sources: Sequence[ComparisonSource],
                      common_files: Sequence[str],
                      progress_sink: Optional[ProgressSink] = None,
                      original_folder: Optional[str] = None,
                      should_cancel: Optional[Callable[[], bool]] = None) -> List[ComparisonResult]:
        """
        Compute IOU and accuracy for every file and source.

        Args:
            ground_truth_folder: Reference mask folder
            primary_result_folder: Folder of the primary result masks
            comparison_sources: Additional labelled result folders, in display order
            common_files: Filenames to score, in output order
            progress_sink: Called with a ProgressEvent before each file and once at the end
            original_folder: Source image folder, recorded in paths for display only
            should_cancel: Polled before each file; a true value stops the batch
                and returns the results computed so far

        Returns:
            One ComparisonResult per processed filename
        """
        total = len(common_files)
        results = []
        logger.info(f"Comparing {total} files across {len(comparison_sources) + 1} sources")

        for index, filename in enumerate(common_files):
            if should_cancel is not None and should_cancel():
                logger.info(f"Batch cancelled after {index} of {total} files")
                return results

            if progress_sink is not None:
                self._notify(progress_sink, ProgressEvent(
                    current=index,
                    total=total,
                    percentage=index / total * 100.0,
                    current_label=filename,
                ))

            results.append(self._compare_file(
                filename, ground_truth_folder, primary_result_folder,
                comparison_sources, original_folder,
            ))

        if progress_sink is not None:
            self._notify(progress_sink, ProgressEvent(
                current=total,
                total=total,
                percentage=100.0,
                current_label=ProgressDefaults.COMPLETION_LABEL,
            ))

        failed = sum(1 for result in results if result.has_failures)
        logger.info(f"Batch finished: {len(results)} files, {failed} with failed metrics")
        return results

    def _compare_file(self, filename: str, ground_truth_folder: str, primary_result_folder: str,
                      comparison_sources: Sequence[ComparisonSource],
                      original_folder: Optional[str]) -> ComparisonResult:
        gt_path = os.path.join(ground_truth_folder, filename)
        primary_path = os.path.join(primary_result_folder, filename)

        iou_scores: Dict[str, Optional[float]] = {}
        accuracy_scores: Dict[str, Optional[float]] = {}
        paths: Dict[str, str] = {}
        failures: Dict[str, List[str]] = {}

        if original_folder is not None:
            paths[ResultLabels.ORIGINAL] = os.path.join(original_folder, filename)
        paths[ResultLabels.GROUND_TRUTH] = gt_path
        paths[self.primary_label] = primary_path

        targets = [(self.primary_label, primary_path)]
        for source in comparison_sources:
            source_path = os.path.join(source.folder, filename)
            paths[source.label] = source_path
            targets.append((source.label, source_path))

        for label, path in targets:
            iou_scores[label] = self._score(self.calculator.iou, "IOU", gt_path, path, label, failures)
            accuracy_scores[label] = self._score(self.calculator.accuracy, "accuracy", gt_path, path,
                                                 label, failures)

        return ComparisonResult(
            filename=filename,
            iou_scores=iou_scores,
            accuracy_scores=accuracy_scores,
            paths=paths,
            failures=failures,
        )

    def _score(self, metric: Callable[[str, str], float], metric_name: str, gt_path: str,
               path: str, label: str, failures: Dict[str, List[str]]) -> Optional[float]:
        try:
            return metric(gt_path, path)
        except (SegCompareError, OSError) as e:
            logger.warning(f"Failed to compute {metric_name} for '{label}': {e}")
            failures.setdefault(label, []).append(f"{metric_name}: {e}")
            return self.fallback_score

    @staticmethod
    def _notify(progress_sink: ProgressSink, event: ProgressEvent) -> None:
        try:
            progress_sink(event)
        except Exception as e:
            logger.warning(f"Failed to deliver progress event {event.current}/{event.total}: {e}")


def compare_batch(ground_truth_folder: str, primary_result_folder: str,
                  comparison_sources: Sequence[ComparisonSource], common_files: Sequence[str],
                  progress_sink: Optional[ProgressSink] = None,
                  original_folder: Optional[str] = None,
                  fallback_score: Optional[float] = 0.0,
                  should_cancel: Optional[Callable[[], bool]] = None) -> List[ComparisonResult]:
    comparator = BatchComparator(fallback_score=fallback_score)
    return comparator.compare_batch(
        ground_truth_folder, primary_result_folder, comparison_sources, common_files,
        progress_sink=progress_sink, original_folder=original_folder,
        should_cancel=should_cancel,
    )
