"""
Command entry points for presentation layers.

Each command returns a CommandResult instead of raising, so a front end
can show structural failures as blocking errors and render everything else.
"""
import logging
from typing import Any, Callable, List, NamedTuple, Optional, Sequence

from segcompare.batch_compare import BatchComparator
from segcompare.config import ProgressDefaults
from segcompare.errors import ExportFailedError, SegCompareError
from segcompare.export_manager import ExportManager
from segcompare.folder_validator import FolderSetValidator
from segcompare.image_handler import ImageSetScanner
from segcompare.models import ComparisonSource, ExportSelection, ProgressEvent

logger = logging.getLogger(__name__)


class CommandResult(NamedTuple):
    """Success/failure result of a command."""
    ok: bool
    value: Any = None
    error: str = ""


class ProgressChannel:
    """Push channel for progress events, keyed by a fixed event name."""

    def __init__(self, event_name: str = ProgressDefaults.EVENT_NAME):
        self.event_name = event_name
        self._handlers: List[Callable[[str, ProgressEvent], None]] = []

    def subscribe(self, handler: Callable[[str, ProgressEvent], None]) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: Callable[[str, ProgressEvent], None]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: ProgressEvent) -> None:
        for handler in list(self._handlers):
            try:
                handler(self.event_name, event)
            except Exception as e:
                logger.warning(f"Progress handler failed on '{self.event_name}': {e}")

    __call__ = emit


def scan_folder(path: str) -> CommandResult:
    try:
        return CommandResult(True, ImageSetScanner.scan(path))
    except SegCompareError as e:
        return CommandResult(False, error=str(e))


def validate_folders(paths: Sequence[str]) -> CommandResult:
    try:
        return CommandResult(True, FolderSetValidator().validate(paths))
    except SegCompareError as e:
        return CommandResult(False, error=str(e))


def compare_batch(gt_folder: str, result_folder: str, sources: Sequence[ComparisonSource],
                  files: Sequence[str], progress: Optional[ProgressChannel] = None,
                  original_folder: Optional[str] = None,
                  fallback_score: Optional[float] = 0.0,
                  should_cancel: Optional[Callable[[], bool]] = None) -> CommandResult:
    comparator = BatchComparator(fallback_score=fallback_score)
    results = comparator.compare_batch(gt_folder, result_folder, sources, files,
                                       progress_sink=progress, original_folder=original_folder,
                                       should_cancel=should_cancel)
    return CommandResult(True, results)


def export_selected(dest_root: str, selections: Sequence[ExportSelection]) -> CommandResult:
    try:
        outcome = ExportManager().export_selected(dest_root, selections)
    except ExportFailedError as e:
        return CommandResult(False, e.outcome, str(e))
    except SegCompareError as e:
        return CommandResult(False, error=str(e))
    return CommandResult(True, outcome)
