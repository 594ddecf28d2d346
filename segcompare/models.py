"""
Data models for the segmentation mask comparator.
"""
import os
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

import numpy as np

from segcompare.config import FolderRoles
from segcompare.image_handler import ImageSetScanner


@dataclass
class ImageFolder:
    """A folder of mask images, scanned on demand."""
    path: str
    role: str
    files: List[str] = field(default_factory=list)

    @classmethod
    def scan(cls, path: str, role: str) -> "ImageFolder":
        return cls(path=path, role=role, files=ImageSetScanner.scan(path))

    @property
    def display_name(self) -> str:
        return folder_display_name(self.path)


def folder_display_name(path: str) -> str:
    """Last path component of ``path``, or the unknown marker."""
    name = os.path.basename(os.path.normpath(path)) if path else ""
    return name or FolderRoles.UNKNOWN_NAME


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating a set of folders against each other."""
    is_valid: bool
    common_files: List[str]
    missing_files: Dict[str, List[str]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'common_files': list(self.common_files),
            'missing_files': {name: list(files) for name, files in self.missing_files.items()},
        }


@dataclass
class PixelMaskPair:
    """Two same-shape binary masks decoded for a single metric computation."""
    first: np.ndarray
    second: np.ndarray
    first_path: str
    second_path: str

    @property
    def total_pixels(self) -> int:
        return int(self.first.size)


@dataclass(frozen=True)
class ComparisonSource:
    """A named result folder scored against ground truth."""
    label: str
    folder: str


@dataclass(frozen=True)
class ComparisonResult:
    """Scores and resolved paths for one common filename."""
    filename: str
    iou_scores: Dict[str, Optional[float]]
    accuracy_scores: Dict[str, Optional[float]]
    paths: Dict[str, str]
    failures: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filename': self.filename,
            'iou_scores': dict(self.iou_scores),
            'accuracy_scores': dict(self.accuracy_scores),
            'paths': dict(self.paths),
            'failures': {label: list(msgs) for label, msgs in self.failures.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComparisonResult":
        return cls(
            filename=data['filename'],
            iou_scores=dict(data.get('iou_scores', {})),
            accuracy_scores=dict(data.get('accuracy_scores', {})),
            paths=dict(data.get('paths', {})),
            failures={label: list(msgs) for label, msgs in data.get('failures', {}).items()},
        )


@dataclass(frozen=True)
class ProgressEvent:
    """One progress tick of a batch comparison."""
    current: int
    total: int
    percentage: float  # 0.0 to 100.0
    current_label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current': self.current,
            'total': self.total,
            'percentage': self.percentage,
            'current_file': self.current_label,
        }


@dataclass
class ExportSelection:
    """A filename chosen for export with the source images to copy."""
    filename: str
    source_paths: Dict[str, str]

    @classmethod
    def from_result(cls, result: ComparisonResult) -> "ExportSelection":
        return cls(filename=result.filename, source_paths=dict(result.paths))


@dataclass
class ExportOutcome:
    """Summary of one export request."""
    exported_count: int  # selections whose image folder was created
    copied_count: int
    total: int
    failures: List[str]
    destination: str
    message: str

    @property
    def ok(self) -> bool:
        if not self.failures:
            return True
        return self.exported_count > 0 and self.copied_count > 0


@dataclass
class CaseAnalysis:
    """Aggregate statistics of one compared image."""
    filename: str
    avg_iou: float
    max_iou: float
    min_iou: float
    iou_variance: float
    avg_accuracy: float
    primary_iou: float
    others_avg_iou: float
    primary_advantage: float
    category: str  # see AnalysisDefaults.CATEGORIES
