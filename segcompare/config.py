"""
Centralized configuration for the segmentation mask comparator.

Default values used across the engine live here so that the scanner,
metrics, batch and export modules agree on extensions, labels and thresholds.
"""
import logging
from typing import List, Optional


class ImageExtensions:
    """File extensions that qualify a directory entry as an image."""
    SUPPORTED = ['jpg', 'jpeg', 'png', 'bmp', 'tiff', 'webp']

    @classmethod
    def is_supported(cls, filename: str) -> bool:
        """Check the extension of ``filename`` case-insensitively."""
        if '.' not in filename:
            return False
        extension = filename.rsplit('.', 1)[-1].lower()
        return extension in cls.SUPPORTED


class MaskDefaults:
    """Binarization of mask luminance."""
    THRESHOLD = 128  # foreground iff luminance > THRESHOLD (8-bit channel)
    BIT_DEPTH = 8


class FolderRoles:
    """Positional roles of the folders handed to the validator."""
    SOURCE_IMAGES = "source images"
    GROUND_TRUTH = "ground truth"
    PRIMARY_RESULT = "primary result"
    COMPARISON_TEMPLATE = "comparison {index}"
    UNKNOWN_NAME = "unknown"
    MIN_FOLDERS = 3

    @classmethod
    def for_position(cls, index: int) -> str:
        """Role name for the folder at 0-based ``index``."""
        fixed: List[str] = [cls.SOURCE_IMAGES, cls.GROUND_TRUTH, cls.PRIMARY_RESULT]
        if index < len(fixed):
            return fixed[index]
        return cls.COMPARISON_TEMPLATE.format(index=index - 2)


class ResultLabels:
    """Display labels used as keys of the per-file result mappings."""
    ORIGINAL = "Original"
    GROUND_TRUTH = "GT"
    PRIMARY = "My Result"


class ProgressDefaults:
    EVENT_NAME = "progress_update"
    COMPLETION_LABEL = "Done"


class AnalysisDefaults:
    """Thresholds used to categorize per-image cases."""
    ADVANTAGE_MARGIN = 0.2
    ADVANTAGE_MIN_IOU = 0.6
    BEST_AVG_IOU = 0.8
    WORST_AVG_IOU = 0.3
    HIGH_VARIANCE = 0.1

    # IOU status bands
    STATUS_SUCCESS = 0.7
    STATUS_WARNING = 0.4

    CATEGORIES = ['primary_advantage', 'best', 'worst', 'high_variance', 'typical']
    SORT_KEYS = ['filename', 'avg_iou', 'max_iou', 'min_iou', 'iou_variance',
                 'avg_accuracy', 'primary_advantage']


class ExportDefaults:
    LABEL_UNSAFE_CHARS = ['/', '\\', ':']
    FOLDER_NAME_SEPARATOR = '.'
    REPLACEMENT = '_'


LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(name)s] - %(message)s'


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure root logging for the command line and Streamlit front ends.

    Args:
        level: Logging level for the root logger
        log_file: Optional file that receives the same records as the console
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
