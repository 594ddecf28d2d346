"""
Export of selected comparison results into one folder per image.
"""
import os
import shutil
import logging
from typing import List, Sequence

from segcompare.config import ExportDefaults
from segcompare.errors import DestinationNotFoundError, ExportFailedError
from segcompare.models import ExportOutcome, ExportSelection

logger = logging.getLogger(__name__)


def image_folder_name(filename: str) -> str:
    """Per-image subfolder name: every '.' of the filename becomes '_'."""
    return filename.replace(ExportDefaults.FOLDER_NAME_SEPARATOR, ExportDefaults.REPLACEMENT)


def sanitize_label(label: str) -> str:
    """Replace path separators and colons so a label can prefix a filename."""
    for char in ExportDefaults.LABEL_UNSAFE_CHARS:
        label = label.replace(char, ExportDefaults.REPLACEMENT)
    return label


class ExportManager:
    """Copies the source images of selected results into a destination tree."""

    def export_selected(self, destination_root: str,
                        selections: Sequence[ExportSelection]) -> ExportOutcome:
        """
        Copy every source image of every selection into
        ``destination_root/<image folder>/<label>_<filename>``.

        Args:
            destination_root: Existing folder receiving the export
            selections: Filenames with their label -> source image path mapping

        Returns:
            ExportOutcome; a partial export is still returned as success

        Raises:
            DestinationNotFoundError: If destination_root does not exist
            ExportFailedError: If there were failures and either no selection
                folder was created or no file was copied at all
        """
        if not os.path.exists(destination_root):
            raise DestinationNotFoundError(destination_root)

        exported = 0
        copied = 0
        failures: List[str] = []

        for selection in selections:
            image_dir = os.path.join(destination_root, image_folder_name(selection.filename))
            try:
                os.makedirs(image_dir, exist_ok=True)
            except OSError as e:
                message = f"Failed to create folder for {selection.filename}: {e}"
                logger.warning(message)
                failures.append(message)
                continue

            for label, source_path in selection.source_paths.items():
                failure = self._copy_one(label, source_path, selection.filename, image_dir)
                if failure:
                    logger.warning(failure)
                    failures.append(failure)
                else:
                    copied += 1

            # The selection counts once its folder exists, whatever its copies did
            exported += 1

        outcome = ExportOutcome(
            exported_count=exported,
            copied_count=copied,
            total=len(selections),
            failures=failures,
            destination=destination_root,
            message=self._summary(exported, len(selections), failures, destination_root),
        )
        logger.info(outcome.message)

        if not outcome.ok:
            raise ExportFailedError(outcome)
        return outcome

    @staticmethod
    def _copy_one(label: str, source_path: str, filename: str, image_dir: str) -> str:
        if not os.path.exists(source_path):
            return f"Source file does not exist: {source_path}"

        dest_path = os.path.join(image_dir, f"{sanitize_label(label)}_{filename}")
        try:
            shutil.copy2(source_path, dest_path)
        except (OSError, shutil.Error) as e:
            return f"Failed to copy {source_path} -> {dest_path}: {e}"
        return ""

    @staticmethod
    def _summary(exported: int, total: int, failures: List[str], destination_root: str) -> str:
        if not failures:
            return f"Exported {exported} images to {destination_root}"
        return f"Partially exported ({exported}/{total}): {'; '.join(failures)}"


def export_selected(destination_root: str, selections: Sequence[ExportSelection]) -> ExportOutcome:
    return ExportManager().export_selected(destination_root, selections)
