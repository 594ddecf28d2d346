"""
Folder-set validation: finds the files shared by every selected folder.
"""
import logging
from typing import List, Dict, Sequence

from segcompare.config import FolderRoles
from segcompare.errors import NotFoundError, FolderNotFoundError, InsufficientFoldersError
from segcompare.models import ImageFolder, ValidationReport

logger = logging.getLogger(__name__)


class FolderSetValidator:
    """Checks that a set of folders holds the same image filenames."""

    def __init__(self, min_folders: int = FolderRoles.MIN_FOLDERS):
        self.min_folders = min_folders

    def validate(self, folders: Sequence[str]) -> ValidationReport:
        """
        Intersect the image listings of all folders.

        Args:
            folders: Folder paths, in role order (source images, ground truth,
                primary result, comparison sources...)

        Returns:
            ValidationReport with the common files and, per folder display
            name, the common files that folder lacks

        Raises:
            InsufficientFoldersError: If fewer than min_folders are given
            FolderNotFoundError: If a folder does not exist
        """
        if len(folders) < self.min_folders:
            raise InsufficientFoldersError(len(folders), self.min_folders)

        scanned = [self._scan(index, path) for index, path in enumerate(folders)]

        common_files = list(scanned[0].files)
        for folder in scanned[1:]:
            present = set(folder.files)
            common_files = [name for name in common_files if name in present]

        missing_files: Dict[str, List[str]] = {}
        for folder in scanned:
            present = set(folder.files)
            missing = [name for name in common_files if name not in present]
            if missing:
                missing_files[folder.display_name] = missing

        is_valid = not missing_files and bool(common_files)
        logger.info(f"Validated {len(folders)} folders: {len(common_files)} common files")
        return ValidationReport(is_valid=is_valid, common_files=common_files,
                                missing_files=missing_files)

    @staticmethod
    def _scan(index: int, path: str) -> ImageFolder:
        role = FolderRoles.for_position(index)
        try:
            return ImageFolder.scan(path, role)
        except NotFoundError as e:
            raise FolderNotFoundError(role, path) from e


def validate(folders: Sequence[str]) -> ValidationReport:
    return FolderSetValidator().validate(folders)
