"""
Exceptions raised by the comparison engine.
"""
from typing import Tuple


class SegCompareError(Exception):
    """Base class for every error raised by the engine."""


class NotFoundError(SegCompareError, FileNotFoundError):
    """A folder or file that must exist is absent."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(message or f"Folder does not exist: {path}")

    def __str__(self):
        return self.args[0]


class FolderNotFoundError(NotFoundError):
    """One of the folders handed to the validator is absent."""

    def __init__(self, role: str, path: str):
        self.role = role
        super().__init__(path, f"'{role}' folder does not exist: {path}")


class DestinationNotFoundError(NotFoundError):
    """The export root is absent."""

    def __init__(self, path: str):
        super().__init__(path, f"Export folder does not exist: {path}")


class InsufficientFoldersError(SegCompareError, ValueError):
    def __init__(self, count: int, minimum: int):
        self.count = count
        self.minimum = minimum
        super().__init__(f"At least {minimum} folders are required, got {count}")


class ImageDecodeError(SegCompareError):
    """An image could not be decoded; ``side`` is "first" or "second"."""

    def __init__(self, path: str, side: str, reason: str = ""):
        self.path = path
        self.side = side
        detail = f": {reason}" if reason else ""
        super().__init__(f"Cannot open {side} image {path}{detail}")


class DimensionMismatchError(SegCompareError, ValueError):
    def __init__(self, first_size: Tuple[int, int], second_size: Tuple[int, int],
                 first_path: str, second_path: str):
        self.first_size = first_size
        self.second_size = second_size
        self.first_path = first_path
        self.second_path = second_path
        super().__init__(
            f"Image size {first_size[0]}x{first_size[1]} does not match "
            f"{second_size[0]}x{second_size[1]}: {first_path} vs {second_path}"
        )


class ExportFailedError(SegCompareError):
    """No export selection succeeded; ``outcome`` holds the details."""

    def __init__(self, outcome):
        self.outcome = outcome
        super().__init__(outcome.message)
