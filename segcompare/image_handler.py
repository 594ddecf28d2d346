"""
Image folder scanning and mask preprocessing for the segmentation comparator.
"""
import os
import logging
from typing import List, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError
import cv2

from segcompare.config import ImageExtensions, MaskDefaults
from segcompare.errors import NotFoundError, ImageDecodeError

logger = logging.getLogger(__name__)


class ImageSetScanner:
    """Lists the qualifying image files of a directory."""

    SUPPORTED_FORMATS = ImageExtensions.SUPPORTED

    @staticmethod
    def scan(folder_path: str) -> List[str]:
        """
        List image filenames directly inside a folder.

        Args:
            folder_path: Directory to scan

        Returns:
            Lexicographically sorted list of image filenames

        Raises:
            NotFoundError: If folder_path is not an existing directory
        """
        if not folder_path or not os.path.isdir(folder_path):
            raise NotFoundError(folder_path)

        files = []
        try:
            with os.scandir(folder_path) as entries:
                for entry in entries:
                    try:
                        # is_file() follows symlinks, so links to directories are rejected
                        if not entry.is_file():
                            continue
                    except OSError:
                        continue
                    if ImageExtensions.is_supported(entry.name):
                        files.append(entry.name)
        except OSError as e:
            # Unlistable folders yield whatever was read before the failure
            logger.warning(f"Could not list {folder_path}: {e}")

        files.sort()
        logger.debug(f"Found {len(files)} images in {folder_path}")
        return files


class MaskPreprocessor:
    """Decodes mask images and reduces them to binary foreground masks."""

    LUMA_WEIGHTS = np.array([[0.2126, 0.7152, 0.0722]], dtype=np.float32)

    @staticmethod
    def load_image(path: str, side: str = "first") -> Image.Image:
        """
        Decode an image file fully into memory.

        Args:
            path: Image file path
            side: Which operand of a comparison this image is, used in errors

        Returns:
            Decoded PIL Image

        Raises:
            ImageDecodeError: If the file is missing or not a readable image
        """
        try:
            with Image.open(path) as image:
                image.load()
                return image.copy()
        except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(path, side, str(e)) from e

    @staticmethod
    def image_size(image: Image.Image) -> Tuple[int, int]:
        """(width, height) of a decoded image."""
        return image.width, image.height

    @staticmethod
    def to_luminance(image: Image.Image) -> np.ndarray:
        """
        Convert an image to a single 8-bit luminance channel.

        Alpha is ignored and 16-bit data is scaled down to 8 bits.

        Args:
            image: Decoded PIL Image

        Returns:
            2-D uint8 array of shape (height, width)
        """
        if image.mode == 'L':
            return np.array(image)

        if image.mode in ('I;16', 'I;16L', 'I;16B', 'I;16N', 'I'):
            wide = np.array(image).astype(np.float64)
            return np.clip(np.rint(wide / 257.0), 0, 255).astype(np.uint8)

        if image.mode == 'F':
            return np.clip(np.rint(np.array(image)), 0, 255).astype(np.uint8)

        if image.mode == 'LA':
            return np.array(image.getchannel('L'))

        rgb = np.array(image.convert('RGB')).astype(np.float32)
        # Rec.709 luma weights
        luma = cv2.transform(rgb, MaskPreprocessor.LUMA_WEIGHTS)
        return np.clip(np.rint(luma), 0, 255).astype(np.uint8)

    @staticmethod
    def binarize(luminance: np.ndarray, threshold: int = MaskDefaults.THRESHOLD) -> np.ndarray:
        """
        Classify each pixel as foreground (True) or background (False).

        Args:
            luminance: 2-D luminance array
            threshold: Pixels strictly above this value are foreground

        Returns:
            Boolean mask of the same shape
        """
        return luminance > threshold
