"""Shared fixtures: small binary mask images written with OpenCV."""

from pathlib import Path
from typing import NamedTuple

import cv2
import numpy as np
import pytest


def write_mask(path: Path, mask: np.ndarray) -> Path:
    """Write a boolean or uint8 mask as an 8-bit grayscale image."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if mask.dtype == bool:
        mask = mask.astype(np.uint8) * 255
    assert cv2.imwrite(str(path), mask)
    return path


def square_mask(size: int = 10, top: int = 0, left: int = 0, side: int = 5) -> np.ndarray:
    mask = np.zeros((size, size), dtype=bool)
    mask[top:top + side, left:left + side] = True
    return mask


class MaskFolders(NamedTuple):
    original: Path
    gt: Path
    mine: Path
    other: Path


@pytest.fixture
def mask_folders(tmp_path: Path) -> MaskFolders:
    """Three files in each of four folders; 'mine' matches ground truth exactly."""
    folders = MaskFolders(*(tmp_path / name for name in ("original", "gt", "mine", "other")))
    for i, name in enumerate(["a.png", "b.png", "c.png"]):
        gt_mask = square_mask(top=i, left=i)
        write_mask(folders.original / name, np.full((10, 10), 90, dtype=np.uint8))
        write_mask(folders.gt / name, gt_mask)
        write_mask(folders.mine / name, gt_mask)
        write_mask(folders.other / name, ~gt_mask)
    return folders
