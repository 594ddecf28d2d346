"""
像素遮罩指標模組 - 計算兩張分割遮罩之間的 IOU 與像素準確率
Pixel mask metrics module computing IOU and pixel accuracy between two masks.

兩張影像皆先轉換為灰階，再以固定閾值二值化為前景/背景，
之後逐像素比較分類結果。
"""
import numpy as np
from typing import Tuple

from segcompare.config import MaskDefaults
from segcompare.errors import DimensionMismatchError
from segcompare.image_handler import MaskPreprocessor
from segcompare.models import PixelMaskPair


class PixelMetricsCalculator:
    """
    像素指標計算器 - 比較兩張相同尺寸的遮罩影像
    Computes IOU and accuracy between two same-dimension mask images.

    計算原理：
    1. 解碼兩張影像並檢查尺寸是否一致
    2. 轉換為單通道亮度
    3. 亮度嚴格大於閾值者為前景
    4. 依前景/背景分類計算交集、聯集與一致像素數
    """

    def __init__(self, threshold: int = MaskDefaults.THRESHOLD):
        """
        初始化像素指標計算器
        Initialize the calculator.

        Args:
            threshold: 前景閾值，亮度嚴格大於此值視為前景
                      Luminance above which a pixel counts as foreground
        """
        self.threshold = threshold

    def iou(self, path_a: str, path_b: str) -> float:
        """
        計算兩張遮罩的 IOU
        Intersection-over-Union of the foreground of two masks.

        Args:
            path_a: 第一張影像路徑 / first image path
            path_b: 第二張影像路徑 / second image path

        Returns:
            介於 0 與 1 之間的分數；兩張皆無前景時為 1.0
            Score in [0, 1]; 1.0 when neither image has foreground

        Raises:
            ImageDecodeError: 影像無法解碼 / an image cannot be decoded
            DimensionMismatchError: 尺寸不一致 / sizes differ
        """
        pair = self.load_pair(path_a, path_b)
        return iou_from_masks(pair.first, pair.second)

    def accuracy(self, path_a: str, path_b: str) -> float:
        """
        計算兩張遮罩的像素準確率
        Fraction of pixels whose foreground/background classification agrees.

        Args:
            path_a: 第一張影像路徑 / first image path
            path_b: 第二張影像路徑 / second image path

        Returns:
            (TP + TN) / 總像素數
            (TP + TN) / total pixels

        Raises:
            ImageDecodeError: 影像無法解碼 / an image cannot be decoded
            DimensionMismatchError: 尺寸不一致 / sizes differ
        """
        pair = self.load_pair(path_a, path_b)
        return accuracy_from_masks(pair.first, pair.second)

    def load_pair(self, path_a: str, path_b: str) -> PixelMaskPair:
        """
        解碼兩張影像並二值化
        Decode both images and binarize them.

        Args:
            path_a: 第一張影像路徑 / first image path
            path_b: 第二張影像路徑 / second image path

        Returns:
            二值遮罩配對 / pair of boolean masks
        """
        # 步驟1：解碼影像（每次呼叫都重新讀取，不做快取）
        # Decode both images; nothing is cached between calls
        image_a = MaskPreprocessor.load_image(path_a, side="first")
        image_b = MaskPreprocessor.load_image(path_b, side="second")

        # 步驟2：檢查尺寸
        # Dimensions must match exactly
        size_a = MaskPreprocessor.image_size(image_a)
        size_b = MaskPreprocessor.image_size(image_b)
        if size_a != size_b:
            raise DimensionMismatchError(size_a, size_b, path_a, path_b)

        # 步驟3：轉為亮度並二值化
        # Convert to luminance and threshold
        mask_a = MaskPreprocessor.binarize(MaskPreprocessor.to_luminance(image_a), self.threshold)
        mask_b = MaskPreprocessor.binarize(MaskPreprocessor.to_luminance(image_b), self.threshold)

        return PixelMaskPair(first=mask_a, second=mask_b, first_path=path_a, second_path=path_b)


def confusion_counts(mask_a: np.ndarray, mask_b: np.ndarray) -> Tuple[int, int, int]:
    """
    Count (intersection, union, agreeing pixels) of two boolean masks.
    """
    intersection = int(np.count_nonzero(mask_a & mask_b))
    union = int(np.count_nonzero(mask_a | mask_b))
    agreeing = int(np.count_nonzero(mask_a == mask_b))
    return intersection, union, agreeing


def iou_from_masks(mask_a: np.ndarray, mask_b: np.ndarray) -> float:
    intersection, union, _ = confusion_counts(mask_a, mask_b)
    if union == 0:
        # 兩張皆為背景時視為完全一致
        return 1.0
    return intersection / union


def accuracy_from_masks(mask_a: np.ndarray, mask_b: np.ndarray) -> float:
    _, _, agreeing = confusion_counts(mask_a, mask_b)
    return agreeing / mask_a.size


_default_calculator = PixelMetricsCalculator()


def iou(path_a: str, path_b: str) -> float:
    """IOU with the default threshold."""
    return _default_calculator.iou(path_a, path_b)


def accuracy(path_a: str, path_b: str) -> float:
    """Pixel accuracy with the default threshold."""
    return _default_calculator.accuracy(path_a, path_b)
