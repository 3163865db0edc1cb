"""
Per-frame anomaly masks against the golden image, and their composition
with the ROI mask at the original input resolution.
"""

from typing import List, Sequence, Tuple

import cv2
import numpy as np

from ..processing import convert_to_grayscale, remove_speckles, resize_image
from ..utils import (
    LoggerMixin, DimensionMismatchError, MaskingError, handle_exceptions
)


def _to_uint8(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint8:
        return image
    return np.clip(np.rint(image), 0, 255).astype(np.uint8)


def _matching_channels(image: np.ndarray, reference: np.ndarray) -> np.ndarray:
    """Bring ``image`` to the channel layout of ``reference``."""
    if image.ndim == reference.ndim and image.shape[2:] == reference.shape[2:]:
        return image
    if reference.ndim == 2:
        return convert_to_grayscale(image)
    raise DimensionMismatchError(
        "Cannot match channel count of frame to golden image",
        context={"frame": image.shape, "golden": reference.shape}
    )


class AnomalyMasker(LoggerMixin):
    """Thresholds the absolute difference between a frame and the golden image."""

    def __init__(self, difference_threshold: int = 32, speckle_iterations: int = 0):
        """
        Args:
            difference_threshold: Differences at or above this level are anomalous
            speckle_iterations: Erode/dilate steps applied to each mask; 0 disables
        """
        self.difference_threshold = difference_threshold
        self.speckle_iterations = speckle_iterations

    @handle_exceptions(MaskingError)
    def compute_mask(self, image: np.ndarray, golden_image: np.ndarray) -> np.ndarray:
        """
        Anomaly mask of one frame: 255 where |frame - golden| >= threshold.

        Raises:
            DimensionMismatchError: if frame and golden image differ in size
        """
        golden = _to_uint8(golden_image)
        frame = _matching_channels(_to_uint8(image), golden)
        if frame.shape[:2] != golden.shape[:2]:
            raise DimensionMismatchError(
                "Frame and golden image differ in size",
                context={"frame": frame.shape, "golden": golden.shape}
            )

        difference = cv2.absdiff(frame, golden)
        if difference.ndim == 3:
            # A pixel is anomalous when any of its channels is
            difference = difference.max(axis=2)
        # '>' on t - 1 is '>=' on t for 8-bit data
        _, mask = cv2.threshold(difference, self.difference_threshold - 1, 255, cv2.THRESH_BINARY)

        if self.speckle_iterations > 0:
            mask = remove_speckles(mask, self.speckle_iterations)
        return mask

    def compute_masks(self, images: Sequence[np.ndarray], golden_image: np.ndarray) -> List[np.ndarray]:
        masks = [self.compute_mask(image, golden_image) for image in images]
        self.logger.info(f"Computed {len(masks)} anomaly masks (threshold={self.difference_threshold})")
        return masks


class MaskCompositor(LoggerMixin):
    """Restricts anomaly masks to the ROI and restores input resolution."""

    def __init__(self, interpolation: int = cv2.INTER_CUBIC):
        self.interpolation = interpolation

    @handle_exceptions(MaskingError)
    def apply_roi_single(self, mask: np.ndarray, roi_mask: np.ndarray) -> np.ndarray:
        """Masked copy: pixels where the ROI is 0 become 0, others keep their value."""
        if mask.shape[:2] != roi_mask.shape[:2]:
            raise DimensionMismatchError(
                "Anomaly mask and ROI mask differ in size",
                context={"mask": mask.shape, "roi": roi_mask.shape}
            )
        return cv2.bitwise_and(mask, mask, mask=(roi_mask != 0).astype(np.uint8))

    def apply_roi(self, masks: Sequence[np.ndarray], roi_mask: np.ndarray) -> List[np.ndarray]:
        return [self.apply_roi_single(mask, roi_mask) for mask in masks]

    def restore_resolution_single(self, mask: np.ndarray, original_size: Tuple[int, int]) -> np.ndarray:
        """
        Resize a mask to ``original_size`` (width, height).

        The result is not re-thresholded: interpolation leaves soft edges.
        """
        if tuple(original_size) == (mask.shape[1], mask.shape[0]):
            return mask.copy()
        return resize_image(mask, target_size=original_size, interpolation=self.interpolation)

    def restore_resolution(self, masks: Sequence[np.ndarray], original_size: Tuple[int, int]) -> List[np.ndarray]:
        return [self.restore_resolution_single(mask, original_size) for mask in masks]
