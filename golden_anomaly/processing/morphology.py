"""
Composable morphological operations on binary masks.
Both use OpenCV's default 3x3 rectangular structuring element.
"""

import cv2
import numpy as np


def _validate_iterations(iterations: int):
    if iterations < 1:
        raise ValueError(f"iterations must be at least 1, got {iterations}")


def close_gaps(mask: np.ndarray, iterations: int) -> np.ndarray:
    """
    Dilate ``iterations`` times, then erode ``iterations - 1`` times.

    Grows thin foreground structures into solid regions and merges nearby
    fragments. The final result stays one step wider than the input, so
    gaps between collinear segments remain closed.

    Args:
        mask: Single-channel binary mask
        iterations: Number of dilation steps (>= 1)

    Returns:
        New mask; the input is not modified
    """
    _validate_iterations(iterations)
    result = cv2.dilate(mask, None, iterations=iterations)
    if iterations > 1:
        result = cv2.erode(result, None, iterations=iterations - 1)
    return result


def remove_speckles(mask: np.ndarray, iterations: int) -> np.ndarray:
    """
    Erode ``iterations`` times, then dilate the same number of times.

    Removes isolated foreground specks no wider than ``2 * iterations``
    pixels while restoring the extent of larger regions.
    """
    _validate_iterations(iterations)
    result = cv2.erode(mask, None, iterations=iterations)
    return cv2.dilate(result, None, iterations=iterations)
