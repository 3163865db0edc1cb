"""
Golden image synthesis: the per-pixel mean of a prefix of the frame set.
"""

from typing import Optional, Sequence

import cv2
import numpy as np

from ..data import check_same_geometry
from ..utils import LoggerMixin, InvalidSampleCountError


class GoldenImageSynthesizer(LoggerMixin):
    """Composites the first ``sample_count`` frames into one reference image."""

    def __init__(self, sample_count: int = -1):
        """
        Args:
            sample_count: Number of leading frames to average; negative means all
        """
        self.sample_count = sample_count

    def resolve_count(self, available: int, count: Optional[int] = None) -> int:
        """
        Turn a requested count into the number of frames to average.

        Raises:
            InvalidSampleCountError: if an explicit count is 0 or exceeds
                the number of available frames
        """
        count = self.sample_count if count is None else count
        if count < 0:
            return available
        if not 1 <= count <= available:
            raise InvalidSampleCountError(
                f"Sample count must be between 1 and {available}",
                context={"sample_count": count, "available": available}
            )
        return count

    def synthesize(self, images: Sequence[np.ndarray], count: Optional[int] = None) -> np.ndarray:
        """
        Average the first ``count`` frames.

        Each frame contributes with weight 1/count to a float64 accumulator;
        rounding to the 8-bit output happens once at the end.

        Args:
            images: Preprocessed frames of identical geometry
            count: Overrides the configured sample count when given

        Returns:
            8-bit golden image with the frames' shape
        """
        check_same_geometry(images)
        count = self.resolve_count(len(images), count)

        weight = 1.0 / count
        accumulator = np.zeros(images[0].shape, dtype=np.float64)
        for image in images[:count]:
            accumulator = cv2.scaleAdd(image.astype(np.float64), weight, accumulator)

        golden = np.clip(np.rint(accumulator), 0, 255).astype(np.uint8)
        self.logger.info(f"Synthesized golden image from {count} of {len(images)} images")
        return golden
