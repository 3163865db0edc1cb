"""
Region-of-interest extraction from the golden image.

Dominant straight structures (a grid or spacer pattern) are found with a
probabilistic Hough transform, rasterized, merged by morphology and then
binarized into the mask of pixels eligible for anomaly reporting.
"""

import math
from enum import Enum
from typing import List, NamedTuple, Tuple

import cv2
import numpy as np

from ..processing import close_gaps, convert_to_grayscale
from ..utils import LoggerMixin, ROIExtractionError, ROIConfig, handle_exceptions


class ROIPolicy(str, Enum):
    """Which side of the detected structure forms the region of interest."""
    # Grid lines are a fixed fixture; analyse the cells between them
    EXCLUDE_STRUCTURE = "exclude_structure"
    # Analyse only the footprint of the detected lines
    INCLUDE_STRUCTURE = "include_structure"


class LineSegment(NamedTuple):
    start: Tuple[int, int]
    end: Tuple[int, int]

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])


class ROIExtractor(LoggerMixin):
    """
    Derives a binary ROI mask (values 0 or 255) from a golden image.
    """

    def __init__(
        self,
        blur_kernel_size: int = 15,
        canny_low: float = 12,
        canny_high: float = 24,
        hough_rho: float = 1.0,
        hough_theta: float = math.pi / 180,
        hough_threshold: int = 50,
        hough_min_line_length: float = 5,
        hough_max_line_gap: float = 50,
        line_thickness: int = 1,
        morphology_iterations: int = 7,
        binarization_threshold: int = 125,
        policy: ROIPolicy = ROIPolicy.EXCLUDE_STRUCTURE
    ):
        """
        Initialize ROI extractor.

        Args:
            blur_kernel_size: Side of the box blur applied before edge detection
            canny_low: Lower hysteresis threshold of the Canny detector
            canny_high: Upper hysteresis threshold of the Canny detector
            hough_rho: Distance resolution of the accumulator in pixels
            hough_theta: Angle resolution of the accumulator in radians
            hough_threshold: Minimum accumulator votes for a line
            hough_min_line_length: Shorter segments are rejected
            hough_max_line_gap: Largest gap joined into one segment
            line_thickness: Width used when rasterizing segments
            morphology_iterations: Dilation steps of the gap-closing pass
            binarization_threshold: Level separating structure from background
            policy: Whether structure is excluded from or forms the ROI
        """
        self.blur_kernel_size = blur_kernel_size
        self.canny_low = canny_low
        self.canny_high = canny_high
        self.hough_rho = hough_rho
        self.hough_theta = hough_theta
        self.hough_threshold = hough_threshold
        self.hough_min_line_length = hough_min_line_length
        self.hough_max_line_gap = hough_max_line_gap
        self.line_thickness = line_thickness
        self.morphology_iterations = morphology_iterations
        self.binarization_threshold = binarization_threshold
        self.policy = ROIPolicy(policy)

    @classmethod
    def from_config(cls, config: ROIConfig) -> "ROIExtractor":
        return cls(
            blur_kernel_size=config.blur_kernel_size,
            canny_low=config.canny_low,
            canny_high=config.canny_high,
            hough_rho=config.hough_rho,
            hough_theta=config.hough_theta,
            hough_threshold=config.hough_threshold,
            hough_min_line_length=config.hough_min_line_length,
            hough_max_line_gap=config.hough_max_line_gap,
            line_thickness=config.line_thickness,
            morphology_iterations=config.morphology_iterations,
            binarization_threshold=config.binarization_threshold,
            policy=config.policy
        )

    def smooth(self, image: np.ndarray) -> np.ndarray:
        """Box-blur to suppress local texture before edge detection."""
        return cv2.blur(image, (self.blur_kernel_size, self.blur_kernel_size))

    def detect_edges(self, image: np.ndarray) -> np.ndarray:
        return cv2.Canny(image, self.canny_low, self.canny_high)

    def detect_lines(self, edges: np.ndarray) -> List[LineSegment]:
        """Run the probabilistic Hough transform over a binary edge map."""
        lines = cv2.HoughLinesP(
            edges,
            self.hough_rho,
            self.hough_theta,
            self.hough_threshold,
            minLineLength=self.hough_min_line_length,
            maxLineGap=self.hough_max_line_gap
        )
        if lines is None:
            return []
        return [
            LineSegment((int(x1), int(y1)), (int(x2), int(y2)))
            for x1, y1, x2, y2 in lines.reshape(-1, 4)
        ]

    def render_lines(self, segments: List[LineSegment], shape: Tuple[int, int]) -> np.ndarray:
        """Draw anti-aliased white segments on a black canvas of ``shape``."""
        canvas = np.zeros(shape[:2], dtype=np.uint8)
        for segment in segments:
            cv2.line(canvas, segment.start, segment.end, 255, self.line_thickness, cv2.LINE_AA)
        return canvas

    def binarize(self, structure: np.ndarray) -> np.ndarray:
        """
        Binarize the merged structure mask according to the policy.

        Under EXCLUDE_STRUCTURE pixels at or above the threshold become 0 and
        the rest 255; INCLUDE_STRUCTURE is the complement.
        """
        # cv2.threshold compares with '>', so t - 1 gives '>=' on 8-bit data
        level = self.binarization_threshold - 1
        mode = cv2.THRESH_BINARY_INV if self.policy is ROIPolicy.EXCLUDE_STRUCTURE else cv2.THRESH_BINARY
        _, mask = cv2.threshold(structure, level, 255, mode)
        return mask

    @handle_exceptions(ROIExtractionError)
    def extract(self, golden_image: np.ndarray) -> np.ndarray:
        """
        Derive the ROI mask of a golden image.

        Args:
            golden_image: 8-bit golden image (converted to gray if needed)

        Returns:
            Single-channel mask with the golden image's size, values 0 or 255
        """
        gray = convert_to_grayscale(golden_image)
        edges = self.detect_edges(self.smooth(gray))
        segments = self.detect_lines(edges)
        structure = self.render_lines(segments, gray.shape)
        structure = close_gaps(structure, self.morphology_iterations)
        roi_mask = self.binarize(structure)

        coverage = float(np.count_nonzero(roi_mask)) / roi_mask.size
        self.logger.info(
            f"Extracted ROI from {len(segments)} line segments "
            f"({coverage:.1%} of pixels included, policy={self.policy.value})"
        )
        return roi_mask
