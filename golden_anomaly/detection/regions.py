"""
Connected-region analysis of final anomaly masks.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np
from skimage import measure

from ..utils import LoggerMixin, MaskingError, handle_exceptions


@dataclass
class AnomalyRegion:
    bbox: Tuple[int, int, int, int]  # (x, y, w, h)
    area: int
    centroid: Tuple[float, float]  # (x, y)

    def to_dict(self) -> Dict:
        return {
            'bbox': list(self.bbox),
            'area': self.area,
            'centroid': [round(c, 2) for c in self.centroid]
        }


class AnomalyRegionAnalyzer(LoggerMixin):
    """
    Labels connected foreground regions of a mask.

    Resized masks carry interpolated edges, so foreground is taken as
    ``mask >= level`` before labelling.
    """

    def __init__(self, min_region_area: int = 1, level: int = 128):
        self.min_region_area = min_region_area
        self.level = level

    @handle_exceptions(MaskingError)
    def extract_regions(self, mask: np.ndarray) -> List[AnomalyRegion]:
        """
        Extract regions at least ``min_region_area`` pixels large, largest first.
        """
        labeled_mask = measure.label(mask >= self.level, connectivity=2)

        regions = []
        for region in measure.regionprops(labeled_mask):
            if region.area < self.min_region_area:
                continue
            min_row, min_col, max_row, max_col = region.bbox
            regions.append(AnomalyRegion(
                bbox=(int(min_col), int(min_row), int(max_col - min_col), int(max_row - min_row)),
                area=int(region.area),
                centroid=(float(region.centroid[1]), float(region.centroid[0]))
            ))

        regions.sort(key=lambda r: r.area, reverse=True)
        return regions

    def count_regions(self, mask: np.ndarray) -> int:
        return len(self.extract_regions(mask))
