"""
Thin I/O layer: discovers and decodes input frames, encodes and writes results.
Kept apart from the processing core, which only ever sees pixel buffers.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import cv2
import numpy as np

from ..utils import LoggerMixin, DataLoadingError
from .image_set import Image, ImageSet


class ImageLoader(LoggerMixin):
    """Loads every file matching a glob pattern from a directory, in name order."""

    def __init__(self, input_dir: Union[str, Path], pattern: str = "*hr.bmp", color: bool = True):
        """
        Initialize loader.

        Args:
            input_dir: Directory holding the input frames
            pattern: Glob pattern selecting the frames
            color: Decode as 3-channel BGR; grayscale otherwise
        """
        self.input_dir = Path(input_dir)
        self.pattern = pattern
        self.read_mode = cv2.IMREAD_COLOR if color else cv2.IMREAD_GRAYSCALE

    def discover(self) -> List[Path]:
        """List matching input files, sorted by name."""
        if not self.input_dir.is_dir():
            raise DataLoadingError(
                f"Input directory {self.input_dir} does not exist",
                context={"input_dir": str(self.input_dir)}
            )
        return sorted(p for p in self.input_dir.glob(self.pattern) if p.is_file())

    def load(self) -> ImageSet:
        """Decode all discovered files into an ImageSet."""
        paths = self.discover()
        self.logger.info(f"Found {len(paths)} images matching '{self.pattern}' in {self.input_dir}")
        return ImageSet([self._load_image(path) for path in paths])

    def _load_image(self, image_path: Path) -> Image:
        image = cv2.imread(str(image_path), self.read_mode)
        if image is None:
            raise DataLoadingError(
                f"Could not load image: {image_path}",
                context={"path": str(image_path)}
            )
        return Image(image, frame_id=image_path.name)


class ResultWriter(LoggerMixin):
    """Writes the golden image, ROI mask, per-frame masks and a JSON summary."""

    GOLDEN_IMAGE_NAME = "golden_image.png"
    ROI_MASK_NAME = "ROI_mask.png"
    SUMMARY_NAME = "report.json"

    def __init__(self, output_dir: Union[str, Path], masks_dir: Optional[Union[str, Path]] = None, create: bool = True):
        self.output_dir = Path(output_dir)
        self.masks_dir = Path(masks_dir) if masks_dir else self.output_dir / "Masks"
        self._check_directories(create)

    def _check_directories(self, create: bool):
        missing = [d for d in (self.output_dir, self.masks_dir) if not d.is_dir()]
        if not missing:
            return
        if not create:
            raise DataLoadingError(
                "Output directories do not exist",
                context={"missing": ", ".join(str(d) for d in missing)}
            )
        for directory in missing:
            directory.mkdir(parents=True, exist_ok=True)
            self.logger.debug(f"Created directory {directory}")

    def _write(self, path: Path, image: np.ndarray) -> Path:
        if not cv2.imwrite(str(path), image):
            raise DataLoadingError(f"Failed to write image: {path}", context={"path": str(path)})
        return path

    def write_golden_image(self, golden_image: np.ndarray) -> Path:
        return self._write(self.output_dir / self.GOLDEN_IMAGE_NAME, golden_image)

    def write_roi_mask(self, roi_mask: np.ndarray) -> Path:
        return self._write(self.output_dir / self.ROI_MASK_NAME, roi_mask)

    @staticmethod
    def mask_name(index: int) -> str:
        """File name for the frame at zero-based ``index``."""
        return f"mask{index + 1}.png"

    def write_mask(self, index: int, mask: np.ndarray) -> Path:
        return self._write(self.masks_dir / self.mask_name(index), mask)

    def write_report(self, report) -> Dict[str, Any]:
        """
        Persist every artifact of a pipeline report.

        Frames that failed or were skipped produce no mask file; they are
        listed in the JSON summary with their reason instead.

        Returns:
            Mapping of artifact name to written path; per-frame mask paths
            are nested under 'masks', keyed by frame id
        """
        written = {}
        if report.golden_image is not None:
            written['golden_image'] = self.write_golden_image(report.golden_image)
        if report.roi_mask is not None:
            written['roi_mask'] = self.write_roi_mask(report.roi_mask)

        written['masks'] = {
            frame.frame_id: self.write_mask(frame.index, frame.final_mask)
            for frame in report.frames if frame.succeeded
        }

        summary = {
            'timestamp': datetime.now().isoformat(),
            **report.to_dict(),
            'mask_files': {
                frame.frame_id: self.mask_name(frame.index)
                for frame in report.frames if frame.succeeded
            }
        }
        summary_path = self.output_dir / self.SUMMARY_NAME
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)
        written['summary'] = summary_path

        self.logger.info(f"Wrote {len(written['masks'])} masks and the summary to {self.output_dir}")
        return written
