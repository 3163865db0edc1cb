"""
Inspection pipeline: per-frame preprocessing, golden image and ROI barriers,
then per-frame anomaly masking, composition and region analysis.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from ..data import ImageSet
from ..detection import (
    ROIExtractor, AnomalyMasker, MaskCompositor, AnomalyRegion, AnomalyRegionAnalyzer
)
from ..processing import Preprocessor, GoldenImageSynthesizer
from ..utils import (
    LoggerMixin, ConfigManager, EmptyInputError, PerImageProcessingError, log_execution_time
)


class CancellationToken:
    """Cooperative cancellation flag checked before each frame's work starts."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class FrameResult:
    """Outcome of one frame; exactly one of mask, error or skipped applies."""
    index: int
    frame_id: str
    final_mask: Optional[np.ndarray] = None
    regions: List[AnomalyRegion] = field(default_factory=list)
    error: Optional[PerImageProcessingError] = None
    skipped: bool = False

    @property
    def succeeded(self) -> bool:
        return self.final_mask is not None and self.error is None

    @property
    def status(self) -> str:
        if self.skipped:
            return "skipped"
        return "ok" if self.succeeded else "failed"

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'index': self.index,
            'frame_id': self.frame_id,
            'status': self.status,
        }
        if self.succeeded:
            result['anomalous_pixels'] = int(np.count_nonzero(self.final_mask))
            result['num_regions'] = len(self.regions)
            result['regions'] = [r.to_dict() for r in self.regions]
        if self.error is not None:
            result['error'] = str(self.error)
        return result


@dataclass
class PipelineReport:
    golden_image: Optional[np.ndarray]
    roi_mask: Optional[np.ndarray]
    frames: List[FrameResult]
    original_size: Tuple[int, int]
    cancelled: bool = False

    @property
    def succeeded(self) -> List[FrameResult]:
        return [f for f in self.frames if f.succeeded]

    @property
    def failed(self) -> List[FrameResult]:
        return [f for f in self.frames if f.error is not None]

    @property
    def skipped(self) -> List[FrameResult]:
        return [f for f in self.frames if f.skipped]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_size': list(self.original_size),
            'cancelled': self.cancelled,
            'total_images': len(self.frames),
            'succeeded': len(self.succeeded),
            'failed': len(self.failed),
            'skipped': len(self.skipped),
            'frames': [f.to_dict() for f in self.frames]
        }


_SKIPPED = object()


class InspectionPipeline(LoggerMixin):
    """
    Runs the full anomaly detection pipeline over an ImageSet.

    Per-frame stages run on a thread pool; a failure in one frame is recorded
    against that frame and does not stop its siblings. Golden image synthesis
    and ROI extraction are sequential barriers between the two fan-outs.
    """

    def __init__(
        self,
        preprocessor: Optional[Preprocessor] = None,
        synthesizer: Optional[GoldenImageSynthesizer] = None,
        roi_extractor: Optional[ROIExtractor] = None,
        masker: Optional[AnomalyMasker] = None,
        compositor: Optional[MaskCompositor] = None,
        region_analyzer: Optional[AnomalyRegionAnalyzer] = None,
        num_workers: int = 4,
        show_progress: bool = False
    ):
        self.preprocessor = preprocessor or Preprocessor()
        self.synthesizer = synthesizer or GoldenImageSynthesizer(sample_count=4)
        self.roi_extractor = roi_extractor or ROIExtractor()
        self.masker = masker or AnomalyMasker()
        self.compositor = compositor or MaskCompositor(interpolation=self.preprocessor.interpolation)
        self.region_analyzer = region_analyzer or AnomalyRegionAnalyzer()
        self.num_workers = num_workers
        self.show_progress = show_progress

        self.logger.info(f"Initialized inspection pipeline with {num_workers} workers")

    @classmethod
    def from_config(cls, config: ConfigManager, show_progress: bool = False) -> "InspectionPipeline":
        """Build every stage from a validated configuration."""
        preprocessor = Preprocessor.from_config(config.get_preprocessing_config())
        anomaly_config = config.get_anomaly_config()
        return cls(
            preprocessor=preprocessor,
            synthesizer=GoldenImageSynthesizer(config.get_golden_config().sample_count),
            roi_extractor=ROIExtractor.from_config(config.get_roi_config()),
            masker=AnomalyMasker(
                difference_threshold=anomaly_config.difference_threshold,
                speckle_iterations=anomaly_config.speckle_iterations
            ),
            compositor=MaskCompositor(interpolation=preprocessor.interpolation),
            region_analyzer=AnomalyRegionAnalyzer(min_region_area=anomaly_config.min_region_area),
            num_workers=config.get_pipeline_config().num_workers,
            show_progress=show_progress
        )

    def _fan_out(
        self,
        func: Callable[[Any], Any],
        items: Sequence[Tuple[int, str, Any]],
        stage: str,
        token: Optional[CancellationToken]
    ) -> Dict[int, Any]:
        """
        Apply ``func`` to each item's payload on the worker pool.

        Returns a mapping from frame index to the result, a
        PerImageProcessingError, or _SKIPPED when cancellation was observed
        before the frame started.
        """
        def work(payload):
            if token is not None and token.cancelled:
                return _SKIPPED
            return func(payload)

        outcomes: Dict[int, Any] = {}
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            futures = {
                executor.submit(work, payload): (index, frame_id)
                for index, frame_id, payload in items
            }
            completed = as_completed(futures)
            if self.show_progress:
                completed = tqdm(completed, total=len(futures), desc=stage)

            for future in completed:
                index, frame_id = futures[future]
                try:
                    outcomes[index] = future.result()
                except Exception as e:
                    error = PerImageProcessingError(
                        frame_id,
                        f"{stage} failed for {frame_id}: {e}",
                        context={"stage": stage, "original_exception": type(e).__name__}
                    )
                    error.__cause__ = e
                    self.logger.warning(str(error))
                    outcomes[index] = error
        return outcomes

    def _reference(
        self,
        image_set: ImageSet,
        cancel_token: Optional[CancellationToken],
        extract_roi: bool = True
    ):
        """Stage (a) fan-out followed by the golden image and ROI barriers."""
        image_set.validate()
        results = [FrameResult(index=i, frame_id=image.frame_id) for i, image in enumerate(image_set)]

        preprocessed = self._fan_out(
            self.preprocessor.preprocess,
            [(i, image.frame_id, image.pixels) for i, image in enumerate(image_set)],
            "preprocess",
            cancel_token
        )
        ready = self._record_outcomes(results, preprocessed)

        if cancel_token is not None and cancel_token.cancelled:
            return results, ready, None, None
        if not ready:
            raise EmptyInputError(
                "No image survived preprocessing",
                context={"failed": len(results)}
            )

        golden_image = self.synthesizer.synthesize([ready[i] for i in sorted(ready)])
        roi_mask = self.roi_extractor.extract(golden_image) if extract_roi else None
        return results, ready, golden_image, roi_mask

    def build_reference(
        self,
        image_set: ImageSet,
        cancel_token: Optional[CancellationToken] = None,
        extract_roi: bool = True
    ) -> PipelineReport:
        """
        Preprocess every frame, then synthesize the golden image and ROI mask.

        Frames that fail preprocessing are recorded as failed and left out of
        the golden image. No anomaly masks are computed, so surviving frames
        carry neither a mask nor an error.
        """
        results, _, golden_image, roi_mask = self._reference(image_set, cancel_token, extract_roi)
        if golden_image is None:
            return self._cancelled_report(results, image_set.size)
        return PipelineReport(
            golden_image=golden_image,
            roi_mask=roi_mask,
            frames=results,
            original_size=image_set.size
        )

    @log_execution_time
    def run(self, image_set: ImageSet, cancel_token: Optional[CancellationToken] = None) -> PipelineReport:
        """
        Run the pipeline.

        Raises:
            EmptyInputError: if the set is empty, or no frame survives preprocessing
            DimensionMismatchError: if frames differ in size or channels
            InvalidSampleCountError: if the golden sample count is out of range
        """
        results, ready, golden_image, roi_mask = self._reference(image_set, cancel_token)
        original_size = image_set.size
        if golden_image is None:
            return self._cancelled_report(results, original_size)

        def mask_frame(frame: np.ndarray):
            mask = self.masker.compute_mask(frame, golden_image)
            mask = self.compositor.apply_roi_single(mask, roi_mask)
            mask = self.compositor.restore_resolution_single(mask, original_size)
            return mask, self.region_analyzer.extract_regions(mask)

        masked = self._fan_out(
            mask_frame,
            [(i, results[i].frame_id, ready[i]) for i in sorted(ready)],
            "mask",
            cancel_token
        )
        for index, (final_mask, regions) in self._record_outcomes(results, masked).items():
            results[index].final_mask = final_mask
            results[index].regions = regions

        report = PipelineReport(
            golden_image=golden_image,
            roi_mask=roi_mask,
            frames=results,
            original_size=original_size,
            cancelled=bool(cancel_token is not None and cancel_token.cancelled)
        )
        self.logger.info(
            f"Pipeline finished: {len(report.succeeded)} succeeded, "
            f"{len(report.failed)} failed, {len(report.skipped)} skipped"
        )
        return report

    @staticmethod
    def _record_outcomes(results: List[FrameResult], outcomes: Dict[int, Any]) -> Dict[int, Any]:
        """Store errors and skips on ``results``; return the successful outcomes."""
        successful = {}
        for index, outcome in outcomes.items():
            if outcome is _SKIPPED:
                results[index].skipped = True
            elif isinstance(outcome, PerImageProcessingError):
                results[index].error = outcome
            else:
                successful[index] = outcome
        return successful

    def _cancelled_report(self, results: List[FrameResult], original_size: Tuple[int, int]) -> PipelineReport:
        for frame in results:
            if frame.error is None:
                frame.skipped = True
        self.logger.warning("Pipeline cancelled before golden image synthesis")
        return PipelineReport(
            golden_image=None,
            roi_mask=None,
            frames=results,
            original_size=original_size,
            cancelled=True
        )
