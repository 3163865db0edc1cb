"""
Golden-Image Anomaly Detection with Automatic Grid ROI

Detects structural anomalies in a series of co-registered grayscale frames by
comparing each frame against a synthesized reference ("golden") image,
restricted to a region of interest derived from the dominant grid/spacer lines
in the scene.

Key Features:
- Grayscale reduction, resampling and per-image auto-contrast
- Golden image synthesis from a prefix of the frame set
- Automatic ROI extraction with Canny edges, Hough lines and morphology
- Per-frame difference thresholding, ROI composition and region analysis
- Thread-pool fan-out with per-frame failure isolation and cancellation
- Logging, configuration management and error handling
- Command-line interface for full runs, golden image and ROI previews

Version: 1.0.0
"""

__version__ = "1.0.0"

# Core imports
from .utils import ConfigManager, LoggerManager, setup_logging
from .data import Image, ImageSet, ImageLoader, ResultWriter
from .processing import Preprocessor, GoldenImageSynthesizer, close_gaps, remove_speckles
from .detection import (
    ROIExtractor, ROIPolicy, LineSegment, AnomalyMasker, MaskCompositor,
    AnomalyRegionAnalyzer, PipelineVisualizer
)
from .pipeline import InspectionPipeline, PipelineReport, FrameResult, CancellationToken

__all__ = [
    # Version info
    '__version__',

    # Core utilities
    'ConfigManager',
    'LoggerManager',
    'setup_logging',

    # Data handling
    'Image',
    'ImageSet',
    'ImageLoader',
    'ResultWriter',

    # Processing
    'Preprocessor',
    'GoldenImageSynthesizer',
    'close_gaps',
    'remove_speckles',

    # Detection
    'ROIExtractor',
    'ROIPolicy',
    'LineSegment',
    'AnomalyMasker',
    'MaskCompositor',
    'AnomalyRegionAnalyzer',
    'PipelineVisualizer',

    # Pipeline
    'InspectionPipeline',
    'PipelineReport',
    'FrameResult',
    'CancellationToken'
]
