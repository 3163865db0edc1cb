"""
Detection package for the anomaly detection system.
Provides ROI extraction, anomaly masking, region analysis and visualization.
"""

from .roi_extractor import ROIExtractor, ROIPolicy, LineSegment
from .anomaly_masker import AnomalyMasker, MaskCompositor
from .regions import AnomalyRegion, AnomalyRegionAnalyzer
from .visualizer import PipelineVisualizer

__all__ = [
    'ROIExtractor',
    'ROIPolicy',
    'LineSegment',
    'AnomalyMasker',
    'MaskCompositor',
    'AnomalyRegion',
    'AnomalyRegionAnalyzer',
    'PipelineVisualizer'
]
