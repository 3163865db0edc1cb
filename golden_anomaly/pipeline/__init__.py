"""
Pipeline package for the anomaly detection system.
Orchestrates the processing and detection stages over an image set.
"""

from .inspection import InspectionPipeline, PipelineReport, FrameResult, CancellationToken

__all__ = [
    'InspectionPipeline',
    'PipelineReport',
    'FrameResult',
    'CancellationToken'
]
