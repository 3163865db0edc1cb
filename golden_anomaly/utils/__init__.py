"""
Utilities package for the anomaly detection system.
Provides common functionality across the application.
"""

from .logger import (
    LoggerManager, LoggerMixin, get_logger, setup_logging, log_execution_time
)
from .config import (
    ConfigManager,
    PreprocessingConfig, GoldenImageConfig, ROIConfig, AnomalyConfig,
    PipelineConfig, PathsConfig
)
from .exceptions import (
    AnomalyDetectionError,
    ConfigurationError,
    DataLoadingError,
    EmptyInputError,
    DimensionMismatchError,
    InvalidSampleCountError,
    PreprocessingError,
    DegenerateImageError,
    ROIExtractionError,
    MaskingError,
    PerImageProcessingError,
    VisualizationError,
    handle_exceptions
)

__all__ = [
    # Logger utilities
    'LoggerManager',
    'LoggerMixin',
    'get_logger',
    'setup_logging',
    'log_execution_time',

    # Configuration utilities
    'ConfigManager',
    'PreprocessingConfig',
    'GoldenImageConfig',
    'ROIConfig',
    'AnomalyConfig',
    'PipelineConfig',
    'PathsConfig',

    # Exception classes
    'AnomalyDetectionError',
    'ConfigurationError',
    'DataLoadingError',
    'EmptyInputError',
    'DimensionMismatchError',
    'InvalidSampleCountError',
    'PreprocessingError',
    'DegenerateImageError',
    'ROIExtractionError',
    'MaskingError',
    'PerImageProcessingError',
    'VisualizationError',
    'handle_exceptions'
]
