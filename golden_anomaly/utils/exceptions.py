"""
Custom exception classes for the golden-image anomaly detection system.
Provides structured error handling with detailed context.
"""

from functools import wraps
from typing import Optional, Dict, Any


class AnomalyDetectionError(Exception):
    """Base exception class for anomaly detection system."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and context.

        Args:
            message: Error message
            context: Additional context information
        """
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation of the exception."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ConfigurationError(AnomalyDetectionError):
    """Exception raised when configuration is invalid."""
    pass


class DataLoadingError(AnomalyDetectionError):
    """Exception raised when images cannot be discovered, decoded or written."""
    pass


class EmptyInputError(AnomalyDetectionError):
    """Exception raised when an image set contains no images."""
    pass


class DimensionMismatchError(AnomalyDetectionError):
    """Exception raised when images in a set differ in size or channel count."""
    pass


class InvalidSampleCountError(AnomalyDetectionError):
    """Exception raised when the golden image sample count is out of range."""
    pass


class PreprocessingError(AnomalyDetectionError):
    """Exception raised when preprocessing fails."""
    pass


class DegenerateImageError(PreprocessingError):
    """Exception raised when auto-contrast is applied to a flat image."""
    pass


class ROIExtractionError(AnomalyDetectionError):
    """Exception raised when the region of interest cannot be derived."""
    pass


class MaskingError(AnomalyDetectionError):
    """Exception raised when anomaly masks cannot be computed or composited."""
    pass


class PerImageProcessingError(AnomalyDetectionError):
    """Exception raised for a failure isolated to a single frame."""

    def __init__(
        self,
        frame_id: str,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        self.frame_id = frame_id
        context = {"frame_id": frame_id, **(context or {})}
        super().__init__(message, context=context)


class VisualizationError(AnomalyDetectionError):
    """Exception raised when visualization fails."""
    pass


def handle_exceptions(exception_type: type = AnomalyDetectionError):
    """
    Decorator to handle exceptions and convert them to custom types.

    Exceptions already derived from AnomalyDetectionError pass through
    unchanged so that specific kinds (e.g. DegenerateImageError) survive.

    Args:
        exception_type: Type of exception to convert to
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except AnomalyDetectionError:
                # Re-raise custom exceptions as-is
                raise
            except Exception as e:
                # Convert other exceptions to custom type
                raise exception_type(
                    f"Error in {func.__name__}: {str(e)}",
                    context={
                        "function": func.__name__,
                        "original_exception": type(e).__name__
                    }
                ) from e
        return wrapper
    return decorator
