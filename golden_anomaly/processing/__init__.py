"""
Processing package for the anomaly detection system.
Provides preprocessing, golden image synthesis and morphology helpers.
"""

from .preprocessor import (
    Preprocessor, convert_to_grayscale, resize_image, stretch_contrast,
    interpolation_flag
)
from .golden import GoldenImageSynthesizer
from .morphology import close_gaps, remove_speckles

__all__ = [
    'Preprocessor',
    'convert_to_grayscale',
    'resize_image',
    'stretch_contrast',
    'interpolation_flag',
    'GoldenImageSynthesizer',
    'close_gaps',
    'remove_speckles'
]
