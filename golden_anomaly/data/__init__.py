"""
Data package for the anomaly detection system.
Provides the image value types and the file I/O layer.
"""

from .image_set import Image, ImageSet, check_same_geometry
from .io import ImageLoader, ResultWriter

__all__ = [
    'Image',
    'ImageSet',
    'check_same_geometry',
    'ImageLoader',
    'ResultWriter'
]
