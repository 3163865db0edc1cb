"""
Preprocessing of input frames: grayscale reduction, resampling and
per-image contrast normalization.
"""

from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from ..utils import (
    LoggerMixin, PreprocessingError, DegenerateImageError, ConfigurationError,
    PreprocessingConfig, handle_exceptions
)


INTERPOLATION_FLAGS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


def interpolation_flag(name: str) -> int:
    """Map an interpolation name from the configuration to an OpenCV flag."""
    try:
        return INTERPOLATION_FLAGS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown interpolation '{name}'",
            context={"allowed": ", ".join(INTERPOLATION_FLAGS)}
        ) from None


@handle_exceptions(PreprocessingError)
def convert_to_grayscale(image: np.ndarray) -> np.ndarray:
    """Reduce a BGR(A) frame to single-channel luminance; gray frames are copied."""
    if image.ndim == 2:
        return image.copy()
    channels = image.shape[2]
    if channels == 1:
        return image[:, :, 0].copy()
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    raise PreprocessingError(f"Unsupported channel count: {channels}")


@handle_exceptions(PreprocessingError)
def resize_image(
    image: np.ndarray,
    target_size: Tuple[int, int] = (0, 0),
    scale_factor: float = 0.0,
    interpolation: int = cv2.INTER_CUBIC
) -> np.ndarray:
    """
    Resample a frame to an absolute size or by a uniform factor.

    Exactly one mode must be active: a scale of 0 means "use target_size",
    a target size of (0, 0) means "use scale_factor".

    Args:
        image: Input frame
        target_size: Output (width, height)
        scale_factor: Factor applied to both width and height
        interpolation: OpenCV interpolation flag

    Returns:
        Resampled frame
    """
    target_size = tuple(int(v) for v in target_size)
    uses_target = target_size != (0, 0)
    uses_scale = scale_factor != 0
    if uses_target == uses_scale:
        raise PreprocessingError(
            "Exactly one of target_size and scale_factor must be set",
            context={"target_size": target_size, "scale_factor": scale_factor}
        )

    if uses_target:
        return cv2.resize(image, target_size, interpolation=interpolation)
    return cv2.resize(image, (0, 0), fx=scale_factor, fy=scale_factor, interpolation=interpolation)


def stretch_contrast(image: np.ndarray) -> np.ndarray:
    """
    Linearly rescale a frame so its minimum maps to 0 and its maximum to 255.

    Raises:
        DegenerateImageError: if the frame is flat (max == min)
    """
    minimum = float(image.min())
    maximum = float(image.max())
    if maximum == minimum:
        raise DegenerateImageError(
            "Cannot auto-contrast a flat image",
            context={"value": minimum}
        )

    working = image.astype(np.float64)
    working -= minimum
    working *= 255.0 / (maximum - minimum)
    return np.clip(np.rint(working), 0, 255).astype(np.uint8)


class Preprocessor(LoggerMixin):
    """
    Applies grayscale reduction, resampling and auto-contrast to frames.
    Every method allocates new buffers; caller arrays are never modified.
    """

    def __init__(
        self,
        scale_factor: float = 0.125,
        target_size: Sequence[int] = (0, 0),
        interpolation: str = "cubic",
        auto_contrast: bool = True
    ):
        """
        Initialize preprocessor.

        Args:
            scale_factor: Uniform resampling factor (0 to use target_size)
            target_size: Absolute (width, height) ((0, 0) to use scale_factor)
            interpolation: Interpolation name, see INTERPOLATION_FLAGS
            auto_contrast: Whether to stretch each frame to [0, 255]
        """
        self.scale_factor = float(scale_factor)
        self.target_size = tuple(int(v) for v in target_size)
        self.interpolation = interpolation_flag(interpolation)
        self.apply_auto_contrast = auto_contrast

        if (self.scale_factor != 0) == (self.target_size != (0, 0)):
            raise ConfigurationError(
                "Exactly one of scale_factor and target_size must be set",
                context={"scale_factor": scale_factor, "target_size": self.target_size}
            )

        self.logger.debug(
            f"Initialized preprocessor (scale={self.scale_factor}, "
            f"target_size={self.target_size}, auto_contrast={auto_contrast})"
        )

    @classmethod
    def from_config(cls, config: PreprocessingConfig) -> "Preprocessor":
        return cls(
            scale_factor=config.scale_factor,
            target_size=config.target_size,
            interpolation=config.interpolation,
            auto_contrast=config.auto_contrast
        )

    def to_grayscale(self, images: Sequence[np.ndarray]) -> List[np.ndarray]:
        return [convert_to_grayscale(image) for image in images]

    def resize(
        self,
        images: Sequence[np.ndarray],
        target_size: Optional[Tuple[int, int]] = None,
        scale_factor: Optional[float] = None
    ) -> List[np.ndarray]:
        """
        Resize frames. Without arguments the configured mode is used; passing
        either argument selects that mode explicitly.
        """
        if target_size is None and scale_factor is None:
            target_size, scale_factor = self.target_size, self.scale_factor
        return [
            resize_image(image, target_size or (0, 0), scale_factor or 0.0, self.interpolation)
            for image in images
        ]

    def auto_contrast(self, images: Sequence[np.ndarray]) -> List[np.ndarray]:
        return [stretch_contrast(image) for image in images]

    def preprocess(self, image: np.ndarray) -> np.ndarray:
        """Run the full chain on a single frame."""
        result = convert_to_grayscale(image)
        result = resize_image(result, self.target_size, self.scale_factor, self.interpolation)
        if self.apply_auto_contrast:
            result = stretch_contrast(result)
        return result

    def preprocess_all(self, images: Sequence[np.ndarray]) -> List[np.ndarray]:
        """Run the full chain on every frame; the first failure propagates."""
        processed = [self.preprocess(image) for image in images]
        self.logger.info(f"Preprocessed {len(processed)} images")
        return processed
