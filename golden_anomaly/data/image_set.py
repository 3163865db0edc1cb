"""
Image value types shared by every pipeline stage.
An ImageSet is an ordered, validated collection of co-registered frames.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..utils import DimensionMismatchError, EmptyInputError


@dataclass(frozen=True)
class Image:
    """
    A single frame: an 8-bit pixel buffer plus the identity used in reports.

    The wrapped array is treated as immutable by convention; stages always
    allocate new buffers instead of writing into ``pixels``.
    """
    pixels: np.ndarray
    frame_id: str = ""

    def __post_init__(self):
        if self.pixels.ndim not in (2, 3):
            raise ValueError(f"Image must be 2D or 3D, got shape {self.pixels.shape}")
        if self.pixels.ndim == 3 and self.pixels.shape[2] not in (1, 3, 4):
            raise ValueError(f"Unsupported channel count: {self.pixels.shape[2]}")

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), the order OpenCV expects for ``dsize``."""
        return self.width, self.height

    @property
    def geometry(self) -> Tuple[int, int, int]:
        return self.height, self.width, self.channels


class ImageSet(Sequence):
    """Ordered sequence of frames that must share width, height and channels."""

    def __init__(self, images: Sequence[Image]):
        self._images: List[Image] = list(images)

    @classmethod
    def from_arrays(cls, arrays: Sequence[np.ndarray], frame_ids: Optional[Sequence[str]] = None) -> "ImageSet":
        """Wrap raw arrays, naming frames ``frame_1``, ``frame_2``... unless ids are given."""
        if frame_ids is None:
            frame_ids = [f"frame_{i + 1}" for i in range(len(arrays))]
        if len(frame_ids) != len(arrays):
            raise ValueError("frame_ids must match the number of arrays")
        return cls([Image(np.asarray(a), fid) for a, fid in zip(arrays, frame_ids)])

    def __len__(self) -> int:
        return len(self._images)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ImageSet(self._images[index])
        return self._images[index]

    def __iter__(self) -> Iterator[Image]:
        return iter(self._images)

    @property
    def frame_ids(self) -> List[str]:
        return [image.frame_id for image in self._images]

    @property
    def arrays(self) -> List[np.ndarray]:
        return [image.pixels for image in self._images]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of the set; requires a validated, non-empty set."""
        return self._images[0].size

    def validate(self) -> "ImageSet":
        """
        Check the set can take part in a comparison.

        Raises:
            EmptyInputError: if the set has no images
            DimensionMismatchError: if any frame differs from the first in
                width, height or channel count
        """
        if not self._images:
            raise EmptyInputError("Image set is empty")

        reference = self._images[0]
        for image in self._images[1:]:
            if image.geometry != reference.geometry:
                raise DimensionMismatchError(
                    "Images in the set differ in size or channel count",
                    context={
                        "expected": reference.geometry,
                        "frame_id": image.frame_id,
                        "actual": image.geometry
                    }
                )
        return self


def check_same_geometry(arrays: Sequence[np.ndarray], what: str = "images"):
    """Raise DimensionMismatchError unless all arrays share one shape."""
    if not arrays:
        raise EmptyInputError(f"No {what} supplied")
    shape = arrays[0].shape
    for i, array in enumerate(arrays[1:], start=1):
        if array.shape != shape:
            raise DimensionMismatchError(
                f"{what.capitalize()} differ in size or channel count",
                context={"expected": shape, "index": i, "actual": array.shape}
            )
