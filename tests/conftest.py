"""
Shared fixtures for the test suite.
"""

import matplotlib
matplotlib.use("Agg")

import cv2
import numpy as np
import pytest

from golden_anomaly.utils import setup_logging


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep console logging at WARNING for every test."""
    setup_logging(level="WARNING", file_logging=False)
    yield


@pytest.fixture
def grid_image():
    """A 200x200 dark frame crossed by bright 3px grid lines every 50px."""
    img = np.full((200, 200), 60, dtype=np.uint8)
    for pos in (50, 100, 150):
        cv2.line(img, (pos, 0), (pos, 199), 220, 3)
        cv2.line(img, (0, pos), (199, pos), 220, 3)
    return img


@pytest.fixture
def gradient_image():
    """A 100x100 horizontal gradient spanning 0..198."""
    row = np.arange(0, 200, 2, dtype=np.uint8)
    return np.tile(row, (100, 1))


@pytest.fixture
def uniform_set_with_block():
    """Four uniform 128 frames and one frame with a 10x10 block of 255."""
    frames = [np.full((100, 100), 128, dtype=np.uint8) for _ in range(4)]
    modified = np.full((100, 100), 128, dtype=np.uint8)
    modified[40:50, 40:50] = 255
    frames.append(modified)
    return frames
