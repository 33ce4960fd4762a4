"""Pytest fixtures for voromosaic tests."""

import os
import tempfile

import cv2
import numpy as np
import pytest


def unit_square(x, y, size=1.0):
    """Counter-clockwise square with its lower corner at (x, y)."""
    return [(x, y), (x + size, y), (x + size, y + size), (x, y + size)]


def signed_area(ring):
    """Shoelace area, positive for counter-clockwise rings."""
    total = 0.0
    n = len(ring)
    for i in range(n):
        x1, y1 = ring[i]
        x2, y2 = ring[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2


@pytest.fixture(autouse=True)
def reset_tracer():
    """Leave the global tracer disabled after every test."""
    yield
    from voromosaic.tracer import configure_tracer
    configure_tracer(enabled=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def gradient_image():
    """80x60 RGBA image with a horizontal red ramp and a vertical green ramp."""
    height, width = 60, 80
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)[None, :]
    img[:, :, 1] = np.linspace(0, 255, height, dtype=np.uint8)[:, None]
    img[:, :, 2] = 128
    img[:, :, 3] = 255
    return img


@pytest.fixture
def two_tone_image():
    """64x48 RGBA image, black on the left half and white on the right."""
    img = np.full((48, 64, 4), 255, dtype=np.uint8)
    img[:, :32, :3] = 0
    return img


@pytest.fixture
def uniform_image():
    """40x40 RGBA image of a single color."""
    img = np.zeros((40, 40, 4), dtype=np.uint8)
    img[:, :] = (200, 100, 50, 255)
    return img


@pytest.fixture
def grid_polygons():
    """3x3 grid of unit squares, row by row from the origin."""
    return [unit_square(x, y) for y in range(3) for x in range(3)]


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from voromosaic.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def synthetic_input_file(temp_dir, two_tone_image):
    """Write the two-tone image as a PNG for CLI tests."""
    path = os.path.join(temp_dir, "test_input.png")
    cv2.imwrite(path, cv2.cvtColor(two_tone_image, cv2.COLOR_RGBA2BGRA))
    return path
