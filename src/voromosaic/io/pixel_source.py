"""
Pixel sources for the pipeline.

A pixel source exposes the image size and hands out the RGBA buffer once per
run. Decoding files is done with OpenCV; decode failures propagate to the
caller unchanged.
"""

import os
from abc import ABC, abstractmethod

import cv2
import numpy as np

from voromosaic.color.sampling import ImageData
from voromosaic.tracer import get_tracer, trace


class PixelSource(ABC):
    """Abstract source: width, height and get_image_data()."""

    width = 0
    height = 0

    @abstractmethod
    def get_image_data(self):
        """Return the ImageData for the whole image."""
        pass


class ArrayPixelSource(PixelSource):
    """
    In-memory RGBA buffer.

    Accepts an array of shape (height, width, 4), or (height, width, 3) in
    which case alpha is filled with 255.
    """

    def __init__(self, rgba):
        arr = np.asarray(rgba, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (H, W, 3|4) array, got shape {arr.shape}")
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)

        self.height, self.width = arr.shape[:2]
        self._image = ImageData(self.width, self.height, arr)

    def get_image_data(self):
        return self._image


@trace(label="load_pixel_source")
def load_pixel_source(path):
    """
    Decode an image file into an ArrayPixelSource.

    Grayscale, BGR and BGRA files are all converted to RGBA.

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the image cannot be decoded.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValueError(f"Failed to load image: {path}")

    if img.dtype != np.uint8:
        # 16-bit PNG/TIFF: keep the high byte
        img = (img >> 8).astype(np.uint8)

    if img.ndim == 2:
        rgba = cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    elif img.shape[2] == 4:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    else:
        rgba = cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)

    source = ArrayPixelSource(rgba)
    tracer.event(f"Loaded image: {source.width}x{source.height}")
    return source
