"""
Color sampling from image data.

Two modes: nearest-pixel sampling at each seed, and the mean color of all
(optionally strided) pixels owned by each cell.
"""

import numpy as np

from voromosaic.models import CellColor
from voromosaic.tracer import get_tracer, trace


class ImageData:
    """
    RGBA pixel buffer, row-major.

    data is held as a uint8 array of shape (height, width, 4); a flat buffer
    of width * height * 4 bytes is reshaped on construction.
    """

    def __init__(self, width, height, data):
        arr = np.asarray(data, dtype=np.uint8)
        if arr.size != width * height * 4:
            raise ValueError(
                f"Pixel buffer has {arr.size} values, expected {width}x{height}x4"
            )
        self.width = int(width)
        self.height = int(height)
        self.data = arr.reshape(self.height, self.width, 4)


def _color_from_rgba(rgba):
    r, g, b, a = (int(v) for v in rgba)
    return CellColor(r=r, g=g, b=b, a=a)


def sample_pixel(image, x, y):
    """Nearest-pixel color at (x, y); coordinates are floored and clamped."""
    cx = min(max(int(np.floor(x)), 0), image.width - 1)
    cy = min(max(int(np.floor(y)), 0), image.height - 1)
    return _color_from_rgba(image.data[cy, cx])


@trace(label="sample_seed_colors")
def sample_seed_colors(image, seeds_px):
    """One color per seed, read from the pixel under the seed."""
    return [sample_pixel(image, x, y) for x, y in seeds_px]


def sampling_step(scale):
    """Pixel stride for a render scale in (0, 1]."""
    if not 0 < scale <= 1:
        raise ValueError(f"render scale must be in (0, 1], got {scale}")
    return max(1, int(np.floor(1 / scale + 0.5)))


@trace(label="compute_cell_average_colors")
def compute_cell_average_colors(image, diagram, scale=1.0):
    """
    Average color of the pixels owned by each Voronoi cell.

    Pixels are visited on a grid of stride round(1 / scale) starting at
    (0, 0); each is assigned to its nearest seed. A cell that receives no
    sample keeps zero sums and is divided by 1, so it comes out as
    transparent black.

    Args:
        image: ImageData
        diagram: VoronoiDiagram for the seeds
        scale: sampling resolution in (0, 1]

    Returns:
        list of CellColor, one per seed
    """
    tracer = get_tracer()

    num_cells = len(diagram)
    if num_cells == 0:
        return []

    step = sampling_step(scale)
    ys = np.arange(0, image.height, step)
    xs = np.arange(0, image.width, step)
    grid_y, grid_x = np.meshgrid(ys, xs, indexing="ij")

    labels = diagram.locate_many(grid_x.ravel(), grid_y.ravel())
    pixels = image.data[grid_y, grid_x].reshape(-1, 4).astype(np.float64)

    counts = np.bincount(labels, minlength=num_cells)
    sums = np.stack(
        [np.bincount(labels, weights=pixels[:, c], minlength=num_cells) for c in range(4)],
        axis=1,
    )
    divisor = np.maximum(counts, 1)[:, None]
    means = np.floor(sums / divisor + 0.5).astype(np.int64)

    empty = int(np.count_nonzero(counts == 0))
    if empty:
        tracer.event(f"{empty} cells received no samples", level="WARN")
    tracer.event(f"Averaged {len(labels)} samples into {num_cells} cells (step={step})")

    return [_color_from_rgba(row) for row in means]
