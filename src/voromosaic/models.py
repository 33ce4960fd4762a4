"""
Pydantic data models for the mosaic pipeline.

Seeds, colors and the pipeline hand-off records flow through these models.
Points are plain (x, y) float tuples so the geometry code can hash and
unpack them cheaply; polygons and rings are lists of points without a
repeated closing vertex.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


PixelPoint = Tuple[float, float]
Polygon = List[PixelPoint]


class SeedStrategy(str, Enum):
    """How the normalized image area is derived from the aspect ratio."""
    ASPECT = "aspect"
    MAX_ASPECT = "maxAspect"


class ColorMode(str, Enum):
    """How each cell's color is sampled from the image."""
    SEED_POINT = "seedPoint"
    CELL_AVERAGE = "cellAverage"


class SimplifyAlgorithm(str, Enum):
    """Polyline simplification algorithm applied to merged rings."""
    NONE = "none"
    RDP = "rdp"
    VW = "vw"
    RW = "rw"


class SeedPoint(BaseModel):
    """A seed in normalized [0, 1] image coordinates."""
    x01: float = Field(..., ge=0.0, le=1.0)
    y01: float = Field(..., ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_pixel(self, width, height):
        return (self.x01 * width, self.y01 * height)


class CellColor(BaseModel):
    """RGBA color of a cell, 8 bits per channel."""
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    a: int = Field(default=255, ge=0, le=255)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_rgb(self):
        """CSS color string without alpha."""
        return f"rgb({self.r}, {self.g}, {self.b})"

    @property
    def opacity(self):
        return self.a / 255


class MergedBoundary(BaseModel):
    """
    A compound region of one color.

    Holds one outer ring plus any number of hole rings. Rings are not
    classified; they are meant to be filled with the even-odd rule.
    """
    color: CellColor
    rings: List[Polygon] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class PipelineOutput(BaseModel):
    """
    Result of one pipeline run, consumed by renderers and exporters.

    seeds01, seeds_px, cell_polygons and cell_colors are index-aligned: the
    i-th entry of each belongs to the i-th generated seed.
    """
    image_width: int = Field(..., gt=0)
    image_height: int = Field(..., gt=0)
    seeds01: List[SeedPoint] = Field(default_factory=list)
    seeds_px: List[PixelPoint] = Field(default_factory=list)
    cell_polygons: List[Polygon] = Field(default_factory=list)
    cell_colors: List[CellColor] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class CellRenderResult(BaseModel):
    """Cells that survived the render filter, plus merged boundaries when requested."""
    polygons: List[Polygon] = Field(default_factory=list)
    colors: List[CellColor] = Field(default_factory=list)
    merged_original: Optional[List[MergedBoundary]] = None
    merged_optimized: Optional[List[MergedBoundary]] = None

    model_config = ConfigDict(extra="forbid")


class SimplificationStats(BaseModel):
    """Vertex counts before and after ring simplification."""
    original_points: int = 0
    optimized_points: int = 0

    model_config = ConfigDict(extra="forbid")

    @property
    def reduction(self):
        if self.original_points == 0:
            return 0.0
        return 1 - self.optimized_points / self.original_points


def compute_bbox(points):
    """
    Compute bounding box from a list of (x, y) points.

    Returns [min_x, min_y, max_x, max_y].
    """
    if not points:
        return [0.0, 0.0, 0.0, 0.0]

    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return [min(xs), min(ys), max(xs), max(ys)]


def ring_point_count(groups):
    """Total number of ring vertices across merged boundaries."""
    return sum(len(ring) for group in groups for ring in group.rings)
