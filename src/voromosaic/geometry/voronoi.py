"""
Bounded Voronoi tessellation.

Builds one closed polygon per seed, clipped to the image rectangle, and
answers "which seed owns this pixel" queries. Seeds are mirrored across the
four borders and corners before running Qhull so every real cell is finite;
each cell is then clipped to the rectangle with shapely and oriented
counter-clockwise, so two neighbouring cells always walk their shared edge in
opposite directions.
"""

import numpy as np
from scipy.spatial import Voronoi, cKDTree
from shapely.geometry import Polygon, box
from shapely.geometry.polygon import orient

from voromosaic.tracer import get_tracer, trace


def mirror_points(points, width, height):
    """8-neighbour mirroring of the seed cloud around the image rectangle."""
    p = points
    left = np.stack([-p[:, 0], p[:, 1]], axis=1)
    right = np.stack([2 * width - p[:, 0], p[:, 1]], axis=1)
    top = np.stack([p[:, 0], -p[:, 1]], axis=1)
    bottom = np.stack([p[:, 0], 2 * height - p[:, 1]], axis=1)
    tl = np.stack([-p[:, 0], -p[:, 1]], axis=1)
    tr = np.stack([2 * width - p[:, 0], -p[:, 1]], axis=1)
    bl = np.stack([-p[:, 0], 2 * height - p[:, 1]], axis=1)
    br = np.stack([2 * width - p[:, 0], 2 * height - p[:, 1]], axis=1)
    return np.vstack([p, left, right, top, bottom, tl, tr, bl, br])


class VoronoiDiagram:
    """
    Cell polygons plus nearest-seed lookup for one seed set.

    cell_polygons[i] belongs to points[i]; it is empty for a seed that
    duplicates an earlier one.
    """

    def __init__(self, points, width, height, cell_polygons, owners):
        self.points = points
        self.width = width
        self.height = height
        self.cell_polygons = cell_polygons
        self._owners = owners
        self._tree = cKDTree(points[owners]) if len(owners) else None

    def __len__(self):
        return len(self.cell_polygons)

    def polygon(self, index):
        return self.cell_polygons[index]

    def locate(self, x, y):
        """Index of the seed nearest to (x, y)."""
        return int(self.locate_many(np.array([x]), np.array([y]))[0])

    def locate_many(self, xs, ys, chunk_size=1_000_000):
        """
        Vectorized nearest-seed lookup.

        Queries are answered in chunks to bound memory on large images.
        Returns an int array of seed indices aligned with xs/ys.
        """
        if self._tree is None:
            raise ValueError("Cannot locate points in an empty diagram")

        coords = np.stack([np.asarray(xs, dtype=float).ravel(), np.asarray(ys, dtype=float).ravel()], axis=1)
        labels = np.empty(len(coords), dtype=np.int64)
        for start in range(0, len(coords), chunk_size):
            end = min(len(coords), start + chunk_size)
            _, idx = self._tree.query(coords[start:end], k=1)
            labels[start:end] = idx
        return self._owners[labels]


@trace(label="build_voronoi")
def build_voronoi(points, width, height):
    """
    Build a Voronoi diagram clipped to [0, width] x [0, height].

    Args:
        points: sequence of (x, y) seed positions in pixel space
        width: clip rectangle width
        height: clip rectangle height

    Returns:
        VoronoiDiagram with one polygon per input point, in input order
    """
    tracer = get_tracer()

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    n = len(pts)
    cell_polygons = [[] for _ in range(n)]

    if n == 0:
        return VoronoiDiagram(pts, width, height, cell_polygons, np.zeros(0, dtype=np.int64))

    # First occurrence of each distinct point owns the cell.
    _, first_idx = np.unique(pts, axis=0, return_index=True)
    owners = np.sort(first_idx)

    bounds = box(0, 0, width, height)

    if len(owners) == 1:
        cell_polygons[owners[0]] = _ring_coords(orient(bounds, sign=1.0))
        return VoronoiDiagram(pts, width, height, cell_polygons, owners)

    mirrored = mirror_points(pts[owners], width, height)
    # Seeds on the border coincide with their own mirror image.
    unique_pts, inverse = np.unique(mirrored, axis=0, return_inverse=True)
    inverse = np.asarray(inverse).ravel()
    vor = Voronoi(unique_pts)

    degenerate = 0
    for k, owner in enumerate(owners):
        region = vor.regions[vor.point_region[inverse[k]]]
        if not region or -1 in region:
            degenerate += 1
            continue
        cell = Polygon(_convex_order(vor.vertices[region]))
        clipped = cell.intersection(bounds)
        clipped = _largest_polygon(clipped)
        if clipped is None:
            degenerate += 1
            continue
        cell_polygons[owner] = _ring_coords(orient(clipped, sign=1.0))

    tracer.event(
        f"Voronoi: {n} seeds, {len(owners)} distinct, {degenerate} degenerate cells"
    )

    return VoronoiDiagram(pts, width, height, cell_polygons, owners)


def _convex_order(vertices):
    """Sort the vertices of a convex cell by angle around their mean."""
    center = vertices.mean(axis=0)
    angles = np.arctan2(vertices[:, 1] - center[1], vertices[:, 0] - center[0])
    return vertices[np.argsort(angles, kind="stable")]


def _largest_polygon(geom):
    if geom.is_empty:
        return None
    if geom.geom_type == "Polygon":
        return geom
    parts = [g for g in getattr(geom, "geoms", []) if g.geom_type == "Polygon" and not g.is_empty]
    if not parts:
        return None
    return max(parts, key=lambda g: g.area)


def _ring_coords(polygon):
    """Exterior vertices as (x, y) tuples without the closing repeat."""
    coords = list(polygon.exterior.coords)[:-1]
    return [(float(x), float(y)) for x, y in coords]
