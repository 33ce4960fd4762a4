"""
Ramer-Douglas-Peucker simplification for closed rings.

The ring is opened by repeating its first vertex at the end, simplified as a
polyline, and closed again by dropping the repeat.
"""

import numpy as np


def _line_distances(points, start, end):
    """
    Perpendicular distances from each point to the infinite line start-end.

    Falls back to plain distance from start when start and end coincide,
    which is always the case for the outermost call on an opened ring.
    """
    line_vec = end - start
    line_len = np.hypot(line_vec[0], line_vec[1])
    offsets = points - start

    if line_len == 0:
        return np.hypot(offsets[:, 0], offsets[:, 1])

    cross = offsets[:, 0] * line_vec[1] - offsets[:, 1] * line_vec[0]
    return np.abs(cross) / line_len


def rdp_simplify(points, epsilon):
    """
    Simplify an open polyline given as an (n, 2) array.

    Returns the indices of the kept points, first and last included.
    """
    n = len(points)
    if n <= 2:
        return list(range(n))

    keep = [0]
    # Explicit stack instead of recursion: rings can have thousands of points.
    stack = [(0, n - 1)]
    kept_inner = []
    while stack:
        lo, hi = stack.pop()
        if hi - lo < 2:
            continue
        distances = _line_distances(points[lo + 1:hi], points[lo], points[hi])
        offset = int(np.argmax(distances))
        if distances[offset] > epsilon:
            split = lo + 1 + offset
            kept_inner.append(split)
            stack.append((lo, split))
            stack.append((split, hi))

    keep.extend(sorted(kept_inner))
    keep.append(n - 1)
    return keep


def remove_duplicate_points(ring):
    """
    Drop consecutive exact duplicates, including a last vertex equal to the first.
    """
    result = []
    for point in ring:
        if not result or result[-1] != point:
            result.append(point)
    while len(result) > 1 and result[-1] == result[0]:
        result.pop()
    return result


def _minimal_triangle(ring):
    """
    Start vertex, the vertex farthest from it, and the vertex farthest from
    that chord, in ring order. None when the ring is collinear.
    """
    arr = np.asarray(ring, dtype=float)
    far = int(np.argmax(np.hypot(arr[:, 0] - arr[0, 0], arr[:, 1] - arr[0, 1])))
    if far == 0:
        return None
    distances = _line_distances(arr, arr[0], arr[far])
    apex = int(np.argmax(distances))
    if distances[apex] == 0:
        return None
    return [ring[i] for i in sorted((0, far, apex))]


def simplify_rdp_closed_ring(ring, epsilon):
    """
    RDP on a closed ring.

    An epsilon of zero or less only removes exact duplicate vertices. If the
    simplified ring would have fewer than 3 vertices, the minimal triangle of
    the ring is returned instead, so an epsilon larger than the ring itself
    yields exactly 3 vertices. Rings of 3 or fewer vertices are returned as is.
    """
    ring = list(ring)
    if len(ring) <= 3:
        return ring
    if epsilon <= 0:
        return remove_duplicate_points(ring)

    opened = np.asarray(ring + [ring[0]], dtype=float)
    keep = rdp_simplify(opened, epsilon)
    simplified = [ring[i] for i in keep[:-1]]

    if len(simplified) < 3:
        triangle = _minimal_triangle(ring)
        return triangle if triangle is not None else ring
    return simplified
