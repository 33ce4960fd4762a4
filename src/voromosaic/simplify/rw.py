"""
Reumann-Witkam simplification for closed rings.
"""

import math


def point_line_distance(point, start, end):
    """Distance from point to the infinite line through start and end."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]

    if dx == 0 and dy == 0:
        return math.hypot(point[0] - start[0], point[1] - start[1])

    return abs((point[0] - start[0]) * dy - (point[1] - start[1]) * dx) / math.hypot(dx, dy)


def simplify_rw_open(points, epsilon):
    """
    Walk an open polyline with an anchor and a one-step look-ahead.

    A point is kept, and becomes the new anchor, when it lies farther than
    epsilon from the line through the anchor and the following point.
    Endpoints are always kept.
    """
    if len(points) <= 2 or epsilon <= 0:
        return list(points)

    simplified = [points[0]]
    anchor = points[0]
    for i in range(1, len(points) - 1):
        if point_line_distance(points[i], anchor, points[i + 1]) > epsilon:
            simplified.append(points[i])
            anchor = points[i]

    simplified.append(points[-1])
    return simplified


def simplify_rw_closed_ring(ring, epsilon):
    """RW on a ring opened at its first vertex; falls back to the input below 3 vertices."""
    ring = list(ring)
    if len(ring) <= 3 or epsilon <= 0:
        return ring

    simplified = simplify_rw_open(ring + [ring[0]], epsilon)[:-1]
    if len(simplified) < 3:
        return ring
    return simplified
