"""
Same-color cell merging.

Fuses the polygons of all cells sharing a color into compound boundaries
(outer rings plus holes). Vertices are snapped to an integer grid so that
coincident corners computed independently by neighbouring cells compare
equal. Each directed cell edge then adds +1 or -1 to its undirected key
depending on direction; edges shared by two cells of the group cancel to
zero and only true boundary edges survive. The survivors are chained into
rings, taking the sharpest counter-clockwise turn at every vertex so that
rings touching at a single vertex are traced separately.
"""

import math
from collections import defaultdict

from voromosaic.models import MergedBoundary
from voromosaic.tracer import get_tracer, trace


DEFAULT_TOLERANCE = 1e-6


def quantize_point(point, tolerance):
    """Integer grid key for a point."""
    return (round(point[0] / tolerance), round(point[1] / tolerance))


def dequantize_key(key, tolerance):
    return (key[0] * tolerance, key[1] * tolerance)


def sanitize_polygon(polygon, tolerance):
    """
    Quantize a polygon and clean it up.

    Consecutive duplicate vertices collapse, an explicit closing vertex is
    dropped, and anything left with fewer than 3 vertices becomes [].
    """
    compact = []
    for point in polygon:
        key = quantize_point(point, tolerance)
        if not compact or compact[-1] != key:
            compact.append(key)

    if len(compact) >= 2 and compact[0] == compact[-1]:
        compact.pop()

    if len(compact) < 3:
        return []
    return compact


def build_boundary_edges(polygons, tolerance):
    """
    Directed boundary edges of the union of polygons.

    Returns a list of (from_key, to_key) tuples. An undirected edge with net
    count c contributes |c| copies, oriented by the sign of c.
    """
    counts = {}

    for polygon in polygons:
        keys = sanitize_polygon(polygon, tolerance)
        n = len(keys)
        for i in range(n):
            start = keys[i]
            end = keys[(i + 1) % n]
            if start == end:
                continue
            if start < end:
                edge, delta = (start, end), 1
            else:
                edge, delta = (end, start), -1
            counts[edge] = counts.get(edge, 0) + delta

    edges = []
    for (a, b), diff in counts.items():
        if diff == 0:
            continue
        directed = (a, b) if diff > 0 else (b, a)
        edges.extend([directed] * abs(diff))

    return edges


def turn_angle(incoming, outgoing):
    """Signed angle from incoming to outgoing direction, in (-pi, pi]."""
    cross = incoming[0] * outgoing[1] - incoming[1] * outgoing[0]
    dot = incoming[0] * outgoing[0] + incoming[1] * outgoing[1]
    return math.atan2(cross, dot)


def _select_next_edge(current, candidates, edges, used):
    start, end = current
    incoming = (end[0] - start[0], end[1] - start[1])

    best_index = None
    best_score = -math.inf
    for idx in candidates:
        if used[idx]:
            continue
        target = edges[idx][1]
        outgoing = (target[0] - end[0], target[1] - end[1])
        score = turn_angle(incoming, outgoing)
        if score > best_score:
            best_score = score
            best_index = idx

    return best_index


def trace_rings(edges, tolerance):
    """
    Chain directed edges into closed rings.

    Open chains (dead ends, exhausted vertices or walks longer than
    4 * len(edges) steps) are discarded, as are closed rings with fewer
    than 3 distinct vertices.

    Returns rings as lists of (x, y) in real coordinates.
    """
    outgoing = defaultdict(list)
    for index, (start, _) in enumerate(edges):
        outgoing[start].append(index)

    used = [False] * len(edges)
    guard_max = len(edges) * 4
    rings = []

    for i in range(len(edges)):
        if used[i]:
            continue

        start_key = edges[i][0]
        ring_keys = [start_key]
        current_index = i
        closed = False
        guard = 0

        # Walk starting from the i-th edge
        while guard < guard_max:
            guard += 1
            if used[current_index]:
                break
            used[current_index] = True

            current = edges[current_index]
            ring_keys.append(current[1])

            if current[1] == start_key:
                closed = True
                break

            next_index = _select_next_edge(current, outgoing.get(current[1], ()), edges, used)
            if next_index is None:
                break
            current_index = next_index

        if not closed or len(ring_keys) < 4:
            continue

        ring_keys.pop()
        rings.append([dequantize_key(key, tolerance) for key in ring_keys])

    return rings


def _color_key(color):
    return (color.r, color.g, color.b, color.a)


@trace(label="merge_cells_by_color")
def merge_cells_by_color(polygons, colors, tolerance=DEFAULT_TOLERANCE):
    """
    Merge same-colored cell polygons into compound boundaries.

    Args:
        polygons: list of cell polygons, each a list of (x, y)
        colors: list of CellColor aligned with polygons
        tolerance: quantization grid size in coordinate units

    Returns:
        list of MergedBoundary, in first-appearance order of each color.
        A color whose cells form disconnected islands still yields a single
        entry holding all of their rings.
    """
    tracer = get_tracer()

    if tolerance <= 0:
        raise ValueError(f"merge tolerance must be > 0, got {tolerance}")
    if len(polygons) != len(colors):
        raise ValueError(
            f"polygons and colors must align: {len(polygons)} != {len(colors)}"
        )

    groups = {}
    group_colors = {}
    for polygon, color in zip(polygons, colors):
        if not polygon or len(polygon) < 3:
            continue
        key = _color_key(color)
        if key not in groups:
            groups[key] = []
            group_colors[key] = color
        groups[key].append(polygon)

    merged = []
    total_edges = 0
    for key, group in groups.items():
        edges = build_boundary_edges(group, tolerance)
        if not edges:
            continue
        total_edges += len(edges)
        rings = trace_rings(edges, tolerance)
        if not rings:
            continue
        merged.append(MergedBoundary(color=group_colors[key], rings=rings))

    ring_count = sum(len(m.rings) for m in merged)
    tracer.event(
        f"Merged {len(polygons)} cells into {len(merged)} color groups, "
        f"{ring_count} rings, {total_edges} boundary edges"
    )

    return merged
