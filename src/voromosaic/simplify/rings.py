"""
Ring simplification for merged boundaries.

Maps a single [0, 1] strength onto algorithm thresholds, relative to each
ring's size, and applies the selected algorithm to every ring of every
merged boundary.
"""

import math
from dataclasses import dataclass

from voromosaic.models import MergedBoundary, SimplifyAlgorithm, compute_bbox, ring_point_count
from voromosaic.simplify.rdp import simplify_rdp_closed_ring
from voromosaic.simplify.rw import simplify_rw_closed_ring
from voromosaic.simplify.vw import simplify_vw_closed_ring
from voromosaic.tracer import get_tracer, trace


EPSILON_FACTOR = 0.05
AREA_FACTOR = 0.02
VW_STRENGTH_MULTIPLIER = 4


@dataclass
class SimplifyOptions:
    """Options for simplify_merged_boundaries."""
    algorithm: SimplifyAlgorithm = SimplifyAlgorithm.NONE
    strength: float = 0.0  # clamped to [0, 1]
    size_compensation: bool = False
    min_path_size: float = 0.0  # absolute, in ring coordinate units


def clamp01(value):
    return max(0.0, min(1.0, value))


def ring_scale(ring):
    """Bounding-box diagonal of a ring, at least 1."""
    min_x, min_y, max_x, max_y = compute_bbox(ring)
    return max(1.0, math.hypot(max_x - min_x, max_y - min_y))


def ring_max_dimension(ring):
    min_x, min_y, max_x, max_y = compute_bbox(ring)
    return max(max_x - min_x, max_y - min_y)


def simplification_thresholds(scale, algorithm, strength, reference_scale, size_compensation):
    """
    Distance epsilon and area threshold for one ring.

    VW gets a 4x strength multiplier since its area metric responds more
    gently than the distance metrics. With size compensation both
    thresholds are rescaled by reference_scale / scale (the area one squared).
    """
    multiplier = VW_STRENGTH_MULTIPLIER if algorithm == SimplifyAlgorithm.VW else 1
    tuned = strength * multiplier
    epsilon = scale * tuned * EPSILON_FACTOR
    area_threshold = (scale * tuned * AREA_FACTOR) ** 2

    compensation = reference_scale / scale if size_compensation else 1.0
    return epsilon * compensation, area_threshold * compensation * compensation


def simplify_ring(ring, algorithm, strength, reference_scale=1.0, size_compensation=False):
    """
    Simplify one closed ring.

    Rings of 3 or fewer vertices are returned unchanged, and a result with
    fewer than 3 vertices reverts to the input ring.
    """
    algorithm = SimplifyAlgorithm(algorithm)
    ring = list(ring)
    if len(ring) <= 3 or algorithm == SimplifyAlgorithm.NONE:
        return ring

    epsilon, area_threshold = simplification_thresholds(
        ring_scale(ring), algorithm, clamp01(strength), reference_scale, size_compensation,
    )

    if algorithm == SimplifyAlgorithm.RDP:
        simplified = simplify_rdp_closed_ring(ring, epsilon)
    elif algorithm == SimplifyAlgorithm.VW:
        simplified = simplify_vw_closed_ring(ring, area_threshold)
    else:
        simplified = simplify_rw_closed_ring(ring, epsilon)

    return simplified if len(simplified) >= 3 else ring


@trace(label="simplify_merged_boundaries")
def simplify_merged_boundaries(groups, options):
    """
    Simplify every ring of every merged boundary, then drop small rings.

    The size-compensation reference scale is the mean ring scale over all
    groups. The size filter runs after simplification and per ring; rings
    whose larger bounding-box side is below options.min_path_size are
    dropped, and groups left without rings are dropped too.

    Args:
        groups: list of MergedBoundary
        options: SimplifyOptions

    Returns:
        new list of MergedBoundary; colors are carried over unchanged
    """
    tracer = get_tracer()

    algorithm = SimplifyAlgorithm(options.algorithm)
    strength = clamp01(options.strength)
    do_simplify = strength > 0 and algorithm != SimplifyAlgorithm.NONE

    scales = [ring_scale(ring) if do_simplify else 1.0 for group in groups for ring in group.rings]
    reference_scale = sum(scales) / len(scales) if scales else 1.0

    min_path_size = max(0.0, options.min_path_size)
    out = []
    for group in groups:
        rings = []
        for ring in group.rings:
            if do_simplify:
                ring = simplify_ring(ring, algorithm, strength, reference_scale, options.size_compensation)
            if ring_max_dimension(ring) >= min_path_size:
                rings.append(ring)
        if rings:
            out.append(MergedBoundary(color=group.color, rings=rings))

    before = ring_point_count(groups)
    after = ring_point_count(out)
    tracer.event(
        f"Simplified ({algorithm.value}, strength={strength:.2f}): {before} -> {after} points, "
        f"{len(groups)} -> {len(out)} groups"
    )

    return out
