"""Tests for same-color cell merging."""

import random

import pytest

from conftest import signed_area, unit_square


def _color(r, g=0, b=0, a=255):
    from voromosaic.models import CellColor
    return CellColor(r=r, g=g, b=b, a=a)


def _vertex_set(ring):
    return {(round(x, 6), round(y, 6)) for x, y in ring}


def _rotations(ring):
    return {tuple(ring[i:] + ring[:i]) for i in range(len(ring))}


class TestBoundaryEdges:
    """Tests for the signed edge counting."""

    def test_shared_edge_cancels(self):
        from voromosaic.geometry.merge import build_boundary_edges

        edges = build_boundary_edges([unit_square(0, 0), unit_square(1, 0)], 1e-6)

        assert len(edges) == 6

    def test_single_polygon_keeps_all_edges(self):
        from voromosaic.geometry.merge import build_boundary_edges

        assert len(build_boundary_edges([unit_square(0, 0)], 1e-6)) == 4

    def test_sanitize_drops_closing_and_duplicates(self):
        from voromosaic.geometry.merge import sanitize_polygon

        keys = sanitize_polygon([(0, 0), (1, 0), (1, 0), (1, 1), (0, 0)], 1.0)

        assert keys == [(0, 0), (1, 0), (1, 1)]
        assert sanitize_polygon([(0, 0), (1e-9, 0), (1, 0)], 1e-6) == []

    def test_quantization_snaps_nearby_vertices(self):
        from voromosaic.geometry.merge import build_boundary_edges

        a = [(0, 0), (1, 0), (1, 1), (0, 1)]
        b = [(1 + 2e-8, 0), (2, 0), (2, 1), (1 - 3e-8, 1)]

        assert len(build_boundary_edges([a, b], 1e-6)) == 6


class TestMergeCellsByColor:
    """Tests for merge_cells_by_color."""

    def test_adjacent_squares_merge(self):
        """Two same-colored unit squares sharing an edge give one 6-vertex ring."""
        from voromosaic.geometry.merge import merge_cells_by_color

        color = _color(10)
        merged = merge_cells_by_color([unit_square(0, 0), unit_square(1, 0)], [color, color])

        assert len(merged) == 1
        assert merged[0].color == color
        assert len(merged[0].rings) == 1
        ring = merged[0].rings[0]
        assert len(ring) == 6
        assert _vertex_set(ring) == {(0, 0), (1, 0), (2, 0), (2, 1), (1, 1), (0, 1)}
        assert abs(signed_area(ring)) == pytest.approx(2.0)

    def test_ring_with_hole(self, grid_polygons):
        """3x3 grid with a different center: the surround gets an outer ring and a hole."""
        from voromosaic.geometry.merge import merge_cells_by_color

        center, surround = _color(1), _color(2)
        colors = [surround] * 9
        colors[4] = center

        merged = merge_cells_by_color(grid_polygons, colors)

        assert [m.color for m in merged] == [surround, center]

        surround_rings = sorted(merged[0].rings, key=len)
        assert [len(r) for r in surround_rings] == [4, 12]
        assert _vertex_set(surround_rings[0]) == {(1, 1), (2, 1), (2, 2), (1, 2)}

        center_rings = merged[1].rings
        assert len(center_rings) == 1
        assert _vertex_set(center_rings[0]) == {(1, 1), (2, 1), (2, 2), (1, 2)}

        even_odd_area = sum(signed_area(r) for r in merged[0].rings)
        assert even_odd_area == pytest.approx(8.0)

    def test_rectangle_area_preserved(self):
        """A rectangle tiled by same-colored cells merges to one ring of its area."""
        from voromosaic.geometry.merge import merge_cells_by_color

        polygons = [unit_square(x, y) for y in range(3) for x in range(5)]
        color = _color(7)
        merged = merge_cells_by_color(polygons, [color] * len(polygons))

        assert len(merged) == 1
        assert len(merged[0].rings) == 1
        assert signed_area(merged[0].rings[0]) == pytest.approx(15.0)

    def test_input_order_does_not_matter(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        polygons = [unit_square(x, y) for y in range(2) for x in range(4)]
        color = _color(7)
        baseline = merge_cells_by_color(polygons, [color] * len(polygons))[0].rings[0]

        shuffled = list(polygons)
        random.Random(3).shuffle(shuffled)
        ring = merge_cells_by_color(shuffled, [color] * len(shuffled))[0].rings[0]

        assert tuple(ring) in _rotations(baseline)

    def test_touching_corners_trace_separately(self):
        """Squares sharing only a vertex stay two rings of one group."""
        from voromosaic.geometry.merge import merge_cells_by_color

        color = _color(9)
        merged = merge_cells_by_color([unit_square(0, 0), unit_square(1, 1)], [color, color])

        assert len(merged) == 1
        assert sorted(len(r) for r in merged[0].rings) == [4, 4]

    def test_disconnected_islands_share_one_group(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        color = _color(9)
        merged = merge_cells_by_color([unit_square(0, 0), unit_square(5, 5)], [color, color])

        assert len(merged) == 1
        assert len(merged[0].rings) == 2

    def test_first_appearance_order(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        a, b = _color(1), _color(2)
        merged = merge_cells_by_color(
            [unit_square(0, 0), unit_square(1, 0), unit_square(2, 0)], [b, a, b],
        )

        assert [m.color for m in merged] == [b, a]

    def test_alpha_distinguishes_colors(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        merged = merge_cells_by_color(
            [unit_square(0, 0), unit_square(1, 0)], [_color(5, a=255), _color(5, a=128)],
        )

        assert len(merged) == 2

    def test_degenerate_polygons_skipped(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        color = _color(1)
        merged = merge_cells_by_color([[], [(0, 0), (1, 1)], unit_square(0, 0)], [color] * 3)

        assert len(merged) == 1
        assert len(merged[0].rings[0]) == 4

    def test_empty_input(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        assert merge_cells_by_color([], []) == []

    def test_length_mismatch_raises(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        with pytest.raises(ValueError):
            merge_cells_by_color([unit_square(0, 0)], [])

    def test_non_positive_tolerance_raises(self):
        from voromosaic.geometry.merge import merge_cells_by_color

        with pytest.raises(ValueError):
            merge_cells_by_color([unit_square(0, 0)], [_color(1)], tolerance=0)

    def test_voronoi_cells_merge_to_rectangle(self):
        """All cells of one color merge into the image rectangle."""
        from voromosaic.geometry.merge import merge_cells_by_color
        from voromosaic.geometry.voronoi import build_voronoi
        from voromosaic.seeds.seed_generation import generate_seeds, seeds_to_pixels

        seeds = seeds_to_pixels(generate_seeds(40, "merge"), 120, 90)
        diagram = build_voronoi(seeds, 120, 90)
        color = _color(0)

        merged = merge_cells_by_color(diagram.cell_polygons, [color] * len(seeds))

        assert len(merged) == 1
        total = sum(signed_area(r) for r in merged[0].rings)
        assert total == pytest.approx(120 * 90, rel=1e-6)
