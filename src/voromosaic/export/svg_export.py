"""
SVG export for voromosaic.

Builds a layered SVG document from a pipeline output: the original image,
the colored cells (individual polygons or merged even-odd paths), the
Voronoi edges and the seed points.
"""

import base64
import mimetypes
import os

import svgwrite

from voromosaic.config import CellRenderConfig, SvgConfig
from voromosaic.pipeline import compute_cell_render
from voromosaic.tracer import get_tracer, trace


def fraction_to_px(fraction, image_width, image_height):
    """Convert a fraction of min(image width, height) to pixels."""
    return fraction * min(image_width, image_height)


def _fmt(value):
    return f"{value:.6g}"


def rings_to_path_data(rings, scale_x=1.0, scale_y=1.0):
    """
    SVG path data for a set of rings, one "M ... L ... Z" subpath per ring.

    Empty rings are skipped.
    """
    subpaths = []
    for ring in rings:
        if not ring:
            continue
        head, tail = ring[0], ring[1:]
        parts = [f"M {_fmt(head[0] * scale_x)} {_fmt(head[1] * scale_y)}"]
        parts.extend(f"L {_fmt(x * scale_x)} {_fmt(y * scale_y)}" for x, y in tail)
        parts.append("Z")
        subpaths.append(" ".join(parts))
    return " ".join(subpaths)


def _scaled_points(polygon, scale_x, scale_y):
    return [(x * scale_x, y * scale_y) for x, y in polygon]


def image_to_data_url(path):
    """Embed an image file as a base64 data URL."""
    mime_type = mimetypes.guess_type(path)[0] or "image/png"
    with open(path, "rb") as f:
        encoded = base64.b64encode(f.read()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


@trace(label="build_voronoi_svg")
def build_voronoi_svg(output, svg_config=None, render_config=None, original_image_href=None,
                      cell_render=None):
    """
    Create the SVG document for a pipeline output.

    Args:
        output: PipelineOutput
        svg_config: SvgConfig (layers, styling, output scale)
        render_config: CellRenderConfig (filter, merge, simplification)
        original_image_href: URL or data URL for the original image layer
        cell_render: precomputed CellRenderResult, computed if omitted

    Returns:
        svgwrite.Drawing
    """
    tracer = get_tracer()

    svg_config = svg_config or SvgConfig()
    render_config = render_config or CellRenderConfig()

    width = output.image_width * svg_config.scale
    height = output.image_height * svg_config.scale
    scale_x = width / output.image_width
    scale_y = height / output.image_height
    style_scale = min(scale_x, scale_y)

    dwg = svgwrite.Drawing(size=(_fmt(width), _fmt(height)))
    dwg.viewbox(0, 0, width, height)

    original_layer = dwg.g(id="layer-original")
    if svg_config.show_original and original_image_href:
        original_layer.add(dwg.image(
            href=original_image_href,
            insert=(0, 0),
            size=(width, height),
            preserveAspectRatio="none",
        ))
    dwg.add(original_layer)

    if cell_render is None:
        cell_render = compute_cell_render(output, render_config)

    cells_layer = dwg.g(id="layer-cells")
    shapes = 0
    if svg_config.show_cells:
        if render_config.combine_same_color_cells:
            for group in cell_render.merged_optimized or []:
                d = rings_to_path_data(group.rings, scale_x, scale_y)
                if not d:
                    continue
                cells_layer.add(dwg.path(
                    d=d,
                    fill=group.color.to_rgb(),
                    fill_opacity=_fmt(group.color.opacity),
                    fill_rule="evenodd",
                ))
                shapes += 1
        else:
            for polygon, color in zip(cell_render.polygons, cell_render.colors):
                if not polygon:
                    continue
                cells_layer.add(dwg.polygon(
                    points=_scaled_points(polygon, scale_x, scale_y),
                    fill=color.to_rgb(),
                    fill_opacity=_fmt(color.opacity),
                ))
                shapes += 1
    dwg.add(cells_layer)

    edges_layer = dwg.g(id="layer-edges")
    if svg_config.show_voronoi:
        line_width = fraction_to_px(
            svg_config.voronoi_line_width_fraction, output.image_width, output.image_height,
        ) * style_scale
        for polygon in output.cell_polygons:
            if not polygon:
                continue
            edges_layer.add(dwg.polygon(
                points=_scaled_points(polygon, scale_x, scale_y),
                fill="none",
                stroke=svg_config.voronoi_line_color,
                stroke_width=_fmt(line_width),
            ))
    dwg.add(edges_layer)

    seeds_layer = dwg.g(id="layer-seeds")
    if svg_config.show_seeds:
        radius = fraction_to_px(
            svg_config.seed_point_radius_fraction, output.image_width, output.image_height,
        ) * style_scale
        for x, y in output.seeds_px:
            seeds_layer.add(dwg.circle(
                center=(x * scale_x, y * scale_y),
                r=_fmt(radius),
                fill=svg_config.seed_point_color,
            ))
    dwg.add(seeds_layer)

    tracer.event(f"SVG built: {_fmt(width)}x{_fmt(height)}, {shapes} cell shapes")

    return dwg


def default_output_path(input_path):
    """<input dir>/<input stem>.svg"""
    stem, _ = os.path.splitext(input_path)
    return stem + ".svg"
