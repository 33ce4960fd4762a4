"""
Main pipeline orchestrator for voromosaic.

run_pipeline turns a pixel source into seeds, cells and colors;
compute_cell_render applies the render filter and, on request, merges and
simplifies same-colored cells. Both are pure functions of their inputs.
"""

from voromosaic.color.cell_render import should_render_cell, to_rendered_color
from voromosaic.color.sampling import compute_cell_average_colors, sample_seed_colors
from voromosaic.config import PipelineConfig, validate_sampling_config
from voromosaic.geometry.merge import merge_cells_by_color
from voromosaic.geometry.voronoi import build_voronoi
from voromosaic.models import (
    CellRenderResult, ColorMode, PipelineOutput, SimplificationStats, SimplifyAlgorithm,
    ring_point_count,
)
from voromosaic.seeds.seed_generation import compute_seed_count, generate_seeds, seeds_to_pixels
from voromosaic.simplify.rings import SimplifyOptions, clamp01, simplify_merged_boundaries
from voromosaic.tracer import get_tracer, trace


@trace(label="run_pipeline")
def run_pipeline(pixel_source, config=None):
    """
    Run seed generation, tessellation and color sampling.

    Args:
        pixel_source: object with width, height and get_image_data()
        config: PipelineConfig (defaults if omitted); seed and color
            sections are validated first

    Returns:
        PipelineOutput with index-aligned seeds, polygons and colors
    """
    tracer = get_tracer()

    if config is None:
        config = PipelineConfig()
    validate_sampling_config(config)

    width = pixel_source.width
    height = pixel_source.height

    with tracer.span("seeds", module="pipeline"):
        seed_count = compute_seed_count(width, height, config.seed.density, config.seed.strategy)
        seeds01 = generate_seeds(seed_count, config.seed.value)
        seeds_px = seeds_to_pixels(seeds01, width, height)

    with tracer.span("tessellate", module="pipeline"):
        diagram = build_voronoi(seeds_px, width, height)

    with tracer.span("sample_colors", module="pipeline"):
        image = pixel_source.get_image_data()
        if ColorMode(config.color.mode) == ColorMode.CELL_AVERAGE:
            cell_colors = compute_cell_average_colors(image, diagram, config.color.render_scale)
        else:
            cell_colors = sample_seed_colors(image, seeds_px)

    output = PipelineOutput(
        image_width=width,
        image_height=height,
        seeds01=seeds01,
        seeds_px=seeds_px,
        cell_polygons=diagram.cell_polygons,
        cell_colors=cell_colors,
    )

    tracer.event(f"Pipeline complete: {seed_count} seeds on {width}x{height}")

    return output


@trace(label="compute_cell_render")
def compute_cell_render(output, render_config):
    """
    Filter cells for rendering and optionally merge/simplify them.

    Cells are recolored (black-and-white mode) and filtered (skip white)
    first, so excluded cells never reach the merge. merged_original and
    merged_optimized are None unless combine_same_color_cells is set.
    """
    tracer = get_tracer()

    polygons = []
    colors = []
    for polygon, color in zip(output.cell_polygons, output.cell_colors):
        rendered = to_rendered_color(color, render_config.black_and_white_cells)
        if not should_render_cell(rendered, render_config.skip_white_cells):
            continue
        polygons.append(polygon)
        colors.append(rendered)

    tracer.event(f"Render filter kept {len(polygons)} of {len(output.cell_polygons)} cells")

    if not render_config.combine_same_color_cells:
        return CellRenderResult(polygons=polygons, colors=colors)

    min_path_size = clamp01(render_config.min_path_size01) * min(output.image_width, output.image_height)

    with tracer.span("merge", module="pipeline"):
        merged_original = merge_cells_by_color(polygons, colors, render_config.merge_tolerance)

    with tracer.span("simplify", module="pipeline"):
        merged_optimized = simplify_merged_boundaries(merged_original, SimplifyOptions(
            algorithm=SimplifyAlgorithm(render_config.algorithm),
            strength=render_config.strength,
            size_compensation=render_config.size_compensation,
            min_path_size=min_path_size,
        ))

    return CellRenderResult(
        polygons=polygons,
        colors=colors,
        merged_original=merged_original,
        merged_optimized=merged_optimized,
    )


def compute_simplification_stats(output, render_config, cell_render=None):
    """
    Ring vertex counts before and after simplification.

    Returns None unless cells are combined and an algorithm other than
    "none" is selected. A precomputed cell_render result may be passed in
    to avoid merging twice.
    """
    if not render_config.combine_same_color_cells:
        return None
    if SimplifyAlgorithm(render_config.algorithm) == SimplifyAlgorithm.NONE:
        return None

    if cell_render is None:
        cell_render = compute_cell_render(output, render_config)

    return SimplificationStats(
        original_points=ring_point_count(cell_render.merged_original or []),
        optimized_points=ring_point_count(cell_render.merged_optimized or []),
    )
