"""
Per-cell render filter.

Decides the color a cell is drawn with and whether it is drawn at all. The
filter runs before merging, so excluded cells contribute no edges.
"""

from voromosaic.models import CellColor


def luminance(color):
    """Rec. 709 relative luminance on the 0-255 scale."""
    return 0.2126 * color.r + 0.7152 * color.g + 0.0722 * color.b


def to_rendered_color(color, black_and_white=False):
    """
    Map a sampled color to the color it is rendered with.

    In black-and-white mode the color snaps to pure white when its luminance
    is at least 128 and to pure black otherwise. Alpha passes through.
    """
    if not black_and_white:
        return color

    value = 255 if luminance(color) >= 128 else 0
    return CellColor(r=value, g=value, b=value, a=color.a)


def is_white_cell(color):
    """Exact white, alpha ignored."""
    return color.r == 255 and color.g == 255 and color.b == 255


def should_render_cell(color, skip_white=False):
    return not (skip_white and is_white_cell(color))
