"""
Command-line interface for voromosaic.

Provides commands for rendering an image as a Voronoi mosaic SVG and for
writing a default configuration file.
"""

import argparse
import sys

from voromosaic.config import load_config, save_default_config, validate_config
from voromosaic.models import ColorMode, SeedStrategy, SimplifyAlgorithm
from voromosaic.tracer import configure_tracer, get_tracer


def str_to_bool(value):
    """Parse a strict true|false flag value."""
    if value == "true":
        return True
    if value == "false":
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


# (flag, config section, attribute, argparse type, choices, help)
OVERRIDES = [
    ("--seed-density", "seed", "density", float, None, "Seed density per normalized area unit"),
    ("--seed-value", "seed", "value", str, None, "Seed string for the random stream"),
    ("--seed-strategy", "seed", "strategy", str, [s.value for s in SeedStrategy], "Normalized area strategy"),
    ("--color-mode", "color", "mode", str, [m.value for m in ColorMode], "Cell color sampling mode"),
    ("--render-scale", "color", "render_scale", float, None, "Sampling resolution for cellAverage, in (0, 1]"),
    ("--show-original", "svg", "show_original", str_to_bool, None, "Embed the original image (true|false)"),
    ("--show-cells", "svg", "show_cells", str_to_bool, None, "Draw filled cells (true|false)"),
    ("--show-voronoi", "svg", "show_voronoi", str_to_bool, None, "Draw cell edges (true|false)"),
    ("--show-seeds", "svg", "show_seeds", str_to_bool, None, "Draw seed points (true|false)"),
    ("--black-and-white-cells", "cell_render", "black_and_white_cells", str_to_bool, None,
     "Threshold cell colors to black or white (true|false)"),
    ("--skip-white-cells", "cell_render", "skip_white_cells", str_to_bool, None,
     "Leave pure white cells out (true|false)"),
    ("--combine-same-color-cells", "cell_render", "combine_same_color_cells", str_to_bool, None,
     "Merge same-colored cells into compound paths (true|false)"),
    ("--path-simplification-algorithm", "cell_render", "algorithm", str,
     [a.value for a in SimplifyAlgorithm], "Simplification algorithm for merged paths"),
    ("--path-simplification-strength", "cell_render", "strength", float, None,
     "Simplification strength in [0, 1]"),
    ("--path-simplification-size-compensation", "cell_render", "size_compensation", str_to_bool, None,
     "Scale thresholds by relative ring size (true|false)"),
    ("--path-simplification-min-path-size01", "cell_render", "min_path_size01", float, None,
     "Drop merged rings smaller than this fraction of the image, in [0, 1]"),
    ("--seed-point-radius", "svg", "seed_point_radius_fraction", float, None,
     "Seed point radius as a fraction of the image, in [0, 1]"),
    ("--scale", "svg", "scale", float, None, "Output scale factor"),
]


def build_parser():
    parser = argparse.ArgumentParser(
        prog="voromosaic",
        description="voromosaic: render raster images as Voronoi mosaic SVGs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Render an image as a mosaic SVG")
    run_parser.add_argument("--input", "-i", required=True, help="Input image path")
    run_parser.add_argument("--output", "-o", default=None, help="Output SVG path (default: <input>.svg)")
    run_parser.add_argument("--config", "-c", default=None, help="Path to YAML configuration file")
    run_parser.add_argument("--output-json", default=None, help="Also write the pipeline output as JSON")

    for flag, _, attr, type_, choices, help_text in OVERRIDES:
        run_parser.add_argument(flag, dest=f"opt_{attr}", type=type_, choices=choices, default=None, help=help_text)

    run_parser.add_argument("--trace", action="store_true", help="Enable runtime tracing")
    run_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    run_parser.add_argument("--trace-file", default=None, help="Path to write trace logs")
    run_parser.add_argument("--trace-json", action="store_true", help="Enable JSON trace output")

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="voromosaic_config.yaml",
        help="Output path for config file",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def apply_overrides(config, args):
    """Copy explicitly given CLI flags onto the loaded configuration."""
    for _, section, attr, _, _, _ in OVERRIDES:
        value = getattr(args, f"opt_{attr}")
        if value is not None:
            setattr(getattr(config, section), attr, value)
    return config


def handle_run(args):
    """Handle the run command."""
    configure_tracer(
        enabled=args.trace,
        level=args.trace_level,
        file_path=args.trace_file,
        json_output=args.trace_json,
    )

    tracer = get_tracer()

    try:
        from voromosaic.export.svg_export import (
            build_voronoi_svg, default_output_path, image_to_data_url,
        )
        from voromosaic.io.pixel_source import load_pixel_source
        from voromosaic.io.save_artifacts import save_json, save_svg
        from voromosaic.pipeline import compute_cell_render, compute_simplification_stats, run_pipeline

        config = apply_overrides(load_config(args.config), args)
        validate_config(config)

        with tracer.span("cli_run", module="cli"):
            pixel_source = load_pixel_source(args.input)
            output = run_pipeline(pixel_source, config)
            cell_render = compute_cell_render(output, config.cell_render)

            href = image_to_data_url(args.input) if config.svg.show_original else None
            dwg = build_voronoi_svg(
                output, config.svg, config.cell_render,
                original_image_href=href, cell_render=cell_render,
            )

            out_path = args.output or default_output_path(args.input)
            save_svg(dwg, out_path)

            if args.output_json:
                save_json(output, args.output_json)

        tracer.event(f"Stage timings: {tracer.timing_report()}")

        print(f"Input: {args.input}")
        print(f"Output: {out_path}")
        print(f"Seeds: {len(output.seeds_px)}")

        stats = compute_simplification_stats(output, config.cell_render, cell_render)
        if stats is not None:
            print(f"Original Points: {stats.original_points}")
            print(f"Optimized Points: {stats.optimized_points}")

        return 0

    except Exception as e:
        tracer.event(f"Run failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    finally:
        tracer.config.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
