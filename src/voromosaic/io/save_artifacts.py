"""
Writing run artifacts: the SVG document and optional JSON dumps of pipeline
records or configuration.
"""

import json
import os
from dataclasses import asdict, is_dataclass

from voromosaic.tracer import get_tracer

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def ensure_dir(path):
    """Create directory if it does not exist; an empty path means the cwd."""
    if path:
        os.makedirs(path, exist_ok=True)


def to_jsonable(data):
    """Pydantic models, config dataclasses and lists of either, as plain JSON data."""
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json")
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    return data


def _write_text(content, path):
    ensure_dir(os.path.dirname(path))
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def save_json(data, path, indent=2):
    """Write a pipeline record (or anything to_jsonable accepts) as JSON."""
    _write_text(json.dumps(to_jsonable(data), indent=indent, default=str), path)
    get_tracer().event(f"Saved JSON: {path}")


def save_svg(svg_content, path):
    """
    Write an svgwrite.Drawing, or ready-made markup, to path.

    Drawings are serialized with an XML declaration in front.
    """
    if hasattr(svg_content, "tostring"):
        content = XML_DECLARATION + svg_content.tostring()
    else:
        content = str(svg_content)

    _write_text(content, path)
    get_tracer().event(f"Saved SVG: {path}", size=len(content))
