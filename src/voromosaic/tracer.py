"""
Hierarchical runtime tracing for the mosaic pipeline.

Stages (seeds, tessellation, sampling, merge, simplify, export) run inside
nested spans that report their duration; one-off events carry counts such
as seeds generated or points removed. Everything is off unless the CLI
enables it, and the hot paths only pay for a flag check.
"""

import functools
import hashlib
import json
import sys
import time
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
from enum import Enum


class TracerConfig:
    """Where and how much the tracer writes."""

    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.file_path = None
        self.json_output = False
        self._file_handle = None

    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        self.close()

        self.enabled = enabled
        self.level = level.upper()
        self.file_path = file_path
        self.json_output = json_output

        if file_path and enabled:
            self._file_handle = open(file_path, "w", encoding="utf-8")

    def close(self):
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


class Tracer:
    """
    Span/event logger with per-stage timing totals.

    Text lines go to stderr (and the trace file when one is configured),
    indented by span depth. With json_output each line is followed by a JSON
    record of the same event. stage_times accumulates elapsed milliseconds
    per span name across the run.
    """

    LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}

    def __init__(self):
        self.config = TracerConfig()
        self._depth = 0
        self._span_stack = []
        self.stage_times = defaultdict(float)

    def reset(self):
        self._depth = 0
        self._span_stack = []
        self.stage_times.clear()

    def _should_log(self, level):
        if not self.config.enabled:
            return False
        return self.LEVELS.get(level, 2) <= self.LEVELS.get(self.config.level, 2)

    def _emit(self, line):
        print(line, file=sys.stderr)
        handle = self.config._file_handle
        if handle:
            handle.write(line + "\n")
            handle.flush()

    def _write(self, level, module, func, message, meta=None):
        if not self._should_log(level):
            return

        now = datetime.now()
        timestamp = now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
        location = f"{module}:{func}" if func else module

        self._emit(f"{timestamp} {level:<5} {'  ' * self._depth}{location}  {message}")

        if self.config.json_output:
            self._emit(json.dumps({
                "timestamp": timestamp,
                "level": level,
                "depth": self._depth,
                "module": module,
                "function": func,
                "message": message,
                "meta": {k: summarize(v) for k, v in (meta or {}).items()},
            }))

    def _leave(self, name, start_time):
        elapsed = (time.perf_counter() - start_time) * 1000
        self._depth -= 1
        self._span_stack.pop()
        self.stage_times[name] += elapsed
        return elapsed

    @contextmanager
    def span(self, name, module="", **meta):
        """
        Traced block; logs start, then end with elapsed milliseconds.

        An exception is logged at ERROR level and re-raised untouched.
        """
        if not self.config.enabled:
            yield
            return

        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write("INFO", module, name, f"start {meta_str}".strip(), meta)
        start_time = time.perf_counter()
        self._depth += 1
        self._span_stack.append((name, module))

        try:
            yield
        except Exception as e:
            elapsed = self._leave(name, start_time)
            self._write("ERROR", module, name, f"failed dt={elapsed:.0f}ms error={type(e).__name__}: {str(e)[:100]}")
            raise
        else:
            elapsed = self._leave(name, start_time)
            self._write("INFO", module, name, f"end ok dt={elapsed:.0f}ms")

    def event(self, message, level="INFO", **meta):
        """Log a one-off event attributed to the innermost open span."""
        if not self._should_log(level):
            return

        func, module = self._span_stack[-1] if self._span_stack else ("", "")
        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write(level, module, func, f"{message} {meta_str}".strip(), meta)

    def timing_report(self, top=8):
        """Slowest stages first, as "name=12ms" pairs."""
        ranked = sorted(self.stage_times.items(), key=lambda item: -item[1])[:top]
        return " ".join(f"{name}={ms:.0f}ms" for name, ms in ranked)


def summarize(obj, max_len=200):
    """
    Compact, length-capped description of obj for trace lines.

    Knows point lists and rings, colors and merged boundaries, diagrams and
    pixel buffers, numpy arrays, shapely geometries and pydantic models.
    """
    try:
        result = _summarize_impl(obj)
    except Exception:
        return f"<{type(obj).__name__}>"
    if len(result) > max_len:
        return result[:max_len - 3] + "..."
    return result


def _is_point(value):
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and all(isinstance(c, (int, float)) for c in value)
    )


def _summarize_impl(obj):
    if obj is None:
        return "None"

    type_name = type(obj).__name__

    if isinstance(obj, Enum):
        return str(obj.value)

    import numpy as np
    if isinstance(obj, np.ndarray):
        shape_str = "x".join(str(s) for s in obj.shape)
        source = obj.tobytes() if 0 < obj.size < 1000 else str(obj.shape).encode()
        return f"ndarray({obj.dtype},{shape_str},h={hashlib.md5(source).hexdigest()[:8]})"

    from shapely.geometry.base import BaseGeometry
    if isinstance(obj, BaseGeometry):
        bounds_str = ",".join(f"{b:.1f}" for b in obj.bounds)
        return f"{type_name}(bounds=[{bounds_str}])"

    if type_name == "CellColor":
        return f"rgba({obj.r},{obj.g},{obj.b},{obj.a})"

    if type_name == "MergedBoundary":
        points = sum(len(ring) for ring in obj.rings)
        return f"MergedBoundary({_summarize_impl(obj.color)},rings={len(obj.rings)},points={points})"

    if type_name == "VoronoiDiagram":
        return f"VoronoiDiagram(cells={len(obj)},{obj.width}x{obj.height})"

    if type_name == "ImageData":
        return f"ImageData({obj.width}x{obj.height})"

    from pydantic import BaseModel
    if isinstance(obj, BaseModel):
        fields = list(type(obj).model_fields.keys())[:3]
        return f"{type_name}(fields={fields}...)"

    if isinstance(obj, str):
        if len(obj) > 50:
            return f"str(len={len(obj)},h={hashlib.md5(obj.encode()).hexdigest()[:8]})"
        return repr(obj)

    if isinstance(obj, bytes):
        return f"bytes(len={len(obj)},h={hashlib.md5(obj).hexdigest()[:8]})"

    if isinstance(obj, (list, tuple)):
        if len(obj) == 0:
            return f"{type_name}(len=0)"
        if _is_point(obj[0]) and all(_is_point(p) for p in obj):
            xs = [p[0] for p in obj]
            ys = [p[1] for p in obj]
            return f"points(n={len(obj)},bbox=[{min(xs):.1f},{min(ys):.1f},{max(xs):.1f},{max(ys):.1f}])"
        return f"{type_name}(len={len(obj)},first={type(obj[0]).__name__})"

    if isinstance(obj, dict):
        keys_str = ",".join(str(k) for k in list(obj.keys())[:5])
        return f"dict(len={len(obj)},keys=[{keys_str}])"

    if isinstance(obj, (bool, int, float)):
        return str(obj)

    return f"<{type_name}>"


def trace(label=None, arg_names=None):
    """
    Run the decorated function inside a span named label (or its __name__).

    Keyword arguments listed in arg_names are attached to the span start line.
    """
    def decorator(func):
        span_name = label or func.__name__
        func_module = func.__module__.split(".")[-1] if func.__module__ else ""

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)

            meta = {name: kwargs[name] for name in (arg_names or ()) if name in kwargs}
            with _tracer.span(span_name, module=func_module, **meta):
                return func(*args, **kwargs)

        return wrapper
    return decorator


_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer and clear its span state and timings."""
    _tracer.reset()
    _tracer.config.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
