"""Parallel rendering and image output."""

from .driver import RenderError, render
from .ppm import format_ppm, read_ppm, to_rgb8, write_ppm

__all__ = ["RenderError", "render", "format_ppm", "read_ppm", "to_rgb8", "write_ppm"]
