"""Configuration management for rendering."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Config:
    """Configuration for a render.

    Attributes:
        image_width: Output width in pixels (e.g., 400)
        aspect_ratio: Width / height; the height is derived from it
        samples_per_pixel: Camera rays averaged per pixel
        max_depth: Maximum number of bounces per camera ray
        seed: Seed for the render's random streams (default: 42)
        num_workers: Worker threads (None = one per CPU)
        chunk_rows: Image rows per work item; part of the deterministic
            partition, so changing it changes the noise pattern
        output_path: Destination PPM file
        show_progress: If True, display a progress bar while rendering
        time0: Shutter open time
        time1: Shutter close time
    """

    image_width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 42
    num_workers: Optional[int] = None
    chunk_rows: int = 8
    output_path: Path = Path("image.ppm")
    show_progress: bool = True
    time0: float = 0.0
    time1: float = 1.0

    def __post_init__(self):
        """Validate configuration."""
        if self.image_width < 1:
            raise ValueError(f"image_width must be >= 1, got {self.image_width}")

        if not self.aspect_ratio > 0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")

        if self.image_height < 1:
            raise ValueError(
                f"image_width ({self.image_width}) / aspect_ratio ({self.aspect_ratio}) "
                f"gives an image height below 1"
            )

        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")

        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")

        if self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")

        if self.num_workers is not None and self.num_workers < 1:
            raise ValueError(f"num_workers must be >= 1, got {self.num_workers}")

        if self.chunk_rows < 1:
            raise ValueError(f"chunk_rows must be >= 1, got {self.chunk_rows}")

        if self.time1 < self.time0:
            raise ValueError(
                f"time0 ({self.time0}) must be <= time1 ({self.time1})"
            )

        self.output_path = Path(self.output_path)

    @property
    def image_height(self) -> int:
        """Image height derived from width and aspect ratio."""
        return int(self.image_width / self.aspect_ratio)

    @property
    def workers(self) -> int:
        """Resolved number of worker threads."""
        if self.num_workers is not None:
            return self.num_workers
        return os.cpu_count() or 1
