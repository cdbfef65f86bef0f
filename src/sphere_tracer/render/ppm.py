"""ASCII PPM (P3) image output."""

import os
import tempfile
from pathlib import Path
from typing import Union

import numpy as np


def to_rgb8(image: np.ndarray) -> np.ndarray:
    """Quantize a [0, 1] float image to uint8 with floor(256 * clamp(c, 0, 0.999)).

    NaN channels map to 0.
    """
    arr = np.asarray(image, dtype=np.float64)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError(f"image must have shape (H, W, 3), got {arr.shape}")
    arr = np.nan_to_num(arr, nan=0.0, posinf=1.0, neginf=0.0)
    return np.floor(256.0 * np.clip(arr, 0.0, 0.999)).astype(np.uint8)


def format_ppm(pixels: np.ndarray) -> str:
    """P3 text for a (H, W, 3) uint8 array, top row first."""
    pixels = np.asarray(pixels)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"pixels must have shape (H, W, 3), got {pixels.shape}")
    height, width = pixels.shape[:2]
    lines = [f"P3\n{width} {height}\n255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(path: Union[str, Path], image: np.ndarray) -> Path:
    """Write a float image as a P3 PPM file.

    The file is written to a temporary sibling and moved into place, so a
    failed write never leaves a partial image at ``path``.

    Args:
        path: Destination file; parent directories are created
        image: (H, W, 3) float image in [0, 1]

    Returns:
        Path that was written
    """
    path = Path(path)
    text = format_ppm(to_rgb8(image))
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path


def read_ppm(path: Union[str, Path]) -> np.ndarray:
    """Read a P3 PPM file into a (H, W, 3) uint8 array."""
    with open(path, "r") as f:
        tokens = [
            token
            for line in f
            for token in line.split("#", 1)[0].split()
        ]

    if not tokens or tokens[0] != "P3":
        raise ValueError(f"{path} is not an ASCII PPM (P3) file")
    if len(tokens) < 4:
        raise ValueError(f"{path} has an incomplete PPM header")

    width, height, maxval = (int(t) for t in tokens[1:4])
    values = np.array([int(t) for t in tokens[4:]], dtype=np.int64)
    if values.size != width * height * 3:
        raise ValueError(
            f"{path} should hold {width * height * 3} channel values, got {values.size}"
        )
    if maxval < 1:
        raise ValueError(f"{path} has invalid maxval {maxval}")
    if maxval != 255:
        values = values * 255 // maxval
    return values.reshape(height, width, 3).astype(np.uint8)
