"""
Green Eye - Vegetation index proxy from the field photoresistor.

The light reading stands in for near-infrared and (full_scale - reading) for red,
then the usual (IR - Red) / (IR + Red). This is a single-channel heuristic, not
multispectral NDVI; health labels derived from it are indicative only.
"""
import math
from typing import List, Optional

import numpy as np

ADC_10BIT_FULL_SCALE = 1024.0
ADC_8BIT_FULL_SCALE = 255.0

HEALTH_NOTE = "Single-channel light proxy, not multispectral NDVI"

# (lower bound exclusive, label), checked top-down
HEALTH_BANDS = (
    (0.4, "Excellent"),
    (0.2, "Good"),
    (0.0, "Fair"),
)


def vegetation_index(light_reading: float, full_scale: float) -> float:
    """
    Vegetation index proxy in [-1, 1].

    Args:
        light_reading: raw photoresistor value
        full_scale: the sensor's maximum reportable value (1024 for the 10-bit
            ADC, 255 for 8-bit readings); callers must say which one they used

    Returns:
        (IR - Red) / (IR + Red), or 0.0 when IR + Red is zero
    """
    ir = light_reading
    red = full_scale - light_reading
    total = ir + red
    if total == 0:
        return 0.0
    value = (ir - red) / total
    if not math.isfinite(value):
        return 0.0
    return max(-1.0, min(1.0, value))


def vegetation_health(index: float) -> str:
    """Label a proxy index: Excellent / Good / Fair / Poor."""
    for lower, label in HEALTH_BANDS:
        if index > lower:
            return label
    return "Poor"


def vegetation_grid(
    index: float,
    size: int = 10,
    noise: float = 0.4,
    seed: Optional[int] = None,
) -> List[List[float]]:
    """
    size x size heatmap cells around the base index with uniform noise in
    [-noise/2, noise/2), clamped to [0, 1]. Pass seed for a reproducible grid.
    """
    rng = np.random.default_rng(seed)
    jitter = (rng.random((size, size)) - 0.5) * noise
    cells = np.clip(index + jitter, 0.0, 1.0)
    return cells.round(4).tolist()
