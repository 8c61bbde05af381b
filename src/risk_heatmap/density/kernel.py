"""
Gaussian Kernel
===============

    K(d, h) = 1 / (h * sqrt(2π)) * exp(-0.5 * (d / h)²)

No truncation radius: every point contributes to every grid cell.
The bandwidth is validated at the configuration boundary, not here.
"""

import math
from typing import Union

import numpy as np


_SQRT_2PI = math.sqrt(2.0 * math.pi)

ArrayLike = Union[float, np.ndarray]


def gaussian_kernel(distance: ArrayLike, bandwidth: float) -> ArrayLike:
    """
    Evaluate the 1-D Gaussian kernel.

    Accepts a scalar distance or a NumPy array of distances.

    Args:
        distance: Weighted distance(s) between grid sample and event
        bandwidth: Kernel spread, must be > 0

    Returns:
        Kernel weight(s), strictly positive for finite distance
    """
    scaled = np.asarray(distance, dtype=np.float64) / bandwidth
    weight = np.exp(-0.5 * scaled * scaled) / (bandwidth * _SQRT_2PI)
    if weight.ndim == 0:
        return float(weight)
    return weight


def kernel_peak(bandwidth: float) -> float:
    """Kernel value at zero distance."""
    return 1.0 / (bandwidth * _SQRT_2PI)
