"""
Density Grid Models
===================

Output of the density estimator.

A DensityGrid is an ordered sequence of (grid_size + 1)² cells. It is
regenerated wholesale on every evaluation and never mutated in place.

Cell Order:
    Axis-1-major, axis-2-minor. For grid_size=2 in 2-D mode:

        (0,0) (0,50) (0,100) (50,0) (50,50) (50,100) (100,0) ...
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Tuple

import numpy as np


class ProjectionMode(str, Enum):
    """
    Projection the grid is sampled in.

    Attributes:
        MODE_2D: Axis 1 = spatial feature, axis 2 = behavioral feature
        MODE_3D: Axis 1 = spatial feature, axis 2 = hour of day
    """

    MODE_2D = "2D"
    MODE_3D = "3D"


@dataclass(frozen=True, slots=True)
class DensityCell:
    """Single grid sample."""

    axis1: float
    axis2: float
    density: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.axis1, self.axis2, self.density)


@dataclass(frozen=True, slots=True)
class DensityGrid:
    """
    Immutable density surface.

    Attributes:
        mode: Projection the grid was sampled in
        grid_size: Number of sampling intervals per axis
        cells: (grid_size + 1)² cells in axis-1-major order
    """

    mode: ProjectionMode
    grid_size: int
    cells: Tuple[DensityCell, ...]

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[DensityCell]:
        return iter(self.cells)

    def cell_at(self, i: int, j: int) -> DensityCell:
        """Cell at axis-1 index i and axis-2 index j."""
        return self.cells[i * (self.grid_size + 1) + j]

    def max_cell(self) -> DensityCell:
        """Cell with the highest density (first one on ties)."""
        return max(self.cells, key=lambda c: c.density)

    def densities(self) -> List[float]:
        return [c.density for c in self.cells]

    def to_matrix(self) -> np.ndarray:
        """
        Densities as a (grid_size + 1, grid_size + 1) array.

        Row index follows axis 1, column index follows axis 2.
        """
        n = self.grid_size + 1
        return np.array(self.densities(), dtype=np.float64).reshape(n, n)

    def to_dict(self) -> dict:
        """Export for renderers: [[axis1, axis2, density], ...]."""
        return {
            "mode": self.mode.value,
            "grid_size": self.grid_size,
            "cells": [list(c.as_tuple()) for c in self.cells],
        }
