"""
Visualization Module
====================

Encode density grids for the frontend renderer.

This module generates PURELY DESCRIPTIVE artifacts. The renderer owns
color scales, tooltips and projection UI; this only packs numbers.

Artifacts:
    - Density heatmap: base64 JSON matrix with axis samples and value range
"""

import base64
import json
import logging
from typing import Optional

from risk_heatmap.models.grid import DensityGrid


logger = logging.getLogger(__name__)


def encode_heatmap(grid: DensityGrid, precision: int = 6) -> str:
    """
    Encode a grid as a base64 JSON document.

    Layout:
        {
            "mode": "2D",
            "resolution": grid_size + 1,
            "axis1": [...], "axis2": [...],
            "min_val": 0.0, "max_val": ...,
            "grid": [[...], ...]   # rows follow axis 1
        }

    Args:
        grid: Density surface to encode
        precision: Decimal places kept for densities

    Returns:
        Base64-encoded JSON string
    """
    matrix = grid.to_matrix()
    n = grid.grid_size + 1
    axis1 = [round(grid.cell_at(i, 0).axis1, 4) for i in range(n)]
    axis2 = [round(grid.cell_at(0, j).axis2, 4) for j in range(n)]

    heatmap_data = {
        "mode": grid.mode.value,
        "resolution": n,
        "axis1": axis1,
        "axis2": axis2,
        "min_val": round(float(matrix.min()), precision),
        "max_val": round(float(matrix.max()), precision),
        "grid": [[round(v, precision) for v in row] for row in matrix.tolist()],
    }

    json_str = json.dumps(heatmap_data)
    return base64.b64encode(json_str.encode()).decode()


def decode_heatmap(payload: str) -> Optional[dict]:
    """Decode an encoded heatmap (None if the payload is not valid)."""
    try:
        return json.loads(base64.b64decode(payload).decode())
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(f"Invalid heatmap payload: {e}")
        return None
