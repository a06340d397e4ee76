"""Generate a rectangular mesh of equilateral triangles.

A structured right-triangle grid three times wider than tall is sheared into
an equilateral parallelogram, cut to a rectangle by a bounding box, then
re-centred and scaled so the y-extent is ``RECT_Y_EXTENT``.
"""

from __future__ import annotations

import logging
import math
from typing import Tuple

import numpy as np

from .config import GENERATOR_ANGLE, RECT_BOX_MARGIN, RECT_Y_EXTENT
from .mesh import Mesh
from .structured import LinearSpacing, StructuredGrid, StructuredMeshGenerator
from .submesh import extract_submesh

_LOGGER = logging.getLogger(__name__)

_SQRT3_2 = math.sqrt(3) / 2.0


def triangle_in_box(
    mesh: Mesh,
    cell_idx: int,
    lo: Tuple[float, float],
    hi: Tuple[float, float],
) -> bool:
    """Return True if ANY vertex of cell ``cell_idx`` lies strictly inside the box."""
    tri = mesh.cells.node_connectivity[cell_idx]
    xy = mesh.nodes.xy[tri[:3]]
    inside = (
        (xy[:, 0] > lo[0]) & (xy[:, 1] > lo[1]) & (xy[:, 0] < hi[0]) & (xy[:, 1] < hi[1])
    )
    return bool(inside.any())


def _cells_in_box(
    mesh: Mesh, lo: Tuple[float, float], hi: Tuple[float, float]
) -> np.ndarray:
    """Vectorised :func:`triangle_in_box` over all cells."""
    xy = mesh.nodes.xy[mesh.cells.node_connectivity.table[:, :3]]
    inside = (
        (xy[..., 0] > lo[0])
        & (xy[..., 1] > lo[1])
        & (xy[..., 0] < hi[0])
        & (xy[..., 1] < hi[1])
    )
    return np.flatnonzero(inside.any(axis=1))


def generate_rect_mesh(ny: int) -> Mesh:
    """Generate an equilateral triangle mesh covering a rectangle.

    Args:
        ny (int): Number of grid rows; the source grid has ``3 * ny`` columns.

    Returns:
        Mesh: A mesh centred on the origin whose y-extent is
        ``RECT_Y_EXTENT``, with the x-extent scaled by the same factor.

    Raises:
        ValueError: If ``ny < 2``.
    """
    if ny < 2:
        raise ValueError(f"generate_rect_mesh needs at least 2 rows, got ny={ny}")
    nx = 3 * ny

    # Right triangles with strict up/down orientation; made equilateral below.
    grid = StructuredGrid(
        LinearSpacing(0, nx, nx, endpoint=False),
        LinearSpacing(0, ny, ny, endpoint=False),
    )
    mesh = StructuredMeshGenerator(angle=GENERATOR_ANGLE).generate(grid)

    xy = mesh.nodes.xy
    xy[:, 0] = xy[:, 0] - 0.5 * xy[:, 1]
    xy[:, 1] = xy[:, 1] * _SQRT3_2

    new_height = (ny - 1) * _SQRT3_2
    length = new_height * 2
    lo = (0.0, -np.finfo(float).max)
    hi = (length + length / nx * RECT_BOX_MARGIN, np.finfo(float).max)
    keep = _cells_in_box(mesh, lo, hi)

    rect = extract_submesh(mesh, keep)

    xy_rect = rect.nodes.xy
    x_min, y_min = xy_rect.min(axis=0)
    x_max, y_max = xy_rect.max(axis=0)
    l_x = x_max - x_min
    l_y = y_max - y_min

    # re-center
    xy_rect[:, 0] = xy_rect[:, 0] - x_min - l_x / 2
    xy_rect[:, 1] = xy_rect[:, 1] - y_min - l_y / 2

    # one factor for both axes keeps edge lengths equal
    scale = RECT_Y_EXTENT / l_y
    xy_rect *= scale
    rect.nodes.lonlat[:] = xy_rect

    _LOGGER.info(
        "Generated rectangular mesh ny=%d: %d nodes, %d cells (%.3f x %.3f)",
        ny,
        rect.nodes.size,
        rect.cells.size,
        l_x * scale,
        l_y * scale,
    )
    return rect
