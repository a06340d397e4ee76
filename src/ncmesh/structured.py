"""Regular structured grids and their triangulation.

This module provides:
  - LinearSpacing: evenly spaced coordinates along one axis.
  - StructuredGrid: the tensor product of an x and a y spacing.
  - StructuredMeshGenerator: splits every grid quad into two triangles.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import NDArray

from .config import DEFAULT_PARTITION, GENERATOR_ANGLE
from .mesh import Mesh, Topology

_LOGGER = logging.getLogger(__name__)


class LinearSpacing:
    """``n`` evenly spaced values over ``[start, end]`` or ``[start, end)``.

    Args:
        start (float): First value.
        end (float): Interval end.
        n (int): Number of values.
        endpoint (bool): Whether ``end`` is included.
    """

    def __init__(self, start: float, end: float, n: int, endpoint: bool = True) -> None:
        if n < 1:
            raise ValueError(f"LinearSpacing needs at least one point, got n={n}")
        self.values: NDArray[Any] = np.linspace(start, end, n, endpoint=endpoint)

    @property
    def size(self) -> int:
        return int(self.values.size)

    def __len__(self) -> int:
        return self.size


class StructuredGrid:
    """Regular grid with ``nx`` points per row and ``ny`` rows."""

    def __init__(self, x: LinearSpacing, y: LinearSpacing) -> None:
        self.x = x
        self.y = y

    @property
    def nx(self) -> int:
        return self.x.size

    @property
    def ny(self) -> int:
        return self.y.size

    @property
    def size(self) -> int:
        return self.nx * self.ny

    def xy(self) -> NDArray[Any]:
        """Return point coordinates of shape (nx*ny, 2), row by row."""
        xx, yy = np.meshgrid(self.x.values, self.y.values)
        return np.column_stack([xx.ravel(), yy.ravel()])


class StructuredMeshGenerator:
    """Generate a triangle mesh from a StructuredGrid.

    Each quad ``(i,j) (i+1,j) (i+1,j+1) (i,j+1)`` is cut along the
    ``(i,j)-(i+1,j+1)`` diagonal into two counter-clockwise triangles.

    Args:
        angle (float): Maximum quad slant in degrees. Only negative values
            (triangles everywhere) are supported.
    """

    def __init__(self, angle: float = GENERATOR_ANGLE) -> None:
        if angle >= 0:
            raise ValueError(
                f"only triangular meshes are supported (angle < 0), got angle={angle}"
            )
        self.angle = angle

    def generate(self, grid: StructuredGrid) -> Mesh:
        """Triangulate ``grid``.

        Returns:
            Mesh: ``nx*ny`` nodes and ``2*(nx-1)*(ny-1)`` triangles.
        """
        nx, ny = grid.nx, grid.ny
        mesh = Mesh()

        nodes = mesh.nodes
        nodes.resize(grid.size)
        nodes.xy[:] = grid.xy()
        nodes.lonlat[:] = nodes.xy
        idx = np.arange(grid.size)
        nodes.global_index[:] = idx
        nodes.remote_index[:] = idx
        nodes.partition[:] = DEFAULT_PARTITION
        Topology.reset(nodes.flags)

        jj, ii = np.meshgrid(np.arange(ny - 1), np.arange(nx - 1), indexing="ij")
        n00 = (jj * nx + ii).ravel()
        n10 = n00 + 1
        n11 = n00 + nx + 1
        n01 = n00 + nx

        tris = np.empty((2 * n00.size, 3), dtype=np.int64)
        tris[0::2] = np.column_stack([n00, n10, n11])
        tris[1::2] = np.column_stack([n00, n11, n01])

        cells = mesh.cells
        cells.add("triangle", tris.shape[0])
        cells.node_connectivity.table[:] = tris
        cells.global_index[:] = np.arange(tris.shape[0])
        cells.partition[:] = DEFAULT_PARTITION

        _LOGGER.debug(
            "StructuredMeshGenerator: grid %dx%d -> %d nodes, %d triangles",
            nx,
            ny,
            nodes.size,
            cells.size,
        )
        return mesh
