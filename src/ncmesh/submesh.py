"""Extract a sub-mesh made of a chosen subset of cells."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from .mesh import Mesh

_LOGGER = logging.getLogger(__name__)


def extract_submesh(mesh: Mesh, keep: Sequence[int]) -> Mesh:
    """Build a new mesh holding only the cells listed in ``keep``.

    Cells keep the order of ``keep`` and are renumbered ``0..k-1``. Nodes
    referenced by a kept cell are kept once, in ascending original order, and
    renumbered densely. Global indices are reassigned from 0; coordinates,
    partition, ghost and flags are copied. Edges and neighbour tables other
    than cell -> node are not carried over.

    Args:
        mesh (Mesh): Source mesh.
        keep (Sequence[int]): Indices of the cells to keep.

    Returns:
        Mesh: The extracted mesh.

    Raises:
        IndexError: If a cell index is out of range.
    """
    keep_arr = np.asarray(keep, dtype=np.int64).reshape(-1)
    n_cells = mesh.cells.size
    if keep_arr.size and (keep_arr.min() < 0 or keep_arr.max() >= n_cells):
        raise IndexError(f"cell index out of range for a mesh of {n_cells} cells")

    cell_nodes = mesh.cells.node_connectivity.table[keep_arr]
    old_nodes, new_conn = np.unique(cell_nodes, return_inverse=True)
    new_conn = new_conn.reshape(cell_nodes.shape)

    sub = Mesh()
    nodes = sub.nodes
    nodes.resize(old_nodes.size)
    nodes.xy[:] = mesh.nodes.xy[old_nodes]
    nodes.lonlat[:] = mesh.nodes.lonlat[old_nodes]
    nodes.global_index[:] = np.arange(old_nodes.size)
    nodes.remote_index[:] = np.arange(old_nodes.size)
    nodes.partition[:] = mesh.nodes.partition[old_nodes]
    nodes.ghost[:] = mesh.nodes.ghost[old_nodes]
    nodes.flags[:] = mesh.nodes.flags[old_nodes]

    cells = sub.cells
    cells.add(mesh.cells.element_type or "triangle", keep_arr.size)
    cells.node_connectivity.table[:] = new_conn
    cells.global_index[:] = np.arange(keep_arr.size)
    cells.partition[:] = mesh.cells.partition[keep_arr]

    _LOGGER.debug(
        "extract_submesh: kept %d/%d cells, %d/%d nodes",
        keep_arr.size,
        n_cells,
        old_nodes.size,
        mesh.nodes.size,
    )
    return sub
