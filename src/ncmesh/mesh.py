"""Module defining the Mesh container for unstructured triangular meshes.

This module provides:
  - Nodes: per-node coordinates, indices and node->cell / node->edge tables.
  - Elements: cells or edges with their node/edge/cell connectivity.
  - Mesh: the container tying nodes, edges and cells together, with meshio
    export and simple topology checks.

All per-entity arrays are allocated in bulk (resize/add) and filled by index.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import meshio
import numpy as np
import scipy.sparse as sp
from numpy.typing import NDArray
from scipy.sparse.csgraph import connected_components

from .config import DEFAULT_PARTITION
from .connectivity import IDX_DTYPE, Connectivity

_LOGGER = logging.getLogger(__name__)

GIDX_DTYPE = np.int64

# Element type name -> nodes per element.
ELEMENT_TYPES: Dict[str, int] = {
    "line": 2,
    "triangle": 3,
}


class Topology:
    """Bit flags attached to mesh nodes."""

    NONE = 0
    BC = 1 << 0
    GHOST = 1 << 1

    @staticmethod
    def reset(flags: NDArray[Any], index: Any = slice(None)) -> None:
        """Clear all flags of the selected node(s) in place."""
        flags[index] = Topology.NONE

    @staticmethod
    def set(flags: NDArray[Any], index: Any, bit: int) -> None:
        flags[index] |= bit

    @staticmethod
    def check(flags: NDArray[Any], index: Any, bit: int) -> Any:
        return (flags[index] & bit) != 0


class Nodes:
    """Per-node data of a mesh.

    Attributes:
        lonlat (NDArray[Any]): Geographic coordinates in degrees, shape (n, 2).
        xy (NDArray[Any]): Planar coordinates, shape (n, 2).
        global_index (NDArray[Any]): Global node ids, shape (n,).
        remote_index (NDArray[Any]): Index on the owning partition, shape (n,).
        partition (NDArray[Any]): Owning partition, shape (n,).
        ghost (NDArray[Any]): 1 for ghost nodes, shape (n,).
        flags (NDArray[Any]): Topology bit flags, shape (n,).
        cell_connectivity (Connectivity): Node -> cells.
        edge_connectivity (Connectivity): Node -> edges.
    """

    def __init__(self) -> None:
        self.lonlat: NDArray[Any] = np.zeros((0, 2), dtype=float)
        self.xy: NDArray[Any] = np.zeros((0, 2), dtype=float)
        self.global_index: NDArray[Any] = np.zeros(0, dtype=GIDX_DTYPE)
        self.remote_index: NDArray[Any] = np.zeros(0, dtype=IDX_DTYPE)
        self.partition: NDArray[Any] = np.zeros(0, dtype=np.int32)
        self.ghost: NDArray[Any] = np.zeros(0, dtype=np.int32)
        self.flags: NDArray[Any] = np.zeros(0, dtype=np.int32)
        self.cell_connectivity = Connectivity()
        self.edge_connectivity = Connectivity()

    @property
    def size(self) -> int:
        return int(self.global_index.shape[0])

    def resize(self, size: int) -> None:
        """Allocate all per-node arrays for ``size`` nodes.

        Existing entries up to ``min(old, new)`` are kept; new entries are
        zero, with ``partition`` set to the default partition.
        """
        old = self.size
        keep = min(old, size)

        def _grow(arr: NDArray[Any], fill: Any = 0) -> NDArray[Any]:
            out = np.full((size,) + arr.shape[1:], fill, dtype=arr.dtype)
            out[:keep] = arr[:keep]
            return out

        self.lonlat = _grow(self.lonlat)
        self.xy = _grow(self.xy)
        self.global_index = _grow(self.global_index)
        self.remote_index = _grow(self.remote_index)
        self.partition = _grow(self.partition, DEFAULT_PARTITION)
        self.ghost = _grow(self.ghost)
        self.flags = _grow(self.flags)
        _LOGGER.debug("Nodes.resize: %d -> %d", old, size)

    def __len__(self) -> int:
        return self.size


class Elements:
    """A block of elements of a single type (cells or edges).

    Attributes:
        element_type (Optional[str]): "triangle", "line" or None when empty.
        global_index (NDArray[Any]): Global element ids, shape (n,).
        partition (NDArray[Any]): Owning partition, shape (n,).
        node_connectivity (Connectivity): Element -> nodes.
        edge_connectivity (Connectivity): Element -> edges.
        cell_connectivity (Connectivity): Element -> cells.
    """

    def __init__(self) -> None:
        self.element_type: Optional[str] = None
        self.global_index: NDArray[Any] = np.zeros(0, dtype=GIDX_DTYPE)
        self.partition: NDArray[Any] = np.zeros(0, dtype=np.int32)
        self.node_connectivity = Connectivity()
        self.edge_connectivity = Connectivity()
        self.cell_connectivity = Connectivity()

    @property
    def size(self) -> int:
        return int(self.global_index.shape[0])

    @property
    def nodes_per_element(self) -> int:
        if self.element_type is None:
            return 0
        return ELEMENT_TYPES[self.element_type]

    def add(self, element_type: str, count: int) -> int:
        """Append ``count`` elements of ``element_type``.

        Node connectivity rows are allocated with the missing value and must
        be filled by the caller.

        Args:
            element_type: One of ``ELEMENT_TYPES``.
            count: Number of elements to add.

        Returns:
            int: Index of the first added element.

        Raises:
            ValueError: For unknown types or when mixing element types.
        """
        if element_type not in ELEMENT_TYPES:
            raise ValueError(f"unknown element type {element_type!r}")
        if self.element_type is not None and self.element_type != element_type:
            raise ValueError(
                f"cannot add {element_type!r} elements to a {self.element_type!r} block"
            )
        begin = self.size
        self.element_type = element_type
        self.global_index = np.concatenate(
            [self.global_index, np.zeros(count, dtype=GIDX_DTYPE)]
        )
        self.partition = np.concatenate(
            [self.partition, np.full(count, DEFAULT_PARTITION, dtype=np.int32)]
        )
        self.node_connectivity.add(count, ELEMENT_TYPES[element_type])
        _LOGGER.debug("Elements.add: %d x %s (begin=%d)", count, element_type, begin)
        return begin

    def __len__(self) -> int:
        return self.size


class Mesh:
    """Unstructured mesh made of nodes, optional edges and triangular cells.

    Attributes:
        nodes (Nodes): Node data and node-based connectivity.
        edges (Elements): Line elements; empty unless imported.
        cells (Elements): Triangle elements.
    """

    def __init__(self) -> None:
        self.nodes = Nodes()
        self.edges = Elements()
        self.cells = Elements()

    def footprint(self) -> Dict[str, int]:
        """Return entity counts and connectivity widths as a dict."""
        return {
            "nodes": self.nodes.size,
            "edges": self.edges.size,
            "cells": self.cells.size,
            "cell_node_width": self.cells.node_connectivity.cols,
            "cell_edge_width": self.cells.edge_connectivity.cols,
            "edge_node_width": self.edges.node_connectivity.cols,
            "edge_cell_width": self.edges.cell_connectivity.cols,
            "node_cell_width": self.nodes.cell_connectivity.cols,
            "node_edge_width": self.nodes.edge_connectivity.cols,
        }

    def unused_nodes(self) -> NDArray[Any]:
        """Return indices of nodes not referenced by any cell."""
        used = np.zeros(self.nodes.size, dtype=bool)
        conn = self.cells.node_connectivity.table
        valid = conn[conn != Connectivity.missing_value]
        used[valid] = True
        return np.flatnonzero(~used)

    def node_cell_components(self) -> int:
        """Count connected components of cells linked through shared nodes.

        Returns:
            int: Number of components (0 for an empty mesh).
        """
        n_cells = self.cells.size
        if n_cells == 0:
            return 0
        conn = self.cells.node_connectivity.table
        rows, cols = np.nonzero(conn != Connectivity.missing_value)
        # Bipartite cell/node incidence graph; cell c -> c, node n -> n_cells + n
        n_total = n_cells + self.nodes.size
        incidence = sp.coo_matrix(
            (np.ones(rows.size), (rows, n_cells + conn[rows, cols])),
            shape=(n_total, n_total),
        ).tocsr()
        _, labels = connected_components(incidence, directed=False)
        n_comp = int(np.unique(labels[:n_cells]).size)
        _LOGGER.debug("node_cell_components: cells=%d -> %d", n_cells, n_comp)
        return n_comp

    def to_meshio(self, use_lonlat: bool = False) -> meshio.Mesh:
        """Build a meshio Mesh with a triangle block (and a line block if present).

        Args:
            use_lonlat: Write lon/lat instead of xy as point coordinates.

        Returns:
            meshio.Mesh: Points are padded with z=0.
        """
        coords = self.nodes.lonlat if use_lonlat else self.nodes.xy
        pts = np.zeros((self.nodes.size, 3), dtype=float)
        pts[:, :2] = coords

        cells: List[Any] = []
        cell_gidx: List[NDArray[Any]] = []
        cell_part: List[NDArray[Any]] = []
        for block in (self.cells, self.edges):
            if block.size == 0:
                continue
            cells.append((block.element_type, block.node_connectivity.table.copy()))
            cell_gidx.append(block.global_index.copy())
            cell_part.append(block.partition.copy())

        return meshio.Mesh(
            points=pts,
            cells=cells,
            point_data={
                "global_index": self.nodes.global_index.copy(),
                "partition": self.nodes.partition.copy(),
            },
            cell_data={"global_index": cell_gidx, "partition": cell_part},
        )

    def write(self, filename: str, use_lonlat: bool = False, **kwargs: Any) -> None:
        """Export the mesh with meshio; the format follows the file extension.

        Raises:
            Exception: If the underlying mesh writer fails.
        """
        try:
            self.to_meshio(use_lonlat=use_lonlat).write(filename, **kwargs)
        except Exception:
            _LOGGER.exception("Mesh.write failed for '%s'.", filename)
            raise
        _LOGGER.info(
            "Mesh written to '%s' (nodes=%d, edges=%d, cells=%d)",
            filename,
            self.nodes.size,
            self.edges.size,
            self.cells.size,
        )

    def __repr__(self) -> str:
        return (
            f"Mesh(nodes={self.nodes.size}, edges={self.edges.size}, "
            f"cells={self.cells.size})"
        )
