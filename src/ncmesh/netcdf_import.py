"""Build meshes from ICON-style unstructured grid netCDF files.

This module provides:
  - Node and cell importers (vlon/vlat, vertex_of_cell).
  - A generic neighbour-table builder for the edge, node and cell relations.
  - Two entry points: a minimal mesh (nodes + cells) and a complete mesh
    (adds edges and all adjacency tables).

Index arrays in the files are 1-based and stored slot-major, i.e. slot ``k``
of entity ``i`` sits at ``flat[k * count + i]``. All tables built here are
0-based with one row per entity.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from utils.netcdf_reader import NetCDFReader

from .config import (
    CELLS_PER_EDGE,
    CELLS_PER_NODE,
    DEFAULT_PARTITION,
    EDGES_PER_CELL,
    EDGES_PER_NODE,
    VERTICES_PER_CELL,
    VERTICES_PER_EDGE,
)
from .connectivity import Connectivity, decode_column_major
from .mesh import Mesh, Topology

_LOGGER = logging.getLogger(__name__)


class MeshImportError(ValueError):
    """Raised when a netCDF file does not describe a usable mesh."""


def _rad_to_lon(rad: np.ndarray) -> np.ndarray:
    return rad / np.pi * 180


def _rad_to_lat(rad: np.ndarray) -> np.ndarray:
    # Same scale as longitude, kept in this form on purpose.
    return rad / (0.5 * np.pi) * 90


def nodes_from_netcdf(reader: NetCDFReader, mesh: Mesh) -> None:
    """Populate ``mesh.nodes`` from the ``vlon``/``vlat`` variables.

    Raises:
        MeshImportError: If a coordinate variable is missing or the two
            arrays differ in length.
    """
    lon = reader.load_field("vlon", dtype=float)
    lat = reader.load_field("vlat", dtype=float)
    if lon.size == 0 or lat.size == 0:
        raise MeshImportError("lat / long variable not found")
    if lon.size != lat.size:
        raise MeshImportError(
            f"lat / long not of consistent sizes ({lat.size} vs {lon.size})"
        )

    num_nodes = int(lat.size)
    nodes = mesh.nodes
    nodes.resize(num_nodes)

    nodes.lonlat[:, 0] = _rad_to_lon(lon)
    nodes.lonlat[:, 1] = _rad_to_lat(lat)
    nodes.xy[:] = nodes.lonlat

    # Single partition: remote index == global index, no ghosts.
    idx = np.arange(num_nodes)
    nodes.global_index[:] = idx
    nodes.remote_index[:] = idx
    nodes.partition[:] = DEFAULT_PARTITION
    nodes.ghost[:] = 0
    Topology.reset(nodes.flags)

    _LOGGER.debug("nodes_from_netcdf: %d nodes", num_nodes)


def cells_from_netcdf(reader: NetCDFReader, mesh: Mesh) -> None:
    """Populate ``mesh.cells`` with triangles from ``vertex_of_cell``.

    Vertex order is kept as stored; it defines the cell orientation.

    Raises:
        MeshImportError: If the grid is not triangular or references
            unknown nodes.
    """
    cell_to_vertex, vertex_per_cell, ncells = reader.load_2d_field(
        "vertex_of_cell", dtype=np.int64
    )
    if vertex_per_cell != VERTICES_PER_CELL:
        raise MeshImportError("not a triangle mesh")

    tri_nodes = decode_column_major(cell_to_vertex, vertex_per_cell, ncells)
    num_nodes = mesh.nodes.size
    if tri_nodes.size and (tri_nodes.min() < 0 or tri_nodes.max() >= num_nodes):
        raise MeshImportError(
            f"cell references unknown node (valid range 0..{num_nodes - 1})"
        )

    cells = mesh.cells
    cells.add("triangle", ncells)
    for cell_idx in range(ncells):
        cells.node_connectivity.set(cell_idx, tri_nodes[cell_idx])
    cells.global_index[:] = np.arange(ncells)
    cells.partition[:] = DEFAULT_PARTITION

    _LOGGER.debug("cells_from_netcdf: %d triangles", ncells)


def alloc_neighbour_table(
    connectivity: Connectivity, num_elements: int, nbh_per_elem: int
) -> None:
    """Append ``num_elements`` rows of width ``nbh_per_elem``, all missing."""
    init = np.full(num_elements * nbh_per_elem, connectivity.missing_value)
    connectivity.add(num_elements, nbh_per_elem, init)


def add_neighbour_list(
    reader: NetCDFReader,
    nbh_list_name: str,
    y_per_x_expected: int,
    connectivity: Connectivity,
) -> None:
    """Fill a pre-allocated table from the neighbour list ``nbh_list_name``.

    Only the rows present in the file are written; everything else keeps the
    missing value set by :func:`alloc_neighbour_table`.

    Raises:
        MeshImportError: If the per-element neighbour count differs from
            ``y_per_x_expected`` or the file has more rows than the table.
    """
    x_to_y, y_per_x, num_y = reader.load_2d_field(nbh_list_name, dtype=np.int64)
    if y_per_x != y_per_x_expected:
        raise MeshImportError(
            f"{nbh_list_name}: number of neighbours per element not as expected "
            f"({y_per_x} != {y_per_x_expected})"
        )
    if num_y > connectivity.rows:
        raise MeshImportError(
            f"{nbh_list_name}: {num_y} rows do not fit a table of {connectivity.rows}"
        )

    y_of_x = decode_column_major(x_to_y, y_per_x, num_y)
    for elem_idx in range(num_y):
        connectivity.set(elem_idx, y_of_x[elem_idx])

    padded = int(np.count_nonzero(y_of_x == connectivity.missing_value))
    if padded:
        _LOGGER.debug(
            "%s: %d padded slot(s) left as missing value", nbh_list_name, padded
        )
    else:
        _LOGGER.debug("%s: %d rows x %d", nbh_list_name, num_y, y_per_x)


def _read_minimal(reader: NetCDFReader) -> Mesh:
    mesh = Mesh()
    nodes_from_netcdf(reader, mesh)
    cells_from_netcdf(reader, mesh)
    return mesh


def _add_edges_and_neighbours(reader: NetCDFReader, mesh: Mesh) -> None:
    num_edges_a = reader.load_field("edge_index").size
    num_edges_b = reader.load_field("elat").size
    # Base grids from DWD carry only edge_index, grids from the web
    # generator only elat.
    if num_edges_a == 0 and num_edges_b == 0:
        raise MeshImportError("no edges found in netcdf file")

    num_edges = max(num_edges_a, num_edges_b)
    edges = mesh.edges
    edges.add("line", num_edges)
    edges.global_index[:] = np.arange(num_edges)
    edges.partition[:] = DEFAULT_PARTITION

    nodes, cells = mesh.nodes, mesh.cells

    # Edges. Edge -> edge is not supported.
    alloc_neighbour_table(edges.cell_connectivity, edges.size, CELLS_PER_EDGE)
    add_neighbour_list(
        reader, "adjacent_cell_of_edge", CELLS_PER_EDGE, edges.cell_connectivity
    )
    # Elements.add already allocated the edge -> node rows as missing.
    add_neighbour_list(
        reader, "edge_vertices", VERTICES_PER_EDGE, edges.node_connectivity
    )

    # Nodes. No node -> node table.
    alloc_neighbour_table(nodes.cell_connectivity, nodes.size, CELLS_PER_NODE)
    add_neighbour_list(
        reader, "cells_of_vertex", CELLS_PER_NODE, nodes.cell_connectivity
    )
    alloc_neighbour_table(nodes.edge_connectivity, nodes.size, EDGES_PER_NODE)
    add_neighbour_list(
        reader, "edges_of_vertex", EDGES_PER_NODE, nodes.edge_connectivity
    )

    # Cells. Cell -> node came with the minimal mesh; cell -> cell is not
    # part of ICON grid files.
    alloc_neighbour_table(cells.edge_connectivity, cells.size, EDGES_PER_CELL)
    add_neighbour_list(
        reader, "edge_of_cell", EDGES_PER_CELL, cells.edge_connectivity
    )


def mesh_from_netcdf_minimal(filename: str) -> Optional[Mesh]:
    """Import nodes and triangle cells from an ICON grid file.

    Args:
        filename (str): Path to the netCDF file.

    Returns:
        Optional[Mesh]: The mesh, or None if the file cannot be read or does
        not describe a triangle mesh. The reason is logged.
    """
    try:
        with NetCDFReader(filename) as reader:
            mesh = _read_minimal(reader)
    except (ValueError, OSError, RuntimeError) as err:
        _LOGGER.error("minimal import of '%s' failed: %s", filename, err)
        return None

    _LOGGER.info(
        "Imported minimal mesh from '%s' (nodes=%d, cells=%d)",
        filename,
        mesh.nodes.size,
        mesh.cells.size,
    )
    return mesh


def mesh_from_netcdf_complete(filename: str) -> Optional[Mesh]:
    """Import nodes, cells, edges and all neighbour tables from an ICON grid file.

    The tables filled are edge->cell, edge->node, node->cell, node->edge and
    cell->edge. Unused slots hold ``Connectivity.missing_value``.

    Args:
        filename (str): Path to the netCDF file.

    Returns:
        Optional[Mesh]: The mesh, or None on the first failing stage. The
        reason is logged.
    """
    mesh = mesh_from_netcdf_minimal(filename)
    if mesh is None:
        return None

    try:
        with NetCDFReader(filename) as reader:
            _add_edges_and_neighbours(reader, mesh)
    except (ValueError, OSError, RuntimeError) as err:
        _LOGGER.error("complete import of '%s' failed: %s", filename, err)
        return None

    _LOGGER.info(
        "Imported complete mesh from '%s' (nodes=%d, edges=%d, cells=%d)",
        filename,
        mesh.nodes.size,
        mesh.edges.size,
        mesh.cells.size,
    )
    return mesh
