"""The ncmesh package builds unstructured triangle meshes from netCDF grids.

This package offers:
  - Import of ICON-style grid files into a Mesh (nodes and cells, or the
    complete set of edges and neighbour tables).
  - Generation of rectangular meshes of equilateral triangles.
  - Sub-mesh extraction and meshio export.

Submodules:
  - config: Constants and log level configuration.
  - connectivity: Fixed-width neighbour tables.
  - mesh: Mesh, Nodes and Elements containers.
  - netcdf_import: netCDF importers.
  - structured: Structured grids and their triangulation.
  - submesh: Sub-mesh extraction.
  - rect_mesh: Rectangular mesh generator.

Utilities:
  NetCDFReader
"""

from .config import (
    DEFAULT_PARTITION,
    MISSING_INDEX,
    set_log_level,
)

from ncmesh.connectivity import Connectivity, decode_column_major
from ncmesh.mesh import Elements, Mesh, Nodes, Topology
from ncmesh.netcdf_import import (
    MeshImportError,
    mesh_from_netcdf_complete,
    mesh_from_netcdf_minimal,
)
from ncmesh.rect_mesh import generate_rect_mesh, triangle_in_box
from ncmesh.structured import LinearSpacing, StructuredGrid, StructuredMeshGenerator
from ncmesh.submesh import extract_submesh

from utils.netcdf_reader import NetCDFReader

__all__ = [
    # Core classes
    "Connectivity",
    "Elements",
    "Mesh",
    "Nodes",
    "Topology",
    "LinearSpacing",
    "StructuredGrid",
    "StructuredMeshGenerator",
    "MeshImportError",
    # Operations
    "mesh_from_netcdf_minimal",
    "mesh_from_netcdf_complete",
    "generate_rect_mesh",
    "triangle_in_box",
    "extract_submesh",
    "decode_column_major",
    # Utilities
    "NetCDFReader",
    # Configuration
    "DEFAULT_PARTITION",
    "MISSING_INDEX",
    "set_log_level",
]
