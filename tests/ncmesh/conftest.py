# conftest.py
import numpy as np
import pytest

from ncmesh.mesh import Mesh


def build_mesh(xy, triangles):
    """Create a Mesh from planar coordinates and triangle node indices."""
    xy = np.asarray(xy, dtype=float)
    triangles = np.asarray(triangles, dtype=int)
    mesh = Mesh()
    mesh.nodes.resize(xy.shape[0])
    mesh.nodes.xy[:] = xy
    mesh.nodes.lonlat[:] = xy
    mesh.nodes.global_index[:] = np.arange(xy.shape[0])
    mesh.nodes.remote_index[:] = np.arange(xy.shape[0])
    mesh.cells.add("triangle", triangles.shape[0])
    for i, tri in enumerate(triangles):
        mesh.cells.node_connectivity.set(i, tri)
    mesh.cells.global_index[:] = np.arange(triangles.shape[0])
    return mesh


@pytest.fixture
def simple_triangle_mesh():
    """
    Provides a Mesh instance with a single triangle:
        v0 = [0, 0]
        v1 = [1, 0]
        v2 = [0, 1]
    """
    return build_mesh([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]], [[0, 1, 2]])


@pytest.fixture
def two_triangle_square():
    """
    Unit square split into two triangles along the diagonal (0-2):
      v3 (0,1) ---- v2 (1,1)
        |  \\           |
        |    \\         |
      v0 (0,0) ---- v1 (1,0)
    Triangles: [0,1,2] and [0,2,3]
    """
    xy = [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]
    return build_mesh(xy, [[0, 1, 2], [0, 2, 3]])


@pytest.fixture
def strip_mesh():
    """
    Four triangles in a row plus one detached triangle and an unused node:
      nodes 0..5 form a 2x3 strip, nodes 6..8 a separate triangle, node 9 unused.
    """
    xy = [
        [0.0, 0.0], [1.0, 0.0], [2.0, 0.0],
        [0.0, 1.0], [1.0, 1.0], [2.0, 1.0],
        [5.0, 5.0], [6.0, 5.0], [5.0, 6.0],
        [9.0, 9.0],
    ]
    tris = [[0, 1, 4], [0, 4, 3], [1, 2, 5], [1, 5, 4], [6, 7, 8]]
    return build_mesh(xy, tris)
