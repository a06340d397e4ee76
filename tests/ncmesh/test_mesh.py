import os

import meshio
import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from ncmesh.config import DEFAULT_PARTITION
from ncmesh.connectivity import Connectivity
from ncmesh.mesh import Elements, Mesh, Nodes, Topology


def test_nodes_resize_allocates_everything():
    nodes = Nodes()
    nodes.resize(5)

    assert nodes.size == 5 and len(nodes) == 5
    assert nodes.lonlat.shape == (5, 2)
    assert nodes.xy.shape == (5, 2)
    for arr in (nodes.global_index, nodes.remote_index, nodes.ghost, nodes.flags):
        assert arr.shape == (5,)
    assert np.all(nodes.partition == DEFAULT_PARTITION)


def test_nodes_resize_keeps_existing_values():
    nodes = Nodes()
    nodes.resize(2)
    nodes.xy[:] = [[1.0, 2.0], [3.0, 4.0]]
    nodes.resize(3)

    assert_allclose(nodes.xy, [[1.0, 2.0], [3.0, 4.0], [0.0, 0.0]])
    nodes.resize(1)
    assert_allclose(nodes.xy, [[1.0, 2.0]])


def test_elements_add_allocates_missing_rows():
    cells = Elements()
    begin = cells.add("triangle", 3)

    assert begin == 0
    assert cells.size == 3
    assert cells.nodes_per_element == 3
    assert cells.node_connectivity.cols == 3
    assert np.all(cells.node_connectivity.table == Connectivity.missing_value)
    assert np.all(cells.partition == DEFAULT_PARTITION)

    assert cells.add("triangle", 2) == 3
    assert cells.size == 5


def test_elements_add_rejects_bad_types():
    cells = Elements()
    with pytest.raises(ValueError):
        cells.add("hexahedron", 1)
    cells.add("triangle", 1)
    with pytest.raises(ValueError):
        cells.add("line", 1)


def test_topology_flags():
    flags = np.zeros(3, dtype=np.int32)
    Topology.set(flags, 1, Topology.GHOST)
    Topology.set(flags, 1, Topology.BC)
    assert Topology.check(flags, 1, Topology.GHOST)
    assert not Topology.check(flags, 0, Topology.GHOST)

    Topology.reset(flags, 1)
    assert flags[1] == Topology.NONE
    flags[:] = 7
    Topology.reset(flags)
    assert np.all(flags == 0)


def test_topology_flag_bits_are_distinct():
    bits = [Topology.BC, Topology.GHOST]
    assert Topology.NONE == 0
    assert all(bit and bit & (bit - 1) == 0 for bit in bits)
    assert Topology.BC & Topology.GHOST == 0


def test_footprint(two_triangle_square):
    fp = two_triangle_square.footprint()
    assert fp["nodes"] == 4
    assert fp["cells"] == 2
    assert fp["edges"] == 0
    assert fp["cell_node_width"] == 3


def test_unused_nodes(strip_mesh, two_triangle_square):
    assert_array_equal(strip_mesh.unused_nodes(), [9])
    assert two_triangle_square.unused_nodes().size == 0


def test_node_cell_components(strip_mesh, two_triangle_square, simple_triangle_mesh):
    assert strip_mesh.node_cell_components() == 2
    assert two_triangle_square.node_cell_components() == 1
    assert simple_triangle_mesh.node_cell_components() == 1
    assert Mesh().node_cell_components() == 0


def test_to_meshio(two_triangle_square):
    m = two_triangle_square.to_meshio()

    assert isinstance(m, meshio.Mesh)
    assert m.points.shape == (4, 3)
    assert_allclose(m.points[:, 2], 0.0)
    assert len(m.cells) == 1
    assert m.cells[0].type == "triangle"
    assert_array_equal(m.cells[0].data, [[0, 1, 2], [0, 2, 3]])
    assert_array_equal(m.point_data["global_index"], np.arange(4))


def test_write_vtu_roundtrip(tmp_path, two_triangle_square):
    filename = os.path.join(str(tmp_path), "mesh.vtu")
    two_triangle_square.write(filename)

    assert os.path.isfile(filename)
    back = meshio.read(filename)
    assert back.points.shape[0] == 4
    assert back.cells[0].data.shape == (2, 3)


def test_write_includes_edges(tmp_path, icon_grid_file):
    from ncmesh.netcdf_import import mesh_from_netcdf_complete

    mesh = mesh_from_netcdf_complete(icon_grid_file)
    m = mesh.to_meshio(use_lonlat=True)

    assert [block.type for block in m.cells] == ["triangle", "line"]
    assert len(m.cell_data["global_index"]) == 2
    mesh.write(os.path.join(str(tmp_path), "complete.vtu"))


def test_write_failure_propagates(tmp_path, two_triangle_square):
    with pytest.raises(Exception):
        two_triangle_square.write(os.path.join(str(tmp_path), "mesh.unknown_ext"))


def test_repr(two_triangle_square):
    assert repr(two_triangle_square) == "Mesh(nodes=4, edges=0, cells=2)"
