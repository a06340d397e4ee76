from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Optional

import numpy as np
import pytest
from netCDF4 import Dataset


def _square_grid() -> Dict[str, Any]:
    """
    Unit square split into two triangles along the diagonal (0-2):
      v3 ---- e3 ---- v2
       |            / |
      e4   c1    e2   e1
       |  /    c0     |
      v0 ---- e0 ---- v1

    Returns 0-based, entity-major tables (-1 = no neighbour).
    """
    deg = np.pi / 180
    return {
        "vlon": np.array([0.0, 1.0, 1.0, 0.0]) * deg,
        "vlat": np.array([0.0, 0.0, 1.0, 1.0]) * deg,
        "vertex_of_cell": np.array([[0, 1, 2], [0, 2, 3]]),
        "edge_vertices": np.array([[0, 1], [1, 2], [2, 0], [2, 3], [3, 0]]),
        "adjacent_cell_of_edge": np.array([[0, -1], [0, -1], [0, 1], [1, -1], [1, -1]]),
        "edge_of_cell": np.array([[0, 1, 2], [2, 3, 4]]),
        "cells_of_vertex": np.array(
            [
                [0, 1, -1, -1, -1, -1],
                [0, -1, -1, -1, -1, -1],
                [0, 1, -1, -1, -1, -1],
                [1, -1, -1, -1, -1, -1],
            ]
        ),
        "edges_of_vertex": np.array(
            [
                [0, 2, 4, -1, -1, -1],
                [0, 1, -1, -1, -1, -1],
                [1, 2, 3, -1, -1, -1],
                [3, 4, -1, -1, -1, -1],
            ]
        ),
    }


def write_icon_grid(
    path: Any,
    drop: Iterable[str] = (),
    overrides: Optional[Dict[str, Any]] = None,
    edge_count_var: str = "edge_index",
    edge_count: Optional[int] = None,
) -> Any:
    """Write a small ICON-style grid file.

    Index tables are given 0-based and entity-major; they are stored 1-based
    and slot-major (shape (slots, entities)) as in real ICON files, so -1
    becomes the 0 padding value.
    """
    grid = _square_grid()
    if overrides:
        grid.update(overrides)
    drop = set(drop)

    with Dataset(str(path), "w") as ds:
        for name, values in grid.items():
            if name in drop:
                continue
            arr = np.asarray(values)
            if arr.ndim == 1:
                dim = f"{name}_n"
                ds.createDimension(dim, arr.shape[0])
                var = ds.createVariable(name, "f8", (dim,))
                var[:] = arr
            else:
                stored = (arr + 1).T.astype(np.int32)
                d0, d1 = f"{name}_slots", f"{name}_n"
                ds.createDimension(d0, stored.shape[0])
                ds.createDimension(d1, stored.shape[1])
                var = ds.createVariable(name, "i4", (d0, d1))
                var[:] = stored

        n_edges = len(grid["edge_vertices"]) if edge_count is None else edge_count
        if edge_count_var and edge_count_var not in drop:
            ds.createDimension("edge", n_edges)
            var = ds.createVariable(edge_count_var, "i4", ("edge",))
            var[:] = np.arange(1, n_edges + 1)
    return path


@pytest.fixture
def icon_grid_writer(tmp_path) -> Callable[..., Any]:
    """Return a function writing a square ICON grid into ``tmp_path``."""

    def _write(name: str = "grid.nc", **kwargs: Any) -> str:
        return str(write_icon_grid(tmp_path / name, **kwargs))

    return _write


@pytest.fixture
def square_grid() -> Dict[str, Any]:
    return _square_grid()


@pytest.fixture
def icon_grid_file(icon_grid_writer) -> str:
    return icon_grid_writer()
