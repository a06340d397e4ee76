"""Module providing NetCDFReader for loading named arrays from netCDF files.

This module defines the NetCDFReader class, a scoped read-only wrapper around
``netCDF4.Dataset`` with helpers to load 1-D and 2-D variables as flat NumPy
buffers. Missing variables load as empty arrays; the caller decides whether
an absent variable is an error.
"""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

import numpy as np
from netCDF4 import Dataset
from numpy.typing import NDArray

_LOGGER = logging.getLogger(__name__)


class NetCDFReader:
    """Read variables from a netCDF file.

    Use as a context manager so the underlying dataset is closed when the
    enclosing operation ends::

        with NetCDFReader("icon_grid.nc") as reader:
            lon = reader.load_field("vlon")

    Attributes:
        filename (str): Path to the opened file.
        dataset (Dataset): The open netCDF4 dataset.

    Raises:
        OSError: If the file cannot be opened.
    """

    def __init__(self, filename: str) -> None:
        if not filename:
            raise OSError("No filename specified")
        self.filename = str(filename)
        self.dataset = Dataset(self.filename, "r")
        # Keep fill/padding values as plain numbers instead of masked entries.
        self.dataset.set_auto_mask(False)
        _LOGGER.debug("Opened netCDF file '%s'", self.filename)

    def __enter__(self) -> NetCDFReader:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        if self.dataset.isopen():
            self.dataset.close()
            _LOGGER.debug("Closed netCDF file '%s'", self.filename)

    @property
    def variables(self) -> List[str]:
        return list(self.dataset.variables.keys())

    def has_variable(self, name: str) -> bool:
        return name in self.dataset.variables

    def dimension_size(self, name: str) -> int:
        """Return the length of dimension ``name``, or 0 if it does not exist."""
        dim = self.dataset.dimensions.get(name)
        return 0 if dim is None else len(dim)

    def load_field(self, name: str, dtype: Any = None) -> NDArray[Any]:
        """Load a 1-D variable.

        Args:
            name (str): Variable name.
            dtype: Optional dtype to cast to.

        Returns:
            NDArray[Any]: The values, or an empty array if ``name`` is absent.

        Raises:
            ValueError: If the variable exists but is not one-dimensional.
        """
        if not self.has_variable(name):
            _LOGGER.debug("load_field: variable '%s' not found", name)
            return np.empty(0, dtype=dtype if dtype is not None else float)

        var = self.dataset.variables[name]
        if var.ndim != 1:
            raise ValueError(
                f"variable '{name}' has {var.ndim} dimensions, expected 1"
            )
        data = np.asarray(var[:], dtype=dtype)
        _LOGGER.debug("load_field: '%s' -> %d values", name, data.size)
        return data

    def load_2d_field(
        self, name: str, dtype: Any = None
    ) -> Tuple[NDArray[Any], int, int]:
        """Load a 2-D variable as a flat buffer in on-disk order.

        The first dimension is the per-entity slot and the second the entity,
        so slot ``k`` of entity ``i`` is ``data[k * dim1 + i]``.

        Args:
            name (str): Variable name.
            dtype: Optional dtype to cast to.

        Returns:
            Tuple[NDArray[Any], int, int]: ``(data, dim0, dim1)``; an empty
            buffer and ``(0, 0)`` if ``name`` is absent.

        Raises:
            ValueError: If the variable exists but is not two-dimensional.
        """
        if not self.has_variable(name):
            _LOGGER.debug("load_2d_field: variable '%s' not found", name)
            return np.empty(0, dtype=dtype if dtype is not None else float), 0, 0

        var = self.dataset.variables[name]
        if var.ndim != 2:
            raise ValueError(
                f"variable '{name}' has {var.ndim} dimensions, expected 2"
            )
        dim0, dim1 = (int(s) for s in var.shape)
        data = np.ascontiguousarray(var[:], dtype=dtype).reshape(-1)
        _LOGGER.debug("load_2d_field: '%s' -> (%d, %d)", name, dim0, dim1)
        return data, dim0, dim1
