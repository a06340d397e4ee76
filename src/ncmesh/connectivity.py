"""Fixed-width connectivity tables for unstructured meshes.

This module provides:
  - Connectivity: a dense (rows x cols) table of neighbour indices with a
    missing-value sentinel for unused slots.
  - decode_column_major: the shared helper that turns a flat, 1-based,
    slot-major neighbour buffer (as stored in ICON netCDF files) into a
    0-based (count x stride) table.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .config import MISSING_INDEX

_LOGGER = logging.getLogger(__name__)

IDX_DTYPE = np.int32


def decode_column_major(
    flat: NDArray[Any], stride: int, count: int, base: int = 1
) -> NDArray[Any]:
    """Decode a flat slot-major neighbour buffer into a row-per-entity table.

    Entry ``flat[k * count + i]`` is slot ``k`` of entity ``i``. The result
    holds ``table[i, k] = flat[k * count + i] - base``.

    Args:
        flat: Flat buffer of length ``stride * count``.
        stride: Number of slots per entity.
        count: Number of entities.
        base: Index base of the stored values (1 for netCDF/Fortran files).

    Returns:
        NDArray[Any]: Array of shape (count, stride) with dtype int32.

    Raises:
        ValueError: If the buffer length does not equal ``stride * count``.
    """
    arr = np.asarray(flat).reshape(-1)
    if arr.size != stride * count:
        raise ValueError(
            f"buffer of length {arr.size} does not match stride {stride} x count {count}"
        )
    return (arr.reshape(stride, count).T - base).astype(IDX_DTYPE)


class Connectivity:
    """Dense fixed-width table mapping an entity to its neighbour indices.

    Rows are allocated in bulk and pre-filled with ``missing_value`` so that
    entities with fewer neighbours than the table width keep the sentinel in
    the trailing slots.

    Attributes:
        missing_value (int): Sentinel marking "no neighbour".
        table (NDArray[Any]): Backing array of shape (rows, cols).
    """

    missing_value: int = MISSING_INDEX

    def __init__(self, cols: int = 0) -> None:
        self.table: NDArray[Any] = np.empty((0, cols), dtype=IDX_DTYPE)

    @property
    def rows(self) -> int:
        """Number of rows (entities)."""
        return int(self.table.shape[0])

    @property
    def cols(self) -> int:
        """Width of each row."""
        return int(self.table.shape[1])

    def add(
        self, rows: int, cols: int, values: Optional[NDArray[Any]] = None
    ) -> None:
        """Append ``rows`` rows of width ``cols``.

        Args:
            rows: Number of rows to append.
            cols: Row width; must match the existing width if rows exist.
            values: Optional initial values, reshaped to (rows, cols).
                Defaults to the missing value.

        Raises:
            ValueError: On a width mismatch with existing rows.
        """
        if self.rows > 0 and cols != self.cols:
            raise ValueError(
                f"cannot append rows of width {cols} to a table of width {self.cols}"
            )
        if values is None:
            block = np.full((rows, cols), self.missing_value, dtype=IDX_DTYPE)
        else:
            block = np.asarray(values, dtype=IDX_DTYPE).reshape(rows, cols)
        if self.rows == 0:
            self.table = block.copy()
        else:
            self.table = np.vstack([self.table, block])
        _LOGGER.debug("Connectivity.add: +%d rows -> shape=%s", rows, self.table.shape)

    def set(self, row: int, values: Sequence[int]) -> None:
        """Overwrite the leading ``len(values)`` slots of ``row``.

        Slots beyond ``len(values)`` keep their current content.
        """
        vals = np.asarray(values, dtype=IDX_DTYPE).reshape(-1)
        if vals.size > self.cols:
            raise ValueError(
                f"row of {vals.size} values does not fit width {self.cols}"
            )
        self.table[row, : vals.size] = vals

    def valid_count(self, row: int) -> int:
        """Return the number of slots in ``row`` that hold a neighbour."""
        return int(np.count_nonzero(self.table[row] != self.missing_value))

    def __getitem__(self, key: Any) -> Any:
        return self.table[key]

    def __len__(self) -> int:
        return self.rows

    def __repr__(self) -> str:
        return f"Connectivity(rows={self.rows}, cols={self.cols})"
