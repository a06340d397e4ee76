"""Package-wide constants and logging configuration for ncmesh.

This module collects the named constants that parameterize mesh import and
generation (partition id, missing-value sentinel, neighbour-table widths,
generator settings) and exposes the environment-driven log level of the
package logger.
"""

from __future__ import annotations

import logging
import os


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
_LOGGER = logging.getLogger("ncmesh")


def _parse_log_level(val: str | int | None, default: int = logging.WARNING) -> int:
    """Parse a logging level string or int into a `logging` level constant.

    Args:
        val: The desired level (e.g., "DEBUG", 10). May be None.
        default: Fallback level if `val` cannot be parsed.

    Returns:
        An integer logging level (e.g., logging.DEBUG).
    """
    if val is None:
        return default
    if isinstance(val, int):
        return val
    lvl = getattr(logging, str(val).strip().upper(), None)
    if isinstance(lvl, int):
        return lvl
    return default


def set_log_level(level: str | int = "WARNING") -> None:
    """Set the package logger level programmatically.

    Args:
        level: A standard logging level name or integer.
    """
    _LOGGER.setLevel(_parse_log_level(level))


# Default level can be overridden by env.
set_log_level(os.getenv("NCMESH_LOGLEVEL", "WARNING"))


# -----------------------------------------------------------------------------
# Mesh constants
# -----------------------------------------------------------------------------
# Single partition only: remote index == global index, no ghosts.
DEFAULT_PARTITION: int = 0

# Sentinel for "no neighbour" in connectivity tables. Padding zeros in ICON
# files become this value after the 1-based -> 0-based shift.
MISSING_INDEX: int = -1

VERTICES_PER_CELL: int = 3
VERTICES_PER_EDGE: int = 2
CELLS_PER_EDGE: int = 2
CELLS_PER_NODE: int = 6  # maximum is 6, some nodes have 5
EDGES_PER_NODE: int = 6  # maximum is 6, some nodes have 5
EDGES_PER_CELL: int = 3

# Structured generator: negative angle means triangles only.
GENERATOR_ANGLE: float = -1.0

# Rectangular mesh: target y-extent and box margin (fraction of one cell width).
RECT_Y_EXTENT: float = 180.0
RECT_BOX_MARGIN: float = 0.1
