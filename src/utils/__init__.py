"""The utils package contains file readers used by ncmesh.

Submodules:
  - netcdf_reader: NetCDFReader for loading named arrays from netCDF files.

Utilities:
  NetCDFReader
"""

from utils.netcdf_reader import NetCDFReader

__all__ = [
    "NetCDFReader",
]
