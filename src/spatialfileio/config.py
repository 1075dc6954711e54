# -*- coding: utf-8 -*-

"""
spatialfileio/config.py

Central place for the constants shared by the grid, window and point-cloud
readers, plus the `ReadOptions` structure that replaces the old positional
`vectorize` / `delete_rows` flags.

Contents:
---------
1. CELL SIZE TOLERANCE:
   - Number of decimals cell sizes are rounded to before being used as a
     step increment. Geotransforms written by different tools accumulate
     drift (10.000000000002 instead of 10.0); snapping keeps the window
     arithmetic on one lattice. A rounded size that differs from the
     stored one by more than CELLSIZE_RTOL is a real cell size (0.125,
     1/120 degree) and is kept as stored.

2. TEXT GRID HEADER:
   - The six ESRI ASCII grid header keys, in the order they must appear.

3. EXTENSIONS:
   - Lower-case file suffix -> dataset kind name. `sources.DatasetKind`
     is built from this table.

4. CLASSIFICATION CODES (ASPRS LAS):
   - Ground and vegetation (low/medium/high) class codes.

Usage:
------
    from spatialfileio.config import ReadOptions

    opts = ReadOptions(vectorize=False)
    opts = ReadOptions(mask_zero=True, cellsize_decimals=None)
"""
from dataclasses import dataclass
from typing import Optional

# ───────────────────────────────────────────────────────────────────────────────
# 1) CELL SIZE TOLERANCE
# ───────────────────────────────────────────────────────────────────────────────
CELLSIZE_DECIMALS = 2          # decimals kept when cell size is used as a step
CELLSIZE_RTOL = 1e-6           # largest relative change snapping may make

# ───────────────────────────────────────────────────────────────────────────────
# 2) TEXT GRID HEADER
# ───────────────────────────────────────────────────────────────────────────────
TEXT_GRID_HEADER_KEYS = (
    'ncols',
    'nrows',
    'xllcorner',
    'yllcorner',
    'cellsize',
    'NODATA_value',
)
TEXT_GRID_HEADER_LINES = len(TEXT_GRID_HEADER_KEYS)

# ───────────────────────────────────────────────────────────────────────────────
# 3) EXTENSIONS
# ───────────────────────────────────────────────────────────────────────────────
EXTENSIONS = {
    '.asc': 'TEXT_GRID',
    '.txt': 'TEXT_GRID',
    '.tif': 'RASTER',
    '.tiff': 'RASTER',
    '.las': 'POINT_CLOUD',
    '.laz': 'POINT_CLOUD',
    '.mat': 'MATLAB_DTM',
}

# ───────────────────────────────────────────────────────────────────────────────
# 4) CLASSIFICATION CODES
# ───────────────────────────────────────────────────────────────────────────────
CLASS_GROUND = 2
CANOPY_CLASSES = (3, 4, 5)     # low, medium, high vegetation

DEFAULT_BAND = 1               # rasterio bands are 1-based


@dataclass(frozen=True)
class ReadOptions:
    """Options for grid reads.

    - vectorize: return flat x/y/z arrays instead of 2D grids
    - compact: drop missing cells from vectorized output (ignored when
      `vectorize` is False)
    - mask_zero: treat exact 0.0 as missing in addition to nodata
    - band: raster band to read (1-based)
    - cellsize_decimals: rounding applied to the cell size before it is used
      as a step increment; None uses the cell size as stored
    """

    vectorize: bool = True
    compact: bool = True
    mask_zero: bool = False
    band: int = DEFAULT_BAND
    cellsize_decimals: Optional[int] = CELLSIZE_DECIMALS
