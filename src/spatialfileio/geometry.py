"""
geometry.py

Small geometry helpers: conversions between pixel (row,col) indices and
world coordinates using affine transforms, and cell-center synthesis for
read windows.

Public functions:
- `pixel_to_geo(transform, rows, cols)` -> (xs, ys)
- `geo_to_pixel(transform, X, Y)` -> (rows, cols)
- `cell_centers(transform, width, height)` -> (xs, ys) 1D center coordinates

"""
from typing import Tuple
import numpy as np


def pixel_to_geo(transform, rows, cols) -> Tuple[np.ndarray, np.ndarray]:
    """Convert pixel indices to world coordinates.

    Parameters:
    - transform: affine.Affine-like object with attributes a,b,c,d,e,f
    - rows, cols: scalars or array-like of the same shape. Integer indices
      give cell corners; add 0.5 for cell centers.

    Returns: (xs, ys) of the same shape as input.
    """
    rows_a = np.asarray(rows, dtype=float)
    cols_a = np.asarray(cols, dtype=float)
    xs = transform.a * cols_a + transform.b * rows_a + transform.c
    ys = transform.d * cols_a + transform.e * rows_a + transform.f
    if xs.shape == ():
        return float(xs), float(ys)
    return xs, ys


def geo_to_pixel(transform, X, Y) -> Tuple[np.ndarray, np.ndarray]:
    """Convert world coordinates to the (row, col) of the containing cell.

    Points on a shared cell edge go to the cell east/south of the edge.
    """
    inv = ~transform
    X_a = np.asarray(X, dtype=float)
    Y_a = np.asarray(Y, dtype=float)
    cols = inv.a * X_a + inv.b * Y_a + inv.c
    rows = inv.d * X_a + inv.e * Y_a + inv.f
    rows_i = np.floor(rows).astype(int)
    cols_i = np.floor(cols).astype(int)
    if rows_i.shape == ():
        return int(rows_i), int(cols_i)
    return rows_i, cols_i


def cell_centers(transform, width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    """Center coordinates of a `height` x `width` block of cells.

    Returns (xs, ys): xs has one entry per column (west to east), ys one per
    row in raster order (north to south for a north-up transform).
    """
    cols = np.arange(int(width), dtype=float) + 0.5
    rows = np.arange(int(height), dtype=float) + 0.5
    xs, _ = pixel_to_geo(transform, np.zeros_like(cols), cols)
    _, ys = pixel_to_geo(transform, rows, np.zeros_like(rows))
    return np.asarray(xs), np.asarray(ys)
