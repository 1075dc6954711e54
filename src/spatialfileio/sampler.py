"""
sampler.py

Pair a raw value buffer read through a `ResolvedWindow` with cell-center
world coordinates.

Raw buffers arrive in raster order (row 0 is the northernmost row). Two
output layouts are produced:

- `GridSample` (not vectorized): coordinates and values stay in raster
  order, so `values` is the buffer itself with missing cells set to NaN.
- `VectorSample` (vectorized): coordinate and value grids are flipped
  north-south together and flattened row-major, so entries run from the
  southernmost row upward. With `compact`, missing cells are dropped from
  all three arrays in a single pass.
"""
from dataclasses import dataclass
from typing import Optional, Union
import logging

import numpy as np

from spatialfileio.geometry import cell_centers
from spatialfileio.window import ResolvedWindow

logger = logging.getLogger(__name__)

MISSING = np.nan


@dataclass(frozen=True)
class NodataPolicy:
    """Which raw values become missing before sampling."""

    nodata_value: Optional[float] = None
    mask_zero: bool = False

    def mask(self, values: np.ndarray) -> np.ndarray:
        """Boolean mask of cells to treat as missing (NaN is always missing)."""
        out = np.isnan(values)
        if self.nodata_value is not None and not np.isnan(self.nodata_value):
            out |= values == self.nodata_value
        if self.mask_zero:
            out |= values == 0.0
        return out

    def apply(self, values) -> np.ndarray:
        """Float64 copy of `values` with every masked cell set to NaN."""
        arr = np.array(values, dtype=np.float64)
        arr[self.mask(arr)] = MISSING
        return arr


@dataclass(frozen=True)
class GridSample:
    grid_x: np.ndarray
    grid_y: np.ndarray
    values: np.ndarray
    cell_size: float

    @property
    def vectorized(self) -> bool:
        return False


@dataclass(frozen=True)
class VectorSample:
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    cell_size: float

    @property
    def vectorized(self) -> bool:
        return True

    def __len__(self) -> int:
        return int(self.z.size)


SampleResult = Union[GridSample, VectorSample]


def sample_grid(window: ResolvedWindow, raw_buffer, nodata_policy: Optional[NodataPolicy] = None,
                vectorize: bool = True, compact: bool = True) -> SampleResult:
    """Synthesize cell-center coordinates for `raw_buffer` and mask it.

    - window: the window `raw_buffer` was read through; its world extent and
      cell size place the cell centers
    - raw_buffer: (pixel_height, pixel_width) array in raster order
    - nodata_policy: values to mask (exact matches); default masks only NaN
    - vectorize: flatten to 1D x/y/z arrays
    - compact: drop masked cells (vectorized output only)
    """
    if nodata_policy is None:
        nodata_policy = NodataPolicy()
    values = nodata_policy.apply(raw_buffer)
    if values.ndim != 2:
        raise ValueError(f'raw buffer must be 2D, got shape {values.shape}')
    if values.shape != window.shape:
        raise ValueError(f'raw buffer shape {values.shape} does not match window {window.shape}')

    xs, ys = cell_centers(window.to_affine(), window.pixel_width, window.pixel_height)
    grid_x, grid_y = np.meshgrid(xs, ys)

    if not vectorize:
        return GridSample(grid_x=grid_x, grid_y=grid_y, values=values, cell_size=window.cell_size)

    x = np.flipud(grid_x).ravel()
    y = np.flipud(grid_y).ravel()
    z = np.flipud(values).ravel()
    if compact:
        keep = ~np.isnan(z)
        x, y, z = x[keep], y[keep], z[keep]
        logger.debug('compacted %d of %d cells', int(keep.size - keep.sum()), int(keep.size))
    return VectorSample(x=np.ascontiguousarray(x), y=np.ascontiguousarray(y),
                        z=np.ascontiguousarray(z), cell_size=window.cell_size)
