"""
transform.py

Immutable model of a grid's pixel-to-world mapping.

Text grids describe their extent from the lower-left corner, GDAL rasters
from the upper-left corner. `GeoTransform` keeps the corner it was built
from (`origin_kind`) and derives the others, so every consumer can ask for
the extent without caring which format the grid came from.

Public API:
- `OriginKind`
- `GeoTransform`
- `snap_cell_size(cell_size, decimals)`
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np
from affine import Affine

from spatialfileio.config import CELLSIZE_DECIMALS, CELLSIZE_RTOL
from spatialfileio.exceptions import UnsupportedTransform


class OriginKind(Enum):
    UPPER_LEFT = 'upper_left'
    LOWER_LEFT = 'lower_left'


def snap_cell_size(cell_size: float, decimals: Optional[int] = CELLSIZE_DECIMALS) -> float:
    """Round `cell_size` to `decimals` to absorb floating-point drift.

    The rounded value is only used when it is within `CELLSIZE_RTOL` of the
    stored one; anything further away (0.125, 1/120) is a genuine cell size
    and is returned as stored. `decimals=None` disables snapping.
    """
    cell_size = float(cell_size)
    if decimals is None:
        return cell_size
    snapped = round(cell_size, decimals)
    if snapped <= 0.0 or not np.isclose(snapped, cell_size, rtol=CELLSIZE_RTOL, atol=0.0):
        return cell_size
    return snapped


@dataclass(frozen=True)
class GeoTransform:
    """Square-cell, north-up grid georeference.

    `origin_x`/`origin_y` are the world coordinates of the corner named by
    `origin_kind`. Rows are counted from the top (north) edge.
    """

    origin_x: float
    origin_y: float
    cell_size: float
    n_cols: int
    n_rows: int
    origin_kind: OriginKind = OriginKind.UPPER_LEFT

    def __post_init__(self):
        if not np.isfinite(self.cell_size) or self.cell_size <= 0:
            raise ValueError(f'cell_size must be positive, got {self.cell_size!r}')
        if int(self.n_cols) < 1 or int(self.n_rows) < 1:
            raise ValueError(f'grid must have at least one cell, got {self.n_cols}x{self.n_rows}')
        if not (np.isfinite(self.origin_x) and np.isfinite(self.origin_y)):
            raise ValueError('origin must be finite')

    @classmethod
    def from_gdal(cls, geotransform: Sequence[float], width: int, height: int, path=None) -> 'GeoTransform':
        """Build from a GDAL-ordered `[x0, dx, shear_x, y0, shear_y, dy]`.

        Only axis-aligned, north-up, square-cell transforms are accepted.
        """
        gt = tuple(float(v) for v in geotransform)
        if len(gt) != 6:
            raise UnsupportedTransform(f'expected 6 geotransform terms, got {len(gt)}', path, geotransform=gt)
        x0, dx, shear_x, y0, shear_y, dy = gt
        if shear_x != 0.0 or shear_y != 0.0:
            raise UnsupportedTransform('rotated or sheared rasters are not supported', path, geotransform=gt)
        if dx <= 0.0:
            raise UnsupportedTransform(f'pixel width must be positive, got {dx}', path, geotransform=gt)
        if dy >= 0.0:
            raise UnsupportedTransform(f'raster is not north-up (dy={dy})', path, geotransform=gt)
        if not np.isclose(-dy, dx, rtol=1e-6, atol=0.0):
            raise UnsupportedTransform(f'non-square cells are not supported (dx={dx}, dy={dy})', path, geotransform=gt)
        return cls(x0, y0, dx, int(width), int(height), OriginKind.UPPER_LEFT)

    @classmethod
    def from_affine(cls, transform: Affine, width: int, height: int, path=None) -> 'GeoTransform':
        return cls.from_gdal(transform.to_gdal(), width, height, path=path)

    def step(self, decimals: Optional[int] = CELLSIZE_DECIMALS) -> float:
        """Cell size as used for stepping across the grid."""
        return snap_cell_size(self.cell_size, decimals)

    # extent -------------------------------------------------------------

    @property
    def x_min(self) -> float:
        return float(self.origin_x)

    @property
    def x_max(self) -> float:
        return float(self.origin_x) + self.n_cols * self.cell_size

    @property
    def y_max(self) -> float:
        if self.origin_kind is OriginKind.UPPER_LEFT:
            return float(self.origin_y)
        return float(self.origin_y) + self.n_rows * self.cell_size

    @property
    def y_min(self) -> float:
        if self.origin_kind is OriginKind.LOWER_LEFT:
            return float(self.origin_y)
        return float(self.origin_y) - self.n_rows * self.cell_size

    @property
    def lower_left(self) -> Tuple[float, float]:
        return self.x_min, self.y_min

    @property
    def upper_right(self) -> Tuple[float, float]:
        return self.x_max, self.y_max

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(x_min, x_max, y_min, y_max), the same order as a window request."""
        return self.x_min, self.x_max, self.y_min, self.y_max

    @property
    def shape(self) -> Tuple[int, int]:
        return int(self.n_rows), int(self.n_cols)

    def to_lower_left(self) -> 'GeoTransform':
        return GeoTransform(self.x_min, self.y_min, self.cell_size, self.n_cols, self.n_rows, OriginKind.LOWER_LEFT)

    def to_upper_left(self) -> 'GeoTransform':
        return GeoTransform(self.x_min, self.y_max, self.cell_size, self.n_cols, self.n_rows, OriginKind.UPPER_LEFT)

    def to_affine(self) -> Affine:
        """Pixel (col, row) -> world affine, anchored at the upper-left corner."""
        return Affine(self.cell_size, 0.0, self.x_min, 0.0, -self.cell_size, self.y_max)
