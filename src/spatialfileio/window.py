"""
window.py

Translate a world-space bounding box into a pixel read window.

The resolver works on the grid's cell lattice: every edge it reports is a
whole number of (snapped) cells away from the grid's north-west corner.
Request edges are snapped outward, so the resolved window always covers
the (clamped) request; a request edge lying exactly on a cell edge stays
there, and a degenerate request still gets one cell.

The overlap test only asks whether some corner of the request lies inside
the dataset. A request that crosses the dataset without any of its corners
landing inside (for instance a thin strip wider than the dataset) is
reported as `OutOfBounds`.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import logging
import math
import warnings

from affine import Affine

from spatialfileio.config import CELLSIZE_DECIMALS
from spatialfileio.exceptions import InvalidRequest, OutOfBounds, WindowClampedWarning
from spatialfileio.geometry import geo_to_pixel, pixel_to_geo
from spatialfileio.transform import GeoTransform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowRequest:
    """World-space bounding box requested by a caller."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @classmethod
    def from_limits(cls, limits: Sequence[float]) -> 'WindowRequest':
        """Build from `[x_min, x_max, y_min, y_max]`."""
        if len(limits) != 4:
            raise InvalidRequest(f'expected [x_min, x_max, y_min, y_max], got {len(limits)} values')
        return cls(*(float(v) for v in limits))

    def validate(self) -> None:
        vals = (self.x_min, self.x_max, self.y_min, self.y_max)
        if not all(math.isfinite(v) for v in vals):
            raise InvalidRequest(f'window bounds must be finite: {vals}')
        if self.x_min > self.x_max:
            raise InvalidRequest(f'x_min ({self.x_min}) is greater than x_max ({self.x_max})')
        if self.y_min > self.y_max:
            raise InvalidRequest(f'y_min ({self.y_min}) is greater than y_max ({self.y_max})')

    def corners(self) -> Tuple[Tuple[float, float], ...]:
        return ((self.x_min, self.y_min), (self.x_min, self.y_max),
                (self.x_max, self.y_min), (self.x_max, self.y_max))

    def contains(self, x, y):
        """Inclusive containment test; works element-wise on arrays."""
        return (x >= self.x_min) & (x <= self.x_max) & (y >= self.y_min) & (y <= self.y_max)


@dataclass(frozen=True)
class ResolvedWindow:
    """Pixel read window plus the cell-aligned world extent it covers."""

    pixel_x_offset: int
    pixel_y_offset: int
    pixel_width: int
    pixel_height: int
    clamped: bool
    world_x_min: float
    world_x_max: float
    world_y_min: float
    world_y_max: float
    cell_size: float

    @property
    def shape(self) -> Tuple[int, int]:
        return self.pixel_height, self.pixel_width

    @property
    def col_slice(self) -> slice:
        return slice(self.pixel_x_offset, self.pixel_x_offset + self.pixel_width)

    @property
    def row_slice(self) -> slice:
        return slice(self.pixel_y_offset, self.pixel_y_offset + self.pixel_height)

    def to_affine(self) -> Affine:
        return Affine(self.cell_size, 0.0, self.world_x_min, 0.0, -self.cell_size, self.world_y_max)

    def to_transform(self) -> GeoTransform:
        """GeoTransform describing just this window."""
        return GeoTransform(self.world_x_min, self.world_y_max, self.cell_size,
                            self.pixel_width, self.pixel_height)


def has_corner_inside(transform: GeoTransform, request: WindowRequest) -> bool:
    x_min, x_max, y_min, y_max = transform.bounds
    return any(x_min <= x <= x_max and y_min <= y <= y_max for x, y in request.corners())


def clamp_request(transform: GeoTransform, request: WindowRequest) -> Tuple[WindowRequest, bool]:
    """Clip each request edge that falls outside the dataset extent."""
    x_min, x_max, y_min, y_max = transform.bounds
    clipped = WindowRequest(
        x_min=max(request.x_min, x_min),
        x_max=min(request.x_max, x_max),
        y_min=max(request.y_min, y_min),
        y_max=min(request.y_max, y_max),
    )
    return clipped, clipped != request


def _corner(lattice: Affine, row: int, col: int) -> Tuple[float, float]:
    return pixel_to_geo(lattice, row, col)


def _first_index(lattice: Affine, x: float, y: float) -> Tuple[int, int]:
    """(row, col) of the last lattice corner at or north-west of (x, y)."""
    row, col = geo_to_pixel(lattice, x, y)
    # the inverse affine can land one cell off either way
    if _corner(lattice, 0, col)[0] > x:
        col -= 1
    elif _corner(lattice, 0, col + 1)[0] <= x:
        col += 1
    if _corner(lattice, row, 0)[1] < y:
        row -= 1
    elif _corner(lattice, row + 1, 0)[1] >= y:
        row += 1
    return row, col


def _end_index(lattice: Affine, x: float, y: float) -> Tuple[int, int]:
    """(row, col) of the first lattice corner at or south-east of (x, y)."""
    row, col = geo_to_pixel(lattice, x, y)
    if _corner(lattice, 0, col)[0] < x:
        col += 1
    elif _corner(lattice, 0, col - 1)[0] >= x:
        col -= 1
    if _corner(lattice, row, 0)[1] > y:
        row += 1
    elif _corner(lattice, row - 1, 0)[1] <= y:
        row -= 1
    return row, col


def resolve_window(transform: GeoTransform, request, *,
                   cellsize_decimals: Optional[int] = CELLSIZE_DECIMALS,
                   path=None) -> ResolvedWindow:
    """Resolve `request` against `transform` into a pixel read window.

    Parameters
    - transform: dataset georeference
    - request: `WindowRequest` or `[x_min, x_max, y_min, y_max]`
    - cellsize_decimals: cell size snapping tolerance (see `snap_cell_size`)

    Raises `InvalidRequest` for inverted bounds and `OutOfBounds` when no
    request corner lies inside the dataset. Partial overlap clamps the
    request and issues `WindowClampedWarning`.
    """
    if not isinstance(request, WindowRequest):
        request = WindowRequest.from_limits(request)
    request.validate()

    if not has_corner_inside(transform, request):
        raise OutOfBounds('requested window out of bounds of dataset', path,
                          request=request, extent=transform.bounds)

    req, clamped = clamp_request(transform, request)
    if clamped:
        logger.warning('window %s exceeds dataset extent %s; clamped to %s',
                       request, transform.bounds, req)
        warnings.warn(f'window request clamped to dataset extent {transform.bounds}',
                      WindowClampedWarning, stacklevel=2)

    step = transform.step(cellsize_decimals)
    lattice = Affine(step, 0.0, transform.x_min, 0.0, -step, transform.y_max)

    row_top, col_left = _first_index(lattice, req.x_min, req.y_max)
    row_end, col_end = _end_index(lattice, req.x_max, req.y_min)

    # offsets: never negative, never past the last cell
    col_left = min(max(col_left, 0), transform.n_cols - 1)
    row_top = min(max(row_top, 0), transform.n_rows - 1)

    width = min(max(col_end - col_left, 1), transform.n_cols - col_left)
    height = min(max(row_end - row_top, 1), transform.n_rows - row_top)

    world_x_min, world_y_max = pixel_to_geo(lattice, row_top, col_left)
    world_x_max, world_y_min = pixel_to_geo(lattice, row_top + height, col_left + width)

    window = ResolvedWindow(
        pixel_x_offset=int(col_left),
        pixel_y_offset=int(row_top),
        pixel_width=int(width),
        pixel_height=int(height),
        clamped=clamped,
        world_x_min=float(world_x_min),
        world_x_max=float(world_x_max),
        world_y_min=float(world_y_min),
        world_y_max=float(world_y_max),
        cell_size=step,
    )
    logger.debug('resolved %s -> %s', request, window)
    return window


def full_window(transform: GeoTransform, *, cellsize_decimals: Optional[int] = CELLSIZE_DECIMALS) -> ResolvedWindow:
    """Window covering the whole dataset."""
    step = transform.step(cellsize_decimals)
    y_max = transform.y_max
    x_min = transform.x_min
    return ResolvedWindow(
        pixel_x_offset=0,
        pixel_y_offset=0,
        pixel_width=int(transform.n_cols),
        pixel_height=int(transform.n_rows),
        clamped=False,
        world_x_min=x_min,
        world_x_max=x_min + transform.n_cols * step,
        world_y_min=y_max - transform.n_rows * step,
        world_y_max=y_max,
        cell_size=step,
    )
