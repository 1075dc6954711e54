"""Read and write gridded and point-cloud spatial files.

The grid readers all follow the same pipeline:

    header  ->  GeoTransform + nodata
    window  ->  ResolvedWindow (pixel offset + size)
    decoder ->  raw buffer for that window
    sampler ->  cell-center coordinates paired with masked values

Text grids (`.asc`, `.txt`) and GeoTIFFs (`.tif`, `.tiff`) go through the
same path; LAS/LAZ files are decoded and passed through the point filter.

Public functions:
- `read_griddata_header(path)`
- `read_griddata(path, options=None)`
- `read_griddata_window(path, request, options=None)`
- `read_resolved_window(path, request, options=None)`
- `resolve_griddata_window(path, request, options=None)`
- `read_las(path, bbox=None, policy=ClassificationPolicy.ALL)`
- `import_dtm(path, tilt=False, options=None)`
- `write_ascii(path, transform, nodata_value, data, reshape=False)`
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

import numpy as np

from spatialfileio.config import ReadOptions, TEXT_GRID_HEADER_KEYS
from spatialfileio.exceptions import MalformedDTM, SpatialIOError, UnrecognizedExtension
from spatialfileio.pointfilter import ClassificationPolicy, PointSet, filter_points
from spatialfileio.sampler import NodataPolicy, SampleResult, VectorSample, sample_grid
from spatialfileio.sources import DatasetKind
from spatialfileio.transform import GeoTransform
from spatialfileio.utils import safe_log_exception as _safe_log_exception
from spatialfileio.window import ResolvedWindow, full_window, resolve_window

logger = logging.getLogger(__name__)


def _grid_source(path, options: ReadOptions):
    kind = DatasetKind.from_path(path)
    if not kind.is_grid:
        raise UnrecognizedExtension(f'{kind.name} files are not gridded data', path)
    return kind.open(path, band=options.band)


def read_griddata_header(path) -> Tuple[GeoTransform, Optional[float]]:
    """Return `(GeoTransform, nodata_value)` for a text grid or raster.

    Text grids give a lower-left anchored transform, rasters an upper-left
    one; both expose the same extent properties.
    """
    return _grid_source(path, ReadOptions()).read_header()


def _read(path, window_for, options: Optional[ReadOptions]) -> Tuple[SampleResult, ResolvedWindow]:
    options = options or ReadOptions()
    source = _grid_source(path, options)
    transform, nodata = source.read_header()
    window = window_for(transform)
    try:
        raw = source.read_window(window.pixel_x_offset, window.pixel_y_offset,
                                 window.pixel_width, window.pixel_height)
    except SpatialIOError:
        raise
    except Exception as e:
        _safe_log_exception('decoder failed reading window', e, path=str(path), window=window)
        raise
    policy = NodataPolicy(nodata_value=nodata, mask_zero=options.mask_zero)
    result = sample_grid(window, raw, policy,
                         vectorize=options.vectorize, compact=options.compact)
    return result, window


def read_griddata(path, options: Optional[ReadOptions] = None) -> SampleResult:
    """Read a whole text grid or raster.

    Returns a `VectorSample` (x, y, z, cell_size) when `options.vectorize`
    is set (the default), otherwise a `GridSample` of 2D arrays.
    """
    options = options or ReadOptions()
    result, _ = _read(path, lambda t: full_window(t, cellsize_decimals=options.cellsize_decimals), options)
    return result


def resolve_griddata_window(path, request, options: Optional[ReadOptions] = None) -> ResolvedWindow:
    """Resolve `request` against the grid at `path` without reading values."""
    options = options or ReadOptions()
    transform, _ = _grid_source(path, options).read_header()
    return resolve_window(transform, request, cellsize_decimals=options.cellsize_decimals, path=path)


def read_griddata_window(path, request, options: Optional[ReadOptions] = None) -> SampleResult:
    """Read the cells of a text grid or raster covering `request`.

    `request` is a `WindowRequest` or `[x_min, x_max, y_min, y_max]` in the
    dataset's coordinates. The returned cells cover the request (snapped
    outward to whole cells and clipped to the dataset).

    Raises `OutOfBounds` when no corner of the request lies inside the
    dataset and `InvalidRequest` for inverted bounds.
    """
    result, _ = read_resolved_window(path, request, options)
    return result


def read_resolved_window(path, request, options: Optional[ReadOptions] = None) -> Tuple[SampleResult, ResolvedWindow]:
    """Like `read_griddata_window`, also returning the `ResolvedWindow` read."""
    options = options or ReadOptions()

    def window_for(transform):
        return resolve_window(transform, request, cellsize_decimals=options.cellsize_decimals, path=path)

    result, window = _read(path, window_for, options)
    logger.info('read %dx%d window at col=%d row=%d from %s%s', window.pixel_width, window.pixel_height,
                window.pixel_x_offset, window.pixel_y_offset, path, ' (clamped)' if window.clamped else '')
    return result, window


def read_las(path, bbox=None, policy: ClassificationPolicy = ClassificationPolicy.ALL) -> PointSet:
    """Load a LAS/LAZ file and keep points matching `policy` inside `bbox`."""
    kind = DatasetKind.from_path(path)
    if kind is not DatasetKind.POINT_CLOUD:
        raise UnrecognizedExtension(f'{kind.name} files are not point clouds', path)
    _, points = kind.open(path).load()
    return filter_points(points, bbox=bbox, policy=policy)


@dataclass(frozen=True)
class TiltedDTM:
    """DTM exported together with slope and aspect grids."""

    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    slope: np.ndarray
    aspect: np.ndarray
    cell_size: float


def import_dtm(path, tilt: bool = False, options: Optional[ReadOptions] = None):
    """Load a terrain model from a `.mat` DTM struct or any grid file.

    MAT files hold a `dtm` struct with `x`, `y`, `z` and `cellsize`; tilted
    exports add `s` (slope) and `a` (aspect) and are returned unchanged as a
    `TiltedDTM`. Otherwise the result is a compacted `VectorSample`.
    """
    kind = DatasetKind.from_path(path)
    if kind.is_grid:
        if tilt:
            raise UnrecognizedExtension('tilted DTMs are only stored in .mat files', path)
        return read_griddata(path, options or ReadOptions(vectorize=True, compact=True))
    if kind is not DatasetKind.MATLAB_DTM:
        raise UnrecognizedExtension(f'{kind.name} files do not hold a DTM', path)

    dtm = kind.open(path).load()
    missing = [k for k in ('x', 'y', 'z', 'cellsize') + (('s', 'a') if tilt else ()) if k not in dtm]
    if missing:
        raise MalformedDTM(f'DTM struct missing fields {missing}', path, missing=missing)
    cell_size = float(np.asarray(dtm['cellsize']).squeeze())
    if tilt:
        return TiltedDTM(dtm['x'], dtm['y'], dtm['z'], dtm['s'], dtm['a'], cell_size)

    x = np.asarray(dtm['x'], dtype=np.float64).ravel(order='F')
    y = np.asarray(dtm['y'], dtype=np.float64).ravel(order='F')
    z = np.asarray(dtm['z'], dtype=np.float64).ravel(order='F')
    keep = ~np.isnan(z)
    return VectorSample(x=x[keep], y=y[keep], z=z[keep], cell_size=cell_size)


def _format_number(value) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def write_ascii(path, transform: GeoTransform, nodata_value: float, data, reshape: bool = False) -> None:
    """Write `data` as an ESRI ASCII grid.

    Parameters
    - transform: georeference of `data`; its lower-left corner is written
    - nodata_value: written in the header and in place of every NaN
    - data: (nrows, ncols) array, north row first, or with `reshape` a
      flat vector in vectorized (south row first) order
    """
    arr = np.array(data, dtype=np.float64)
    if reshape:
        arr = np.flipud(arr.reshape(transform.n_rows, transform.n_cols))
    if arr.shape != transform.shape:
        raise ValueError(f'data shape {arr.shape} does not match grid shape {transform.shape}')
    arr[np.isnan(arr)] = nodata_value

    values = (
        int(transform.n_cols),
        int(transform.n_rows),
        transform.x_min,
        transform.y_min,
        transform.cell_size,
        nodata_value,
    )
    with open(path, 'w') as f:
        for key, value in zip(TEXT_GRID_HEADER_KEYS, values):
            f.write(f'{key} {_format_number(value)}\n')
        for row in arr:
            f.write(' '.join(_format_number(v) for v in row))
            f.write('\n')
    logger.debug('wrote %dx%d text grid to %s', transform.n_rows, transform.n_cols, path)
