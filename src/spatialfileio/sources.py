"""
sources.py

Dataset kinds and the decoder adapters behind them.

`DatasetKind` is picked from the file suffix once; each kind knows which
adapter decodes it, so callers never compare extension strings themselves.

Adapters
- `AsciiGridSource`: ESRI ASCII grid (`.asc`, `.txt`), body via numpy
- `RasterSource`: single-band GDAL raster via rasterio
- `PointCloudSource`: LAS/LAZ via laspy
- `MatDTMSource`: MATLAB DTM struct via scipy (v5) or h5py (v7.3)

Every adapter opens its file inside a `with` block per call, so handles are
released on all exit paths and adapters can be shared between callers.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple
import logging

import laspy
import numpy as np
import rasterio
from rasterio.windows import Window

from spatialfileio.config import DEFAULT_BAND, EXTENSIONS, TEXT_GRID_HEADER_LINES
from spatialfileio.exceptions import MalformedDTM, MalformedGrid, UnrecognizedExtension
from spatialfileio.header import raster_header, read_ascii_header
from spatialfileio.pointfilter import PointSet
from spatialfileio.transform import GeoTransform

logger = logging.getLogger(__name__)


def extension(path) -> str:
    """Lower-case suffix of `path` including the dot, e.g. '.tif'."""
    suffix = Path(path).suffix.lower()
    if not suffix:
        raise UnrecognizedExtension('file name has no extension', path)
    return suffix


class DatasetKind(Enum):
    TEXT_GRID = 'text_grid'
    RASTER = 'raster'
    POINT_CLOUD = 'point_cloud'
    MATLAB_DTM = 'matlab_dtm'

    @classmethod
    def from_path(cls, path) -> 'DatasetKind':
        suffix = extension(path)
        name = EXTENSIONS.get(suffix)
        if name is None:
            raise UnrecognizedExtension(
                f"unrecognized extension '{suffix}'. Supported: {', '.join(sorted(EXTENSIONS))}", path)
        return cls[name]

    @property
    def is_grid(self) -> bool:
        return self in (DatasetKind.TEXT_GRID, DatasetKind.RASTER)

    def open(self, path, **kwargs):
        """Adapter instance decoding `path` as this kind."""
        return _ADAPTERS[self](path, **kwargs)


class AsciiGridSource:
    """Text grid decoder.

    Header parsing is delegated to `header.read_ascii_header`; the body is
    `nrows` lines of `ncols` whitespace-separated numbers, north row first.
    """

    def __init__(self, path, band: int = DEFAULT_BAND):
        self.path = Path(path)
        self._header = None

    def read_header(self) -> Tuple[GeoTransform, Optional[float]]:
        if self._header is None:
            self._header = read_ascii_header(self.path)
        return self._header

    def read_body(self) -> np.ndarray:
        transform, _ = self.read_header()
        try:
            data = np.loadtxt(self.path, skiprows=TEXT_GRID_HEADER_LINES, ndmin=2, dtype=np.float64)
        except ValueError as e:
            raise MalformedGrid(f'cannot parse grid values: {e}', self.path) from e
        if data.shape != transform.shape:
            raise MalformedGrid(f'grid body has shape {data.shape}, header declares {transform.shape}', self.path)
        return data

    def read_window(self, x_off: int, y_off: int, width: int, height: int) -> np.ndarray:
        data = self.read_body()
        return data[y_off:y_off + height, x_off:x_off + width].copy()


class RasterSource:
    """Single band of a GDAL raster read through rasterio."""

    def __init__(self, path, band: int = DEFAULT_BAND):
        self.path = Path(path)
        self.band = int(band)

    def _open(self):
        return rasterio.open(self.path)

    def geotransform(self) -> Tuple[float, ...]:
        with self._open() as src:
            return tuple(src.transform.to_gdal())

    def nodata_value(self) -> Optional[float]:
        with self._open() as src:
            return src.nodatavals[self.band - 1]

    def width(self) -> int:
        with self._open() as src:
            return int(src.width)

    def height(self) -> int:
        with self._open() as src:
            return int(src.height)

    def read_header(self) -> Tuple[GeoTransform, Optional[float]]:
        with self._open() as src:
            return raster_header(src.transform.to_gdal(), src.width, src.height,
                                 src.nodatavals[self.band - 1], path=self.path)

    def read_band(self, x_off: int, y_off: int, width: int, height: int) -> np.ndarray:
        with self._open() as src:
            data = src.read(self.band, window=Window(x_off, y_off, width, height))
        logger.debug('read %s band %d window col=%d row=%d %dx%d', self.path, self.band, x_off, y_off, width, height)
        return np.asarray(data, dtype=np.float64)

    def read_window(self, x_off: int, y_off: int, width: int, height: int) -> np.ndarray:
        return self.read_band(x_off, y_off, width, height)


@dataclass(frozen=True)
class LasHeaderInfo:
    x_scale: float
    x_offset: float
    y_scale: float
    y_offset: float
    z_scale: float
    z_offset: float
    x_min: float
    x_max: float
    y_min: float
    y_max: float


class PointCloudSource:
    """LAS/LAZ decoder (`.laz` needs the lazrs backend installed with laspy)."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Tuple[LasHeaderInfo, PointSet]:
        with laspy.open(self.path) as fh:
            las = fh.read()
        hdr = las.header
        scales = np.asarray(hdr.scales, dtype=np.float64)
        offsets = np.asarray(hdr.offsets, dtype=np.float64)
        mins = np.asarray(hdr.mins, dtype=np.float64)
        maxs = np.asarray(hdr.maxs, dtype=np.float64)
        info = LasHeaderInfo(
            x_scale=scales[0], x_offset=offsets[0],
            y_scale=scales[1], y_offset=offsets[1],
            z_scale=scales[2], z_offset=offsets[2],
            x_min=mins[0], x_max=maxs[0],
            y_min=mins[1], y_max=maxs[1],
        )
        # stored coordinates are scaled integers
        points = PointSet(
            x=np.asarray(las.X, dtype=np.float64) * info.x_scale + info.x_offset,
            y=np.asarray(las.Y, dtype=np.float64) * info.y_scale + info.y_offset,
            z=np.asarray(las.Z, dtype=np.float64) * info.z_scale + info.z_offset,
            classification=np.asarray(las.classification, dtype=np.uint8),
        )
        logger.debug('loaded %d points from %s', len(points), self.path)
        return info, points


class MatDTMSource:
    """MATLAB file holding a `dtm` struct with x, y, z, cellsize (and s, a)."""

    def __init__(self, path, variable: str = 'dtm'):
        self.path = Path(path)
        self.variable = variable

    def load(self) -> Dict[str, np.ndarray]:
        from scipy.io import loadmat
        try:
            mat = loadmat(str(self.path), squeeze_me=True, struct_as_record=False)
        except NotImplementedError:
            # v7.3 MAT files are HDF5 containers
            return self._load_hdf5()
        if self.variable not in mat:
            raise MalformedDTM(f"MAT file has no '{self.variable}' struct", self.path, missing=(self.variable,))
        struct = mat[self.variable]
        return {name: np.asarray(getattr(struct, name)) for name in struct._fieldnames}

    def _load_hdf5(self) -> Dict[str, np.ndarray]:
        import h5py
        out = {}
        with h5py.File(self.path, 'r') as h:
            if self.variable not in h:
                raise MalformedDTM(f"MAT file has no '{self.variable}' struct", self.path, missing=(self.variable,))
            grp = h[self.variable]
            for name, obj in grp.items():
                if isinstance(obj, h5py.Dataset):
                    # MATLAB writes column-major; h5py sees the transpose
                    out[name] = np.asarray(obj[()]).T
        return out


_ADAPTERS = {
    DatasetKind.TEXT_GRID: AsciiGridSource,
    DatasetKind.RASTER: RasterSource,
    DatasetKind.POINT_CLOUD: PointCloudSource,
    DatasetKind.MATLAB_DTM: MatDTMSource,
}
