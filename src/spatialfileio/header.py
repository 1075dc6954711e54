"""
header.py

Grid header readers. Both text grids and GDAL rasters are normalised to a
`(GeoTransform, nodata_value)` pair.

Text grid headers are six `<key> <value>` lines in a fixed order:

    ncols         4
    nrows         3
    xllcorner     500000
    yllcorner     4100000
    cellsize      10
    NODATA_value  -9999

Keys are compared case-insensitively (ESRI tools write both `NODATA_value`
and `nodata_value`); any other deviation raises `MalformedHeader`.
"""
from itertools import islice
from typing import Iterable, Optional, Sequence, Tuple
import logging

from spatialfileio.config import TEXT_GRID_HEADER_KEYS, TEXT_GRID_HEADER_LINES
from spatialfileio.exceptions import MalformedHeader
from spatialfileio.transform import GeoTransform, OriginKind

logger = logging.getLogger(__name__)

_INT_KEYS = ('ncols', 'nrows')


def parse_ascii_header(lines: Iterable[str], path=None) -> Tuple[GeoTransform, Optional[float]]:
    """Parse the six header lines of a text grid.

    Returns a lower-left anchored `GeoTransform` and the nodata value.
    """
    values = {}
    lines = list(islice(iter(lines), TEXT_GRID_HEADER_LINES))
    for lineno, key in enumerate(TEXT_GRID_HEADER_KEYS, start=1):
        if lineno > len(lines):
            raise MalformedHeader('header ended early', path, line_number=lineno, expected_key=key)
        tokens = lines[lineno - 1].split()
        if len(tokens) != 2:
            raise MalformedHeader(f'expected "<key> <value>", got {lines[lineno - 1].strip()!r}',
                                  path, line_number=lineno, expected_key=key)
        name, raw = tokens
        if name.lower() != key.lower():
            raise MalformedHeader(f'unexpected header key {name!r}', path, line_number=lineno, expected_key=key)
        try:
            values[key] = int(raw) if key in _INT_KEYS else float(raw)
        except ValueError as e:
            raise MalformedHeader(f'cannot parse {raw!r} as a number', path,
                                  line_number=lineno, expected_key=key) from e

    try:
        transform = GeoTransform(
            origin_x=values['xllcorner'],
            origin_y=values['yllcorner'],
            cell_size=values['cellsize'],
            n_cols=values['ncols'],
            n_rows=values['nrows'],
            origin_kind=OriginKind.LOWER_LEFT,
        )
    except ValueError as e:
        raise MalformedHeader(str(e), path) from e
    return transform, values['NODATA_value']


def read_ascii_header(path) -> Tuple[GeoTransform, Optional[float]]:
    """Read the header of the text grid at `path`."""
    with open(path, 'r') as f:
        header = parse_ascii_header(islice(f, TEXT_GRID_HEADER_LINES), path=path)
    logger.debug('text grid header %s: %s, nodata=%s', path, header[0], header[1])
    return header


def raster_header(geotransform: Sequence[float], width: int, height: int,
                  nodata_value: Optional[float], path=None) -> Tuple[GeoTransform, Optional[float]]:
    """Normalise raster metadata to the same pair `read_ascii_header` returns."""
    transform = GeoTransform.from_gdal(geotransform, width, height, path=path)
    nodata = None if nodata_value is None else float(nodata_value)
    logger.debug('raster header %s: %s, nodata=%s', path, transform, nodata)
    return transform, nodata
