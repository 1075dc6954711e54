"""
Command line access to the spatialfileio readers.

usage:
    spatialfileio header dem.tif
    spatialfileio window dem.tif 500000 500500 4100000 4100500 --out clip.asc
    spatialfileio points tile.laz --policy canopy --bbox 500000 500500 4100000 4100500
"""

import argparse
import logging
import sys

import numpy as np

from spatialfileio.config import ReadOptions
from spatialfileio.exceptions import SpatialIOError
from spatialfileio.io import (
    read_griddata_header,
    read_las,
    read_resolved_window,
    write_ascii,
)
from spatialfileio.pointfilter import ClassificationPolicy
from spatialfileio.utils import configure_logging
from spatialfileio.window import WindowRequest

logger = logging.getLogger(__name__)


def _cmd_header(args) -> int:
    transform, nodata = read_griddata_header(args.path)
    print(f'ncols     {transform.n_cols}')
    print(f'nrows     {transform.n_rows}')
    print(f'cellsize  {transform.cell_size}')
    print(f'extent    x=[{transform.x_min}, {transform.x_max}] y=[{transform.y_min}, {transform.y_max}]')
    print(f'nodata    {nodata}')
    return 0


def _cmd_window(args) -> int:
    request = WindowRequest(args.xmin, args.xmax, args.ymin, args.ymax)
    options = ReadOptions(vectorize=False, mask_zero=args.mask_zero)
    sample, window = read_resolved_window(args.path, request, options)
    valid = int(np.count_nonzero(~np.isnan(sample.values)))
    print(f'offset    col={window.pixel_x_offset} row={window.pixel_y_offset}')
    print(f'size      {window.pixel_width} cols x {window.pixel_height} rows')
    print(f'extent    x=[{window.world_x_min}, {window.world_x_max}] y=[{window.world_y_min}, {window.world_y_max}]')
    print(f'clamped   {window.clamped}')
    print(f'valid     {valid}')
    if args.out:
        write_ascii(args.out, window.to_transform(), args.nodata, sample.values)
        logger.info('wrote %s', args.out)
    return 0


def _cmd_points(args) -> int:
    bbox = WindowRequest(*args.bbox) if args.bbox else None
    points = read_las(args.path, bbox=bbox, policy=ClassificationPolicy(args.policy))
    print(f'{len(points)} points')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='spatialfileio', description='Extract windows and points from spatial files')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('header', help='Print grid georeference and nodata value')
    p.add_argument('path')
    p.set_defaults(func=_cmd_header)

    p = sub.add_parser('window', help='Read the cells covering a bounding box')
    p.add_argument('path')
    for name in ('xmin', 'xmax', 'ymin', 'ymax'):
        p.add_argument(name, type=float)
    p.add_argument('--out', help='Write the window as an ASCII grid')
    p.add_argument('--nodata', type=float, default=-9999.0, help='Nodata value for --out (default -9999)')
    p.add_argument('--mask-zero', dest='mask_zero', action='store_true', help='Treat zero cells as missing')
    p.set_defaults(func=_cmd_window)

    p = sub.add_parser('points', help='Count lidar points kept by a filter')
    p.add_argument('path')
    p.add_argument('--bbox', nargs=4, type=float, metavar=('XMIN', 'XMAX', 'YMIN', 'YMAX'))
    p.add_argument('--policy', default=ClassificationPolicy.ALL.value,
                   choices=[p.value for p in ClassificationPolicy])
    p.set_defaults(func=_cmd_points)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except SpatialIOError as e:
        print(f'error: {e}', file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
