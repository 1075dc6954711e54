import warnings

import numpy as np
import pytest

from spatialfileio.exceptions import InvalidRequest, OutOfBounds, WindowClampedWarning
from spatialfileio.transform import GeoTransform, OriginKind
from spatialfileio.window import WindowRequest, clamp_request, full_window, has_corner_inside, resolve_window


def grid_100():
    # extent x in [0, 100], y in [0, 100], 10x10 cells of 10
    return GeoTransform(0.0, 0.0, 10.0, 10, 10, OriginKind.LOWER_LEFT)


def resolve_quiet(transform, request, **kw):
    with warnings.catch_warnings():
        warnings.simplefilter('ignore', WindowClampedWarning)
        return resolve_window(transform, request, **kw)


def test_partial_overlap_is_clamped():
    with pytest.warns(WindowClampedWarning):
        w = resolve_window(grid_100(), WindowRequest(-20.0, 50.0, -20.0, 50.0))
    assert w.clamped
    assert w.world_x_min == 0.0
    assert w.world_y_min == 0.0
    assert w.world_x_max == 50.0
    assert w.world_y_max == 50.0
    assert w.pixel_x_offset == 0
    # row offset counts from the top edge: 100 -> 50 is five rows
    assert w.pixel_y_offset == 5
    assert (w.pixel_width, w.pixel_height) == (5, 5)


def test_entirely_outside_raises():
    with pytest.raises(OutOfBounds) as exc:
        resolve_window(grid_100(), WindowRequest(200.0, 300.0, 0.0, 50.0))
    assert exc.value.extent == (0.0, 100.0, 0.0, 100.0)


def test_inverted_request_rejected():
    with pytest.raises(InvalidRequest):
        resolve_window(grid_100(), WindowRequest(50.0, 10.0, 0.0, 50.0))
    with pytest.raises(InvalidRequest):
        resolve_window(grid_100(), WindowRequest(10.0, 50.0, 60.0, 20.0))


def test_non_finite_request_rejected():
    with pytest.raises(InvalidRequest):
        resolve_window(grid_100(), [0.0, np.nan, 0.0, 10.0])


def test_limits_sequence_accepted():
    w = resolve_window(grid_100(), [10, 30, 20, 40])
    assert (w.pixel_x_offset, w.pixel_y_offset, w.pixel_width, w.pixel_height) == (1, 6, 2, 2)


def test_limits_wrong_length():
    with pytest.raises(InvalidRequest):
        resolve_window(grid_100(), [10, 30, 20])


def test_interior_request_snaps_outward():
    w = resolve_window(grid_100(), WindowRequest(12.0, 38.0, 41.0, 67.0))
    assert not w.clamped
    assert (w.world_x_min, w.world_x_max) == (10.0, 40.0)
    assert (w.world_y_min, w.world_y_max) == (40.0, 70.0)
    assert (w.pixel_x_offset, w.pixel_y_offset) == (1, 3)
    assert (w.pixel_width, w.pixel_height) == (3, 3)


def test_edges_on_cell_boundaries_stay_put():
    w = resolve_window(grid_100(), WindowRequest(10.0, 30.0, 20.0, 40.0))
    assert (w.world_x_min, w.world_x_max, w.world_y_min, w.world_y_max) == (10.0, 30.0, 20.0, 40.0)
    assert (w.pixel_width, w.pixel_height) == (2, 2)


def test_whole_dataset_request_not_clamped():
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        w = resolve_window(grid_100(), WindowRequest(0.0, 100.0, 0.0, 100.0))
    assert not w.clamped
    assert w == full_window(grid_100())


def test_degenerate_request_gets_one_cell():
    w = resolve_window(grid_100(), WindowRequest(30.0, 30.0, 40.0, 40.0))
    assert (w.pixel_width, w.pixel_height) == (1, 1)
    assert w.world_x_min <= 30.0 <= w.world_x_max
    assert w.world_y_min <= 40.0 <= w.world_y_max


def test_request_touching_far_corner():
    w = resolve_quiet(grid_100(), WindowRequest(100.0, 150.0, 100.0, 150.0))
    assert (w.pixel_x_offset, w.pixel_y_offset) == (9, 0)
    assert (w.pixel_width, w.pixel_height) == (1, 1)
    assert (w.world_x_max, w.world_y_max) == (100.0, 100.0)


def test_strip_crossing_dataset_without_corner_inside():
    # only corners are tested for overlap, so a strip wider than the grid is rejected
    req = WindowRequest(-10.0, 110.0, 40.0, 60.0)
    assert not has_corner_inside(grid_100(), req)
    with pytest.raises(OutOfBounds):
        resolve_window(grid_100(), req)


def test_clamp_request():
    req, clamped = clamp_request(grid_100(), WindowRequest(-5.0, 50.0, 10.0, 120.0))
    assert clamped
    assert req == WindowRequest(0.0, 50.0, 10.0, 100.0)
    req, clamped = clamp_request(grid_100(), WindowRequest(5.0, 50.0, 10.0, 20.0))
    assert not clamped


def test_upper_left_transform_same_window():
    ul = grid_100().to_upper_left()
    a = resolve_window(ul, WindowRequest(12.0, 38.0, 41.0, 67.0))
    b = resolve_window(grid_100(), WindowRequest(12.0, 38.0, 41.0, 67.0))
    assert a == b


def test_cellsize_drift_is_snapped():
    t = GeoTransform.from_gdal([0.0, 10.000000001, 0.0, 100.0, 0.0, -10.000000001], 10, 10)
    w = resolve_window(t, WindowRequest(0.0, 50.0, 50.0, 100.0))
    assert w.cell_size == 10.0
    assert (w.pixel_width, w.pixel_height) == (5, 5)
    assert w.world_x_max == 50.0

    raw = resolve_window(t, WindowRequest(0.0, 50.0, 50.0, 100.0), cellsize_decimals=None)
    assert raw.cell_size == 10.000000001
    assert raw.world_x_max > 50.0


def test_fractional_cellsize():
    t = GeoTransform(0.0, 0.0, 0.5, 8, 8, OriginKind.LOWER_LEFT)
    w = resolve_window(t, WindowRequest(0.6, 1.4, 0.1, 0.9))
    assert (w.world_x_min, w.world_x_max) == (0.5, 1.5)
    assert (w.world_y_min, w.world_y_max) == (0.0, 1.0)
    assert (w.pixel_x_offset, w.pixel_y_offset) == (1, 6)


def test_window_helpers():
    w = resolve_window(grid_100(), WindowRequest(12.0, 38.0, 41.0, 67.0))
    assert w.shape == (3, 3)
    assert w.col_slice == slice(1, 4)
    assert w.row_slice == slice(3, 6)
    sub = w.to_transform()
    assert sub.bounds == (10.0, 40.0, 40.0, 70.0)


def test_random_requests_stay_inside_and_cover_request():
    rng = np.random.default_rng(42)
    transforms = [
        grid_100(),
        GeoTransform(500000.0, 4100000.0, 2.5, 37, 23, OriginKind.LOWER_LEFT),
        GeoTransform(-13.3, 47.1, 0.25, 41, 19, OriginKind.UPPER_LEFT),
    ]
    for t in transforms:
        x0, x1, y0, y1 = t.bounds
        span_x, span_y = x1 - x0, y1 - y0
        for _ in range(300):
            xs = np.sort(rng.uniform(x0 - 0.3 * span_x, x1 + 0.3 * span_x, 2))
            ys = np.sort(rng.uniform(y0 - 0.3 * span_y, y1 + 0.3 * span_y, 2))
            req = WindowRequest(xs[0], xs[1], ys[0], ys[1])
            if not has_corner_inside(t, req):
                with pytest.raises(OutOfBounds):
                    resolve_quiet(t, req)
                continue
            w = resolve_quiet(t, req)
            assert w.pixel_x_offset >= 0 and w.pixel_y_offset >= 0
            assert w.pixel_width >= 1 and w.pixel_height >= 1
            assert w.pixel_x_offset + w.pixel_width <= t.n_cols
            assert w.pixel_y_offset + w.pixel_height <= t.n_rows
            clipped, _ = clamp_request(t, req)
            assert w.world_x_min <= clipped.x_min
            assert w.world_x_max >= clipped.x_max
            assert w.world_y_min <= clipped.y_min
            assert w.world_y_max >= clipped.y_max
