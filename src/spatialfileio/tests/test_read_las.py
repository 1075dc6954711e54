import numpy as np
import pytest

from spatialfileio.exceptions import UnrecognizedExtension
from spatialfileio.io import read_las
from spatialfileio.pointfilter import ClassificationPolicy
from spatialfileio.sources import PointCloudSource
from spatialfileio.tests.fixtures.grid_fixture import write_las

X = [1.25, 2.5, 3.75, 5.0, 6.25]
Y = [10.0, 20.0, 30.0, 40.0, 50.0]
Z = [100.0, 101.5, 102.0, 103.25, 104.0]
CLS = [2, 3, 4, 5, 1]


@pytest.fixture
def tile(tmp_path):
    return write_las(tmp_path / 'tile.las', X, Y, Z, CLS)


def test_load_scales_coordinates(tile):
    info, points = PointCloudSource(tile).load()
    assert info.x_scale == pytest.approx(0.01)
    np.testing.assert_allclose(points.x, X)
    np.testing.assert_allclose(points.y, Y)
    np.testing.assert_allclose(points.z, Z)
    assert points.classification.tolist() == CLS
    assert info.x_min == pytest.approx(1.25)
    assert info.y_max == pytest.approx(50.0)


def test_read_all(tile):
    assert len(read_las(tile)) == 5


def test_read_canopy(tile):
    pts = read_las(tile, policy=ClassificationPolicy.CANOPY_ONLY)
    assert pts.classification.tolist() == [3, 4, 5]


def test_read_non_ground(tile):
    pts = read_las(tile, policy=ClassificationPolicy.NON_GROUND)
    assert pts.classification.tolist() == [3, 4, 5, 1]


def test_read_with_bbox(tile):
    pts = read_las(tile, bbox=[2.0, 6.0, 20.0, 40.0], policy=ClassificationPolicy.GROUND_AND_CANOPY)
    np.testing.assert_allclose(pts.x, [2.5, 3.75, 5.0])
    np.testing.assert_allclose(pts.z, [101.5, 102.0, 103.25])


def test_grid_is_not_a_point_cloud(tmp_path):
    with pytest.raises(UnrecognizedExtension):
        read_las(tmp_path / 'dem.tif')
