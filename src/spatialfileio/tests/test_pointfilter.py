import numpy as np
import pytest

from spatialfileio.exceptions import InvalidRequest
from spatialfileio.pointfilter import ClassificationPolicy, PointSet, filter_points, policy_from_flags
from spatialfileio.window import WindowRequest


def sample_points():
    return PointSet(
        x=[1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        y=[1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        z=[10.0, 11.0, 12.0, 13.0, 14.0, 15.0],
        classification=[1, 2, 3, 4, 5, 6],
    )


def test_policy_canopy_only():
    out = filter_points(sample_points(), policy=ClassificationPolicy.CANOPY_ONLY)
    assert out.classification.tolist() == [3, 4, 5]
    assert out.z.tolist() == [12.0, 13.0, 14.0]


def test_policy_ground_and_canopy():
    out = filter_points(sample_points(), policy=ClassificationPolicy.GROUND_AND_CANOPY)
    assert out.classification.tolist() == [2, 3, 4, 5]


def test_policy_non_ground():
    out = filter_points(sample_points(), policy=ClassificationPolicy.NON_GROUND)
    assert out.classification.tolist() == [1, 3, 4, 5, 6]


def test_policy_all_returns_input():
    pts = sample_points()
    assert filter_points(pts) is pts


def test_bbox_is_inclusive_and_keeps_order():
    out = filter_points(sample_points(), bbox=WindowRequest(2.0, 4.0, 2.0, 5.0))
    assert out.x.tolist() == [2.0, 3.0, 4.0]
    assert out.classification.tolist() == [2, 3, 4]


def test_bbox_and_policy_combine():
    out = filter_points(sample_points(), bbox=[2.0, 4.0, 0.0, 10.0], policy=ClassificationPolicy.CANOPY_ONLY)
    assert out.x.tolist() == [3.0, 4.0]


def test_nothing_kept():
    out = filter_points(sample_points(), bbox=[100.0, 200.0, 100.0, 200.0])
    assert len(out) == 0
    assert out.classification.shape == (0,)


def test_inverted_bbox_rejected():
    with pytest.raises(InvalidRequest):
        filter_points(sample_points(), bbox=[5.0, 1.0, 0.0, 10.0])


def test_policy_from_flags():
    assert policy_from_flags() is ClassificationPolicy.CANOPY_ONLY
    assert policy_from_flags(include_all=True) is ClassificationPolicy.ALL
    assert policy_from_flags(include_ground=True) is ClassificationPolicy.GROUND_AND_CANOPY
    # ground wins
    assert policy_from_flags(include_ground=True, include_all=True) is ClassificationPolicy.GROUND_AND_CANOPY


def test_pointset_defaults_and_validation():
    pts = PointSet([0.0, 1.0], [0.0, 1.0], [0.0, 1.0])
    assert pts.classification.tolist() == [0, 0]
    assert pts.x.dtype == np.float64
    with pytest.raises(ValueError):
        PointSet([0.0, 1.0], [0.0], [0.0, 1.0])


def test_empty_pointset():
    assert len(PointSet.empty()) == 0
    assert len(filter_points(PointSet.empty(), bbox=[0, 1, 0, 1])) == 0
