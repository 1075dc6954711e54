"""
pointfilter.py

Classification and bounding-box filtering of decoded lidar points.

Filtering never reorders points: the classification mask and the spatial
mask are combined and applied in one compaction pass over parallel arrays.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import logging

import numpy as np

from spatialfileio.config import CANOPY_CLASSES, CLASS_GROUND
from spatialfileio.window import WindowRequest

logger = logging.getLogger(__name__)


class ClassificationPolicy(Enum):
    """Which ASPRS classes a point filter keeps."""

    CANOPY_ONLY = 'canopy'
    GROUND_AND_CANOPY = 'ground-canopy'
    NON_GROUND = 'non-ground'
    ALL = 'all'

    def mask(self, classification) -> np.ndarray:
        cls = np.asarray(classification)
        if self is ClassificationPolicy.ALL:
            return np.ones(cls.shape, dtype=bool)
        if self is ClassificationPolicy.NON_GROUND:
            return cls != CLASS_GROUND
        keep = CANOPY_CLASSES
        if self is ClassificationPolicy.GROUND_AND_CANOPY:
            keep = (CLASS_GROUND,) + tuple(CANOPY_CLASSES)
        return np.isin(cls, keep)


def policy_from_flags(include_ground: bool = False, include_all: bool = False) -> ClassificationPolicy:
    """Map the legacy `(ground, all)` flag pair onto a policy.

    Ground inclusion wins when both flags are set.
    """
    if include_ground:
        return ClassificationPolicy.GROUND_AND_CANOPY
    if include_all:
        return ClassificationPolicy.ALL
    return ClassificationPolicy.CANOPY_ONLY


@dataclass(frozen=True)
class PointSet:
    """Ordered lidar points as parallel arrays."""

    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    classification: Optional[np.ndarray] = None

    def __post_init__(self):
        for name in ('x', 'y', 'z'):
            object.__setattr__(self, name, np.asarray(getattr(self, name), dtype=np.float64))
        n = self.x.shape[0]
        if self.classification is None:
            object.__setattr__(self, 'classification', np.zeros(n, dtype=np.uint8))
        else:
            object.__setattr__(self, 'classification', np.asarray(self.classification))
        for name in ('y', 'z', 'classification'):
            if getattr(self, name).shape[0] != n:
                raise ValueError(f'PointSet.{name} length does not match x ({n})')

    def __len__(self) -> int:
        return int(self.x.shape[0])

    @classmethod
    def empty(cls) -> 'PointSet':
        return cls(np.empty(0), np.empty(0), np.empty(0), np.empty(0, dtype=np.uint8))

    def compress(self, keep) -> 'PointSet':
        keep = np.asarray(keep, dtype=bool)
        return PointSet(self.x[keep], self.y[keep], self.z[keep], self.classification[keep])


def filter_points(points: PointSet, bbox: Optional[WindowRequest] = None,
                  policy: ClassificationPolicy = ClassificationPolicy.ALL) -> PointSet:
    """Keep points matching `policy` and lying inside `bbox` (inclusive).

    `bbox` may be a `WindowRequest` or `[x_min, x_max, y_min, y_max]`;
    None disables the spatial test.
    """
    keep = policy.mask(points.classification)
    if bbox is not None:
        if not isinstance(bbox, WindowRequest):
            bbox = WindowRequest.from_limits(bbox)
        bbox.validate()
        keep &= bbox.contains(points.x, points.y)
    logger.debug('point filter (%s, bbox=%s) kept %d of %d', policy.name, bbox, int(keep.sum()), len(points))
    if keep.all():
        return points
    return points.compress(keep)
