import math

import pytest

from contracts import Correspondence, Keypoint
from ttc.camera import compute_ttc_camera, ttc_from_distance_ratio
from ttc.statistics import median_lower


def _scaled(points, scale):
    return [Keypoint(x=u * scale, y=v * scale, index=i) for i, (u, v) in enumerate(points)]


TRIANGLE = [(0.0, 0.0), (200.0, 0.0), (0.0, 200.0)]
IDENTITY_MATCHES = [Correspondence(i, i, 1.0) for i in range(3)]


def test_worked_example_from_median_ratio() -> None:
    median = median_lower([0.95, 0.8, 0.9])
    assert median == 0.9
    assert ttc_from_distance_ratio(median, 10.0) == pytest.approx(-1.0)


def test_shrinking_pattern_gives_negative_ttc() -> None:
    prev = _scaled(TRIANGLE, 1.0)
    curr = _scaled(TRIANGLE, 0.9)
    assert compute_ttc_camera(prev, curr, IDENTITY_MATCHES, frame_rate=10.0) == pytest.approx(-1.0)


def test_growing_pattern_gives_positive_ttc() -> None:
    prev = _scaled(TRIANGLE, 1.0)
    curr = _scaled(TRIANGLE, 1.1)
    assert compute_ttc_camera(prev, curr, IDENTITY_MATCHES, frame_rate=10.0) == pytest.approx(1.0)


def test_no_surviving_pairs_is_undefined() -> None:
    prev = _scaled(TRIANGLE, 1.0)
    assert math.isnan(compute_ttc_camera(prev, prev, IDENTITY_MATCHES[:1], frame_rate=10.0))
    small = _scaled(TRIANGLE, 0.1)
    assert math.isnan(compute_ttc_camera(small, small, IDENTITY_MATCHES, frame_rate=10.0))


def test_unit_median_ratio_is_undefined() -> None:
    prev = _scaled(TRIANGLE, 1.0)
    assert math.isnan(compute_ttc_camera(prev, prev, IDENTITY_MATCHES, frame_rate=10.0))
    assert math.isnan(ttc_from_distance_ratio(1.0, 10.0))


def test_non_positive_frame_rate_is_undefined() -> None:
    assert math.isnan(ttc_from_distance_ratio(0.9, 0.0))


def test_coincident_previous_keypoints_are_skipped() -> None:
    prev = [Keypoint(0.0, 0.0, 0), Keypoint(0.0, 0.0, 1), Keypoint(200.0, 0.0, 2)]
    curr = [Keypoint(0.0, 0.0, 0), Keypoint(0.0, 150.0, 1), Keypoint(180.0, 0.0, 2)]
    # Only the pairs involving keypoint 2 survive; pair (0, 1) has zero previous distance
    ttc = compute_ttc_camera(prev, curr, IDENTITY_MATCHES, frame_rate=10.0, min_dist=100.0)
    assert not math.isnan(ttc)
