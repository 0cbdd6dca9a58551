import pytest

from app.sim import simple_calibration
from contracts import RangePoint, Rect, Region
from fusion.clustering import cluster_lidar_with_roi
from fusion.roi import RangeCrop, crop_range_points

# simple_calibration maps (x, y, z) to u = 620 - 70 * y * 10 / x, v = 190 - 70 * z * 10 / x


def _point_at(u: float, v: float, x: float = 10.0) -> RangePoint:
    return RangePoint(x, (620.0 - u) * x / 700.0, (190.0 - v) * x / 700.0, 0.5)


def test_point_inside_unique_region_is_assigned_once() -> None:
    calibration = simple_calibration()
    left = Region(region_id=0, roi=Rect(500.0, 150.0, 100.0, 100.0))
    right = Region(region_id=1, roi=Rect(700.0, 150.0, 100.0, 100.0))
    point = _point_at(550.0, 200.0)

    stats = cluster_lidar_with_roi([left, right], [point], 0.0, calibration)

    assert left.range_points == [point]
    assert right.range_points == []
    assert stats.assigned == 1


def test_point_in_overlap_goes_to_neither_region() -> None:
    calibration = simple_calibration()
    a = Region(region_id=0, roi=Rect(500.0, 150.0, 100.0, 100.0))
    b = Region(region_id=1, roi=Rect(540.0, 150.0, 100.0, 100.0))

    stats = cluster_lidar_with_roi([a, b], [_point_at(570.0, 200.0)], 0.0, calibration)

    assert a.range_points == []
    assert b.range_points == []
    assert stats.ambiguous == 1


def test_unmatched_and_behind_camera_points_are_discarded() -> None:
    calibration = simple_calibration()
    region = Region(region_id=0, roi=Rect(500.0, 150.0, 100.0, 100.0))
    points = [_point_at(100.0, 100.0), RangePoint(-10.0, 0.0, 0.0)]

    stats = cluster_lidar_with_roi([region], points, 0.0, calibration)

    assert region.range_points == []
    assert stats.unmatched == 1
    assert stats.behind_camera == 1


def test_shrinking_never_adds_points() -> None:
    calibration = simple_calibration()
    points = [_point_at(u, 200.0) for u in (502.0, 520.0, 550.0, 580.0, 598.0)]
    counts = []
    for factor in (0.0, 0.1, 0.3, 0.6, 0.9):
        region = Region(region_id=0, roi=Rect(500.0, 150.0, 100.0, 100.0))
        cluster_lidar_with_roi([region], points, factor, calibration)
        counts.append(len(region.range_points))

    assert counts == sorted(counts, reverse=True)
    assert counts[0] == 5
    assert counts[1] == 3


def test_invalid_shrink_factor_raises() -> None:
    region = Region(region_id=0, roi=Rect(0.0, 0.0, 10.0, 10.0))
    for factor in (-0.1, 1.0):
        with pytest.raises(ValueError):
            cluster_lidar_with_roi([region], [], factor, simple_calibration())


def test_no_regions_leaves_points_unmatched() -> None:
    stats = cluster_lidar_with_roi([], [_point_at(550.0, 200.0)], 0.1, simple_calibration())
    assert stats.assigned == 0
    assert stats.unmatched == 1


def test_rect_shrink_moves_each_side_by_half_factor() -> None:
    rect = Rect(100.0, 50.0, 200.0, 100.0).shrink(0.2)
    assert rect.to_tuple() == pytest.approx((120.0, 60.0, 160.0, 80.0))


def test_rect_containment_is_half_open() -> None:
    rect = Rect(0.0, 0.0, 10.0, 10.0)
    assert rect.contains(0.0, 0.0)
    assert not rect.contains(10.0, 5.0)
    assert not rect.contains(5.0, 10.0)


def test_crop_keeps_points_inside_box() -> None:
    crop = RangeCrop()
    points = [
        RangePoint(10.0, 0.0, -1.2, 0.5),
        RangePoint(1.0, 0.0, -1.2, 0.5),
        RangePoint(10.0, 3.0, -1.2, 0.5),
        RangePoint(10.0, 0.0, -0.5, 0.5),
        RangePoint(10.0, 0.0, -1.2, 0.05),
    ]
    assert crop_range_points(points, crop) == points[:1]


def test_clustering_is_repeatable_on_fresh_inputs() -> None:
    calibration = simple_calibration()
    points = [_point_at(u, v) for u in (502.0, 550.0, 570.0, 620.0) for v in (160.0, 200.0)]
    points.append(RangePoint(-10.0, 0.0, 0.0))

    def run():
        regions = [
            Region(region_id=0, roi=Rect(500.0, 150.0, 100.0, 100.0)),
            Region(region_id=1, roi=Rect(560.0, 150.0, 100.0, 100.0)),
        ]
        stats = cluster_lidar_with_roi(regions, list(points), 0.1, calibration)
        return [region.range_points for region in regions], stats

    first_points, first_stats = run()
    second_points, second_stats = run()

    assert first_points == second_points
    assert first_stats == second_stats
    assert first_stats.behind_camera == 1
