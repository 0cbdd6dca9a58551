import json

import pytest

from app.frame_io import frame_from_dict, load_frame_pair, save_frame_pair, save_results
from app.pipeline import FramePairProcessor
from app.sim import SceneConfig, simulate_frame_pair
from configs.settings import default_config
from exceptions import FrameDataError


def test_frame_pair_survives_save_and_load(tmp_path) -> None:
    pair = simulate_frame_pair(SceneConfig(lidar_points=10, keypoints=8)).pair
    path = tmp_path / "pair.json"

    save_frame_pair(path, pair)
    loaded = load_frame_pair(path)

    assert loaded.frame_rate == pair.frame_rate
    assert loaded.previous == pair.previous
    assert loaded.current == pair.current
    assert loaded.correspondences == pair.correspondences


def test_missing_pair_file(tmp_path) -> None:
    with pytest.raises(FrameDataError):
        load_frame_pair(tmp_path / "missing.json")


def test_invalid_json(tmp_path) -> None:
    path = tmp_path / "pair.json"
    path.write_text("{not json")
    with pytest.raises(FrameDataError):
        load_frame_pair(path)


def test_pair_needs_both_frames(tmp_path) -> None:
    path = tmp_path / "pair.json"
    path.write_text(json.dumps({"previous": {"frame_index": 0}}))
    with pytest.raises(FrameDataError):
        load_frame_pair(path)


def test_malformed_correspondences(tmp_path) -> None:
    path = tmp_path / "pair.json"
    path.write_text(json.dumps({"previous": {}, "current": {}, "correspondences": [[1]]}))
    with pytest.raises(FrameDataError):
        load_frame_pair(path)


def test_duplicate_region_ids_rejected() -> None:
    regions = [{"region_id": 1, "roi": [0, 0, 10, 10]}, {"region_id": 1, "roi": [20, 0, 10, 10]}]
    with pytest.raises(FrameDataError) as exc:
        frame_from_dict({"frame_index": 3, "regions": regions})
    assert exc.value.frame_index == 3


def test_region_without_roi_rejected() -> None:
    with pytest.raises(FrameDataError):
        frame_from_dict({"regions": [{"region_id": 1}]})


def test_save_results_writes_null_for_undefined(tmp_path) -> None:
    scene = simulate_frame_pair(SceneConfig())
    pair = scene.pair
    result = FramePairProcessor(default_config(), scene.calibration).process_pair(
        pair.previous, pair.current, pair.correspondences
    )
    path = tmp_path / "results.json"

    save_results(path, [result])

    data = json.loads(path.read_text())
    ttcs = {item["curr_region_id"]: item for item in data[0]["ttcs"]}
    assert ttcs[1]["ttc_lidar"] is None
    assert ttcs[0]["ttc_lidar"] == pytest.approx(scene.ttc_true)


def test_range_point_without_reflectivity_rejected() -> None:
    with pytest.raises(FrameDataError) as exc:
        frame_from_dict({"frame_index": 2, "range_points": [[10.0, 0.0, -1.2]]})
    assert exc.value.frame_index == 2


def test_range_point_with_reflectivity_loaded() -> None:
    frame = frame_from_dict({"range_points": [[10.0, 0.5, -1.2, 0.3]]})
    assert frame.range_points[0].r == 0.3
