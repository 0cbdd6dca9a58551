"""Persist frame pairs and TTC results as JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from contracts import Correspondence, Frame, Keypoint, RangePoint, Rect, Region
from exceptions import FrameDataError
from log_config.logger import get_logger

logger = get_logger(__name__)


@dataclass
class FramePair:
    previous: Frame
    current: Frame
    correspondences: List[Correspondence]
    frame_rate: Optional[float] = None


def _range_point(values: Any, frame_index: int) -> RangePoint:
    # x, y, z and reflectivity; the range crop filters on reflectivity
    if len(values) != 4:
        raise FrameDataError(
            f"Range point in frame {frame_index} needs [x, y, z, r], got {len(values)} values",
            frame_index=frame_index,
        )
    return RangePoint(*[float(v) for v in values])


def frame_from_dict(data: Dict[str, Any]) -> Frame:
    frame_index = int(data.get("frame_index", 0))
    try:
        keypoints = [
            Keypoint(x=float(kp[0]), y=float(kp[1]), index=i)
            for i, kp in enumerate(data.get("keypoints", []))
        ]
        regions = [
            Region(
                region_id=int(item["region_id"]),
                roi=Rect(*[float(v) for v in item["roi"]]),
                class_id=int(item.get("class_id", -1)),
                confidence=float(item.get("confidence", 0.0)),
            )
            for item in data.get("regions", [])
        ]
        range_points = [_range_point(point, frame_index) for point in data.get("range_points", [])]
    except (KeyError, TypeError, ValueError, IndexError) as e:
        raise FrameDataError(f"Malformed frame {frame_index}: {e}", frame_index=frame_index)

    ids = [region.region_id for region in regions]
    if len(set(ids)) != len(ids):
        raise FrameDataError(f"Duplicate region ids in frame {frame_index}: {ids}", frame_index=frame_index)
    return Frame(frame_index=frame_index, keypoints=keypoints, regions=regions, range_points=range_points)


def frame_to_dict(frame: Frame) -> Dict[str, Any]:
    return {
        "frame_index": frame.frame_index,
        "keypoints": [[kp.x, kp.y] for kp in frame.keypoints],
        "regions": [
            {
                "region_id": region.region_id,
                "roi": list(region.roi.to_tuple()),
                "class_id": region.class_id,
                "confidence": region.confidence,
            }
            for region in frame.regions
        ],
        "range_points": [[p.x, p.y, p.z, p.r] for p in frame.range_points],
    }


def load_frame_pair(path: Path) -> FramePair:
    """Load a frame pair document.

    Raises:
        FrameDataError: If the file is missing, not JSON, or malformed
    """
    path = Path(path)
    if not path.exists():
        raise FrameDataError(f"Frame pair file not found: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise FrameDataError(f"Failed to parse frame pair file {path}: {e}")
    if not isinstance(data, dict) or "previous" not in data or "current" not in data:
        raise FrameDataError(f"Frame pair file {path} needs 'previous' and 'current' frames")

    try:
        correspondences = [
            Correspondence(prev_idx=int(m[0]), curr_idx=int(m[1]), distance=float(m[2]))
            for m in data.get("correspondences", [])
        ]
    except (TypeError, ValueError, IndexError) as e:
        raise FrameDataError(f"Malformed correspondences in {path}: {e}")

    frame_rate = data.get("frame_rate")
    pair = FramePair(
        previous=frame_from_dict(data["previous"]),
        current=frame_from_dict(data["current"]),
        correspondences=correspondences,
        frame_rate=float(frame_rate) if frame_rate is not None else None,
    )
    logger.info(
        f"Loaded frame pair {pair.previous.frame_index}->{pair.current.frame_index} "
        f"with {len(correspondences)} correspondences from {path}"
    )
    return pair


def save_frame_pair(path: Path, pair: FramePair) -> None:
    payload = {
        "frame_rate": pair.frame_rate,
        "previous": frame_to_dict(pair.previous),
        "current": frame_to_dict(pair.current),
        "correspondences": [[m.prev_idx, m.curr_idx, m.distance] for m in pair.correspondences],
    }
    Path(path).write_text(json.dumps(payload, indent=2))


def save_results(path: Path, results: Iterable[Any]) -> None:
    """Write results (objects with ``to_dict``); undefined TTCs are written as null."""
    payload = [result.to_dict() for result in results]
    Path(path).write_text(json.dumps(payload, indent=2))
