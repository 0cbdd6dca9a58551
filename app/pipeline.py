"""Frame-pair pipeline: clustering, association, correspondence filtering, and TTC."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from calib.calibration import SensorCalibration
from configs.settings import AppConfig
from contracts import Correspondence, Frame, is_undefined
from fusion.association import AssociationResult, match_bounding_boxes
from fusion.clustering import ClusteringStats, cluster_lidar_with_roi
from fusion.keypoints import cluster_kpt_matches_with_roi
from fusion.roi import crop_range_points
from log_config.logger import get_logger, log_performance
from telemetry.monitor import TelemetryMonitor
from ttc.camera import compute_ttc_camera
from ttc.lidar import compute_ttc_lidar

logger = get_logger(__name__)


def _nan_to_none(value: float) -> Optional[float]:
    return None if math.isnan(value) else value


@dataclass(frozen=True)
class RegionTTC:
    curr_region_id: int
    prev_region_id: int
    votes: int
    authoritative: bool
    ttc_lidar: float
    ttc_camera: float
    n_prev_points: int
    n_curr_points: int
    n_matches: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "curr_region_id": self.curr_region_id,
            "prev_region_id": self.prev_region_id,
            "votes": self.votes,
            "authoritative": self.authoritative,
            "ttc_lidar": _nan_to_none(self.ttc_lidar),
            "ttc_camera": _nan_to_none(self.ttc_camera),
            "n_prev_points": self.n_prev_points,
            "n_curr_points": self.n_curr_points,
            "n_matches": self.n_matches,
        }


@dataclass(frozen=True)
class FramePairResult:
    frame_index: int
    association: AssociationResult
    ttcs: List[RegionTTC] = field(default_factory=list)
    latency_ms: float = 0.0

    def ttc_for(self, curr_region_id: int) -> Optional[RegionTTC]:
        for item in self.ttcs:
            if item.curr_region_id == curr_region_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_index": self.frame_index,
            "association": self.association.to_dict(),
            "ttcs": [item.to_dict() for item in self.ttcs],
            "latency_ms": self.latency_ms,
        }


class FramePairProcessor:
    """Runs the TTC core over consecutive frames.

    Frames are prepared once (range crop and clustering into their regions),
    then every (previous, current) pair is associated and each associated
    region pair gets a lidar and a camera TTC. Undefined estimates are NaN
    and never stop the remaining regions from being processed.
    """

    def __init__(
        self,
        config: AppConfig,
        calibration: SensorCalibration,
        telemetry: Optional[TelemetryMonitor] = None,
    ) -> None:
        self._config = config
        self._calibration = calibration
        self._reducer = config.lidar_ttc.build_reducer()
        self.telemetry = telemetry or TelemetryMonitor()

    def prepare_frame(self, frame: Frame) -> ClusteringStats:
        """Crop the frame's lidar scan and assign its points to the frame's regions.

        Points already held by the regions are replaced, so preparing a frame
        twice leaves each point in its region exactly once.
        """
        for region in frame.regions:
            region.range_points.clear()
        clustering = self._config.clustering
        points = frame.range_points
        if clustering.crop_enabled:
            points = crop_range_points(points, clustering.crop)
            logger.debug(
                f"Frame {frame.frame_index}: kept {len(points)}/{len(frame.range_points)} lidar points after crop"
            )
        return cluster_lidar_with_roi(frame.regions, points, clustering.shrink_factor, self._calibration)

    def process_pair(
        self,
        prev_frame: Frame,
        curr_frame: Frame,
        correspondences: Sequence[Correspondence],
        frame_rate: Optional[float] = None,
        prepare: bool = True,
    ) -> FramePairResult:
        """Associate the regions of two frames and estimate TTC per associated pair.

        Args:
            prev_frame: Earlier frame
            curr_frame: Later frame
            correspondences: Keypoint matches from prev_frame to curr_frame
            frame_rate: Frame rate in Hz, defaults to the configured rate
            prepare: Cluster lidar points of both frames first; disable when
                both frames were already prepared

        Returns:
            FramePairResult with the association and one RegionTTC per mapped region
        """
        start = time.perf_counter()
        frame_rate = self._config.pipeline.frame_rate if frame_rate is None else frame_rate

        if prepare:
            self.prepare_frame(prev_frame)
            self.prepare_frame(curr_frame)

        association = match_bounding_boxes(
            correspondences, prev_frame, curr_frame, strategy=self._config.association.strategy
        )

        ttcs: List[RegionTTC] = []
        for curr_id, prev_id in association.mapping.items():
            curr_region = curr_frame.region_by_id(curr_id)
            prev_region = prev_frame.region_by_id(prev_id)
            # Correspondences are owned by the pair being processed
            curr_region.correspondences.clear()

            cluster_kpt_matches_with_roi(
                curr_region,
                prev_frame.keypoints,
                curr_frame.keypoints,
                correspondences,
                distance_ratio=self._config.keypoints.distance_ratio,
            )
            ttc_lidar = compute_ttc_lidar(
                prev_region.range_points,
                curr_region.range_points,
                frame_rate,
                lane_width=self._config.lidar_ttc.lane_width,
                reducer=self._reducer,
            )
            ttc_camera = compute_ttc_camera(
                prev_frame.keypoints,
                curr_frame.keypoints,
                curr_region.correspondences,
                frame_rate,
                min_dist=self._config.camera_ttc.min_dist,
            )
            authoritative = association.is_authoritative(curr_id)
            if not authoritative:
                logger.warning(
                    f"Frame {curr_frame.frame_index}: region {curr_id} mapped to {prev_id} without votes"
                )

            ttcs.append(
                RegionTTC(
                    curr_region_id=curr_id,
                    prev_region_id=prev_id,
                    votes=association.best_votes.get(curr_id, 0),
                    authoritative=authoritative,
                    ttc_lidar=ttc_lidar,
                    ttc_camera=ttc_camera,
                    n_prev_points=len(prev_region.range_points),
                    n_curr_points=len(curr_region.range_points),
                    n_matches=len(curr_region.correspondences),
                )
            )
            self.telemetry.record_estimates(not is_undefined(ttc_lidar), not is_undefined(ttc_camera))

        latency_ms = (time.perf_counter() - start) * 1000.0
        self.telemetry.record_latency_ms(latency_ms)
        log_performance(
            f"frame pair {prev_frame.frame_index}->{curr_frame.frame_index}",
            latency_ms,
            threshold_ms=self._config.pipeline.latency_warn_ms,
        )
        return FramePairResult(
            frame_index=curr_frame.frame_index,
            association=association,
            ttcs=ttcs,
            latency_ms=latency_ms,
        )

    def process_sequence(
        self,
        frames: Iterable[Frame],
        correspondences: Iterable[Sequence[Correspondence]],
        frame_rate: Optional[float] = None,
    ) -> Iterator[FramePairResult]:
        """Process consecutive frames, preparing each frame exactly once.

        ``correspondences`` yields one match list per consecutive pair, i.e.
        one fewer than the number of frames.
        """
        pairs: Iterator[Sequence[Correspondence]] = iter(correspondences)
        prev: Optional[Frame] = None
        for frame in frames:
            self.prepare_frame(frame)
            if prev is not None:
                matches = next(pairs, None)
                if matches is None:
                    logger.warning(f"No correspondences for frame pair ending at {frame.frame_index}")
                    return
                yield self.process_pair(prev, frame, matches, frame_rate=frame_rate, prepare=False)
            prev = frame


def summarize_results(results: Iterable[FramePairResult]) -> List[Tuple[int, int, float, float]]:
    """Flatten results into ``(frame_index, region_id, ttc_lidar, ttc_camera)`` rows."""
    rows: List[Tuple[int, int, float, float]] = []
    for result in results:
        for item in result.ttcs:
            rows.append((result.frame_index, item.curr_region_id, item.ttc_lidar, item.ttc_camera))
    return rows
