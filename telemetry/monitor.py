"""Telemetry tracking for frame-pair latency and estimate availability."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class LatencyStats:
    p50_ms: float
    p95_ms: float
    max_ms: float


@dataclass
class TelemetrySnapshot:
    frame_pairs: int
    regions: int
    lidar_ttc_rate: float
    camera_ttc_rate: float
    latency: LatencyStats


@dataclass
class TelemetryMonitor:
    latency_samples_ms: List[float] = field(default_factory=list)
    regions: int = 0
    lidar_defined: int = 0
    camera_defined: int = 0

    def record_latency_ms(self, value: float) -> None:
        self.latency_samples_ms.append(value)

    def record_estimates(self, lidar_defined: bool, camera_defined: bool) -> None:
        self.regions += 1
        self.lidar_defined += int(lidar_defined)
        self.camera_defined += int(camera_defined)

    def summarize(self) -> LatencyStats:
        if not self.latency_samples_ms:
            return LatencyStats(p50_ms=0.0, p95_ms=0.0, max_ms=0.0)
        values = sorted(self.latency_samples_ms)
        max_ms = values[-1]
        p50_ms = values[int(0.5 * (len(values) - 1))]
        p95_ms = values[int(0.95 * (len(values) - 1))]
        return LatencyStats(p50_ms=p50_ms, p95_ms=p95_ms, max_ms=max_ms)

    def snapshot(self) -> TelemetrySnapshot:
        regions = max(self.regions, 1)
        return TelemetrySnapshot(
            frame_pairs=len(self.latency_samples_ms),
            regions=self.regions,
            lidar_ttc_rate=self.lidar_defined / regions,
            camera_ttc_rate=self.camera_defined / regions,
            latency=self.summarize(),
        )
