"""Per-frame-pair latency and TTC availability telemetry."""

from .monitor import LatencyStats, TelemetryMonitor, TelemetrySnapshot

__all__ = ["LatencyStats", "TelemetryMonitor", "TelemetrySnapshot"]
