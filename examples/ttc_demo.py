"""Synthetic TTC demo."""

from __future__ import annotations

import json

from app.pipeline import FramePairProcessor
from app.sim import SceneConfig, simulate_frame_pair
from configs.settings import default_config


def main() -> None:
    scene = simulate_frame_pair(SceneConfig(range_noise_m=0.02, pixel_noise=0.3))
    pair = scene.pair
    processor = FramePairProcessor(default_config(), scene.calibration)
    result = processor.process_pair(pair.previous, pair.current, pair.correspondences, frame_rate=pair.frame_rate)
    payload = {
        "ttc_true": scene.ttc_true,
        "result": result.to_dict(),
    }
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
