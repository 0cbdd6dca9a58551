"""Command-line interface for frame-pair TTC estimation."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from app.frame_io import load_frame_pair, save_frame_pair, save_results
from app.pipeline import FramePairProcessor, FramePairResult
from app.sim import SceneConfig, simulate_frame_pair
from calib.calibration import load_calibration
from configs.settings import DEFAULT_CONFIG_PATH, load_config
from contracts import is_undefined
from exceptions import TTCFusionError
from log_config.logger import configure_file_logging


def _format_ttc(value: float) -> str:
    return "n/a" if is_undefined(value) else f"{value:.2f}s"


def _print_result(result: FramePairResult) -> None:
    print(f"Frame {result.frame_index}: {len(result.ttcs)} associated regions ({result.latency_ms:.1f} ms)")
    for item in result.ttcs:
        flag = "" if item.authoritative else "  [no votes]"
        print(
            f"  region {item.curr_region_id} <- {item.prev_region_id} "
            f"votes={item.votes} lidar={_format_ttc(item.ttc_lidar)} "
            f"camera={_format_ttc(item.ttc_camera)} "
            f"points={item.n_prev_points}/{item.n_curr_points} matches={item.n_matches}{flag}"
        )


def process_command(args) -> int:
    """Handle process command.

    Args:
        args: Parsed command-line arguments
    """
    try:
        config = load_config(Path(args.config))
        calibration = load_calibration(Path(args.calib))
        pair = load_frame_pair(Path(args.pair))
    except TTCFusionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    processor = FramePairProcessor(config, calibration)
    frame_rate = args.frame_rate if args.frame_rate is not None else pair.frame_rate
    try:
        result = processor.process_pair(pair.previous, pair.current, pair.correspondences, frame_rate=frame_rate)
    except TTCFusionError as e:
        print(f"Error during processing: {e}", file=sys.stderr)
        return 1

    _print_result(result)
    if args.output:
        save_results(Path(args.output), [result])
        print(f"\n  Results: {args.output}")
    return 0


def demo_command(args) -> int:
    """Handle demo command: run the pipeline on a synthetic approaching vehicle."""
    scene = simulate_frame_pair(
        SceneConfig(
            seed=args.seed,
            closing_speed_mps=args.speed,
            range_noise_m=args.range_noise,
            pixel_noise=args.pixel_noise,
        )
    )
    try:
        config = load_config(Path(args.config))
    except TTCFusionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    processor = FramePairProcessor(config, scene.calibration)
    pair = scene.pair
    if args.save_pair:
        save_frame_pair(Path(args.save_pair), pair)
        print(f"Synthetic frame pair written to {args.save_pair}")

    result = processor.process_pair(pair.previous, pair.current, pair.correspondences, frame_rate=pair.frame_rate)
    print(f"Ground truth TTC: {_format_ttc(scene.ttc_true)}")
    _print_result(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ttc-fusion",
        description="Lidar/camera time-to-collision estimation for frame pairs",
    )
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Configuration YAML")
    parser.add_argument("--log-dir", default=None, help="Also write rotating log files here")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    process_parser = subparsers.add_parser("process", help="Estimate TTC for a recorded frame pair")
    process_parser.add_argument("--pair", required=True, help="Frame pair JSON file")
    process_parser.add_argument("--calib", required=True, help="KITTI calib.txt or calibration YAML")
    process_parser.add_argument("--frame-rate", type=float, default=None, help="Override frame rate (Hz)")
    process_parser.add_argument("--output", default=None, help="Write results JSON here")
    process_parser.set_defaults(func=process_command)

    demo_parser = subparsers.add_parser("demo", help="Run on a synthetic approaching vehicle")
    demo_parser.add_argument("--seed", type=int, default=7)
    demo_parser.add_argument("--speed", type=float, default=5.0, help="Closing speed (m/s)")
    demo_parser.add_argument("--range-noise", type=float, default=0.02, help="Lidar range noise (m)")
    demo_parser.add_argument("--pixel-noise", type=float, default=0.3, help="Keypoint noise (px)")
    demo_parser.add_argument("--save-pair", default=None, help="Write the synthetic frame pair JSON here")
    demo_parser.set_defaults(func=demo_command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1
    if args.log_dir:
        configure_file_logging(args.log_dir)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
