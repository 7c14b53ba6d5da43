"""Run live camera overlay.

Usage:
    uvicorn api.main:app --reload  # (separate, for the control API)
    python scripts/live_overlay.py [--camera 0] [--mobile] [--show-all] [--threshold 0.05]

Keys: q quit, a show all, l landmarks, c contours, m mesh, s stats, +/- threshold.
"""
import argparse
import logging

from emoji_overlay.config import Settings
from emoji_overlay.live import run_live_overlay


def unit_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not 0.0 <= f <= 1.0:
        raise argparse.ArgumentTypeError(f"must be within 0..1, got {f}")
    return f


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--camera", type=int, default=None, help="Camera index")
    p.add_argument("--mobile", action="store_true", help="Low-resource preset (short window, small detector input)")
    p.add_argument("--show-all", action="store_true", help="Start in bar-chart mode")
    p.add_argument("--threshold", type=unit_float, default=None, help="Confidence threshold (0..1)")
    return p


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    overrides = {"MOBILE": args.mobile, "SHOW_ALL_EXPRESSIONS": args.show_all}
    if args.threshold is not None:
        overrides["CONFIDENCE_THRESHOLD"] = args.threshold
    s = Settings(**overrides)
    if s.MOBILE:
        logging.getLogger(__name__).info(
            f"Mobile preset: window={s.window_ms}ms detect_width={s.detect_width} "
            f"min_face_confidence={s.min_face_confidence}"
        )
    run_live_overlay(s, camera_index=args.camera)


if __name__ == '__main__':
    main()
