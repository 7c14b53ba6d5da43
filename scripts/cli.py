"""
CLI to replay a video through the expression overlay -> JSON display timeline.
"""
from __future__ import annotations
import argparse, json, logging, os
from emoji_overlay.config import Settings
from emoji_overlay.pipeline import analyze_video

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--video", required=True, help="Path to input video")
    p.add_argument("--out", default=None, help="Optional path to also write the JSON timeline")
    p.add_argument("--mobile", action="store_true", help="Use the short smoothing window preset")
    p.add_argument("--show-all", action="store_true", help="Rank every expression (bar-chart mode)")
    p.add_argument("--every-n", type=int, default=None, help="Analyze every N-th frame")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    return p

def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    overrides = {"MOBILE": args.mobile, "SHOW_ALL_EXPRESSIONS": args.show_all}
    if args.every_n is not None:
        overrides["ANALYZE_EVERY_N_FRAMES"] = args.every_n
    settings = Settings(**overrides)

    timeline = analyze_video(args.video, settings)
    print(json.dumps(timeline, indent=2, ensure_ascii=False))

    if args.out:
        os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
        with open(args.out, "w", encoding="utf-8") as f:
            json.dump(timeline, f, indent=2, ensure_ascii=False)
        print(f"✅ Timeline written to {args.out}")
    return timeline

if __name__ == "__main__":
    main()
