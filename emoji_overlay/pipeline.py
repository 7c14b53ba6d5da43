# emoji_overlay/pipeline.py
from __future__ import annotations
from typing import Dict, List, Optional
import logging
import os

import cv2

from emoji_overlay.config import Settings
from emoji_overlay.detector import ExpressionDetector
from emoji_overlay.session import ExpressionSession

logger = logging.getLogger(__name__)

# Kinds that change what is on screen
REPORTED_KINDS = ("NO_FACE", "NO_STRONG_EXPRESSION", "FULL", "ALL")


def analyze_video(video_path: str, settings: Settings,
                  detector: Optional[ExpressionDetector] = None) -> List[Dict]:
    """
    Replay a recorded video through the live cycle and return the display timeline.

    Frame timestamps come from the video's FPS, so smoothing and silence
    timeouts behave as they would have live. Only cycles that change the shown
    set are reported:
      {"time": seconds, "kind": ..., "expressions": [{"category", "confidence", "icon"}, ...]}
    """
    if not os.path.exists(video_path):
        raise FileNotFoundError(f"Video not found: {video_path}")

    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open video: {video_path}")

    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0
    every_n = settings.ANALYZE_EVERY_N_FRAMES
    detector = detector or ExpressionDetector(settings)
    session = ExpressionSession(settings)
    timeline: List[Dict] = []
    logger.debug(f"[pipeline] replay {video_path} fps={fps} every_n={every_n}")

    frame_index = 0
    try:
        while True:
            ok, frame = cap.read()
            if not ok:
                break
            if frame_index % every_n == 0:
                now = frame_index / fps * 1000.0
                update = session.process_cycle(detector.detect(frame), now, detector.last_detection_ms)
                if update.kind in REPORTED_KINDS:
                    timeline.append({
                        "time": round(now / 1000.0, 2),
                        "kind": update.kind,
                        "expressions": [r.model_dump(mode="json") for r in update.expressions],
                    })
            frame_index += 1
    finally:
        cap.release()

    logger.debug(f"[pipeline] finished; frames={frame_index} entries={len(timeline)}")
    return timeline
