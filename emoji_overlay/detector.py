"""
Face + expression detection with DeepFace.
"""
# emoji_overlay/detector.py
from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import logging
import time

import cv2
import numpy as np

from emoji_overlay.config import Settings
from emoji_overlay.models import ExpressionVector, FaceDetection, FaceRegion

logger = logging.getLogger(__name__)

# DeepFace reports emotion scores as percentages
DEEPFACE_SCORE_SCALE = 100.0


def _resize_for_detect(img: np.ndarray, target_w: int) -> Tuple[np.ndarray, float]:
    H, W = img.shape[:2]
    if W <= target_w:
        return img, 1.0
    scale = target_w / float(W)
    small = cv2.resize(img, (target_w, int(H * scale)), interpolation=cv2.INTER_AREA)
    return small, scale


def _to_full_region(reg: Dict, scale: float) -> FaceRegion:
    return FaceRegion(
        x=int(reg.get("x", 0) / scale),
        y=int(reg.get("y", 0) / scale),
        w=int(reg.get("w", 0) / scale),
        h=int(reg.get("h", 0) / scale),
    )


def _eye_points(reg: Dict, scale: float) -> Optional[List[Tuple[float, float]]]:
    pts = []
    for key in ("left_eye", "right_eye"):
        p = reg.get(key)
        if isinstance(p, (list, tuple)) and len(p) == 2:
            pts.append((float(p[0]) / scale, float(p[1]) / scale))
    return pts or None


class ExpressionDetector:
    """
    Wraps DeepFace.analyze(actions=["emotion"]) and keeps only the first valid face.

    DeepFace is imported lazily so tests can inject a fake module via sys.modules.
    """
    def __init__(self, settings: Settings):
        self.s = settings
        self.last_detection_ms = 0.0

    def _valid(self, r: Dict) -> bool:
        reg = (r or {}).get("region") or {}
        if int(reg.get("w", 0) or 0) <= 0 or int(reg.get("h", 0) or 0) <= 0:
            return False
        conf = r.get("face_confidence")
        try:
            conf = float(1.0 if conf is None else conf)
        except (TypeError, ValueError):
            conf = 1.0
        return conf >= self.s.min_face_confidence

    def load(self):
        """Import DeepFace; RuntimeError if the stack is missing."""
        try:
            from deepface import DeepFace
        except Exception as e:
            raise RuntimeError("DeepFace import failed. Ensure deepface/tensorflow stack is installed.") from e
        return DeepFace

    def detect(self, frame: np.ndarray) -> Optional[FaceDetection]:
        DeepFace = self.load()

        t0 = time.perf_counter()
        small, scale = _resize_for_detect(frame, self.s.detect_width)
        try:
            result = DeepFace.analyze(
                small,
                actions=["emotion"],
                enforce_detection=False,
                detector_backend=self.s.DETECTOR_BACKEND,
            )
        except Exception:
            logger.exception("[detector] DeepFace.analyze failed; treating frame as NO_FACE")
            result = []
        finally:
            self.last_detection_ms = (time.perf_counter() - t0) * 1000.0

        # DeepFace returns list[dict] or dict depending on version; normalize to list
        if isinstance(result, dict):
            result = [result]
        faces = [r for r in (result or []) if self._valid(r)]
        logger.debug(f"[detector] faces_detected={len(faces)} in {self.last_detection_ms:.1f}ms")
        if not faces:
            return None

        r0 = faces[0]
        reg = r0.get("region") or {}
        scores = r0.get("emotion") if isinstance(r0.get("emotion"), dict) else {}
        conf = r0.get("face_confidence")
        return FaceDetection(
            region=_to_full_region(reg, scale),
            expressions=ExpressionVector.from_mapping(scores, scale=DEEPFACE_SCORE_SCALE),
            face_confidence=float(conf) if isinstance(conf, (int, float)) else 1.0,
            landmarks=_eye_points(reg, scale),
        )
