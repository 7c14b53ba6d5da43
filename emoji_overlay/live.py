# emoji_overlay/live.py
"""
Live (real-time) expression overlay.

One detection cycle per camera frame: DeepFace -> ExpressionSession -> overlay.
The detector call is synchronous, so a new cycle never starts while one is
still running.

- run_live_overlay: OpenCV window with keyboard toggles
- LiveAnalyzer: same loop on a background thread, driven by the HTTP API
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Optional

import cv2

# Prevent OpenMP oversubscription on CPU
os.environ.setdefault("OMP_NUM_THREADS", "1")
os.environ.setdefault("MKL_NUM_THREADS", "1")

from emoji_overlay.config import Settings
from emoji_overlay.detector import ExpressionDetector
from emoji_overlay.models import DisplayUpdate, LiveStatus
from emoji_overlay.session import ExpressionSession
from emoji_overlay.visual import draw_landmarks, draw_overlays, draw_stats

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Expression Overlay (q to quit)"
THRESHOLD_STEP = 0.01


def now_ms() -> float:
    return time.monotonic() * 1000.0


def handle_key(key: int, session: ExpressionSession) -> bool:
    """
    Apply a keyboard toggle between cycles. Returns False when the loop should stop.

    a: show all   l: landmarks   c: contours   m: mesh   s: stats   +/-: threshold
    """
    s = session.s
    if key == ord("q"):
        return False
    if key == ord("a"):
        session.set_show_all(not s.SHOW_ALL_EXPRESSIONS)
    elif key == ord("l"):
        s.SHOW_LANDMARKS = not s.SHOW_LANDMARKS
    elif key == ord("c"):
        s.SHOW_CONTOURS = not s.SHOW_CONTOURS
    elif key == ord("m"):
        s.SHOW_MESH = not s.SHOW_MESH
    elif key == ord("s"):
        s.SHOW_STATS = not s.SHOW_STATS
    elif key in (ord("+"), ord("=")):
        session.set_confidence_threshold(min(1.0, round(s.CONFIDENCE_THRESHOLD + THRESHOLD_STEP, 2)))
    elif key == ord("-"):
        session.set_confidence_threshold(max(0.0, round(s.CONFIDENCE_THRESHOLD - THRESHOLD_STEP, 2)))
    return True


def run_live_overlay(settings: Settings,
                     camera_index: Optional[int] = None,
                     detector: Optional[ExpressionDetector] = None) -> None:
    """
    Open webcam, detect the face/expressions each frame and draw the stabilized overlay.

    Press 'q' to quit; see `handle_key` for the other toggles.
    """
    cam_idx = settings.CAMERA_INDEX if camera_index is None else camera_index
    cap = cv2.VideoCapture(cam_idx)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open camera index {cam_idx}")

    detector = detector or ExpressionDetector(settings)
    try:
        detector.load()
    except RuntimeError:
        cap.release()
        raise

    session = ExpressionSession(settings)
    view: Optional[DisplayUpdate] = None
    logger.debug(f"[live] overlay started camera={cam_idx} window={settings.window_ms}ms mobile={settings.MOBILE}")

    while True:
        ok, frame = cap.read()
        if not ok:
            break

        detection = detector.detect(frame)
        update = session.process_cycle(detection, now_ms(), detector.last_detection_ms)
        if update.kind != "HOLD":
            view = update

        annotated = draw_overlays(frame, detection.region if detection else None, view)
        if detection is not None and (settings.SHOW_LANDMARKS or settings.SHOW_CONTOURS or settings.SHOW_MESH):
            draw_landmarks(annotated, detection.landmarks,
                           show_points=settings.SHOW_LANDMARKS,
                           show_contours=settings.SHOW_CONTOURS,
                           show_mesh=settings.SHOW_MESH,
                           density=settings.LANDMARK_DENSITY)
        if settings.SHOW_STATS:
            draw_stats(annotated, session.stats)
        cv2.imshow(WINDOW_TITLE, annotated)

        if not handle_key(cv2.waitKey(1) & 0xFF, session):
            break

    cap.release()
    cv2.destroyAllWindows()


class LiveAnalyzer:
    """Runs the detection loop on a background thread (no window)."""
    def __init__(self, settings: Settings, detector: Optional[ExpressionDetector] = None):
        self.s = settings
        self.session = ExpressionSession(settings)
        self._detector = detector
        self._run = False
        self._stop_event = threading.Event()
        self._lifecycle = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._started_at: Optional[float] = None
        self._last_update: Optional[DisplayUpdate] = None

    # ---- lifecycle ----
    def start(self) -> bool:
        with self._lifecycle:
            if self._run:
                return False
            # a stopped run may still be inside detect(); let it finish first
            if self._thread is not None and self._thread.is_alive():
                logger.debug("[live] waiting for the previous analyzer run to exit")
                self._thread.join()
            self._stop_event = threading.Event()
            self._run = True
            self._started_at = time.time()
            self.session.reset()
            self._thread = threading.Thread(target=self._video_loop, args=(self._stop_event,), daemon=True)
            self._thread.start()
            return True

    def stop(self) -> bool:
        with self._lifecycle:
            if not self._run:
                return False
            self._stop_event.set()
            self._run = False
            return True

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._run

    def status(self) -> LiveStatus:
        return LiveStatus(
            running=self._run,
            started_at=self._started_at if self._run else None,
            frames=self.session.fps.frames,
            fps=self.session.stats.fps,
        )

    def latest(self) -> Optional[DisplayUpdate]:
        return self._last_update

    # ---- loop ----
    def _finish(self, stop: threading.Event) -> None:
        stop.set()
        if stop is self._stop_event:
            self._run = False

    def _video_loop(self, stop: threading.Event):
        cap = cv2.VideoCapture(self.s.CAMERA_INDEX)
        if not cap.isOpened():
            logger.error(f"[live] could not open camera index {self.s.CAMERA_INDEX}; analyzer stopped")
            self._finish(stop)
            return

        detector = self._detector or ExpressionDetector(self.s)
        try:
            while not stop.is_set():
                ok, frame = cap.read()
                if not ok:
                    time.sleep(0.1)
                    continue
                detection = detector.detect(frame)
                update = self.session.process_cycle(detection, now_ms(), detector.last_detection_ms)
                if update.kind != "HOLD":
                    self._last_update = update
        except Exception:
            logger.exception("[live] analyzer loop failed")
        finally:
            self._finish(stop)
            cap.release()
