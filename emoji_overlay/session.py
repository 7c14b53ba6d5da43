"""
Per-camera expression session: buffer + smoothing + stabilizer + settings.

The detection loop owns one session and calls `process_cycle` once per frame.
Setters share the cycle lock, so UI/API toggles always land between cycles.
"""
from __future__ import annotations
from typing import Mapping, Optional, Union
import logging
import threading

from emoji_overlay.buffer import ExpressionBuffer
from emoji_overlay.config import Settings
from emoji_overlay.models import (
    DisplayUpdate,
    ExpressionVector,
    FaceDetection,
    FrameStats,
)
from emoji_overlay.smoothing import average
from emoji_overlay.stabilizer import DisplayStabilizer

logger = logging.getLogger(__name__)

Observation = Union[FaceDetection, ExpressionVector, Mapping, None]


class FpsCounter:
    """Frames counted per wall-clock second, plus the last detection latency."""
    def __init__(self):
        self.frames = 0
        self._window_frames = 0
        self._window_start: Optional[float] = None
        self.stats = FrameStats()

    def tick(self, now: float, detection_ms: float = 0.0) -> FrameStats:
        self.frames += 1
        self._window_frames += 1
        if self._window_start is None:
            self._window_start = now
        fps = self.stats.fps
        if now - self._window_start >= 1000.0:
            fps = self._window_frames
            self._window_frames = 0
            self._window_start = now
        self.stats = FrameStats(fps=fps, detection_ms=round(float(detection_ms), 1))
        return self.stats


def _as_vector(observation: Observation) -> Optional[ExpressionVector]:
    if observation is None:
        return None
    if isinstance(observation, FaceDetection):
        return observation.expressions
    if isinstance(observation, ExpressionVector):
        return observation
    return ExpressionVector.from_mapping(observation)


class ExpressionSession:
    def __init__(self, settings: Optional[Settings] = None):
        self.s = settings or Settings()
        self.buffer = ExpressionBuffer(self.s.window_ms)
        self.stabilizer = DisplayStabilizer(
            confidence_threshold=self.s.CONFIDENCE_THRESHOLD,
            change_threshold=self.s.CHANGE_THRESHOLD,
            show_all=self.s.SHOW_ALL_EXPRESSIONS,
        )
        self.fps = FpsCounter()
        self._lock = threading.Lock()

    # ---- cycle ----
    def process_cycle(self, observation: Observation, now: float,
                      detection_ms: float = 0.0) -> DisplayUpdate:
        """
        Run one detection cycle.

        Args:
            observation: the detected face (or its vector / raw score mapping), None if no face.
            now: timestamp in milliseconds, non-decreasing across calls.
            detection_ms: detector latency, for the stats overlay.
        """
        with self._lock:
            self.fps.tick(now, detection_ms)
            vector = _as_vector(observation)
            if vector is not None:
                self.buffer.ingest(vector, now)
                averaged = average(self.buffer)
                return self.stabilizer.update(averaged, now)

            if self.buffer.is_empty():
                return DisplayUpdate(kind="NO_FACE", ts=now)
            # Face lost: keep the last view until the history goes stale
            self.buffer.clear_if_stale(now, self.s.SILENCE_TIMEOUT_MS)
            return DisplayUpdate(kind="HOLD", ts=now)

    @property
    def stats(self) -> FrameStats:
        return self.fps.stats

    def reset(self) -> None:
        with self._lock:
            self.buffer.clear()
            self.stabilizer.reset()

    # ---- setters (UI / API toggles) ----
    def set_show_all(self, enabled: bool) -> None:
        with self._lock:
            self.s.SHOW_ALL_EXPRESSIONS = bool(enabled)
            self.stabilizer.show_all = bool(enabled)
        logger.debug(f"[session] show all expressions: {bool(enabled)}")

    def set_confidence_threshold(self, value: float) -> None:
        with self._lock:
            self.stabilizer.set_confidence_threshold(value)
            self.s.CONFIDENCE_THRESHOLD = self.stabilizer.confidence_threshold
        logger.debug(f"[session] confidence threshold: {value}")

    def set_change_threshold(self, value: float) -> None:
        with self._lock:
            self.stabilizer.set_change_threshold(value)
            self.s.CHANGE_THRESHOLD = self.stabilizer.change_threshold
        logger.debug(f"[session] change threshold: {value}")

    def set_window_ms(self, value: float) -> None:
        with self._lock:
            self.buffer.window_ms = value
            if self.s.MOBILE:
                self.s.MOBILE_WINDOW_MS = self.buffer.window_ms
            else:
                self.s.WINDOW_MS = self.buffer.window_ms
        logger.debug(f"[session] smoothing window: {value}ms")

    def set_silence_timeout_ms(self, value: float) -> None:
        value = float(value)
        if value <= 0:
            raise ValueError(f"silence_timeout_ms must be > 0, got {value}")
        with self._lock:
            self.s.SILENCE_TIMEOUT_MS = value
        logger.debug(f"[session] silence timeout: {value}ms")

    def set_mobile(self, enabled: bool) -> None:
        with self._lock:
            self.s.MOBILE = bool(enabled)
            self.buffer.window_ms = self.s.window_ms
            if self.s.MOBILE:
                # same preset as Settings: expensive overlays off
                self.s.SHOW_CONTOURS = False
                self.s.SHOW_MESH = False
        logger.debug(f"[session] mobile preset: {bool(enabled)} window={self.s.window_ms}ms")

    def apply(self, **changes) -> Settings:
        """Apply several settings at once; keys are lower-case option names. Unset (None) values are skipped."""
        setters = {
            "show_all_expressions": self.set_show_all,
            "confidence_threshold": self.set_confidence_threshold,
            "change_threshold": self.set_change_threshold,
            "window_ms": self.set_window_ms,
            "silence_timeout_ms": self.set_silence_timeout_ms,
            "mobile": self.set_mobile,
        }
        unknown = set(changes) - set(setters)
        if unknown:
            raise ValueError(f"Unknown settings: {sorted(unknown)}")
        # mobile first so an explicit window lands on the active preset
        for key in sorted(changes, key=lambda k: k != "mobile"):
            if changes[key] is not None:
                setters[key](changes[key])
        return self.s
