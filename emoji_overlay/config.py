"""
Configuration for the expression overlay.
"""
from pydantic import BaseModel
import os


def _env_flag(name: str, default: str = "0") -> bool:
    return (os.getenv(name, default) or default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.

    Times are milliseconds. WINDOW_MS / MOBILE_WINDOW_MS are the two smoothing
    presets; `window_ms` resolves the active one from MOBILE.
    """
    MOBILE: bool = _env_flag("MOBILE")

    WINDOW_MS: float = float(os.getenv("WINDOW_MS", "500"))
    MOBILE_WINDOW_MS: float = float(os.getenv("MOBILE_WINDOW_MS", "300"))
    SILENCE_TIMEOUT_MS: float = float(os.getenv("SILENCE_TIMEOUT_MS", "1000"))
    CONFIDENCE_THRESHOLD: float = float(os.getenv("CONFIDENCE_THRESHOLD", "0.05"))
    CHANGE_THRESHOLD: float = float(os.getenv("CHANGE_THRESHOLD", "0.15"))
    SHOW_ALL_EXPRESSIONS: bool = _env_flag("SHOW_ALL_EXPRESSIONS")

    # Detector (DeepFace)
    DETECTOR_BACKEND: str = os.getenv("DETECTOR_BACKEND", "opencv")
    DETECT_WIDTH: int = int(os.getenv("DETECT_WIDTH", "640"))
    MOBILE_DETECT_WIDTH: int = int(os.getenv("MOBILE_DETECT_WIDTH", "320"))
    MIN_FACE_CONFIDENCE: float = float(os.getenv("MIN_FACE_CONFIDENCE", "0.5"))
    MOBILE_MIN_FACE_CONFIDENCE: float = float(os.getenv("MOBILE_MIN_FACE_CONFIDENCE", "0.7"))

    # Camera / overlay
    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    SHOW_LANDMARKS: bool = _env_flag("SHOW_LANDMARKS", "1")
    SHOW_CONTOURS: bool = _env_flag("SHOW_CONTOURS")
    SHOW_MESH: bool = _env_flag("SHOW_MESH")
    LANDMARK_DENSITY: int = int(os.getenv("LANDMARK_DENSITY", "100"))
    SHOW_STATS: bool = _env_flag("SHOW_STATS")

    # Offline replay
    ANALYZE_EVERY_N_FRAMES: int = int(os.getenv("ANALYZE_EVERY_N_FRAMES", "1"))

    def __init__(self, **data):
        super().__init__(**data)
        # Normalize: clamp percentages and thresholds into their ranges
        density = max(1, min(100, int(self.LANDMARK_DENSITY)))
        object.__setattr__(self, "LANDMARK_DENSITY", density)
        object.__setattr__(self, "ANALYZE_EVERY_N_FRAMES", max(1, int(self.ANALYZE_EVERY_N_FRAMES)))
        object.__setattr__(self, "DETECTOR_BACKEND", (self.DETECTOR_BACKEND or "opencv").strip().lower())
        if self.MOBILE:
            # Expensive overlays are off on constrained devices
            object.__setattr__(self, "SHOW_CONTOURS", False)
            object.__setattr__(self, "SHOW_MESH", False)

    @property
    def window_ms(self) -> float:
        return self.MOBILE_WINDOW_MS if self.MOBILE else self.WINDOW_MS

    @property
    def detect_width(self) -> int:
        return self.MOBILE_DETECT_WIDTH if self.MOBILE else self.DETECT_WIDTH

    @property
    def min_face_confidence(self) -> float:
        return self.MOBILE_MIN_FACE_CONFIDENCE if self.MOBILE else self.MIN_FACE_CONFIDENCE
