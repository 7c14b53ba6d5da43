import pytest
import numpy as np

from emoji_overlay.config import Settings
from emoji_overlay.models import ExpressionVector, FaceDetection, FaceRegion


class FakeDetector:
    """Stands in for ExpressionDetector: replays a scripted list of results."""
    def __init__(self, results=None, default=None):
        self.results = list(results or [])
        self.default = default
        self.calls = 0
        self.last_detection_ms = 3.0

    def load(self):
        return None

    def detect(self, frame):
        self.calls += 1
        if self.results:
            return self.results.pop(0)
        return self.default


def face(**scores):
    return FaceDetection(
        region=FaceRegion(x=10, y=10, w=30, h=30),
        expressions=ExpressionVector(**scores),
    )


@pytest.fixture
def settings():
    return Settings(MOBILE=False, WINDOW_MS=500, SILENCE_TIMEOUT_MS=1000,
                    CONFIDENCE_THRESHOLD=0.05, CHANGE_THRESHOLD=0.15,
                    SHOW_ALL_EXPRESSIONS=False)


@pytest.fixture
def frame():
    return np.zeros((120, 160, 3), dtype=np.uint8)
