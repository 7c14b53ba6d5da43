
import importlib

from emoji_overlay.config import Settings
import emoji_overlay.config as config_mod

def test_Settings():
    s = Settings()
    assert s.WINDOW_MS > s.MOBILE_WINDOW_MS
    assert 0 <= s.CONFIDENCE_THRESHOLD <= 1
    # override via env-like behavior (construct new instance)
    s2 = Settings(CHANGE_THRESHOLD=0.3)
    assert s2.CHANGE_THRESHOLD == 0.3

def test_mobile_preset():
    desktop = Settings(MOBILE=False, SHOW_MESH=True)
    assert desktop.window_ms == desktop.WINDOW_MS
    assert desktop.detect_width == desktop.DETECT_WIDTH
    assert desktop.SHOW_MESH is True

    mobile = Settings(MOBILE=True, SHOW_MESH=True, SHOW_CONTOURS=True)
    assert mobile.window_ms == mobile.MOBILE_WINDOW_MS
    assert mobile.detect_width == mobile.MOBILE_DETECT_WIDTH
    assert mobile.min_face_confidence == mobile.MOBILE_MIN_FACE_CONFIDENCE
    assert mobile.SHOW_MESH is False and mobile.SHOW_CONTOURS is False

def test_settings_normalization():
    s = Settings(LANDMARK_DENSITY=250, ANALYZE_EVERY_N_FRAMES=0, DETECTOR_BACKEND=" OpenCV ")
    assert s.LANDMARK_DENSITY == 100
    assert s.ANALYZE_EVERY_N_FRAMES == 1
    assert s.DETECTOR_BACKEND == "opencv"

def test_settings_env_override(monkeypatch):
    monkeypatch.setenv("WINDOW_MS", "750")
    monkeypatch.setenv("SHOW_ALL_EXPRESSIONS", "true")
    try:
        mod = importlib.reload(config_mod)
        s = mod.Settings()
        assert s.WINDOW_MS == 750.0
        assert s.SHOW_ALL_EXPRESSIONS is True
    finally:
        monkeypatch.delenv("WINDOW_MS")
        monkeypatch.delenv("SHOW_ALL_EXPRESSIONS")
        importlib.reload(config_mod)
