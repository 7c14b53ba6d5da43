
import numpy as np
import pytest

from emoji_overlay.config import Settings
from emoji_overlay.session import ExpressionSession
import emoji_overlay.live as live
from conftest import FakeDetector, face

class DummyCap:
    def __init__(self, frames=10, opened=True):
        self.i = 0
        self.n = frames
        self.opened = opened
        self.frame = np.zeros((64, 64, 3), dtype=np.uint8)
    def isOpened(self): return self.opened
    def read(self):
        self.i += 1
        if self.i > self.n:
            return False, None
        return True, self.frame.copy()
    def release(self): pass

def _patch_cv2(monkeypatch, cap, keys):
    shown = []
    monkeypatch.setattr(live.cv2, 'VideoCapture', lambda idx: cap)
    monkeypatch.setattr(live.cv2, 'imshow', lambda title, img: shown.append(img))
    monkeypatch.setattr(live.cv2, 'destroyAllWindows', lambda: None)
    seq = iter(keys)
    monkeypatch.setattr(live.cv2, 'waitKey', lambda d: next(seq, -1))
    return shown

def test_run_live_overlay_one_cycle_per_frame(monkeypatch, settings):
    shown = _patch_cv2(monkeypatch, DummyCap(frames=4), keys=[-1, -1, ord('q')])
    det = FakeDetector(results=[face(happy=0.9), None, face(sad=0.4)])
    live.run_live_overlay(settings, camera_index=0, detector=det)
    assert det.calls == 3
    assert len(shown) == 3 and all(img.shape == (64, 64, 3) for img in shown)

def test_run_live_overlay_stops_when_camera_ends(monkeypatch, settings):
    settings.SHOW_STATS = True
    shown = _patch_cv2(monkeypatch, DummyCap(frames=2), keys=[])
    det = FakeDetector(default=face(neutral=0.5))
    live.run_live_overlay(settings, camera_index=0, detector=det)
    assert det.calls == 2 and len(shown) == 2

def test_run_live_overlay_camera_error(monkeypatch, settings):
    _patch_cv2(monkeypatch, DummyCap(opened=False), keys=[])
    with pytest.raises(RuntimeError):
        live.run_live_overlay(settings, camera_index=3, detector=FakeDetector())

def test_handle_key_toggles(settings):
    sess = ExpressionSession(settings)
    assert live.handle_key(ord('a'), sess) is True
    assert settings.SHOW_ALL_EXPRESSIONS is True and sess.stabilizer.show_all is True
    landmarks = settings.SHOW_LANDMARKS
    live.handle_key(ord('l'), sess)
    assert settings.SHOW_LANDMARKS is (not landmarks)
    live.handle_key(ord('s'), sess)
    assert settings.SHOW_STATS is True
    live.handle_key(ord('+'), sess)
    assert settings.CONFIDENCE_THRESHOLD == pytest.approx(0.06)
    live.handle_key(ord('-'), sess)
    live.handle_key(ord('-'), sess)
    assert settings.CONFIDENCE_THRESHOLD == pytest.approx(0.04)
    assert live.handle_key(ord('q'), sess) is False
    assert live.handle_key(255, sess) is True

def test_live_overlay_script_threshold_range(monkeypatch):
    import scripts.live_overlay as script
    seen = {}
    monkeypatch.setattr(script, "run_live_overlay", lambda s, camera_index=None: seen.update(s=s, cam=camera_index))
    script.main(["--camera", "2", "--threshold", "0.2"])
    assert seen["cam"] == 2 and seen["s"].CONFIDENCE_THRESHOLD == 0.2

    # rejected by the parser, before any Settings/stabilizer is built
    with pytest.raises(SystemExit) as exc:
        script.main(["--threshold", "1.5"])
    assert exc.value.code == 2
    with pytest.raises(SystemExit):
        script.main(["--threshold", "abc"])
