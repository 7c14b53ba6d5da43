
import numpy as np

from emoji_overlay.models import DisplayUpdate, ExpressionCategory as C, FaceRegion, FrameStats, RankedExpression
from emoji_overlay.visual import (
    MESH_CONNECTIONS, draw_expression_bars, draw_landmarks, draw_overlays, draw_stats,
)

def _ranked(*pairs):
    return [RankedExpression(category=c, confidence=v, icon="x") for c, v in pairs]

def test_draw_overlays_cases(frame):
    out1 = draw_overlays(frame, None, DisplayUpdate(kind="NO_FACE"))
    assert out1.shape == frame.shape and out1.any()
    out2 = draw_overlays(frame, FaceRegion(x=10, y=10, w=15, h=12),
                         DisplayUpdate(kind="NO_STRONG_EXPRESSION"))
    assert out2.shape == frame.shape
    out3 = draw_overlays(frame, FaceRegion(x=10, y=10, w=15, h=12),
                         DisplayUpdate(kind="FULL", expressions=_ranked((C.HAPPY, 0.6), (C.SAD, 0.2))))
    assert out3.any()
    # input frame untouched
    assert not frame.any()

def test_face_box_is_clamped(frame):
    out = draw_overlays(frame, FaceRegion(x=150, y=110, w=500, h=500), None)
    assert out.shape == frame.shape

def test_bar_chart(frame):
    big = np.zeros((240, 400, 3), dtype=np.uint8)
    ranked = _ranked(*[(c, 1.0 / (i + 1)) for i, c in enumerate(C)])
    out = draw_overlays(big, None, DisplayUpdate(kind="ALL", expressions=ranked))
    assert out.any()
    assert draw_expression_bars(big.copy(), []).shape == big.shape

def test_draw_landmarks_68_points():
    img = np.zeros((200, 200, 3), dtype=np.uint8)
    pts = [(20 + (i % 17) * 9, 40 + (i // 17) * 30) for i in range(68)]
    assert max(max(a, b) for a, b in MESH_CONNECTIONS) < 68
    out = draw_landmarks(img, pts, show_points=True, show_contours=True, show_mesh=True, density=50)
    assert out is img and img.any()

def test_draw_landmarks_density_and_empty():
    img = np.zeros((50, 50, 3), dtype=np.uint8)
    assert not draw_landmarks(img, None).any()
    draw_landmarks(img, [(10, 10), (40, 40)], density=50)
    # step 2: first point drawn, second skipped
    assert img[10, 10].any() and not img[40, 40].any()

def test_draw_stats(frame):
    out = draw_stats(frame.copy(), FrameStats(fps=12, detection_ms=30.5))
    assert out.any()
