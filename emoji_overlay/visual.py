"""Visualization helpers for the live overlay.

- draw_overlays: face box + expression panel (ranked list, bar chart or sentinel text)
- draw_landmarks: landmark points, contours and mesh for the 68-point layout
- draw_stats: FPS / detection latency line

Hershey fonts are ASCII only, so the panel shows category names; the emoji
icons travel on DisplayUpdate for UIs that can render them.
"""
from __future__ import annotations
import math
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from emoji_overlay.models import DisplayUpdate, FaceRegion, FrameStats, RankedExpression

Point = Tuple[float, float]

FONT = cv2.FONT_HERSHEY_SIMPLEX
TEXT_COLOR = (255, 255, 255)
WARN_COLOR = (0, 0, 255)
BAR_COLOR = (0, 200, 255)
POINT_COLOR = (255, 255, 0)     # cyan in BGR
CONTOUR_COLOR = (0, 255, 0)
MESH_COLOR = (255, 255, 255)

# 68-point layout: jaw, brows, nose bridge, nostrils, eyes, outer lip, inner lip
CONTOUR_GROUPS: List[Tuple[int, int, bool]] = [
    (0, 17, False), (17, 22, False), (22, 27, False), (27, 31, False), (31, 36, False),
    (36, 42, True), (42, 48, True), (48, 60, True), (60, 68, True),
]


def _chain(start: int, count: int) -> List[Tuple[int, int]]:
    return [(start + i, start + i + 1) for i in range(count)]


MESH_CONNECTIONS: List[Tuple[int, int]] = (
    _chain(0, 16) + _chain(17, 4) + _chain(22, 4) + _chain(27, 3) + _chain(31, 4)
    + _chain(36, 5) + [(41, 36)] + _chain(42, 5) + [(47, 42)]
    + _chain(48, 11) + [(59, 48)] + _chain(60, 7) + [(67, 60)]
    + [(0, 36), (16, 45), (1, 31), (15, 35), (27, 39), (27, 42), (30, 33), (30, 51),
       (8, 57), (48, 31), (54, 35)]
)


def _pt(p: Point) -> Tuple[int, int]:
    return int(round(p[0])), int(round(p[1]))


def draw_landmarks(frame: np.ndarray,
                   points: Optional[Sequence[Point]],
                   show_points: bool = True,
                   show_contours: bool = False,
                   show_mesh: bool = False,
                   density: int = 100) -> np.ndarray:
    """Draw landmark points (every ceil(100/density)-th), contours and mesh in place."""
    if not points:
        return frame
    pts = list(points)
    if show_mesh:
        for a, b in MESH_CONNECTIONS:
            if a < len(pts) and b < len(pts):
                cv2.line(frame, _pt(pts[a]), _pt(pts[b]), MESH_COLOR, 2, cv2.LINE_AA)
    if show_contours:
        for start, end, closed in CONTOUR_GROUPS:
            group = pts[start:end]
            if len(group) > 1:
                arr = np.array([_pt(p) for p in group], dtype=np.int32).reshape(-1, 1, 2)
                cv2.polylines(frame, [arr], closed, CONTOUR_COLOR, 2, cv2.LINE_AA)
    if show_points:
        step = math.ceil(100 / max(1, min(100, int(density))))
        for i, p in enumerate(pts):
            if i % step == 0:
                cv2.circle(frame, _pt(p), 2, POINT_COLOR, -1, cv2.LINE_AA)
    return frame


def draw_expression_panel(frame: np.ndarray, expressions: Sequence[RankedExpression],
                          origin: Tuple[int, int] = (10, 30)) -> np.ndarray:
    x, y = origin
    for i, r in enumerate(expressions):
        label = f"{r.category.value} {r.percentage:.1f}%"
        cv2.putText(frame, label, (x, y + i * 30), FONT, 0.8, TEXT_COLOR, 2, cv2.LINE_AA)
    return frame


def draw_expression_bars(frame: np.ndarray, expressions: Sequence[RankedExpression],
                         origin: Tuple[int, int] = (10, 30), bar_width: int = 160) -> np.ndarray:
    x, y = origin
    cv2.putText(frame, "All Expressions", (x, y), FONT, 0.6, TEXT_COLOR, 1, cv2.LINE_AA)
    for i, r in enumerate(expressions):
        row = y + 22 * (i + 1)
        cv2.putText(frame, f"{r.category.value:<9} {r.percentage:5.1f}%", (x, row),
                    FONT, 0.45, TEXT_COLOR, 1, cv2.LINE_AA)
        bx = x + 150
        filled = int(bar_width * max(0.0, min(1.0, r.confidence)))
        cv2.rectangle(frame, (bx, row - 10), (bx + bar_width, row), TEXT_COLOR, 1)
        if filled > 0:
            cv2.rectangle(frame, (bx, row - 10), (bx + filled, row), BAR_COLOR, -1)
    return frame


def draw_stats(frame: np.ndarray, stats: FrameStats) -> np.ndarray:
    h = frame.shape[0]
    text = f"FPS: {stats.fps}  Detection: {stats.detection_ms:.1f}ms"
    cv2.putText(frame, text, (10, max(15, h - 10)), FONT, 0.5, TEXT_COLOR, 1, cv2.LINE_AA)
    return frame


def draw_overlays(frame: np.ndarray,
                  face: Optional[FaceRegion] = None,
                  update: Optional[DisplayUpdate] = None,
                  color: Tuple[int, int, int] = (0, 255, 0)) -> np.ndarray:
    """Draw the face box and the expression panel for one display update.

    Args:
        frame: BGR image
        face: region of the detected face, if any
        update: the view to render (HOLD updates should be replaced by the previous view)
        color: BGR color for the face rectangle

    Returns:
        Annotated copy of the frame
    """
    out = frame.copy()
    h, w = out.shape[:2]

    if face is not None:
        # clamp to image bounds
        x = max(0, min(face.x, w - 1)); y = max(0, min(face.y, h - 1))
        fw = max(0, min(face.w, w - x)); fh = max(0, min(face.h, h - y))
        cv2.rectangle(out, (x, y), (x + fw, y + fh), color, 2)

    if update is None:
        return out
    if update.kind == "NO_FACE":
        cv2.putText(out, "No face detected", (10, 30), FONT, 0.8, WARN_COLOR, 2, cv2.LINE_AA)
    elif update.kind == "NO_STRONG_EXPRESSION":
        cv2.putText(out, "No strong expression", (10, 30), FONT, 0.8, WARN_COLOR, 2, cv2.LINE_AA)
    elif update.kind == "ALL":
        draw_expression_bars(out, update.expressions)
    else:
        draw_expression_panel(out, update.expressions)
    return out
