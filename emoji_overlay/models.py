"""
Pydantic data models for expression vectors and display results.
"""
from __future__ import annotations
from enum import Enum
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Tuple
import logging
import math

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class ExpressionCategory(str, Enum):
    NEUTRAL = "neutral"
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    FEARFUL = "fearful"
    DISGUSTED = "disgusted"
    SURPRISED = "surprised"


# Enumeration order doubles as the ranking tie-break
CATEGORIES: Tuple[ExpressionCategory, ...] = tuple(ExpressionCategory)

# DeepFace labels that differ from ours
CATEGORY_ALIASES: Dict[str, ExpressionCategory] = {
    "fear": ExpressionCategory.FEARFUL,
    "disgust": ExpressionCategory.DISGUSTED,
    "surprise": ExpressionCategory.SURPRISED,
}

EXPRESSION_ICONS: Dict[ExpressionCategory, Tuple[str, ...]] = {
    ExpressionCategory.NEUTRAL: ("😐", "😑", "😶"),
    ExpressionCategory.HAPPY: ("😊", "😀", "😃"),
    ExpressionCategory.SAD: ("😢", "😞", "☹️"),
    ExpressionCategory.ANGRY: ("😠", "😡", "💢"),
    ExpressionCategory.FEARFUL: ("😨", "😰", "😱"),
    ExpressionCategory.DISGUSTED: ("🤢", "🤮", "😖"),
    ExpressionCategory.SURPRISED: ("😲", "😯", "😮"),
}
FALLBACK_ICON = "😐"
NO_FACE_ICON = "🤔"
NO_EXPRESSION_ICON = "😶"


def icon_for(category: ExpressionCategory) -> str:
    return EXPRESSION_ICONS.get(category, (FALLBACK_ICON,))[0]


def to_category(key) -> Optional[ExpressionCategory]:
    """Resolve an enum member, a label or a DeepFace alias; None if unknown."""
    if isinstance(key, ExpressionCategory):
        return key
    if not isinstance(key, str):
        return None
    label = key.strip().lower()
    try:
        return ExpressionCategory(label)
    except ValueError:
        return CATEGORY_ALIASES.get(label)


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def _safe_confidence(v, scale: float = 1.0) -> float:
    try:
        f = float(v) / scale
    except (TypeError, ValueError, ZeroDivisionError):
        return 0.0
    if math.isnan(f) or math.isinf(f):
        return 0.0
    return clamp01(f)


class ExpressionVector(BaseModel):
    """Confidence per category for one detection cycle. Immutable."""
    model_config = ConfigDict(frozen=True)

    neutral: float = 0.0
    happy: float = 0.0
    sad: float = 0.0
    angry: float = 0.0
    fearful: float = 0.0
    disgusted: float = 0.0
    surprised: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _sanitize(cls, v):
        return _safe_confidence(v)

    @classmethod
    def from_mapping(cls, scores: Optional[Mapping], scale: float = 1.0) -> "ExpressionVector":
        """
        Build a vector from a loose mapping (e.g. DeepFace's `emotion` dict).

        Args:
            scores: label -> score. Unknown labels are dropped, missing ones are 0.
            scale: divisor applied before clamping (100 for percentages).
        """
        values: Dict[str, float] = {}
        for key, raw in (scores or {}).items():
            category = to_category(key)
            if category is None:
                logger.debug(f"[models] dropping unknown expression key={key!r}")
                continue
            values[category.value] = _safe_confidence(raw, scale)
        return cls(**values)

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "ExpressionVector":
        return cls(**{c.value: float(v) for c, v in zip(CATEGORIES, values)})

    def get(self, category: ExpressionCategory) -> float:
        return getattr(self, category.value)

    def as_dict(self) -> Dict[str, float]:
        return {c.value: self.get(c) for c in CATEGORIES}

    def as_array(self) -> np.ndarray:
        return np.array([self.get(c) for c in CATEGORIES], dtype=np.float64)


class TimestampedExpression(BaseModel):
    model_config = ConfigDict(frozen=True)

    vector: ExpressionVector
    timestamp: float  # ms


class RankedExpression(BaseModel):
    category: ExpressionCategory
    confidence: float
    icon: Optional[str] = None

    @property
    def percentage(self) -> float:
        return round(self.confidence * 100.0, 1)


DisplayKind = Literal["NO_FACE", "HOLD", "NO_STRONG_EXPRESSION", "FULL", "VALUES", "ALL"]


class DisplayUpdate(BaseModel):
    """
    Result of one detection cycle for the rendering layer.

    - NO_FACE: nothing detected and no history
    - HOLD: nothing detected, keep showing the previous view
    - NO_STRONG_EXPRESSION: every category under the confidence floor
    - FULL: replace the shown set (`expressions` carries icons)
    - VALUES: same shown set, refreshed numbers; `candidates` is this cycle's top-3
    - ALL: every category ranked, for the bar chart
    """
    kind: DisplayKind
    expressions: List[RankedExpression] = Field(default_factory=list)
    candidates: List[RankedExpression] = Field(default_factory=list)
    ts: Optional[float] = None


class FaceRegion(BaseModel):
    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0


class FaceDetection(BaseModel):
    region: FaceRegion
    expressions: ExpressionVector
    face_confidence: float = 1.0
    landmarks: Optional[List[Tuple[float, float]]] = None


class FrameStats(BaseModel):
    fps: int = 0
    detection_ms: float = 0.0


class LiveStatus(BaseModel):
    running: bool
    started_at: float | None = None
    frames: int = 0
    fps: int = 0


# API models


class DisplaySettings(BaseModel):
    mobile: bool
    window_ms: float
    silence_timeout_ms: float
    confidence_threshold: float
    change_threshold: float
    show_all_expressions: bool


class SettingsPatch(BaseModel):
    mobile: Optional[bool] = None
    window_ms: Optional[float] = Field(default=None, gt=0)
    silence_timeout_ms: Optional[float] = Field(default=None, gt=0)
    confidence_threshold: Optional[float] = Field(default=None, ge=0, le=1)
    change_threshold: Optional[float] = Field(default=None, ge=0, le=1)
    show_all_expressions: Optional[bool] = None
