"""
Ranking and flicker suppression for the expression display.

The stabilizer keeps the last top-3 it asked the UI to draw and only swaps it
out when a rank change comes with a large confidence jump; otherwise the UI
just refreshes the numbers next to the icons it already shows.
"""
from __future__ import annotations
from typing import List, Optional, Sequence
import logging

from emoji_overlay.models import (
    CATEGORIES,
    DisplayUpdate,
    ExpressionVector,
    RankedExpression,
    icon_for,
)

logger = logging.getLogger(__name__)

MAX_DISPLAYED = 3
DEFAULT_CONFIDENCE_THRESHOLD = 0.05
DEFAULT_CHANGE_THRESHOLD = 0.15


def _check_unit(name: str, value: float) -> float:
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")
    return value


def rank_expressions(vector: ExpressionVector, threshold: Optional[float] = None,
                     with_icons: bool = False) -> List[RankedExpression]:
    """
    Categories sorted by confidence, highest first.

    Ties keep enumeration order (sorted() is stable). With `threshold`, only
    categories strictly above it are kept.
    """
    ranked = [
        RankedExpression(category=c, confidence=vector.get(c),
                         icon=icon_for(c) if with_icons else None)
        for c in CATEGORIES
    ]
    if threshold is not None:
        ranked = [r for r in ranked if r.confidence > threshold]
    return sorted(ranked, key=lambda r: r.confidence, reverse=True)


def should_replace(displayed: Sequence[RankedExpression],
                   candidates: Sequence[RankedExpression],
                   change_threshold: float = DEFAULT_CHANGE_THRESHOLD) -> bool:
    """
    Hysteresis gate: True for a full update, False for a value-only refresh.

    Position by position, a slot the display does not have yet forces a full
    update, and so does a different category whose confidence moved by more
    than `change_threshold`. Reordering the same categories does not count.
    """
    for i in range(min(MAX_DISPLAYED, len(candidates))):
        if i >= len(displayed):
            return True
        old, new = displayed[i], candidates[i]
        if old.category != new.category and abs(new.confidence - old.confidence) > change_threshold:
            return True
    return False


class DisplayStabilizer:
    """Turns an averaged vector into a stable ranked view."""
    def __init__(self,
                 confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
                 change_threshold: float = DEFAULT_CHANGE_THRESHOLD,
                 show_all: bool = False):
        self.confidence_threshold = _check_unit("confidence_threshold", confidence_threshold)
        self.change_threshold = _check_unit("change_threshold", change_threshold)
        self.show_all = bool(show_all)
        # Snapshot taken at the last full update; drives the hysteresis check
        self._decision: List[RankedExpression] = []
        # What the UI currently shows, including value-only refreshes
        self._shown: List[RankedExpression] = []

    @property
    def displayed(self) -> List[RankedExpression]:
        return [r.model_copy() for r in self._decision]

    @property
    def shown(self) -> List[RankedExpression]:
        return [r.model_copy() for r in self._shown]

    def set_confidence_threshold(self, value: float) -> None:
        self.confidence_threshold = _check_unit("confidence_threshold", value)

    def set_change_threshold(self, value: float) -> None:
        self.change_threshold = _check_unit("change_threshold", value)

    def reset(self) -> None:
        self._decision = []
        self._shown = []

    def update(self, averaged: ExpressionVector, now: Optional[float] = None) -> DisplayUpdate:
        if self.show_all:
            ranked_all = rank_expressions(averaged, with_icons=True)
            return DisplayUpdate(kind="ALL", expressions=ranked_all, candidates=ranked_all, ts=now)

        candidates = rank_expressions(averaged, self.confidence_threshold)[:MAX_DISPLAYED]
        if not candidates:
            self.reset()
            return DisplayUpdate(kind="NO_STRONG_EXPRESSION", ts=now)

        if should_replace(self._decision, candidates, self.change_threshold):
            top = [r.model_copy(update={"icon": icon_for(r.category)}) for r in candidates]
            self._decision = [r.model_copy() for r in top]
            self._shown = [r.model_copy() for r in top]
            logger.debug(f"[stabilizer] full update -> {[r.category.value for r in top]}")
            return DisplayUpdate(kind="FULL", expressions=self.shown, candidates=candidates, ts=now)

        fresh = {r.category: r.confidence for r in candidates}
        self._shown = [
            r.model_copy(update={"confidence": fresh[r.category]}) if r.category in fresh else r
            for r in self._shown
        ]
        return DisplayUpdate(kind="VALUES", expressions=self.shown, candidates=candidates, ts=now)
