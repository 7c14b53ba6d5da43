"""
Sliding-window averaging of buffered expression vectors.
"""
from __future__ import annotations
from typing import Iterable, Optional

import numpy as np

from emoji_overlay.models import ExpressionVector, TimestampedExpression


def average(entries: Iterable[TimestampedExpression]) -> Optional[ExpressionVector]:
    """
    Per-category mean over the buffered entries.

    Accepts an ExpressionBuffer or any iterable of TimestampedExpression.
    Returns None for an empty input; check `buffer.is_empty()` first.
    """
    stacked = [e.vector.as_array() for e in entries]
    if not stacked:
        return None
    means = np.stack(stacked, axis=0).mean(axis=0)
    return ExpressionVector.from_array(means)
