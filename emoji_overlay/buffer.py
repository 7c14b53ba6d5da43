"""
Time-windowed buffer of recent expression vectors.
"""
from __future__ import annotations
from collections import deque
from typing import Deque, Iterator, Optional
import logging

from emoji_overlay.models import ExpressionVector, TimestampedExpression

logger = logging.getLogger(__name__)

DEFAULT_SILENCE_TIMEOUT_MS = 1000.0


class ExpressionBuffer:
    """
    Arrival-ordered queue of timestamped vectors.

    Entries older than `window_ms` are evicted on every ingest; the whole
    buffer is dropped once the face has been gone longer than the silence
    timeout (see `clear_if_stale`).
    """
    def __init__(self, window_ms: float = 500.0):
        self._window_ms = 0.0
        self.window_ms = window_ms
        self._entries: Deque[TimestampedExpression] = deque()

    @property
    def window_ms(self) -> float:
        return self._window_ms

    @window_ms.setter
    def window_ms(self, value: float) -> None:
        value = float(value)
        if value <= 0:
            raise ValueError(f"window_ms must be > 0, got {value}")
        self._window_ms = value

    def ingest(self, vector: ExpressionVector, now: float) -> None:
        self._entries.append(TimestampedExpression(vector=vector, timestamp=float(now)))
        self.evict(now)

    def evict(self, now: float) -> int:
        """Drop every entry with age > window_ms. Returns how many were dropped."""
        before = len(self._entries)
        self._entries = deque(e for e in self._entries if now - e.timestamp <= self._window_ms)
        return before - len(self._entries)

    def clear_if_stale(self, now: float, silence_timeout_ms: float = DEFAULT_SILENCE_TIMEOUT_MS) -> bool:
        """Clear everything if the oldest entry is older than the silence timeout."""
        oldest = self.oldest
        if oldest is None or now - oldest.timestamp <= silence_timeout_ms:
            return False
        logger.debug(f"[buffer] silence for {now - oldest.timestamp:.0f}ms; clearing {len(self._entries)} entries")
        self._entries.clear()
        return True

    def clear(self) -> None:
        self._entries.clear()

    @property
    def oldest(self) -> Optional[TimestampedExpression]:
        return self._entries[0] if self._entries else None

    def is_empty(self) -> bool:
        return not self._entries

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TimestampedExpression]:
        return iter(tuple(self._entries))
