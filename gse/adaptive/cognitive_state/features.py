"""
Keystroke Features - Typing Dynamics as Cognitive Proxy

Turns a stream of raw key events into the six calibrated features the
stuck-score aggregator consumes:

F1. Flight-time median: typical gap between key presses (ms)
F2. Flight-time variance: rhythm irregularity (ms^2)
F3. Correction rate: share of backspaces among recent keys
F4. Burst length: mean keys typed between pauses
F5. Pause count: long gaps inside the window
F6. Pause-after-delete rate: hesitation right after deleting

Privacy: only timing and the backspace flag are kept, never key contents.

Research basis:
- Hall et al. (2024): pause frequency in writing tasks
- Keystroke dynamics as a proxy for cognitive load (Vizer 2009)
"""
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional
import logging
import math
import time

import numpy as np

from .constants import VK_BACK

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureVector:
    """Per-keystroke statistics consumed by the estimation core"""
    f1_flight_time_median: float = 0.0
    f2_flight_time_variance: float = 0.0
    f3_correction_rate: float = 0.0
    f4_burst_length: float = 0.0
    f5_pause_count: float = 0.0
    f6_pause_after_del_rate: float = 0.0

    @property
    def has_data(self) -> bool:
        """
        False when there is no valid prior keystroke to measure against.

        A non-positive flight time marks the very first key or a data gap;
        non-finite values are treated the same way.
        """
        values = (
            self.f1_flight_time_median,
            self.f2_flight_time_variance,
            self.f3_correction_rate,
            self.f4_burst_length,
            self.f5_pause_count,
            self.f6_pause_after_del_rate,
        )
        if not all(math.isfinite(v) for v in values):
            return False
        return self.f1_flight_time_median > 0.0


@dataclass(frozen=True)
class KeyEvent:
    """Single raw key event from the capture layer"""
    vk_code: Optional[int]
    timestamp_ms: float  # monotonic clock
    is_press: bool = True

    @property
    def is_backspace(self) -> bool:
        return self.vk_code == VK_BACK


@dataclass
class _KeyRecord:
    timestamp_ms: float
    is_backspace: bool
    interval_ms: Optional[float]  # None for the first key ever seen
    follows_backspace: bool


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds"""
    return time.monotonic() * 1000.0


class KeystrokeFeatureExtractor:
    """
    Sliding-window feature extraction over key-down events.

    Not thread-safe on its own: it is driven exclusively by the capture
    callback, which delivers events one at a time.
    """

    def __init__(
        self,
        window_seconds: float = 30.0,
        pause_threshold_ms: float = 2000.0,
        min_flight_time_ms: float = 10.0,
    ):
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.window_ms = window_seconds * 1000.0
        self.pause_threshold_ms = pause_threshold_ms
        self.min_flight_time_ms = min_flight_time_ms

        self._records: Deque[_KeyRecord] = deque()
        self._last_press_ms: Optional[float] = None
        self._last_was_backspace = False

    def reset(self):
        """Forget all history; the next key is treated as the first"""
        self._records.clear()
        self._last_press_ms = None
        self._last_was_backspace = False

    @property
    def window_size(self) -> int:
        return len(self._records)

    def observe(self, event: KeyEvent) -> Optional[FeatureVector]:
        """
        Record a key event and return the features as of this key.

        Returns None for key-up events, which carry no flight-time
        information.
        """
        if not event.is_press:
            return None

        now = event.timestamp_ms
        interval = None
        if self._last_press_ms is not None:
            interval = now - self._last_press_ms
            if interval < 0:
                # Clock went backwards; treat like a data gap
                logger.debug(f"Non-monotonic key timestamp ({interval:.1f}ms), resetting window")
                self._records.clear()
                interval = None

        self._records.append(_KeyRecord(
            timestamp_ms=now,
            is_backspace=event.is_backspace,
            interval_ms=interval,
            follows_backspace=self._last_was_backspace,
        ))
        self._last_press_ms = now
        self._last_was_backspace = event.is_backspace

        self._evict(now)
        return self._compute()

    def _evict(self, now: float):
        while self._records and now - self._records[0].timestamp_ms > self.window_ms:
            self._records.popleft()

    def _compute(self) -> FeatureVector:
        records = list(self._records)
        flight_times = [
            r.interval_ms for r in records
            if r.interval_ms is not None and r.interval_ms >= self.min_flight_time_ms
        ]

        if not flight_times:
            return FeatureVector()

        return FeatureVector(
            f1_flight_time_median=float(np.median(flight_times)),
            f2_flight_time_variance=float(np.var(flight_times)),
            f3_correction_rate=self._correction_rate(records),
            f4_burst_length=self._burst_length(records),
            f5_pause_count=float(self._pause_count(records)),
            f6_pause_after_del_rate=self._pause_after_delete_rate(records),
        )

    def _is_pause(self, record: _KeyRecord) -> bool:
        return record.interval_ms is not None and record.interval_ms >= self.pause_threshold_ms

    def _correction_rate(self, records: List[_KeyRecord]) -> float:
        return sum(1 for r in records if r.is_backspace) / len(records)

    def _pause_count(self, records: List[_KeyRecord]) -> int:
        return sum(1 for r in records if self._is_pause(r))

    def _burst_length(self, records: List[_KeyRecord]) -> float:
        # A pause before the oldest key in the window does not split anything
        boundaries = sum(1 for r in records[1:] if self._is_pause(r))
        return len(records) / (boundaries + 1)

    def _pause_after_delete_rate(self, records: List[_KeyRecord]) -> float:
        after_delete = [r for r in records if r.follows_backspace and r.interval_ms is not None]
        if not after_delete:
            return 0.0
        return sum(1 for r in after_delete if self._is_pause(r)) / len(after_delete)
