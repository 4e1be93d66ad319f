"""
Observation symbols for the belief updater.

The smoothed stuck score is binned into tenths (symbols 0-9, with a
perfect 1.0 landing in 10). A run of backspaces long enough to mean
deliberate rework overrides the score and emits symbol 10 directly.
"""
import math
from typing import Optional

from gse.core.sync import GuardedValue

from .constants import (
    BACKSPACE_OBSERVATION,
    BACKSPACE_STREAK_THRESHOLD,
    VK_BACK,
    VK_MAX,
    VK_MIN,
)


def discretize(smoothed_score: float, backspace_streak: int = 0) -> int:
    """Map a smoothed score in [0, 1] and the current streak to a symbol in [0, 10]"""
    if backspace_streak >= BACKSPACE_STREAK_THRESHOLD:
        return BACKSPACE_OBSERVATION

    if not math.isfinite(smoothed_score) or smoothed_score <= 0.0:
        return 0
    return min(int(math.floor(smoothed_score * 10)), BACKSPACE_OBSERVATION)


def is_recognized_key(vk_code: Optional[int]) -> bool:
    """True for a real virtual-key code, False for 'no key' or garbage"""
    return vk_code is not None and VK_MIN <= vk_code <= VK_MAX


class BackspaceStreakTracker:
    """
    Counts consecutive backspaces.

    Any other recognized key resets the count. Events without a usable
    key code leave it alone, so filtered or synthetic events cannot
    break a genuine streak.
    """

    def __init__(self):
        self._streak: GuardedValue[int] = GuardedValue(0, name="backspace_streak")

    @property
    def value(self) -> int:
        return self._streak.get()

    @property
    def recoveries(self) -> int:
        return self._streak.recoveries

    def on_key(self, vk_code: Optional[int]) -> int:
        def step(streak: int) -> int:
            if vk_code == VK_BACK:
                return streak + 1
            if is_recognized_key(vk_code):
                return 0
            return streak

        return self._streak.update(step)

    def reset(self) -> None:
        self._streak.set(0)
