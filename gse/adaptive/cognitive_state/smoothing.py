"""
Temporal smoothing of the stuck score.

EWMA formula: s_t = alpha * raw_t + (1 - alpha) * s_{t-1}, s_0 = 0

With alpha = 0.3 a one-off spike (three spaces in a row, a glance away
from the keyboard) moves the smoothed score by at most 30% of its size,
which is not enough to flip the discretized observation on its own.
"""
from gse.core.sync import GuardedValue

from .constants import EWMA_ALPHA


class TemporalSmoother:
    """Exponentially-weighted moving average over a scalar signal"""

    def __init__(self, alpha: float = EWMA_ALPHA):
        if not 0 < alpha <= 1:
            raise ValueError("Alpha must be between 0 and 1")

        self.alpha = alpha
        self._ewma: GuardedValue[float] = GuardedValue(0.0, name="s_stuck_ewma")

    @property
    def value(self) -> float:
        return self._ewma.get()

    @property
    def recoveries(self) -> int:
        return self._ewma.recoveries

    def smooth(self, raw: float) -> float:
        """Blend a new raw score into the average and return the result"""
        return self._ewma.update(lambda prev: self.alpha * raw + (1 - self.alpha) * prev)

    def reset(self) -> None:
        """Back to zero. Only the forced-reset path calls this."""
        self._ewma.set(0.0)
