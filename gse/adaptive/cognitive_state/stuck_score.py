"""
Stuck-score aggregation.

Collapses a FeatureVector into a single scalar S_stuck in [0, 1]:

    S = 0.30 phi(F1) + 0.10 phi(F2) + 0.15 phi(F3)
      + 0.15 phi(F6) + 0.15 (1 - phi(F4)) + 0.15 phi(F5)

Burst length (F4) is inverted: short bursts indicate struggle.
"""
import math

from .constants import (
    BETA_BURST_LENGTH,
    BETA_CORRECTION_RATE,
    BETA_FLIGHT_TIME_MEDIAN,
    BETA_FLIGHT_TIME_VARIANCE,
    BETA_PAUSE_AFTER_DEL_RATE,
    BETA_PAUSE_COUNT,
    PHI_SLOPE,
    WEIGHT_BURST_LENGTH,
    WEIGHT_CORRECTION_RATE,
    WEIGHT_FLIGHT_TIME_MEDIAN,
    WEIGHT_FLIGHT_TIME_VARIANCE,
    WEIGHT_PAUSE_AFTER_DEL_RATE,
    WEIGHT_PAUSE_COUNT,
)
from .features import FeatureVector

# exp() argument bound; the logistic is saturated well before this
_MAX_EXPONENT = 60.0


def phi(value: float, beta: float, slope: float = PHI_SLOPE) -> float:
    """
    Saturating response of a feature relative to its calibration threshold.

    Logistic in log(value / beta):

        phi = 1 / (1 + (beta / value) ** slope)

    so phi(beta, beta) == 0.5, phi -> 1 as value grows past beta and
    phi -> 0 as it shrinks toward zero. Non-positive values map to 0.
    """
    if beta <= 0:
        raise ValueError(f"beta must be positive, got {beta}")
    if not value > 0:
        return 0.0

    z = slope * (math.log(value) - math.log(beta))
    z = max(-_MAX_EXPONENT, min(_MAX_EXPONENT, z))
    return 1.0 / (1.0 + math.exp(-z))


class StuckScoreAggregator:
    """Weighted sum of monotonic feature responses"""

    def score(self, features: FeatureVector) -> float:
        phi1 = phi(features.f1_flight_time_median, BETA_FLIGHT_TIME_MEDIAN)
        phi2 = phi(features.f2_flight_time_variance, BETA_FLIGHT_TIME_VARIANCE)
        phi3 = phi(features.f3_correction_rate, BETA_CORRECTION_RATE)
        phi4_inv = 1.0 - phi(features.f4_burst_length, BETA_BURST_LENGTH)
        phi5 = phi(features.f5_pause_count, BETA_PAUSE_COUNT)
        phi6 = phi(features.f6_pause_after_del_rate, BETA_PAUSE_AFTER_DEL_RATE)

        s = (
            WEIGHT_FLIGHT_TIME_MEDIAN * phi1
            + WEIGHT_FLIGHT_TIME_VARIANCE * phi2
            + WEIGHT_CORRECTION_RATE * phi3
            + WEIGHT_PAUSE_AFTER_DEL_RATE * phi6
            + WEIGHT_BURST_LENGTH * phi4_inv
            + WEIGHT_PAUSE_COUNT * phi5
        )
        # Floating-point rounding can push the sum a hair past 1.0
        return max(0.0, min(1.0, s))

    def components(self, features: FeatureVector) -> dict:
        """Per-feature responses, for diagnostics"""
        return {
            "flight_time_median": phi(features.f1_flight_time_median, BETA_FLIGHT_TIME_MEDIAN),
            "flight_time_variance": phi(features.f2_flight_time_variance, BETA_FLIGHT_TIME_VARIANCE),
            "correction_rate": phi(features.f3_correction_rate, BETA_CORRECTION_RATE),
            "burst_length_inverted": 1.0 - phi(features.f4_burst_length, BETA_BURST_LENGTH),
            "pause_count": phi(features.f5_pause_count, BETA_PAUSE_COUNT),
            "pause_after_del_rate": phi(features.f6_pause_after_del_rate, BETA_PAUSE_AFTER_DEL_RATE),
        }
