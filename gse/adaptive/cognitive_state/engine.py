"""
Cognitive State Engine - Real-Time Typing State Estimation

Per keystroke:

    FeatureVector -> stuck score -> EWMA -> observation symbol
                  (+ backspace streak override) -> HMM forward step

The engine is built once and shared by the capture callback (the single
writer) and any number of readers (overlay, dashboard, API). Every
mutable field sits behind its own lock, so a slow reader of the belief
never delays the smoother or the streak counter.

Pause/override control:
- set_paused(True) freezes the engine: updates become no-ops.
- force_flow_state() snaps the belief to near-certain FLOW and clears the
  smoother. Used when the current input window is not the user's own
  thinking (e.g. IME composition) and must not poison the evidence.

Nothing here raises for finite input. The estimate is a best-effort
visual cue, so it degrades gracefully instead of failing.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional
import logging

from gse.core.sync import GuardedValue

from .constants import FORCED_FLOW_BELIEF, INITIAL_BELIEF, validate_model
from .features import FeatureVector
from .hmm import BeliefUpdater, BeliefVector, CognitiveState
from .observation import BackspaceStreakTracker, discretize
from .smoothing import TemporalSmoother
from .stuck_score import StuckScoreAggregator

logger = logging.getLogger(__name__)


class SkipReason(str, Enum):
    """Why an update call left the engine untouched"""
    PAUSED = "paused"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a single engine update"""
    belief: BeliefVector
    skipped: bool = False
    skip_reason: Optional[SkipReason] = None
    raw_score: Optional[float] = None
    smoothed_score: Optional[float] = None
    observation: Optional[int] = None
    backspace_streak: Optional[int] = None

    @property
    def dominant_state(self) -> CognitiveState:
        return self.belief.dominant()


class CognitiveStateEngine:
    """
    HMM-based cognitive state estimator driven by keystroke features
    """

    def __init__(self):
        validate_model()

        self._aggregator = StuckScoreAggregator()
        self._updater = BeliefUpdater()

        self._belief: GuardedValue[BeliefVector] = GuardedValue(
            BeliefVector(*INITIAL_BELIEF), name="current_state_probs"
        )
        self._paused: GuardedValue[bool] = GuardedValue(False, name="is_paused")
        self._smoother = TemporalSmoother()
        self._streak = BackspaceStreakTracker()

    # ============== Pause / Override ==============

    def set_paused(self, paused: bool):
        self._paused.set(bool(paused))
        logger.debug(f"Engine {'paused' if paused else 'resumed'}")

    def is_paused(self) -> bool:
        return self._paused.get()

    def force_flow_state(self):
        """
        Snap to near-certain FLOW and clear the smoother.

        Leaves the pause flag and the backspace streak alone.
        """
        self._belief.set(BeliefVector(*FORCED_FLOW_BELIEF))
        self._smoother.reset()
        logger.debug("Belief forced to FLOW, smoother cleared")

    def reset(self):
        """Back to the freshly constructed state (initial prior, no history)"""
        self._belief.set(BeliefVector(*INITIAL_BELIEF))
        self._smoother.reset()
        self._streak.reset()
        self._paused.set(False)

    # ============== Update ==============

    def update(self, features: FeatureVector, vk_code: Optional[int] = None) -> UpdateResult:
        """
        Fold one keystroke's features into the belief.

        Args:
            features: Feature vector computed for this keystroke
            vk_code: Virtual-key code of the triggering key, or None if
                the event is not key-identifiable

        Returns:
            UpdateResult with the posterior belief and diagnostics
        """
        if self.is_paused():
            return UpdateResult(belief=self.belief(), skipped=True, skip_reason=SkipReason.PAUSED)

        # F1 <= 0: first key or a data gap, nothing to measure against
        if not features.has_data:
            logger.debug("Skipping update: insufficient keystroke data")
            return UpdateResult(
                belief=self.belief(), skipped=True, skip_reason=SkipReason.INSUFFICIENT_DATA
            )

        streak = self._streak.on_key(vk_code)

        raw_score = self._aggregator.score(features)
        smoothed = self._smoother.smooth(raw_score)
        observation = discretize(smoothed, streak)

        posterior = self._belief.update(lambda prior: self._updater.update(prior, observation))

        return UpdateResult(
            belief=posterior,
            raw_score=raw_score,
            smoothed_score=smoothed,
            observation=observation,
            backspace_streak=streak,
        )

    # ============== Read-only access ==============

    def belief(self) -> BeliefVector:
        return self._belief.get()

    def get_current_state(self) -> Dict[CognitiveState, float]:
        return self.belief().to_dict()

    def dominant_state(self) -> CognitiveState:
        return self.belief().dominant()

    def smoothed_score(self) -> float:
        return self._smoother.value

    def backspace_streak(self) -> int:
        return self._streak.value

    def recoveries(self) -> int:
        """Total critical sections recovered from across all fields"""
        return (
            self._belief.recoveries
            + self._paused.recoveries
            + self._smoother.recoveries
            + self._streak.recoveries
        )
