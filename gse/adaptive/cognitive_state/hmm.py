"""
Three-state Hidden Markov Model over cognitive states.

States: FLOW (fluent input), INCUBATION (deliberate pausing / thinking),
STUCK (struggling: long pauses or heavy correction).

One forward-algorithm step per keystroke:

    alpha_t(j) = B[j][o_t] * sum_i alpha_{t-1}(i) * A[i][j]

normalized so the belief sums to 1. Parameters are fixed constants; this
model is filtered, never trained.
"""
from enum import Enum
from typing import Dict, NamedTuple, Sequence, Tuple
import logging
import math

from .constants import EMISSIONS, N_OBSERVATIONS, N_STATES, TRANSITIONS

logger = logging.getLogger(__name__)


class CognitiveState(str, Enum):
    """Cognitive states tracked by the engine, in belief-vector order"""
    FLOW = "flow"
    INCUBATION = "incubation"
    STUCK = "stuck"

    @property
    def index(self) -> int:
        return _STATE_ORDER.index(self)


_STATE_ORDER: Tuple[CognitiveState, ...] = (
    CognitiveState.FLOW,
    CognitiveState.INCUBATION,
    CognitiveState.STUCK,
)


class BeliefVector(NamedTuple):
    """Probability distribution over (FLOW, INCUBATION, STUCK)"""
    flow: float
    incubation: float
    stuck: float

    def probability(self, state: CognitiveState) -> float:
        return self[state.index]

    def to_dict(self) -> Dict[CognitiveState, float]:
        return {state: self[i] for i, state in enumerate(_STATE_ORDER)}

    def dominant(self) -> CognitiveState:
        """Arg-max state; ties go to the earlier state (FLOW first)"""
        best = 0
        for i in range(1, N_STATES):
            if self[i] > self[best]:
                best = i
        return _STATE_ORDER[best]


class BeliefUpdater:
    """Forward-algorithm step with fixed transition and emission tables"""

    def __init__(
        self,
        transitions: Sequence[Sequence[float]] = TRANSITIONS,
        emissions: Sequence[Sequence[float]] = EMISSIONS,
    ):
        self.transitions = tuple(tuple(row) for row in transitions)
        self.emissions = tuple(tuple(row) for row in emissions)

    def update(self, prior: Sequence[float], observation: int) -> BeliefVector:
        """
        Posterior belief after observing ``observation``.

        If every state assigns the observation zero likelihood the
        posterior mass collapses; the prior is then returned unchanged.
        """
        if not 0 <= observation < N_OBSERVATIONS:
            raise ValueError(f"Observation symbol must be in [0, {N_OBSERVATIONS - 1}], got {observation}")

        A = self.transitions
        B = self.emissions
        p0, p1, p2 = prior

        # Unrolled 3x3 predict + emit
        u0 = B[0][observation] * (p0 * A[0][0] + p1 * A[1][0] + p2 * A[2][0])
        u1 = B[1][observation] * (p0 * A[0][1] + p1 * A[1][1] + p2 * A[2][1])
        u2 = B[2][observation] * (p0 * A[0][2] + p1 * A[1][2] + p2 * A[2][2])

        total = u0 + u1 + u2
        if not (total > 0.0 and math.isfinite(total)):
            logger.debug(f"Degenerate belief update (obs={observation}), keeping prior")
            return BeliefVector(p0, p1, p2)

        return BeliefVector(u0 / total, u1 / total, u2 / total)
