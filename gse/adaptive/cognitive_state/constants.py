"""
Fixed model parameters for cognitive state estimation.

All values are literature-calibrated constants. They are set once at
engine construction and never change at runtime; retuning means editing
this module.

State order everywhere: (FLOW, INCUBATION, STUCK).
"""
from typing import Tuple

import numpy as np

N_STATES = 3
N_OBSERVATIONS = 11

# Column reserved for the backspace-streak override
BACKSPACE_OBSERVATION = 10

# Consecutive backspaces that count as large-scale rework rather than
# ordinary typo correction
BACKSPACE_STREAK_THRESHOLD = 5

# Windows virtual-key code for Backspace (VK_BACK)
VK_BACK = 0x08

# Valid virtual-key codes are 0x01..0xFE; anything else is not a key
VK_MIN = 0x01
VK_MAX = 0xFE

# Transition matrix A[i][j] = P(state_t = j | state_{t-1} = i)
#
# FLOW -> FLOW 0.92: mean flow dwell 1/(1-0.92) = 12.5 steps
#   (Csikszentmihalyi 1990, conservative lower bound).
# FLOW -> INCUBATION 0.07, FLOW -> STUCK 0.01: pause frequency in
#   writing tasks; fast typing rarely drops straight into a block
#   (Hall et al. 2024).
# INCUBATION -> INCUBATION 0.82: 1/(1-0.82) = 5.6 steps
#   (Sio & Ormerod 2009 meta-analysis of incubation).
# STUCK -> STUCK 0.80: recovery within ~5 steps; STUCK -> FLOW 0.05
#   allows direct recovery after a breakthrough.
TRANSITIONS: Tuple[Tuple[float, ...], ...] = (
    (0.92, 0.07, 0.01),
    (0.10, 0.82, 0.08),
    (0.05, 0.15, 0.80),
)

# Emission matrix B[j][k] = P(observation = k | state = j)
#
# Bins 0-9 are the smoothed stuck score in tenths. Bin 10 is the
# out-of-band backspace penalty, so rows are not required to sum to 1.
#   FLOW:       mass on low bins (ordinary typing scores ~0.1-0.2)
#   INCUBATION: spread over the middle/high bins (thinking pauses)
#   STUCK:      high bins only; 0.99 on bin 10 forces Stuck on rework
EMISSIONS: Tuple[Tuple[float, ...], ...] = (
    (0.35, 0.25, 0.15, 0.10, 0.07, 0.05, 0.02, 0.01, 0.00, 0.00, 0.00),
    (0.02, 0.03, 0.05, 0.08, 0.10, 0.15, 0.20, 0.20, 0.10, 0.06, 0.01),
    (0.00, 0.00, 0.01, 0.02, 0.05, 0.10, 0.20, 0.30, 0.20, 0.10, 0.99),
)

INITIAL_BELIEF: Tuple[float, float, float] = (0.7, 0.2, 0.1)

# Belief installed when the input window cannot be attributed to the user
FORCED_FLOW_BELIEF: Tuple[float, float, float] = (0.98, 0.01, 0.01)

# EWMA blend: 30% new value, 70% previous
EWMA_ALPHA = 0.3

# Calibration thresholds (beta) for the response function. Tuned on
# measured Surface Pro / Japanese-input users.
BETA_FLIGHT_TIME_MEDIAN = 250.0      # ms, typical median flight time
BETA_FLIGHT_TIME_VARIANCE = 2000.0   # ms^2
BETA_CORRECTION_RATE = 0.10          # up to 10% corrections is normal
BETA_BURST_LENGTH = 2.0              # chars; shorter bursts suggest struggle
BETA_PAUSE_COUNT = 3.0               # pauses per 30s window
BETA_PAUSE_AFTER_DEL_RATE = 0.15     # share of deletions followed by a pause

# Aggregation weights, summing to exactly 1.0
WEIGHT_FLIGHT_TIME_MEDIAN = 0.30
WEIGHT_FLIGHT_TIME_VARIANCE = 0.10
WEIGHT_CORRECTION_RATE = 0.15
WEIGHT_PAUSE_AFTER_DEL_RATE = 0.15
WEIGHT_BURST_LENGTH = 0.15
WEIGHT_PAUSE_COUNT = 0.15

# Slope of the response function on a log-ratio scale
PHI_SLOPE = 2.0


def validate_model() -> None:
    """
    Sanity-check the constant tables.

    Raises ValueError if the tables are malformed. Called once at engine
    construction so that an edit to this module cannot produce an engine
    that silently emits garbage.
    """
    transitions = np.asarray(TRANSITIONS, dtype=float)
    emissions = np.asarray(EMISSIONS, dtype=float)

    if transitions.shape != (N_STATES, N_STATES):
        raise ValueError(f"Transition matrix must be {N_STATES}x{N_STATES}, got {transitions.shape}")
    if emissions.shape != (N_STATES, N_OBSERVATIONS):
        raise ValueError(f"Emission matrix must be {N_STATES}x{N_OBSERVATIONS}, got {emissions.shape}")
    if (transitions < 0).any() or (emissions < 0).any():
        raise ValueError("Model probabilities must be non-negative")
    if not np.allclose(transitions.sum(axis=1), 1.0, atol=1e-9):
        raise ValueError("Transition matrix rows must sum to 1.0")

    for name, vector in (("initial", INITIAL_BELIEF), ("forced flow", FORCED_FLOW_BELIEF)):
        if not np.isclose(sum(vector), 1.0, atol=1e-9):
            raise ValueError(f"The {name} belief must sum to 1.0")

    weights = (
        WEIGHT_FLIGHT_TIME_MEDIAN,
        WEIGHT_FLIGHT_TIME_VARIANCE,
        WEIGHT_CORRECTION_RATE,
        WEIGHT_PAUSE_AFTER_DEL_RATE,
        WEIGHT_BURST_LENGTH,
        WEIGHT_PAUSE_COUNT,
    )
    if not np.isclose(sum(weights), 1.0, atol=1e-12):
        raise ValueError("Stuck-score weights must sum to 1.0")
