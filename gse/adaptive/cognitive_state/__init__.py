"""
Cognitive State Module

Research alignment:
- Flow theory: fluent, uninterrupted production (Csikszentmihalyi 1990)
- Incubation: productive pauses while thinking (Sio & Ormerod 2009)
- Stuck: long pauses and heavy correction in writing (Hall et al. 2024)

Components:
1. Feature Extraction: keystroke timing -> six calibrated features
2. Stuck Score: weighted aggregation of feature responses
3. Temporal Smoothing: EWMA over the stuck score
4. Observation: binning + backspace-streak override
5. Belief Update: 3-state HMM forward step
6. Engine / Pipeline: pause, override and capture-callback wiring
"""

from .features import (
    FeatureVector,
    KeyEvent,
    KeystrokeFeatureExtractor,
    monotonic_ms,
)

from .stuck_score import (
    StuckScoreAggregator,
    phi,
)

from .smoothing import TemporalSmoother

from .observation import (
    BackspaceStreakTracker,
    discretize,
    is_recognized_key,
)

from .hmm import (
    BeliefUpdater,
    BeliefVector,
    CognitiveState,
)

from .engine import (
    CognitiveStateEngine,
    SkipReason,
    UpdateResult,
)

from .pipeline import KeystrokePipeline

__all__ = [
    # Features
    "FeatureVector",
    "KeyEvent",
    "KeystrokeFeatureExtractor",
    "monotonic_ms",
    # Scoring
    "StuckScoreAggregator",
    "phi",
    "TemporalSmoother",
    # Observation
    "BackspaceStreakTracker",
    "discretize",
    "is_recognized_key",
    # HMM
    "BeliefUpdater",
    "BeliefVector",
    "CognitiveState",
    # Engine
    "CognitiveStateEngine",
    "SkipReason",
    "UpdateResult",
    "KeystrokePipeline",
]
