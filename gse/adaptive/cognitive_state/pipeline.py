"""
Keystroke pipeline: the bridge between the capture layer and the engine.

The capture callback hands every raw key event to ``on_key_event``; the
composition-mode detector calls ``on_composition_change``. Both run
synchronously and never raise into the caller.

While composition is active the feature window is frozen as well as the
engine: composed keystrokes never enter the window, and the window is
cleared when composition ends, so the first key afterwards is treated
as the first key of a fresh run.
"""
from typing import Optional
from threading import Lock
import logging

from gse.core.logging import log_function_call

from .engine import CognitiveStateEngine, UpdateResult
from .features import FeatureVector, KeyEvent, KeystrokeFeatureExtractor
from .hmm import CognitiveState

logger = logging.getLogger(__name__)


class KeystrokePipeline:
    """Feature extraction + engine update for a stream of key events"""

    def __init__(
        self,
        engine: CognitiveStateEngine,
        extractor: Optional[KeystrokeFeatureExtractor] = None,
    ):
        self.engine = engine
        self.extractor = extractor or KeystrokeFeatureExtractor()
        self._last_state: Optional[CognitiveState] = None
        self._composing = False
        # Serializes the extractor and the composition flag; the engine has
        # its own per-field locks
        self._event_lock = Lock()

    def __repr__(self) -> str:
        return f"KeystrokePipeline(composing={self._composing}, paused={self.engine.is_paused()})"

    @property
    def composing(self) -> bool:
        return self._composing

    def on_key_event(self, event: KeyEvent) -> Optional[UpdateResult]:
        """
        Process one raw key event.

        Returns None for key-up events, otherwise the engine's UpdateResult.
        Keys typed during composition are reported as skipped and leave the
        feature window untouched.
        """
        if not event.is_press:
            return None

        with self._event_lock:
            if self._composing:
                return self.engine.update(FeatureVector(), event.vk_code)

            features = self.extractor.observe(event)
            if features is None:
                return None

            result = self.engine.update(features, event.vk_code)

        if not result.skipped:
            self._log_state_change(result)
        return result

    @log_function_call
    def on_composition_change(self, active: bool):
        """
        Gate the engine on text-composition (IME) activity.

        While composing, keystrokes reflect the input method rather than
        the user's thinking: reset to FLOW and freeze until it ends.
        A repeated "active" signal re-applies the pause if something
        resumed the engine in between.
        """
        with self._event_lock:
            if active == self._composing and (not active or self.engine.is_paused()):
                return
            self._composing = active

            if active:
                self.engine.force_flow_state()
                self.engine.set_paused(True)
                logger.info("Composition started - analysis paused")
            else:
                self._resume()

    @log_function_call
    def set_paused(self, paused: bool):
        """
        Manual pause control.

        Resuming while composition is active ends composition, so the
        composition flag never disagrees with the engine's pause state.
        """
        with self._event_lock:
            if not paused and self._composing:
                self._composing = False
                self._resume()
            else:
                self.engine.set_paused(paused)

    def _resume(self):
        # Caller holds _event_lock
        self.extractor.reset()
        self.engine.set_paused(False)
        logger.info("Composition ended - analysis resumed with an empty feature window")

    def _log_state_change(self, result: UpdateResult):
        state = result.dominant_state
        if state == self._last_state:
            return
        self._last_state = state

        b = result.belief
        logger.info(
            f"[STATE: {state.value.upper()}] "
            f"FLOW={b.flow * 100:.2f}% INC={b.incubation * 100:.2f}% STUCK={b.stuck * 100:.2f}% | "
            f"S_stuck={result.smoothed_score:.3f} obs={result.observation} streak={result.backspace_streak}"
        )
