"""
Cognitive State API Endpoints

Read side for the overlay / dashboard, plus the inbound signals the
capture and composition-detection processes send.

Endpoints:
- GET  /: Current belief snapshot (never mutates the engine)
- POST /observe: One update from a precomputed feature vector
- POST /keys: One raw key event through feature extraction
- POST /pause, /force-flow, /composition: Pause / override control
"""
from fastapi import APIRouter, HTTPException, Depends, Request
from typing import Optional
import logging

from gse.adaptive.cognitive_state import (
    BeliefVector,
    CognitiveStateEngine,
    FeatureVector,
    KeyEvent,
    KeystrokePipeline,
    StuckScoreAggregator,
    UpdateResult,
    monotonic_ms,
)
from gse.schemas.cognitive_state import (
    BeliefSnapshot,
    CompositionRequest,
    FeatureObservation,
    KeyEventInput,
    PauseRequest,
    UpdateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_aggregator = StuckScoreAggregator()


def get_engine(request: Request) -> CognitiveStateEngine:
    """Dependency injection"""
    return request.app.state.engine


def get_pipeline(request: Request) -> KeystrokePipeline:
    """Dependency injection"""
    return request.app.state.pipeline


def _snapshot(engine: CognitiveStateEngine, belief: Optional[BeliefVector] = None) -> BeliefSnapshot:
    """Snapshot of ``belief``, or of the engine's current belief if omitted"""
    if belief is None:
        belief = engine.belief()
    return BeliefSnapshot(
        flow=belief.flow,
        incubation=belief.incubation,
        stuck=belief.stuck,
        dominant_state=belief.dominant().value,
        paused=engine.is_paused(),
    )


def _update_response(
    engine: CognitiveStateEngine,
    result: UpdateResult,
    features: Optional[FeatureVector] = None,
) -> UpdateResponse:
    components = {}
    if features is not None and not result.skipped:
        components = _aggregator.components(features)

    return UpdateResponse(
        # The belief this update produced, not whatever a later write left behind
        state=_snapshot(engine, result.belief),
        skipped=result.skipped,
        skip_reason=result.skip_reason.value if result.skip_reason else None,
        raw_score=result.raw_score,
        smoothed_score=result.smoothed_score,
        observation=result.observation,
        backspace_streak=result.backspace_streak,
        components=components,
    )


# ============== State Query ==============

@router.get("/", response_model=BeliefSnapshot)
async def get_cognitive_state(engine: CognitiveStateEngine = Depends(get_engine)):
    """Current probability of FLOW / INCUBATION / STUCK"""
    return _snapshot(engine)


# ============== Updates ==============

@router.post("/observe", response_model=UpdateResponse)
async def observe_features(
    request: FeatureObservation,
    engine: CognitiveStateEngine = Depends(get_engine),
):
    """
    Apply one keystroke's precomputed features.

    A non-positive flight-time median means "no data yet": the update is
    skipped and reported as such, not rejected.
    """
    try:
        features = FeatureVector(
            f1_flight_time_median=request.f1_flight_time_median,
            f2_flight_time_variance=request.f2_flight_time_variance,
            f3_correction_rate=request.f3_correction_rate,
            f4_burst_length=request.f4_burst_length,
            f5_pause_count=request.f5_pause_count,
            f6_pause_after_del_rate=request.f6_pause_after_del_rate,
        )
        result = engine.update(features, request.vk_code)
        return _update_response(engine, result, features)

    except Exception as e:
        logger.error(f"Error applying feature observation: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/keys")
async def observe_key_event(
    request: KeyEventInput,
    pipeline: KeystrokePipeline = Depends(get_pipeline),
):
    """Feed a raw key event through feature extraction and the engine"""
    try:
        event = KeyEvent(
            vk_code=request.vk_code,
            timestamp_ms=request.timestamp_ms if request.timestamp_ms is not None else monotonic_ms(),
            is_press=request.is_press,
        )
        result = pipeline.on_key_event(event)
        if result is None:
            return {"ignored": True, "state": _snapshot(pipeline.engine)}

        return _update_response(pipeline.engine, result)

    except Exception as e:
        logger.error(f"Error processing key event: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ============== Pause / Override ==============

@router.post("/pause", response_model=BeliefSnapshot)
async def set_paused(
    request: PauseRequest,
    pipeline: KeystrokePipeline = Depends(get_pipeline),
):
    """Manual pause; resuming also ends an active composition"""
    pipeline.set_paused(request.paused)
    return _snapshot(pipeline.engine)


@router.post("/force-flow", response_model=BeliefSnapshot)
async def force_flow_state(engine: CognitiveStateEngine = Depends(get_engine)):
    """Discard accumulated evidence and snap to FLOW"""
    engine.force_flow_state()
    return _snapshot(engine)


@router.post("/composition", response_model=BeliefSnapshot)
async def set_composition(
    request: CompositionRequest,
    pipeline: KeystrokePipeline = Depends(get_pipeline),
):
    """Composition-mode (IME) signal: pauses analysis while active"""
    pipeline.on_composition_change(request.active)
    return _snapshot(pipeline.engine)
