from typing import Dict, Optional
from pydantic import BaseModel, Field


class BeliefSnapshot(BaseModel):
    flow: float = Field(..., ge=0, le=1)
    incubation: float = Field(..., ge=0, le=1)
    stuck: float = Field(..., ge=0, le=1)
    dominant_state: str
    paused: bool = False


class FeatureObservation(BaseModel):
    """Six calibrated features for one keystroke"""
    f1_flight_time_median: float = Field(..., description="Median flight time (ms); <= 0 means no data")
    f2_flight_time_variance: float = Field(default=0.0, ge=0)
    f3_correction_rate: float = Field(default=0.0, ge=0, le=1)
    f4_burst_length: float = Field(default=0.0, ge=0)
    f5_pause_count: float = Field(default=0.0, ge=0)
    f6_pause_after_del_rate: float = Field(default=0.0, ge=0, le=1)
    vk_code: Optional[int] = Field(default=None, description="Virtual-key code of the triggering key")


class KeyEventInput(BaseModel):
    vk_code: Optional[int] = None
    timestamp_ms: Optional[float] = Field(default=None, description="Monotonic ms; server clock if omitted")
    is_press: bool = True


class UpdateResponse(BaseModel):
    state: BeliefSnapshot
    skipped: bool
    skip_reason: Optional[str] = None
    raw_score: Optional[float] = None
    smoothed_score: Optional[float] = None
    observation: Optional[int] = None
    backspace_streak: Optional[int] = None
    components: Dict[str, float] = Field(default_factory=dict)


class PauseRequest(BaseModel):
    paused: bool


class CompositionRequest(BaseModel):
    active: bool
