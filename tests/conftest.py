"""
Root pytest configuration and shared fixtures.
"""

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport

from gse.adaptive.cognitive_state import (
    CognitiveStateEngine,
    FeatureVector,
    KeystrokeFeatureExtractor,
    KeystrokePipeline,
)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: unit tests for isolated components"
    )
    config.addinivalue_line(
        "markers", "scenario: end-to-end typing scenarios through the engine"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def engine() -> CognitiveStateEngine:
    """A freshly constructed engine"""
    return CognitiveStateEngine()


@pytest.fixture
def pipeline(engine) -> KeystrokePipeline:
    """Pipeline around the engine fixture with default extractor settings"""
    return KeystrokePipeline(engine, KeystrokeFeatureExtractor())


@pytest.fixture
def fast_typing_features() -> FeatureVector:
    """Sustained fluent typing"""
    return FeatureVector(
        f1_flight_time_median=60.0,
        f2_flight_time_variance=50.0,
        f3_correction_rate=0.02,
        f4_burst_length=8.0,
        f5_pause_count=0.0,
        f6_pause_after_del_rate=0.0,
    )


@pytest.fixture
def neutral_features() -> FeatureVector:
    """Every feature sitting exactly on its calibration threshold"""
    return FeatureVector(
        f1_flight_time_median=250.0,
        f2_flight_time_variance=2000.0,
        f3_correction_rate=0.10,
        f4_burst_length=2.0,
        f5_pause_count=3.0,
        f6_pause_after_del_rate=0.15,
    )


@pytest.fixture
def struggling_features() -> FeatureVector:
    """Slow, irregular typing with heavy correction"""
    return FeatureVector(
        f1_flight_time_median=1500.0,
        f2_flight_time_variance=500000.0,
        f3_correction_rate=0.5,
        f4_burst_length=1.0,
        f5_pause_count=8.0,
        f6_pause_after_del_rate=0.6,
    )


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def app():
    """A fresh application (and engine) per test"""
    from gse.main import create_app
    return create_app()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
