"""
Tests for cognitive state router endpoints
"""
import pytest

from gse.adaptive.cognitive_state.constants import VK_BACK

VK_A = 0x41

BASE = "/api/cognitive-state"

FAST_TYPING = {
    "f1_flight_time_median": 60.0,
    "f2_flight_time_variance": 50.0,
    "f3_correction_rate": 0.02,
    "f4_burst_length": 8.0,
    "f5_pause_count": 0.0,
    "f6_pause_after_del_rate": 0.0,
    "vk_code": VK_A,
}


class TestCognitiveStateModels:
    """Tests for request/response models"""

    def test_feature_observation_defaults(self):
        from gse.schemas.cognitive_state import FeatureObservation

        observation = FeatureObservation(f1_flight_time_median=120.0)

        assert observation.f3_correction_rate == 0.0
        assert observation.vk_code is None

    def test_feature_observation_validation(self):
        from gse.schemas.cognitive_state import FeatureObservation

        with pytest.raises(Exception):
            FeatureObservation(f1_flight_time_median=120.0, f3_correction_rate=1.5)

    def test_key_event_input_defaults(self):
        from gse.schemas.cognitive_state import KeyEventInput

        event = KeyEventInput(vk_code=VK_A)

        assert event.is_press is True
        assert event.timestamp_ms is None


class TestStateQuery:
    """Tests for the read side"""

    @pytest.mark.asyncio
    async def test_initial_state(self, client):
        response = await client.get(f"{BASE}/")

        assert response.status_code == 200
        data = response.json()
        assert data["flow"] == pytest.approx(0.7)
        assert data["incubation"] == pytest.approx(0.2)
        assert data["stuck"] == pytest.approx(0.1)
        assert data["dominant_state"] == "flow"
        assert data["paused"] is False

    @pytest.mark.asyncio
    async def test_query_does_not_mutate(self, client):
        first = (await client.get(f"{BASE}/")).json()
        for _ in range(5):
            await client.get(f"{BASE}/")
        last = (await client.get(f"{BASE}/")).json()

        assert first == last


class TestObserveEndpoint:
    """Tests for feature-vector updates"""

    @pytest.mark.asyncio
    async def test_observe_fast_typing(self, client):
        for _ in range(20):
            response = await client.post(f"{BASE}/observe", json=FAST_TYPING)
            assert response.status_code == 200

        data = response.json()
        assert data["skipped"] is False
        assert data["observation"] == 0
        assert data["state"]["flow"] > 0.8
        assert set(data["components"]) >= {"flight_time_median", "burst_length_inverted"}

    @pytest.mark.asyncio
    async def test_observe_without_data_is_skipped(self, client):
        response = await client.post(f"{BASE}/observe", json={"f1_flight_time_median": 0.0})

        assert response.status_code == 200
        data = response.json()
        assert data["skipped"] is True
        assert data["skip_reason"] == "insufficient_data"
        assert data["components"] == {}

    @pytest.mark.asyncio
    async def test_observe_invalid_payload(self, client):
        response = await client.post(
            f"{BASE}/observe",
            json={"f1_flight_time_median": 100.0, "f3_correction_rate": 2.0},
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_backspace_streak_reported(self, client):
        payload = {"f1_flight_time_median": 250.0, "vk_code": VK_BACK}
        for _ in range(5):
            response = await client.post(f"{BASE}/observe", json=payload)

        data = response.json()
        assert data["backspace_streak"] == 5
        assert data["observation"] == 10


class TestKeysEndpoint:
    """Tests for raw key events"""

    @pytest.mark.asyncio
    async def test_first_key_skipped(self, client):
        response = await client.post(f"{BASE}/keys", json={"vk_code": VK_A, "timestamp_ms": 0.0})

        assert response.status_code == 200
        assert response.json()["skip_reason"] == "insufficient_data"

    @pytest.mark.asyncio
    async def test_second_key_updates(self, client):
        await client.post(f"{BASE}/keys", json={"vk_code": VK_A, "timestamp_ms": 0.0})
        response = await client.post(f"{BASE}/keys", json={"vk_code": VK_A, "timestamp_ms": 90.0})

        data = response.json()
        assert data["skipped"] is False
        assert data["raw_score"] is not None

    @pytest.mark.asyncio
    async def test_key_release_ignored(self, client):
        response = await client.post(
            f"{BASE}/keys",
            json={"vk_code": VK_A, "timestamp_ms": 10.0, "is_press": False},
        )

        data = response.json()
        assert data["ignored"] is True
        assert data["state"]["dominant_state"] == "flow"

    @pytest.mark.asyncio
    async def test_server_clock_used_when_timestamp_missing(self, client):
        response = await client.post(f"{BASE}/keys", json={"vk_code": VK_A})
        assert response.status_code == 200


class TestControlEndpoints:
    """Tests for pause / override control"""

    @pytest.mark.asyncio
    async def test_pause_blocks_updates(self, client):
        response = await client.post(f"{BASE}/pause", json={"paused": True})
        assert response.json()["paused"] is True

        response = await client.post(f"{BASE}/observe", json=FAST_TYPING)
        data = response.json()
        assert data["skipped"] is True
        assert data["skip_reason"] == "paused"

        response = await client.post(f"{BASE}/pause", json={"paused": False})
        assert response.json()["paused"] is False

    @pytest.mark.asyncio
    async def test_force_flow(self, client):
        response = await client.post(f"{BASE}/force-flow")

        assert response.status_code == 200
        assert response.json()["flow"] == pytest.approx(0.98)

    @pytest.mark.asyncio
    async def test_composition(self, client):
        response = await client.post(f"{BASE}/composition", json={"active": True})
        data = response.json()
        assert data["paused"] is True
        assert data["flow"] == pytest.approx(0.98)

        response = await client.post(f"{BASE}/composition", json={"active": False})
        assert response.json()["paused"] is False


class TestAppEndpoints:
    """Tests for root-level endpoints"""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["lock_recoveries"] == 0

    @pytest.mark.asyncio
    async def test_root(self, client):
        response = await client.get("/")
        assert response.json()["status"] == "running"

    def test_each_app_gets_its_own_engine(self):
        from gse.main import create_app

        first = create_app()
        second = create_app()

        assert first.state.engine is not second.state.engine


class TestUpdateResponse:
    """Tests for response assembly"""

    def test_state_comes_from_the_update_result(self, engine, struggling_features):
        from gse.routers.cognitive_state import _update_response

        for _ in range(12):
            result = engine.update(struggling_features, VK_A)
        engine.force_flow_state()

        response = _update_response(engine, result, struggling_features)

        assert response.state.stuck == pytest.approx(result.belief.stuck)
        assert response.state.dominant_state == result.dominant_state.value
        assert response.state.flow != pytest.approx(0.98)


class TestPauseDuringComposition:
    """Manual pause control stays consistent with the composition gate"""

    @pytest.mark.asyncio
    async def test_resume_then_composition_pauses_again(self, client):
        await client.post(f"{BASE}/composition", json={"active": True})

        response = await client.post(f"{BASE}/pause", json={"paused": False})
        assert response.json()["paused"] is False

        response = await client.post(f"{BASE}/composition", json={"active": True})
        assert response.json()["paused"] is True

    @pytest.mark.asyncio
    async def test_manual_pause_without_composition(self, app, client):
        await client.post(f"{BASE}/pause", json={"paused": True})

        assert app.state.engine.is_paused()
        assert not app.state.pipeline.composing
