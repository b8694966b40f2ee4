"""Integration tests for wizard routes."""

from unittest.mock import patch

from fastapi.testclient import TestClient

ESSENTIAL_SHAPES = ["heart", "star", "moon", "key", "leaf"]

SHIPPING = {
    "fullName": "Sam Rivera",
    "email": "sam@example.com",
    "address": "1 Main St",
    "city": "Portland",
    "state": "OR",
    "zipCode": "97201",
}


def _to_shapes(client: TestClient) -> None:
    client.post("/api/v1/wizard/start")
    client.post("/api/v1/wizard/tier", json={"tier": "essential"})
    client.post("/api/v1/wizard/tier/continue")


def _to_checkout(client: TestClient) -> None:
    _to_shapes(client)
    client.post("/api/v1/wizard/shapes", json={"shapes": ESSENTIAL_SHAPES})
    client.post("/api/v1/wizard/shapes/finalize")
    client.post("/api/v1/wizard/partner/skip")
    client.post("/api/v1/wizard/image/photo", json={"photoUrl": "https://cdn.example.com/p.jpg"})
    client.post("/api/v1/wizard/image/continue")
    client.post("/api/v1/wizard/hints", json={"hintCards": [{"id": "h1", "title": "Where we met"}]})
    client.post("/api/v1/wizard/hints/continue")
    client.post("/api/v1/wizard/packaging/continue")


class TestWizardState:
    """Tests for GET /api/v1/wizard."""

    def test_starts_at_home(self, client: TestClient) -> None:
        """Test that a fresh device starts at home with no session."""
        response = client.get("/api/v1/wizard")

        assert response.status_code == 200
        data = response.json()
        assert data["step"] == "home"
        assert data["session"] is None
        assert data["accepted"] is True

    def test_start_creates_session(self, client: TestClient) -> None:
        """Test that start returns the new draft in camelCase."""
        data = client.post("/api/v1/wizard/start").json()

        assert data["step"] == "tier"
        assert data["session"]["tier"] == "classic"
        assert data["session"]["selectedShapes"] == []
        assert data["session"]["imageChoice"] == "photo"
        assert data["session"]["createdAt"] == data["session"]["updatedAt"]


class TestWizardFlow:
    """Tests for walking the wizard over HTTP."""

    def test_full_flow_returns_order_number(self, client: TestClient) -> None:
        """Test that completing checkout yields an order number and clears the draft."""
        _to_checkout(client)
        client.post("/api/v1/wizard/shipping", json={"shippingInfo": SHIPPING})

        data = client.post("/api/v1/wizard/complete").json()

        assert data["accepted"] is True
        assert data["step"] == "confirmation"
        assert data["orderNumber"].startswith("PZ-")
        assert data["session"]["orderComplete"] is True

    def test_refused_guard_is_not_an_error(self, client: TestClient) -> None:
        """Test that a guard refusal returns 200 with accepted false."""
        _to_shapes(client)
        client.post("/api/v1/wizard/shapes/toggle", json={"shapeId": "heart"})

        response = client.post("/api/v1/wizard/shapes/finalize")

        assert response.status_code == 200
        data = response.json()
        assert data["accepted"] is False
        assert data["step"] == "shapes"
        assert data["session"]["selectedShapes"] == ["heart"]

    def test_transition_without_session_is_refused(self, client: TestClient) -> None:
        """Test that continuing from home without a draft is a no-op."""
        data = client.post("/api/v1/wizard/tier/continue").json()

        assert data["accepted"] is False
        assert data["step"] == "home"

    def test_over_quota_shape_is_rejected(self, client: TestClient) -> None:
        """Test that picking more shapes than the tier allows is a 422."""
        _to_shapes(client)
        client.post("/api/v1/wizard/shapes", json={"shapes": ESSENTIAL_SHAPES})

        response = client.post("/api/v1/wizard/shapes/toggle", json={"shapeId": "sun"})

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "validation_error"
        assert "essential" in data["message"]

    def test_unknown_tier_is_rejected(self, client: TestClient) -> None:
        """Test that the request schema only accepts known tiers."""
        client.post("/api/v1/wizard/start")

        response = client.post("/api/v1/wizard/tier", json={"tier": "platinum"})

        assert response.status_code == 422

    def test_complete_without_shipping_is_refused(self, client: TestClient) -> None:
        """Test that checkout cannot complete without shipping info."""
        _to_checkout(client)

        data = client.post("/api/v1/wizard/complete").json()

        assert data["accepted"] is False
        assert data["step"] == "checkout"
        assert data.get("orderNumber") is None

    def test_back_and_start_over(self, client: TestClient) -> None:
        """Test that back follows the edge and start over returns home."""
        _to_shapes(client)

        assert client.post("/api/v1/wizard/back").json()["step"] == "tier"

        data = client.post("/api/v1/wizard/start-over").json()
        assert data["step"] == "home"
        assert data["session"] is None

    def test_shape_meaning_and_colours(self, client: TestClient) -> None:
        """Test annotating a shape and choosing comfy colours."""
        _to_shapes(client)
        client.post("/api/v1/wizard/shapes", json={"shapes": ESSENTIAL_SHAPES})
        data = client.post(
            "/api/v1/wizard/shapes/meaning", json={"shapeId": "heart", "meaning": "our first home"}
        ).json()
        assert data["session"]["shapeMeanings"] == {"heart": "our first home"}

        client.post("/api/v1/wizard/shapes/finalize")
        client.post("/api/v1/wizard/partner/skip")
        data = client.post("/api/v1/wizard/image/colors", json={"colorAssignments": {"heart": "rose"}}).json()

        assert data["session"]["imageChoice"] == "comfy-colors"
        assert data["session"]["colorAssignments"] == {"heart": "rose"}
        assert "photoUrl" not in data["session"] or data["session"]["photoUrl"] is None


class TestResumption:
    """Tests for resuming a draft across restarts."""

    def test_draft_survives_restart(self) -> None:
        """Test that a new lifespan over the same medium resumes the draft."""
        from interlock.core.storage import InMemoryKeyValueStore
        from interlock.main import app
        from interlock.services.runtime import build_runtime

        store = InMemoryKeyValueStore()

        with patch(
            "interlock.services.runtime.build_runtime",
            side_effect=lambda settings: build_runtime(settings, store),
        ):
            with TestClient(app) as first:
                _to_shapes(first)
                first.post("/api/v1/wizard/shapes", json={"shapes": ESSENTIAL_SHAPES})

            with TestClient(app) as second:
                data = second.get("/api/v1/wizard").json()

        assert data["step"] == "image"
        assert data["session"]["selectedShapes"] == ESSENTIAL_SHAPES
