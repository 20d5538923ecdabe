"""HTTP-level tests for the cycle endpoints against the in-memory store."""

from __future__ import annotations

from datetime import date

from fastapi.testclient import TestClient

from src.cycles.tests.conftest import FakeCycleStore
from src.services.tests.conftest import AUTH_HEADERS


class TestAuth:
    def test_missing_token_is_401(self, client: TestClient) -> None:
        response = client.get("/api/v1/cycles/estimate")
        assert response.status_code == 401

    def test_token_without_app_user_is_401(self, client: TestClient, monkeypatch) -> None:
        from src.middleware.clerk_auth import ClerkAuthMiddleware

        monkeypatch.setattr(ClerkAuthMiddleware, "_decode", lambda self, token: {"sub": "u"})

        response = client.get("/api/v1/cycles/estimate", headers=AUTH_HEADERS)

        assert response.status_code == 401
        assert response.json() == {"detail": "Account not provisioned"}

    def test_health_is_public_and_degraded_without_database(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["algorithm_version"] == "2.0"

    def test_catalogue_needs_no_database(self, client: TestClient) -> None:
        response = client.get("/api/v1/symptom-logs/catalogue", headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert {"symptom_id": "pain-cramps", "name": "Cramps"} in response.json()["pain"]


class TestCycleEndpoints:
    def test_recompute_returns_most_recent_first(
        self, client: TestClient, fake_store: FakeCycleStore
    ) -> None:
        response = client.post("/api/v1/cycles/recompute", headers=AUTH_HEADERS)

        assert response.status_code == 200
        cycles = response.json()
        assert [c["start_date"] for c in cycles] == ["2024-01-29", "2024-01-01"]
        assert cycles[1]["length"] == 28
        assert cycles[0]["length"] is None
        assert fake_store.profile.last_period_start == date(2024, 1, 29)

    def test_list_cycles(self, client: TestClient) -> None:
        client.post("/api/v1/cycles/recompute", headers=AUTH_HEADERS)

        response = client.get("/api/v1/cycles", params={"limit": 1}, headers=AUTH_HEADERS)

        assert response.status_code == 200
        assert [c["start_date"] for c in response.json()] == ["2024-01-29"]

    def test_predictions(self, client: TestClient, fake_store: FakeCycleStore) -> None:
        client.post("/api/v1/cycles/recompute", headers=AUTH_HEADERS)

        response = client.post(
            "/api/v1/cycles/predictions", json={"count": 2}, headers=AUTH_HEADERS
        )

        assert response.status_code == 200
        predictions = response.json()
        assert [p["predicted_period_start"] for p in predictions] == [
            "2024-02-26",
            "2024-03-25",
        ]
        assert predictions[0]["confidence_score"] == 1.0
        assert len(fake_store.predictions) == 1

    def test_prediction_count_is_bounded(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/cycles/predictions", json={"count": 50}, headers=AUTH_HEADERS
        )
        assert response.status_code == 422

    def test_estimate(self, client: TestClient) -> None:
        client.post("/api/v1/cycles/recompute", headers=AUTH_HEADERS)

        response = client.get("/api/v1/cycles/estimate", headers=AUTH_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["periods"][0] == {"start_date": "2024-02-26", "end_date": "2024-03-01"}
        assert body["fertile_window"]["ovulation_date"] == "2024-02-12"

    def test_analytics(self, client: TestClient) -> None:
        client.post("/api/v1/cycles/recompute", headers=AUTH_HEADERS)

        response = client.get("/api/v1/cycles/analytics", headers=AUTH_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["cycle_length_variation"] == [28]
        assert body["period_length_variation"] == [4, 5]
        assert 0.0 <= body["data_quality_score"] <= 1.0


class TestSymptomLogValidation:
    def test_unknown_symptom_is_rejected_before_storage(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/symptom-logs",
            json={"date": "2024-01-02", "symptom_id": "pain-unknown", "intensity": 2},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 422
        assert "pain-unknown" in response.json()["detail"]

    def test_intensity_out_of_range(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/symptom-logs",
            json={"date": "2024-01-02", "symptom_id": "pain-cramps", "intensity": 9},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 422


class TestProfileUpdate:
    def test_null_averages_alone_are_rejected(self, client: TestClient) -> None:
        response = client.patch(
            "/api/v1/profile",
            json={"average_cycle_length": None, "average_period_length": None},
            headers=AUTH_HEADERS,
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "No fields to update"}
