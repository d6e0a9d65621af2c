"""장소 API 엔드포인트 테스트."""

from __future__ import annotations

import importlib

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_nearby_service
from app.core.config import get_settings
from app.services.jwt_service import JwtService
from app.services.nearby_service import NearbyPlacesService
from tests.mocks.in_memory_place_store import InMemoryPlaceStore


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("JWT_ACCESS_SECRET", "test-secret")
    monkeypatch.setenv("JWT_ACCESS_EXPIRY_MINUTES", "30")
    monkeypatch.setenv("DOCS_MODE", "disabled")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryPlaceStore:
    return InMemoryPlaceStore()


@pytest.fixture
def client(monkeypatch, store):
    _set_required_env(monkeypatch)
    import app.main as main_module

    main_module = importlib.reload(main_module)
    main_module.app.dependency_overrides[get_nearby_service] = lambda: NearbyPlacesService(store)
    yield TestClient(main_module.app)
    main_module.app.dependency_overrides.clear()


def _auth_headers(user_id: str = "user-1") -> dict[str, str]:
    token = JwtService(secret="test-secret").sign_user_token(user_id, f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


def test_nearby_returns_markers_with_camel_case_fields(client, store) -> None:
    place = store.add_place(37.5001, 127.0, ["park"], base_points=30)

    response = client.get(
        "/api/v1/places/nearby",
        params={"latitude": 37.5, "longitude": 127.0, "zoomLevel": 15},
        headers=_auth_headers(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["markers"][0]["id"] == place.id
    assert body["markers"][0]["pointValue"] == 33
    assert body["markers"][0]["postRadius"] == 200
    assert body["markers"][0]["radiusDescription"] == "넓은 구역"
    assert body["filters"] == {"radius": 25.0, "zoomLevel": 15, "hideVisited": False, "category": ""}


def test_nearby_hide_visited_query_flag(client, store) -> None:
    visited = store.add_place(37.5001, 127.0)
    store.add_post(visited.id, "user-1")

    response = client.get(
        "/api/v1/places/nearby",
        params={"latitude": 37.5, "longitude": 127.0, "zoomLevel": 20, "hideVisited": "true"},
        headers=_auth_headers(),
    )

    assert response.status_code == 200
    assert response.json()["markers"] == []


@pytest.mark.parametrize(
    "params",
    [
        {"latitude": 37.5, "longitude": 127.0, "zoomLevel": 0},
        {"latitude": 37.5, "longitude": 127.0, "zoomLevel": 21},
        {"latitude": 91, "longitude": 127.0, "zoomLevel": 10},
        {"latitude": 37.5, "longitude": 181, "zoomLevel": 10},
        {"latitude": 37.5, "longitude": 127.0, "zoomLevel": 10, "radius": 0},
        {"latitude": 37.5, "longitude": 127.0, "zoomLevel": 10, "maxPlaces": 0},
        {"latitude": 37.5, "longitude": 127.0},
    ],
)
def test_nearby_rejects_invalid_parameters(client, params) -> None:
    response = client.get("/api/v1/places/nearby", params=params, headers=_auth_headers())

    assert response.status_code == 422


def test_nearby_requires_token(client) -> None:
    missing = client.get("/api/v1/places/nearby", params={"latitude": 37.5, "longitude": 127.0, "zoomLevel": 10})
    invalid = client.get(
        "/api/v1/places/nearby",
        params={"latitude": 37.5, "longitude": 127.0, "zoomLevel": 10},
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert missing.status_code == 401
    assert missing.json() == {"detail": "인증 정보가 필요합니다."}
    assert invalid.status_code == 401
    assert invalid.json() == {"detail": "유효하지 않은 토큰입니다."}


def test_token_signed_with_other_secret_is_rejected(client) -> None:
    token = JwtService(secret="other-secret").sign_user_token("user-1", "user-1@example.com")

    response = client.get(
        "/api/v1/places/nearby",
        params={"latitude": 37.5, "longitude": 127.0, "zoomLevel": 10},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


def test_validate_location_reports_distance(client, store) -> None:
    place = store.add_place(37.5, 127.0, ["cafe"], name="Corner Cafe")

    response = client.get(
        f"/api/v1/places/{place.id}/validate-location",
        params={"latitude": 37.501, "longitude": 127.0},
        headers=_auth_headers(),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["place_name"] == "Corner Cafe"
    assert body["can_post"] is False
    assert body["required_distance"] == 25
    assert body["radius_type"] == "small"


def test_validate_location_unknown_place_returns_404(client) -> None:
    response = client.get(
        "/api/v1/places/999/validate-location",
        params={"latitude": 37.5, "longitude": 127.0},
        headers=_auth_headers(),
    )

    assert response.status_code == 404
    assert response.json() == {"detail": "장소를 찾을 수 없습니다."}
