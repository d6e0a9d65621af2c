"""Google Places Nearby Search 서비스 테스트."""

from __future__ import annotations

import asyncio

import pytest
import requests

from app.core.config import get_settings
from app.services.google_places_service import (
    GooglePlacesError,
    GooglePlacesService,
    ProviderErrorKind,
    classify_status,
)

_RESULT = {
    "place_id": "ChIJ-castle",
    "name": "Gyeongbokgung Palace",
    "geometry": {"location": {"lat": 37.5796, "lng": 126.9770}},
    "types": ["palace", "tourist_attraction", "point_of_interest"],
    "rating": 4.6,
    "user_ratings_total": 51234,
    "vicinity": "161 Sajik-ro, Jongno-gu",
    "business_status": "OPERATIONAL",
    "icon": "https://maps.gstatic.com/icon.png",
    "photos": [{"photo_reference": "photo-1"}, {"height": 10}],
    "plus_code": {"global_code": "8Q98HXHG+RR"},
    "opening_hours": {"open_now": True},
}


class _Response:
    def __init__(self, payload: dict, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self) -> dict:
        return self._payload


class _Session:
    def __init__(self, responses: list) -> None:
        self._responses = list(responses)
        self.calls: list[dict] = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        return None


def _service(*responses, language_code: str = "") -> tuple[GooglePlacesService, _Session]:
    session = _Session(list(responses))
    return GooglePlacesService("test-key", timeout_seconds=10, language_code=language_code, session=session), session


def test_classify_status() -> None:
    assert classify_status("OK") is None
    assert classify_status("ZERO_RESULTS") is None
    assert classify_status("REQUEST_DENIED") == ProviderErrorKind.ACCESS_DENIED
    assert classify_status("OVER_QUERY_LIMIT") == ProviderErrorKind.QUOTA_EXCEEDED
    assert classify_status("INVALID_REQUEST") == ProviderErrorKind.BAD_REQUEST
    assert classify_status("UNKNOWN_ERROR") == ProviderErrorKind.UNKNOWN
    assert classify_status(None) == ProviderErrorKind.UNKNOWN


def test_nearby_search_parses_results_and_token() -> None:
    payload = {"status": "OK", "results": [_RESULT, {"name": "no id"}], "next_page_token": "next-1"}
    service, session = _service(_Response(payload), language_code="ko")

    page = asyncio.run(service.nearby_search(37.5796, 126.9770, 80_000))

    assert page.next_page_token == "next-1"
    assert page.total_results == 2
    assert len(page.candidates) == 1
    candidate = page.candidates[0]
    assert candidate.place_id == "ChIJ-castle"
    assert candidate.types[0] == "palace"
    assert candidate.photo_references == ["photo-1"]
    assert candidate.plus_code == "8Q98HXHG+RR"
    assert candidate.has_opening_hours is True

    params = session.calls[0]["params"]
    assert params["radius"] == 50_000
    assert params["language"] == "ko"
    assert params["key"] == "test-key"
    assert session.calls[0]["timeout"] == (3.0, 7.0)


def test_next_page_sends_only_token() -> None:
    service, session = _service(_Response({"status": "ZERO_RESULTS", "results": []}))

    page = asyncio.run(service.next_page("next-1"))

    assert page.candidates == []
    assert page.next_page_token is None
    assert session.calls[0]["params"] == {"pagetoken": "next-1", "key": "test-key"}


def test_wrong_typed_result_is_dropped_without_failing_page() -> None:
    bad_rating = {**_RESULT, "place_id": "ChIJ-bad", "rating": "n/a"}
    bad_location = {**_RESULT, "place_id": "ChIJ-nowhere", "geometry": "unknown"}
    payload = {"status": "OK", "results": [bad_rating, _RESULT, bad_location, "garbage"]}
    service, _ = _service(_Response(payload))

    page = asyncio.run(service.nearby_search(37.5796, 126.9770, 1000))

    assert [candidate.place_id for candidate in page.candidates] == ["ChIJ-castle"]
    assert page.total_results == 4


@pytest.mark.parametrize(
    ("status", "kind"),
    [
        ("REQUEST_DENIED", ProviderErrorKind.ACCESS_DENIED),
        ("OVER_QUERY_LIMIT", ProviderErrorKind.QUOTA_EXCEEDED),
        ("INVALID_REQUEST", ProviderErrorKind.BAD_REQUEST),
        ("UNKNOWN_ERROR", ProviderErrorKind.UNKNOWN),
    ],
)
def test_error_status_raises_classified_error(status: str, kind: ProviderErrorKind) -> None:
    service, _ = _service(_Response({"status": status, "results": [], "error_message": "nope"}))

    with pytest.raises(GooglePlacesError) as exc_info:
        asyncio.run(service.nearby_search(37.5, 127.0, 1000))

    assert exc_info.value.kind == kind
    assert exc_info.value.status == status


def test_network_and_http_errors_are_unknown() -> None:
    service, _ = _service(requests.ConnectionError("down"), _Response({}, status_code=503))

    with pytest.raises(GooglePlacesError) as network_error:
        asyncio.run(service.nearby_search(37.5, 127.0, 1000))
    with pytest.raises(GooglePlacesError) as http_error:
        asyncio.run(service.nearby_search(37.5, 127.0, 1000))

    assert network_error.value.kind == ProviderErrorKind.UNKNOWN
    assert http_error.value.kind == ProviderErrorKind.UNKNOWN


def test_from_settings_returns_none_without_api_key(monkeypatch) -> None:
    monkeypatch.setenv("JWT_ACCESS_SECRET", "test-secret")
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "")
    get_settings.cache_clear()

    assert GooglePlacesService.from_settings() is None


def test_from_settings_builds_service_with_key(monkeypatch) -> None:
    monkeypatch.setenv("JWT_ACCESS_SECRET", "test-secret")
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "real-key")
    monkeypatch.setenv("GOOGLE_PLACES_LANGUAGE_CODE", "ko")
    get_settings.cache_clear()

    service = GooglePlacesService.from_settings()

    assert isinstance(service, GooglePlacesService)
    service.close()
