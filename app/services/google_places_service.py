"""Google Places Nearby Search 서비스 구현."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from functools import lru_cache
from typing import Any

import requests

from app.core.config import get_settings
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy, to_requests_timeout
from app.schemas.place import NearbySearchPage, PlaceCandidate
from app.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)


class ProviderErrorKind(StrEnum):
    """제공자 오류 분류."""

    ACCESS_DENIED = "access_denied"
    QUOTA_EXCEEDED = "quota_exceeded"
    BAD_REQUEST = "bad_request"
    UNKNOWN = "unknown"


_STATUS_KINDS = {
    "REQUEST_DENIED": ProviderErrorKind.ACCESS_DENIED,
    "OVER_QUERY_LIMIT": ProviderErrorKind.QUOTA_EXCEEDED,
    "INVALID_REQUEST": ProviderErrorKind.BAD_REQUEST,
}

_STATUS_MESSAGES = {
    ProviderErrorKind.ACCESS_DENIED: "Google Places API access denied - check API key and permissions",
    ProviderErrorKind.QUOTA_EXCEEDED: "Google Places API query limit exceeded",
    ProviderErrorKind.BAD_REQUEST: "Google Places API invalid request parameters",
}

_SUCCESS_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


class GooglePlacesError(RuntimeError):
    """Google Places 호출 실패 시 발생하는 예외."""

    def __init__(self, kind: ProviderErrorKind, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status


def classify_status(status: str | None) -> ProviderErrorKind | None:
    """응답 status를 오류 분류로 변환합니다. 성공 상태면 None."""
    if status in _SUCCESS_STATUSES:
        return None
    return _STATUS_KINDS.get(status or "", ProviderErrorKind.UNKNOWN)


class GooglePlacesService(PlacesServiceProtocol):
    """Google Places 레거시 Nearby Search API 기반 서비스."""

    _BASE_URL = "https://maps.googleapis.com/maps/api/place"
    _NEARBY_PATH = "/nearbysearch/json"

    def __init__(
        self,
        api_key: str,
        timeout_seconds: int = 10,
        language_code: str = "",
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise GooglePlacesError(ProviderErrorKind.ACCESS_DENIED, "GOOGLE_PLACES_API_KEY is not configured.")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._language_code = language_code.strip() if language_code else ""
        self._session = session or requests.Session()

    def close(self) -> None:
        """HTTP 세션을 정리합니다."""
        self._session.close()

    @classmethod
    def from_settings(cls) -> GooglePlacesService | None:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다. API 키가 없으면 None."""
        settings = get_settings()
        if not settings.GOOGLE_PLACES_API_KEY:
            logger.error("GOOGLE_PLACES_API_KEY is not configured; place ingestion is disabled.")
            return None
        timeout_policy = get_timeout_policy(settings)
        return cls(
            api_key=settings.GOOGLE_PLACES_API_KEY,
            timeout_seconds=timeout_policy.google_places_timeout_seconds,
            language_code=settings.GOOGLE_PLACES_LANGUAGE_CODE,
        )

    async def nearby_search(self, latitude: float, longitude: float, radius_meters: int) -> NearbySearchPage:
        """좌표와 반경으로 첫 페이지를 검색합니다."""
        radius = min(self.MAX_RADIUS_METERS, max(1, int(round(radius_meters))))
        params: dict[str, Any] = {"location": f"{latitude:f},{longitude:f}", "radius": radius}
        if self._language_code:
            params["language"] = self._language_code
        return await self._fetch_page(params)

    async def next_page(self, page_token: str) -> NearbySearchPage:
        """페이지 토큰으로 다음 페이지를 조회합니다."""
        return await self._fetch_page({"pagetoken": page_token})

    async def _fetch_page(self, params: dict[str, Any]) -> NearbySearchPage:
        data = await self._request(params)
        status = data.get("status")
        kind = classify_status(status)
        if kind is not None:
            logger.error(
                "Google Places API error response: status=%s results=%d error_message=%s",
                status,
                len(data.get("results") or []),
                data.get("error_message"),
            )
            message = _STATUS_MESSAGES.get(kind, f"Google Places API error: {status}")
            raise GooglePlacesError(kind, message, status=status)

        raw_results = data.get("results") or []
        candidates = [c for c in (PlaceCandidate.from_nearby_result(item) for item in raw_results) if c]
        if len(candidates) < len(raw_results):
            logger.warning("Dropped %d malformed Google Places results", len(raw_results) - len(candidates))

        return NearbySearchPage(
            candidates=candidates,
            total_results=len(raw_results),
            next_page_token=data.get("next_page_token") or None,
        )

    async def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        request_params = {**params, "key": self._api_key}
        request_timeout = to_requests_timeout(self._timeout_seconds)

        def _send() -> requests.Response:
            return self._session.get(
                f"{self._BASE_URL}{self._NEARBY_PATH}",
                params=request_params,
                timeout=request_timeout,
            )

        try:
            response = await asyncio.to_thread(_send)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            response = exc.response
            status_code = response.status_code if response is not None else None
            logger.error("Google Places API HTTP error: status=%s", status_code)
            raise GooglePlacesError(ProviderErrorKind.UNKNOWN, f"Google Places API HTTP error: {status_code}") from exc
        except requests.RequestException as exc:
            logger.error("Google Places API request failed: %s", exc)
            raise GooglePlacesError(ProviderErrorKind.UNKNOWN, "error calling Google Places API") from exc
        except ValueError as exc:
            logger.error("Google Places API response parse failed: %s", exc)
            raise GooglePlacesError(ProviderErrorKind.UNKNOWN, "error decoding Google Places API response") from exc

        if not isinstance(data, dict):
            raise GooglePlacesError(ProviderErrorKind.UNKNOWN, "unexpected Google Places API response shape")
        return data


@lru_cache(maxsize=1)
def get_google_places_service() -> GooglePlacesService | None:
    """설정 재사용을 위한 프로세스 단위 싱글톤을 반환합니다. API 키가 없으면 None."""
    return GooglePlacesService.from_settings()
