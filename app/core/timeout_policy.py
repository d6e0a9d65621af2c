"""요청, 외부 API, 수집 루프에 걸리는 타임아웃을 한곳에서 계산합니다.

하위 단계의 타임아웃은 상위 단계보다 길 수 없습니다.
요청 > 외부 API > Google Places 순으로 제한되고, 수집 데드라인은
요청 타임아웃보다 1초 짧게 제한되어 조회가 기존 데이터로 응답할 여유를 남깁니다.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.core.config import Settings, get_settings

MIN_TIMEOUT_SECONDS = 1
_CONNECT_SHARE = 0.3
_CONNECT_CEILING_SECONDS = 5.0


def _bounded_seconds(value: object, fallback: int, ceiling: int | None = None) -> int:
    try:
        seconds = int(value) if value is not None else fallback
    except (TypeError, ValueError):
        seconds = fallback
    seconds = max(MIN_TIMEOUT_SECONDS, seconds)
    return seconds if ceiling is None else min(seconds, ceiling)


@dataclass(frozen=True, slots=True)
class TimeoutPolicy:
    """단계별 타임아웃(초)."""

    request_timeout_seconds: int
    external_api_timeout_seconds: int
    google_places_timeout_seconds: int
    ingestion_timeout_seconds: int

    @classmethod
    def from_settings(cls, settings: Settings) -> TimeoutPolicy:
        request = _bounded_seconds(settings.REQUEST_TIMEOUT_SECONDS, 60)
        external = _bounded_seconds(settings.EXTERNAL_API_TIMEOUT_SECONDS, 15, request)
        return cls(
            request_timeout_seconds=request,
            external_api_timeout_seconds=external,
            google_places_timeout_seconds=_bounded_seconds(settings.GOOGLE_PLACES_TIMEOUT_SECONDS, 10, external),
            ingestion_timeout_seconds=_bounded_seconds(
                settings.INGESTION_TIMEOUT_SECONDS,
                20,
                max(MIN_TIMEOUT_SECONDS, request - 1),
            ),
        )


def get_timeout_policy(settings: Settings | None = None) -> TimeoutPolicy:
    """현재 설정 기준의 타임아웃 정책을 반환합니다."""
    return TimeoutPolicy.from_settings(settings or get_settings())


def to_requests_timeout(total_timeout_seconds: int) -> tuple[float, float]:
    """전체 시간을 `requests`용 (connect, read) 튜플로 나눕니다.

    connect는 전체의 30%를 1~5초 범위로 자르고, 나머지를 read에 배정합니다.
    """
    total = float(max(MIN_TIMEOUT_SECONDS, int(total_timeout_seconds)))
    connect = min(_CONNECT_CEILING_SECONDS, max(1.0, total * _CONNECT_SHARE))
    if total > connect:
        return connect, max(1.0, total - connect)
    return connect, max(0.5, total / 2)
