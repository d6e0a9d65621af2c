"""단계별 타임아웃 계산 테스트."""

import pytest

from app.core.config import Settings
from app.core.timeout_policy import TimeoutPolicy, to_requests_timeout


def _policy(**overrides) -> TimeoutPolicy:
    return TimeoutPolicy.from_settings(Settings(JWT_ACCESS_SECRET="test-secret", **overrides))


def test_nested_timeouts_never_exceed_request_budget() -> None:
    policy = _policy(
        REQUEST_TIMEOUT_SECONDS=20,
        EXTERNAL_API_TIMEOUT_SECONDS=50,
        GOOGLE_PLACES_TIMEOUT_SECONDS=25,
        INGESTION_TIMEOUT_SECONDS=45,
    )

    assert (
        policy.request_timeout_seconds,
        policy.external_api_timeout_seconds,
        policy.google_places_timeout_seconds,
    ) == (20, 20, 20)
    # 수집은 요청보다 1초 먼저 끊겨야 저장된 데이터로 응답할 수 있다.
    assert policy.ingestion_timeout_seconds == 19


def test_defaults_are_kept_when_within_budget() -> None:
    policy = _policy()

    assert policy == TimeoutPolicy(
        request_timeout_seconds=60,
        external_api_timeout_seconds=15,
        google_places_timeout_seconds=10,
        ingestion_timeout_seconds=20,
    )


def test_one_second_request_budget_still_leaves_positive_ingestion_deadline() -> None:
    policy = _policy(REQUEST_TIMEOUT_SECONDS=1)

    assert policy.ingestion_timeout_seconds == 1


@pytest.mark.parametrize(
    ("total", "expected"),
    [
        (10, (3.0, 7.0)),
        (30, (5.0, 25.0)),
        (1, (1.0, 0.5)),
    ],
)
def test_to_requests_timeout_splits_connect_and_read(total, expected) -> None:
    assert to_requests_timeout(total) == expected
