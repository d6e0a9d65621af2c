"""수집 후보 제외 규칙 테스트."""

from __future__ import annotations

import pytest

from app.core.candidate_filter import filter_candidates, rejection_reason, should_exclude_candidate
from tests.mocks.mock_places_service import make_candidate


def test_excluded_category_is_rejected() -> None:
    candidate = make_candidate("spa", 37.5, 127.0, ["spa", "point_of_interest"], name="Blue Lagoon")

    assert rejection_reason(candidate) == "excluded_category"


@pytest.mark.parametrize("name", ["Ali Berber", "Kim's BARBER shop", "강남 미용실", "Merkez Eczane"])
def test_suspicious_names_are_rejected(name: str) -> None:
    candidate = make_candidate("name", 37.5, 127.0, ["point_of_interest"], name=name)

    assert rejection_reason(candidate) == "suspicious_name"


def test_restaurant_below_rating_threshold_is_rejected() -> None:
    candidate = make_candidate("r1", 37.5, 127.0, ["restaurant"], name="Bistro Luna", rating=3.0)

    assert rejection_reason(candidate) == "quality:restaurant"


def test_restaurant_with_excluded_keyword_is_rejected() -> None:
    candidate = make_candidate("r2", 37.5, 127.0, ["restaurant"], name="Quick Takeaway", rating=4.6)

    assert rejection_reason(candidate) == "quality:restaurant"


def test_missing_rating_and_reviews_skip_threshold_checks() -> None:
    candidate = make_candidate(
        "r3",
        37.5,
        127.0,
        ["restaurant"],
        name="Bistro Luna",
        rating=None,
        user_ratings_total=None,
    )

    assert rejection_reason(candidate) is None


def test_store_requires_keyword_in_name() -> None:
    plain = make_candidate("s1", 37.5, 127.0, ["store"], name="Corner Store", rating=4.0, user_ratings_total=20)
    antique = make_candidate("s2", 37.5, 127.0, ["store"], name="Antique Boutique", rating=4.0, user_ratings_total=20)

    assert should_exclude_candidate(plain) is True
    assert should_exclude_candidate(antique) is False


def test_landmark_passes() -> None:
    candidate = make_candidate("m", 37.5, 127.0, ["museum", "tourist_attraction"], name="National Museum")

    assert should_exclude_candidate(candidate) is False


def test_filter_candidates_counts_rejections_by_reason() -> None:
    candidates = [
        make_candidate("ok", 37.5, 127.0, ["park"], name="Olympic Park"),
        make_candidate("x1", 37.5, 127.0, ["bank"], name="City Center"),
        make_candidate("x2", 37.5, 127.0, ["parking"], name="Lot 7"),
        make_candidate("x3", 37.5, 127.0, ["point_of_interest"], name="Nail Studio"),
    ]

    kept, rejected = filter_candidates(candidates)

    assert [candidate.place_id for candidate in kept] == ["ok"]
    assert rejected == {"excluded_category": 2, "suspicious_name": 1}
