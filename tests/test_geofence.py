"""게시 가능 반경 정책 테스트."""

from __future__ import annotations

import math

from app.core.geofence import check_post_location, resolve_post_radius


def test_unknown_categories_use_default_radius() -> None:
    radius = resolve_post_radius(["unknown_type"])

    assert radius.radius_m == 25
    assert radius.radius_type == "small"
    assert radius.description == "좁은 구역"
    assert math.isclose(radius.coverage_area, math.pi * 25 * 25)


def test_small_categories_never_go_below_default() -> None:
    # taxi_stand(10)와 jewelry_store(10)는 기본값보다 작다.
    assert resolve_post_radius(["taxi_stand", "jewelry_store"]).radius_m == 25
    assert resolve_post_radius([]).radius_m == 25


def test_largest_category_radius_wins() -> None:
    radius = resolve_post_radius(["restaurant", "park", "tourist_attraction"])

    assert radius.radius_m == 200
    assert radius.radius_type == "large"


def test_radius_lookup_is_case_insensitive() -> None:
    assert resolve_post_radius(["National_Park"]).radius_m == 1000
    assert resolve_post_radius(["National_Park"]).radius_type == "very_large"


def test_radius_classes_follow_boundaries() -> None:
    assert resolve_post_radius(["island"]).radius_type == "very_large"
    assert resolve_post_radius(["museum"]).radius_type == "medium"
    assert resolve_post_radius(["gym"]).radius_type == "small_medium"
    assert resolve_post_radius(["bar"]).radius_type == "small"


def test_check_post_location_inside_radius() -> None:
    # 위도 0.0005도 ≈ 55m, 공원 반경 200m
    check = check_post_location(37.5, 127.0, ["park"], 37.5005, 127.0)

    assert check.is_within_radius is True
    assert 50 < check.distance_m < 60
    assert check.shortfall_m == 0


def test_check_post_location_outside_radius_reports_shortfall() -> None:
    # 위도 0.001도 ≈ 111m, 카페 기본 반경 25m
    check = check_post_location(37.5, 127.0, ["cafe"], 37.501, 127.0)

    assert check.is_within_radius is False
    assert check.post_radius.radius_m == 25
    assert check.shortfall_m == int(check.distance_m) - 25
