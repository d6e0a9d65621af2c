"""카테고리 기반 게시 가능 반경(geofence) 정책."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from app.core.geo import haversine_km
from app.core.place_rules import RadiusRules, get_default_place_rules


@dataclass(frozen=True, slots=True)
class PostRadius:
    """장소의 게시 가능 반경 정보."""

    radius_m: int
    radius_type: str
    description: str
    coverage_area: float


@dataclass(frozen=True, slots=True)
class LocationCheck:
    """사용자 위치가 게시 가능 반경 안에 있는지 판정한 결과."""

    distance_m: float
    post_radius: PostRadius
    is_within_radius: bool

    @property
    def shortfall_m(self) -> int:
        """반경 밖일 때 더 가까이 가야 하는 거리(m). 반경 안이면 0."""
        if self.is_within_radius:
            return 0
        return int(self.distance_m) - self.post_radius.radius_m


def resolve_post_radius(categories: Iterable[str], rules: RadiusRules | None = None) -> PostRadius:
    """카테고리 중 가장 큰 반경을 골라 분류와 면적을 함께 반환합니다.

    일치하는 카테고리가 없거나 모두 기본값보다 작으면 기본 반경(25m)을 사용합니다.
    """
    rules = rules or get_default_place_rules().radius
    radius = rules.default_radius
    for category in categories:
        matched = rules.category_radius.get(str(category).strip().lower())
        if matched is not None and matched > radius:
            radius = matched

    radius_class = next((item for item in rules.classes if radius >= item.minimum), rules.fallback_class)
    return PostRadius(
        radius_m=radius,
        radius_type=radius_class.radius_type,
        description=radius_class.description,
        coverage_area=math.pi * radius * radius,
    )


def check_post_location(
    place_latitude: float,
    place_longitude: float,
    categories: Iterable[str],
    user_latitude: float,
    user_longitude: float,
    rules: RadiusRules | None = None,
) -> LocationCheck:
    """사용자 좌표가 장소의 게시 가능 반경 안에 있는지 판정합니다."""
    post_radius = resolve_post_radius(categories, rules)
    distance_m = haversine_km(user_latitude, user_longitude, place_latitude, place_longitude) * 1000
    return LocationCheck(
        distance_m=distance_m,
        post_radius=post_radius,
        is_within_radius=distance_m <= post_radius.radius_m,
    )
