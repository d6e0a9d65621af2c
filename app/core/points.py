"""장소 기본 포인트 계산 정책."""

from __future__ import annotations

from typing import Iterable

from app.core.place_rules import DynamicPointsRules, PointsRules, get_default_place_rules, match_band


def _normalize_categories(categories: Iterable[str]) -> set[str]:
    return {str(category).strip().lower() for category in categories if str(category).strip()}


def calculate_place_points(
    categories: Iterable[str],
    rating: float | None = None,
    user_ratings_total: int | None = None,
    rules: PointsRules | None = None,
) -> int:
    """카테고리/평점/리뷰 수로 장소의 기본 포인트를 계산합니다.

    모든 카테고리 중 가장 높은 카테고리 점수를 기준으로 평점 보너스, 인기도 보너스,
    카테고리 조합 보너스를 더한 뒤 [10, 60] 범위로 자르고 5의 배수로 맞춥니다.

    Args:
        categories: 장소 유형 목록 (대소문자 무관).
        rating: 평균 평점. None이면 평점 보너스를 적용하지 않습니다.
        user_ratings_total: 리뷰 수. None이면 인기도 보너스를 적용하지 않습니다.
        rules: 포인트 규칙. 생략하면 기본 규칙을 사용합니다.

    Returns:
        10 이상 60 이하의 5의 배수.
    """
    rules = rules or get_default_place_rules().points
    category_set = _normalize_categories(categories)

    matched = [rules.category_points[c] for c in category_set if c in rules.category_points]
    base_points = max(matched) if matched else rules.default_category_points

    rating_bonus = 0
    if rating is not None:
        rating_bonus = match_band(float(rating), rules.rating_bands, rules.rating_floor_bonus)

    popularity_bonus = 0
    if user_ratings_total is not None:
        popularity_bonus = match_band(int(user_ratings_total), rules.popularity_bands, rules.popularity_floor_bonus)

    combo_bonus = sum(combo.bonus for combo in rules.combo_bonuses if combo.categories <= category_set)

    total = base_points + rating_bonus + popularity_bonus + combo_bonus
    total = max(rules.min_points, min(rules.max_points, total))
    return ((total + rules.step // 2) // rules.step) * rules.step


def calculate_dynamic_point_value(
    base_points: int,
    *,
    user_has_posted: bool,
    total_posts: int,
    rules: DynamicPointsRules | None = None,
) -> int:
    """요청 사용자 기준으로 장소의 현재 포인트를 계산합니다.

    이미 게시한 장소는 방문 포인트로 고정되고, 아무도 게시하지 않은 장소는
    첫 게시 보너스를 더하며, 그 외에는 기본 포인트를 그대로 반환합니다.
    """
    rules = rules or get_default_place_rules().dynamic_points
    if user_has_posted:
        return rules.user_visited_points
    if total_posts == 0:
        return base_points + rules.no_posts_bonus_points
    return base_points
