"""수집 후보 정렬용 중요도 점수.

기본 포인트(`app.core.points`)는 모든 카테고리 중 최댓값을 쓰지만, 중요도 점수는
후보의 첫 번째 카테고리만 봅니다. 두 규칙은 같은 입력에서 다른 결과를 낼 수 있으며
의도적으로 분리된 함수로 유지합니다.
"""

from __future__ import annotations

from app.core.place_rules import ImportanceRules, get_default_place_rules, match_band
from app.schemas.place import PlaceCandidate


def calculate_importance_score(candidate: PlaceCandidate, rules: ImportanceRules | None = None) -> float:
    """후보의 중요도 점수를 계산합니다. 저장되지 않고 정렬에만 사용됩니다."""
    rules = rules or get_default_place_rules().importance
    score = 0.0

    if candidate.rating is not None:
        score += (float(candidate.rating) - rules.rating_pivot) * rules.rating_weight

    if candidate.user_ratings_total is not None:
        score += match_band(int(candidate.user_ratings_total), rules.review_bands, rules.review_floor_score)

    if candidate.types:
        first_category = candidate.types[0].strip().lower()
        category_score = rules.default_category_score
        for group, value in rules.category_groups:
            if first_category in group:
                category_score = value
                break
        score += category_score

    return score


def rank_candidates(
    candidates: list[PlaceCandidate],
    rules: ImportanceRules | None = None,
) -> list[tuple[PlaceCandidate, float]]:
    """중요도 내림차순으로 정렬한 (후보, 점수) 목록을 반환합니다. 동점은 입력 순서를 유지합니다."""
    scored = [(candidate, calculate_importance_score(candidate, rules)) for candidate in candidates]
    return sorted(scored, key=lambda item: item[1], reverse=True)
