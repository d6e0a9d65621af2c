"""수집 후보 제외 규칙."""

from __future__ import annotations

from app.core.place_rules import FilterRules, QualityThreshold, get_default_place_rules
from app.schemas.place import PlaceCandidate


def _violates_threshold(candidate: PlaceCandidate, threshold: QualityThreshold, name_lower: str) -> bool:
    if candidate.rating is not None and candidate.rating < threshold.min_rating:
        return True
    if candidate.user_ratings_total is not None and candidate.user_ratings_total < threshold.min_user_ratings_total:
        return True
    if threshold.required_keywords and not any(kw.lower() in name_lower for kw in threshold.required_keywords):
        return True
    return any(kw.lower() in name_lower for kw in threshold.excluded_keywords)


def rejection_reason(candidate: PlaceCandidate, rules: FilterRules | None = None) -> str | None:
    """후보를 제외해야 하는 이유를 반환합니다. 통과하면 None.

    Returns:
        ``"excluded_category"``, ``"suspicious_name"``, ``"quality:<category>"`` 중 하나 또는 None.
    """
    rules = rules or get_default_place_rules().filtering
    categories = [category.strip().lower() for category in candidate.types]

    if any(category in rules.excluded_categories for category in categories):
        return "excluded_category"

    name_lower = candidate.name.lower()
    if any(keyword in name_lower for keyword in rules.suspicious_name_keywords):
        return "suspicious_name"

    for category in categories:
        threshold = rules.quality_thresholds.get(category)
        if threshold is not None and _violates_threshold(candidate, threshold, name_lower):
            return f"quality:{category}"

    return None


def should_exclude_candidate(candidate: PlaceCandidate, rules: FilterRules | None = None) -> bool:
    """카테고리 블랙리스트, 의심 이름, 품질 기준 중 하나라도 걸리면 True."""
    return rejection_reason(candidate, rules) is not None


def filter_candidates(
    candidates: list[PlaceCandidate],
    rules: FilterRules | None = None,
) -> tuple[list[PlaceCandidate], dict[str, int]]:
    """통과한 후보 목록과 사유별 제외 건수를 반환합니다."""
    kept: list[PlaceCandidate] = []
    rejected: dict[str, int] = {}
    for candidate in candidates:
        reason = rejection_reason(candidate, rules)
        if reason is None:
            kept.append(candidate)
        else:
            rejected[reason] = rejected.get(reason, 0) + 1
    return kept, rejected
