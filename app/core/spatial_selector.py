"""중요도와 지리적 분산을 함께 고려한 수집 후보 선택."""

from __future__ import annotations

from dataclasses import dataclass, field

from app.core.geo import grid_cell_key, haversine_km
from app.core.place_rules import SelectionRules, get_default_place_rules
from app.schemas.place import PlaceCandidate


@dataclass(frozen=True, slots=True)
class KnownLocation:
    """이미 저장된 주변 장소의 좌표."""

    latitude: float
    longitude: float


@dataclass(slots=True)
class SelectionResult:
    """선택 결과와 패스별 선택 건수."""

    selected: list[PlaceCandidate] = field(default_factory=list)
    override_count: int = 0
    distributed_count: int = 0
    fallback_count: int = 0


def _category_set(candidate: PlaceCandidate) -> set[str]:
    return {category.strip().lower() for category in candidate.types}


def _within(candidate: PlaceCandidate, other: PlaceCandidate, distance_km: float) -> bool:
    return haversine_km(candidate.latitude, candidate.longitude, other.latitude, other.longitude) < distance_km


def select_distributed_candidates(
    ranked: list[tuple[PlaceCandidate, float]],
    known_locations: list[KnownLocation],
    max_places: int,
    rules: SelectionRules | None = None,
) -> SelectionResult:
    """중요도 순으로 정렬된 후보에서 최대 `max_places`개를 고릅니다.

    1. 중요도가 임계값(80) 이상인 후보는 분산과 관계없이 선택합니다.
    2. 격자 셀(약 1km)이 비어 있는 후보를 선택합니다. 같은 카테고리의
       분산 선택 후보와 최소 간격(200m) 안이면 셀 경계를 넘어도 건너뜁니다.
    3. 남은 자리는 이미 선택된 모든 후보와 최소 간격 이상 떨어진 후보로 채웁니다.

    격자 점유 상태는 호출마다 새로 만들고 호출이 끝나면 버립니다.
    """
    rules = rules or get_default_place_rules().selection
    result = SelectionResult()
    if not ranked or max_places <= 0:
        return result

    occupied_cells = {
        grid_cell_key(location.latitude, location.longitude, rules.grid_size_deg) for location in known_locations
    }
    selected_ids: set[str] = set()
    spaced: list[PlaceCandidate] = []

    def _accept(candidate: PlaceCandidate) -> None:
        result.selected.append(candidate)
        selected_ids.add(candidate.place_id)

    for candidate, score in ranked:
        if len(result.selected) >= max_places:
            return result
        if candidate.place_id in selected_ids or score < rules.high_importance_threshold:
            continue
        _accept(candidate)
        occupied_cells.add(grid_cell_key(candidate.latitude, candidate.longitude, rules.grid_size_deg))
        result.override_count += 1

    for candidate, _score in ranked:
        if len(result.selected) >= max_places:
            return result
        if candidate.place_id in selected_ids:
            continue
        cell = grid_cell_key(candidate.latitude, candidate.longitude, rules.grid_size_deg)
        if cell in occupied_cells:
            continue
        categories = _category_set(candidate)
        if any(
            categories & _category_set(other) and _within(candidate, other, rules.min_spacing_km) for other in spaced
        ):
            continue
        _accept(candidate)
        spaced.append(candidate)
        occupied_cells.add(cell)
        result.distributed_count += 1

    for candidate, _score in ranked:
        if len(result.selected) >= max_places:
            return result
        if candidate.place_id in selected_ids:
            continue
        if any(_within(candidate, other, rules.min_spacing_km) for other in result.selected):
            continue
        _accept(candidate)
        spaced.append(candidate)
        result.fallback_count += 1

    return result
